"""
JDK Installer — CLI entrypoint.

Usage:
    python -m src.main --help
    python -m src.main install jdk-17.0.2+8 --tool jdk17 --catalog catalog.json
    python -m src.main detect
    python -m src.main cache status
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from src import __version__
from src.core.config.loader import ConfigError, InstallerConfig, load_config
from src.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="jdk-installer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to installer.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """JDK Installer — provision Temurin JDK builds onto hosts."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("JDKI_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("JDKI_LOG_FILE"),
        log_file_level=os.environ.get("JDKI_LOG_FILE_LEVEL"),
    )

    # ── Configuration (once, at process start) ──────────────────
    try:
        ctx.obj["config"] = load_config(Path(config_path) if config_path else None)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _cache_store(config: InstallerConfig, disable_cache: bool = False):
    from src.core.services.jdk_install import CacheStore

    return CacheStore(
        config.root_dir,
        disabled=config.disable_cache or disable_cache,
        product=config.product,
    )


@cli.command()
@click.argument("release_id")
@click.option("--tool", "tool_name", required=True, help="Tool installation name.")
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Catalog JSON (default: catalog_path from config).",
)
@click.option("--disable-cache", is_flag=True, help="Neither read nor write the local cache.")
@click.pass_context
def install(
    ctx: click.Context,
    release_id: str,
    tool_name: str,
    catalog_path: Path | None,
    disable_cache: bool,
) -> None:
    """Install RELEASE_ID for a tool on this host.

    Examples:

        jdk-installer install jdk-17.0.2+8 --tool jdk17

        jdk-installer install jdk8u172-b11 --tool jdk8 --disable-cache
    """
    from src.core.services.jdk_install import (
        InstallError,
        JdkInstaller,
        LocalHost,
        load_catalog,
    )

    config: InstallerConfig = ctx.obj["config"]
    source = catalog_path or config.catalog_path
    quiet = ctx.obj.get("quiet", False)

    installer = JdkInstaller(
        release_id,
        catalog_loader=lambda: load_catalog(source),
        cache=_cache_store(config, disable_cache),
        os_release_path=config.os_release_path,
    )
    host = LocalHost(config.root_dir)

    try:
        home = installer.perform_installation(
            tool_name, host, log=None if quiet else click.echo,
        )
    except InstallError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    click.secho(f"✅ {release_id} → {home}", fg="green")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def detect(ctx: click.Context, as_json: bool) -> None:
    """Detect the platform and CPU of this host."""
    from src.core.services.jdk_install import (
        DetectionFailed,
        LocalHost,
        detect_cpu,
        detect_platform,
    )

    config: InstallerConfig = ctx.obj["config"]
    host = LocalHost(config.root_dir)
    try:
        platform = detect_platform(host, config.os_release_path)
        cpu = detect_cpu(host)
    except DetectionFailed as e:
        if as_json:
            click.echo(json.dumps({"ok": False, "error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"ok": True, "platform": platform.id, "cpu": cpu.value}, indent=2))
        return

    click.echo(f"   Platform: {platform.id}")
    click.echo(f"   CPU:      {cpu.value}")


@cli.command()
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Catalog JSON (default: catalog_path from config).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def releases(ctx: click.Context, catalog_path: Path | None, as_json: bool) -> None:
    """List installable JDK releases."""
    from src.core.services.jdk_install import (
        CatalogUnavailable,
        list_installable,
        load_catalog,
    )

    config: InstallerConfig = ctx.obj["config"]
    try:
        catalog = load_catalog(catalog_path or config.catalog_path)
    except CatalogUnavailable as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    rows = list_installable(catalog)
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    if not rows:
        click.secho("   No releases in catalog", fg="yellow")
        return

    family = None
    for row in rows:
        if row["family"] != family:
            family = row["family"]
            click.secho(f"\n📦 {family}", fg="cyan", bold=True)
        click.echo(f"     • {row['release']}  ({row['impl']})")
    click.echo()


@cli.group()
def cache() -> None:
    """Local installation cache commands."""


@cache.command("status")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def cache_status(ctx: click.Context, as_json: bool) -> None:
    """Show cached JDK archives."""
    result = _cache_store(ctx.obj["config"]).status()

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    state = "disabled" if result["disabled"] else "enabled"
    click.secho(f"\n🗄  Cache ({state}): {result['cache_dir']}", fg="cyan", bold=True)
    for entry in result["entries"]:
        click.echo(
            f"     • {entry['platform']}/{entry['cpu']}/{entry['release']}"
            f"  {entry['size_mb']} MB"
        )
    click.echo(f"   Total: {result['total_size_mb']} MB")
    click.echo()


@cache.command("clear")
@click.option("--release", "release_id", default=None, help="Only this release id.")
@click.pass_context
def cache_clear(ctx: click.Context, release_id: str | None) -> None:
    """Delete cached JDK archives."""
    removed = _cache_store(ctx.obj["config"]).clear(release_id)
    click.secho(f"🗑  Removed {removed} cached archive(s)", fg="green")


def main() -> None:
    """Console-script entrypoint."""
    cli(obj={})


if __name__ == "__main__":
    main()
