"""
L5 Orchestration — JDK installation on a host.

``JdkInstaller.perform_installation()`` ties detection, catalog
resolution, the cache and the download collaborator together::

    marker matches? ── yes ──> done
         │ no
    reset dir → catalog → release → detect platform/cpu → binary
         │
    cache hit? ── yes ──> restore from cache
         │ no
    download → extract → pull up → marker → cache write

Catalog and resolution errors are fatal.  Detection errors are not:
the attempt is skipped and the empty installation directory returned.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Protocol

from src.core.models.catalog import Catalog
from src.core.models.platform import Platform
from src.core.services.jdk_install.detection.cpu_probe import detect_cpu
from src.core.services.jdk_install.detection.platform_probe import (
    DEFAULT_OS_RELEASE_PATH,
    detect_platform,
)
from src.core.services.jdk_install.errors import (
    BinaryNotFound,
    CacheWriteFailure,
    CatalogEmpty,
    CatalogUnavailable,
    DetectionFailed,
    ReleaseNotFound,
)
from src.core.services.jdk_install.execution.archive_download import (
    TIMESTAMP_FILE,
    ArchiveDownloader,
)
from src.core.services.jdk_install.execution.cache_store import CacheStore
from src.core.services.jdk_install.execution.host import Host
from src.core.services.jdk_install.resolver.catalog import (
    catalog_is_empty,
    find_release,
    select_binary,
)

logger = logging.getLogger(__name__)

MARKER_FILE = ".installedByJenkins"

LogSink = Callable[[str], None]


class Downloader(Protocol):
    def install(self, url: str, target_dir: Path, log: LogSink | None = None) -> bool: ...


def _sanitize(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.\-]", "_", name)


def find_pull_up_directory(root: Path, platform: Platform) -> Path | None:
    """Find the real content root inside a freshly extracted archive.

    Archives usually wrap everything in one top-level directory
    (``jdk-17.0.2+8/``).  If ``root`` holds exactly that, it is the
    directory to pull up.  macOS bundles keep the JDK under
    ``<wrapper>/Contents/Home``, which is preferred when present.

    Returns:
        The directory whose children belong directly in ``root``,
        or None when the tree should stay as extracted.
    """
    children = list(root.iterdir())
    if len(children) != 1 or not children[0].is_dir():
        return None

    if platform is Platform.MACOS:
        home = children[0] / "Contents" / "Home"
        if home.is_dir():
            return home
    return children[0]


def pull_up(base: Path, root: Path) -> None:
    """Move the children of ``base`` into ``root`` and drop the wrapper.

    ``base`` must live below ``root``.  The top-level wrapper is first
    parked in a staging directory so a child sharing its name can land
    in ``root`` without a collision.
    """
    relative = base.relative_to(root)
    wrapper = root / relative.parts[0]
    staging = Path(tempfile.mkdtemp(prefix=".pullup_", dir=root))
    try:
        wrapper.rename(staging / wrapper.name)
        moved_base = staging / relative
        for child in list(moved_base.iterdir()):
            shutil.move(str(child), str(root / child.name))
    finally:
        shutil.rmtree(staging, ignore_errors=True)


class JdkInstaller:
    """Installs one JDK release onto hosts.

    Args:
        release_id: Catalog ``release_name`` to install.
        catalog_loader: Returns the current catalog snapshot; may raise
            ``CatalogUnavailable`` or return None when nothing is loaded.
        cache: Shared installation cache.
        downloader: Download-and-extract collaborator.
        os_release_path: Probe file for Alpine detection.
    """

    def __init__(
        self,
        release_id: str,
        *,
        catalog_loader: Callable[[], Catalog | None],
        cache: CacheStore,
        downloader: Downloader | None = None,
        os_release_path: str | Path = DEFAULT_OS_RELEASE_PATH,
    ):
        self.release_id = release_id
        self.catalog_loader = catalog_loader
        self.cache = cache
        self.downloader = downloader or ArchiveDownloader()
        self.os_release_path = os_release_path

    def preferred_location(self, tool_name: str, host: Host) -> Path:
        """Installation directory for ``tool_name`` on ``host``."""
        return host.root / "tools" / _sanitize(tool_name)

    def perform_installation(
        self,
        tool_name: str,
        host: Host,
        log: LogSink | None = None,
    ) -> Path:
        """Make sure ``release_id`` is installed for ``tool_name`` on ``host``.

        Returns:
            The installation directory.  After a detection skip it
            exists but is empty.

        Raises:
            CatalogUnavailable, CatalogEmpty, ReleaseNotFound, BinaryNotFound,
            UnsupportedCPU, CacheReadFailure, CacheWriteFailure,
            ArchiveDownloadFailure: The attempt failed.
        """
        ctx = {"host": host.name}
        say = log or (lambda msg: logger.info(msg, extra=ctx))
        expected = self.preferred_location(tool_name, host)
        marker = expected / MARKER_FILE

        if marker.is_file() and marker.read_bytes() == self.release_id.encode("utf-8"):
            logger.debug("%s already has %s", expected, self.release_id, extra=ctx)
            return expected

        if expected.exists():
            shutil.rmtree(expected)
        expected.mkdir(parents=True)

        catalog = self._load_catalog()
        if catalog_is_empty(catalog):
            raise CatalogEmpty("The JDK catalog lists no releases")
        release = find_release(catalog, self.release_id)
        if release is None:
            raise ReleaseNotFound(self.release_id)

        try:
            platform = detect_platform(host, self.os_release_path)
            cpu = detect_cpu(host)
        except DetectionFailed as e:
            say(f"Skipping JDK installation on {host.name}: {e}")
            return expected

        binary = select_binary(release, platform, cpu)
        if binary is None:
            raise BinaryNotFound(self.release_id, platform.name, cpu.name)

        cache_file = self.cache.path_for(platform, cpu, self.release_id)
        if self.cache.try_read(cache_file, expected.parent, say):
            if not any(expected.iterdir()):
                # Entries are rooted at the writer's tool directory name
                say(
                    f"Cache entry {cache_file} holds no files for {expected.name}; "
                    "it was written under another tool name"
                )
            return expected

        fresh = self.downloader.install(binary.binary_link, expected, say)
        logger.debug("Download of %s fresh=%s", binary.binary_link, fresh, extra=ctx)
        (expected / TIMESTAMP_FILE).unlink(missing_ok=True)

        base = find_pull_up_directory(expected, platform)
        if base is not None and base != expected:
            pull_up(base, expected)

        # The archive carries the marker; a failed cache write takes it back
        marker.write_bytes(self.release_id.encode("utf-8"))
        try:
            self.cache.write(expected, cache_file)
        except CacheWriteFailure:
            marker.unlink(missing_ok=True)
            raise
        return expected

    def _load_catalog(self) -> Catalog:
        catalog = self.catalog_loader()
        if catalog is None:
            raise CatalogUnavailable("No downloadable JDK catalog is available")
        return catalog
