"""
L2 Resolver — Release lookup and binary selection.

Pure functions over a ``Catalog`` snapshot.  Lookups report absence
with ``None``; the orchestrator decides which error to raise.
"""

from __future__ import annotations

import logging

from src.core.models.catalog import Catalog, JdkBinary, JdkRelease
from src.core.models.platform import CPU, Platform
from src.core.services.jdk_install.errors import UnsupportedCPU

logger = logging.getLogger(__name__)

# Catalog architecture strings accepted for each CPU.
# Adding a CPU means adding exactly one row here.
ARCHITECTURES: dict[CPU, tuple[str, ...]] = {
    CPU.I386: ("x32",),
    CPU.AMD64: ("x64",),
    CPU.SPARC: ("sparcv9",),
    CPU.PPC64: ("ppc64", "ppc64le"),
    CPU.S390X: ("s390x",),
    CPU.ARM: ("arm", "aarch64"),
}


def catalog_is_empty(catalog: Catalog) -> bool:
    """True when no family lists any release."""
    return all(not family.releases for family in catalog.data)


def find_release(catalog: Catalog, release_id: str) -> JdkRelease | None:
    """Return the first release whose id equals ``release_id`` exactly."""
    for family in catalog.data:
        for release in family.releases:
            if release.matches_id(release_id):
                return release
    return None


def select_binary(release: JdkRelease, platform: Platform, cpu: CPU) -> JdkBinary | None:
    """Pick the binary of ``release`` built for ``platform`` / ``cpu``.

    A candidate must match the platform id and the release's
    implementation tag, then its architecture must be one the CPU
    accepts.  Catalog order decides ties.

    Raises:
        UnsupportedCPU: ``cpu`` has no row in ``ARCHITECTURES``.
    """
    for binary in release.binaries:
        if binary.os != platform.id or binary.openjdk_impl != release.openjdk_impl:
            continue
        accepted = ARCHITECTURES.get(cpu)
        if accepted is None:
            raise UnsupportedCPU(f"Unsupported CPU: {cpu}")
        if binary.architecture in accepted:
            return binary
    logger.debug(
        "No binary in %s for %s/%s (%d candidates)",
        release.release_name, platform, cpu, len(release.binaries),
    )
    return None


def list_installable(catalog: Catalog) -> list[dict[str, str]]:
    """Flatten the catalog into ``{"family", "release", "impl"}`` rows."""
    rows: list[dict[str, str]] = []
    for family in catalog.data:
        for release in family.releases:
            rows.append({
                "family": family.name,
                "release": release.release_name,
                "impl": release.openjdk_impl,
            })
    return rows
