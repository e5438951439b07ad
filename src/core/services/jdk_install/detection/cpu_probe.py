"""
L3 Detection — CPU architecture.
"""

from __future__ import annotations

import logging
import platform

from src.core.models.platform import CPU
from src.core.services.jdk_install.errors import DetectionFailed, HostUnavailable
from src.core.services.jdk_install.execution.host import Host

logger = logging.getLogger(__name__)


def classify_arch(arch: str) -> CPU:
    """Map a machine/architecture string to a ``CPU``.

    "86_64" must be tested before the bare "86", otherwise 64-bit x86
    hosts would come out as i386.

    Raises:
        DetectionFailed: If nothing matches.
    """
    a = arch.lower()
    if "sparc" in a:
        return CPU.SPARC
    if "amd64" in a or "86_64" in a:
        return CPU.AMD64
    if "86" in a:
        return CPU.I386
    if "s390x" in a:
        return CPU.S390X
    if "ppc64" in a:
        return CPU.PPC64
    if "arm" in a or "aarch64" in a:
        return CPU.ARM
    raise DetectionFailed(f"Unknown CPU architecture: {a}")


def current_cpu() -> CPU:
    """Classify the CPU of the process this runs in."""
    return classify_arch(platform.machine())


def detect_cpu(host: Host) -> CPU:
    """Detect the CPU of ``host`` by running the probe on it.

    Raises:
        DetectionFailed: Unknown architecture, or the host could not run the probe.
    """
    try:
        result = host.run(current_cpu)
    except HostUnavailable as exc:
        raise DetectionFailed(f"Cannot detect CPU of {host.name}: {exc}") from exc
    logger.debug("CPU of %s: %s", host.name, result)
    return result
