"""
L3 Detection — Operating system family.

Classifies the host OS into a ``Platform``.  Linux hosts get a second
probe of ``/etc/os-release`` to tell Alpine (musl) apart from glibc
distributions, since they need different JDK builds.
"""

from __future__ import annotations

import functools
import logging
import platform
from pathlib import Path

from src.core.models.platform import Platform
from src.core.services.jdk_install.errors import DetectionFailed, HostUnavailable
from src.core.services.jdk_install.execution.host import Host

logger = logging.getLogger(__name__)

DEFAULT_OS_RELEASE_PATH = "/etc/os-release"


def is_alpine_linux(os_release_path: str | Path = DEFAULT_OS_RELEASE_PATH) -> bool:
    """Return True if the os-release file declares ``ID=alpine``.

    A missing or unreadable file means "not Alpine"; it never fails
    detection.
    """
    try:
        with open(os_release_path, encoding="utf-8", errors="replace") as f:
            for line in f:
                if line.rstrip("\r\n").lower() == "id=alpine":
                    return True
    except OSError:
        return False
    return False


def classify_os_name(
    os_name: str,
    os_release_path: str | Path = DEFAULT_OS_RELEASE_PATH,
) -> Platform:
    """Map an OS name string to a ``Platform``.

    Checks run in priority order; the first substring hit wins.

    Raises:
        DetectionFailed: If nothing matches.
    """
    name = os_name.lower()
    if "linux" in name:
        return Platform.ALPINE_LINUX if is_alpine_linux(os_release_path) else Platform.LINUX
    if "windows" in name:
        return Platform.WINDOWS
    if "sun" in name or "solaris" in name:
        return Platform.SOLARIS
    # Python reports macOS as "Darwin"
    if "mac" in name or "darwin" in name:
        return Platform.MACOS
    if "aix" in name:
        return Platform.AIX
    raise DetectionFailed(f"Unknown OS name: {name}")


def current_platform(os_release_path: str | Path = DEFAULT_OS_RELEASE_PATH) -> Platform:
    """Classify the OS of the process this runs in."""
    return classify_os_name(platform.system(), os_release_path)


def detect_platform(
    host: Host,
    os_release_path: str | Path = DEFAULT_OS_RELEASE_PATH,
) -> Platform:
    """Detect the platform of ``host`` by running the probe on it.

    Raises:
        DetectionFailed: Unknown OS, or the host could not run the probe.
    """
    try:
        result = host.run(functools.partial(current_platform, os_release_path))
    except HostUnavailable as exc:
        raise DetectionFailed(f"Cannot detect platform of {host.name}: {exc}") from exc
    logger.debug("Platform of %s: %s", host.name, result)
    return result
