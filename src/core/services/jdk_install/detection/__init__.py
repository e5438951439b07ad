"""
L3 Detection — ``__init__.py`` re-exports host probes.

Probes READ host state (os name, machine, /etc/os-release) but never WRITE.
"""

from src.core.services.jdk_install.detection.cpu_probe import (  # noqa: F401
    classify_arch,
    current_cpu,
    detect_cpu,
)
from src.core.services.jdk_install.detection.platform_probe import (  # noqa: F401
    DEFAULT_OS_RELEASE_PATH,
    classify_os_name,
    current_platform,
    detect_platform,
    is_alpine_linux,
)
