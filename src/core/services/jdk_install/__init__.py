"""
JDK installation service — package re-exports.

Layers, leaves first (detection → resolver → execution → orchestration)::

    from src.core.services.jdk_install import JdkInstaller, CacheStore, LocalHost
"""

# ── L1: Errors ──
from src.core.services.jdk_install.errors import (  # noqa: F401
    ArchiveDownloadFailure,
    BinaryNotFound,
    CacheReadFailure,
    CacheWriteFailure,
    CatalogEmpty,
    CatalogUnavailable,
    DetectionFailed,
    HostUnavailable,
    InstallError,
    ReleaseNotFound,
    UnsupportedCPU,
)

# ── L2: Resolver ──
from src.core.services.jdk_install.resolver.catalog import (  # noqa: F401
    catalog_is_empty,
    find_release,
    list_installable,
    select_binary,
)

# ── L3: Detection ──
from src.core.services.jdk_install.detection.cpu_probe import (  # noqa: F401
    classify_arch,
    detect_cpu,
)
from src.core.services.jdk_install.detection.platform_probe import (  # noqa: F401
    classify_os_name,
    detect_platform,
    is_alpine_linux,
)

# ── L4: Execution ──
from src.core.services.jdk_install.execution.archive_download import (  # noqa: F401
    ArchiveDownloader,
)
from src.core.services.jdk_install.execution.cache_store import CacheStore  # noqa: F401
from src.core.services.jdk_install.execution.catalog_source import load_catalog  # noqa: F401
from src.core.services.jdk_install.execution.host import Host, LocalHost  # noqa: F401

# ── L5: Orchestration ──
from src.core.services.jdk_install.orchestration.orchestrator import (  # noqa: F401
    MARKER_FILE,
    JdkInstaller,
    find_pull_up_directory,
)
