"""
L4 Execution — side effects: host tasks, downloads, cache files.
"""

from src.core.services.jdk_install.execution.archive_download import ArchiveDownloader  # noqa: F401
from src.core.services.jdk_install.execution.cache_store import CacheStore  # noqa: F401
from src.core.services.jdk_install.execution.catalog_source import load_catalog  # noqa: F401
from src.core.services.jdk_install.execution.host import Host, LocalHost  # noqa: F401
