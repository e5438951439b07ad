"""
L5 Orchestration — ``__init__.py`` re-exports the installer entry point.
"""

from src.core.services.jdk_install.orchestration.orchestrator import (  # noqa: F401
    JdkInstaller,
    find_pull_up_directory,
    pull_up,
)
