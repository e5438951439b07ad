"""
Domain models — host identity and the downloadable JDK catalog.

All models are re-exported here for convenient access:

    from src.core.models import Platform, CPU, Catalog, JdkRelease
"""

from src.core.models.catalog import Catalog, JdkBinary, JdkFamily, JdkRelease
from src.core.models.platform import CPU, Platform

__all__ = [
    # catalog.py
    "Catalog",
    "JdkBinary",
    "JdkFamily",
    "JdkRelease",
    # platform.py
    "CPU",
    "Platform",
]
