"""
L2 Resolver — pure lookups over the catalog snapshot.
"""

from src.core.services.jdk_install.resolver.catalog import (  # noqa: F401
    ARCHITECTURES,
    catalog_is_empty,
    find_release,
    list_installable,
    select_binary,
)
