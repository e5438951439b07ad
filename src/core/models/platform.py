"""
Platform and CPU — the closed sets of host targets a JDK can be built for.

``Platform`` values are the ``os`` ids used by the catalog document and
the cache path segments.  ``CPU`` values are the architecture names used
as cache path segments; the catalog's own architecture strings are
mapped onto them by the resolver.
"""

from __future__ import annotations

from enum import Enum


class Platform(str, Enum):
    """Supported operating system families."""

    LINUX = "linux"
    ALPINE_LINUX = "alpine-linux"
    WINDOWS = "windows"
    MACOS = "mac"
    SOLARIS = "solaris"
    AIX = "aix"

    @property
    def id(self) -> str:
        """Catalog ``os`` id for this platform."""
        return self.value

    def __str__(self) -> str:
        return self.value


class CPU(str, Enum):
    """Supported CPU architectures."""

    I386 = "i386"
    AMD64 = "amd64"
    SPARC = "sparc"
    S390X = "s390x"
    PPC64 = "ppc64"
    ARM = "arm"

    def __str__(self) -> str:
        return self.value
