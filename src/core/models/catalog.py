"""
Catalog models — the parsed JDK release catalog.

The catalog document is produced upstream and consumed verbatim::

    {"version": 1,
     "data": [{"name": "openjdk17-hotspot",
               "releases": [{"release_name": "jdk-17.0.2+8",
                             "openjdk_impl": "hotspot",
                             "binaries": [{"os": "linux",
                                           "architecture": "x64",
                                           "openjdk_impl": "hotspot",
                                           "binary_link": "https://..."}]}]}]}

Field names mirror the document so that ``Catalog.model_validate(doc)``
needs no aliasing.  Catalog objects are read-only snapshots.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class JdkBinary(BaseModel):
    """One downloadable archive for a specific os/architecture."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    os: str = ""
    architecture: str = ""
    openjdk_impl: str = ""
    binary_link: str = ""


class JdkRelease(BaseModel):
    """One installable JDK build, identified by ``release_name``."""

    model_config = ConfigDict(extra="ignore")

    release_name: str
    openjdk_impl: str = ""
    binaries: list[JdkBinary] = Field(default_factory=list)

    def matches_id(self, release_id: str | None) -> bool:
        """Exact, case-sensitive id comparison."""
        return release_id is not None and release_id == self.release_name


class JdkFamily(BaseModel):
    """Grouping of releases (e.g. ``openjdk17-hotspot``)."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    releases: list[JdkRelease] = Field(default_factory=list)


class Catalog(BaseModel):
    """Root of the catalog document."""

    model_config = ConfigDict(extra="ignore")

    version: int = 0
    data: list[JdkFamily] = Field(default_factory=list)
