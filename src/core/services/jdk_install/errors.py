"""
L1 Domain — Installation error taxonomy.

Every failure the installer raises derives from ``InstallError``.
``DetectionFailed`` is the only non-fatal one: the orchestrator catches
it and soft-skips the attempt.  Everything else aborts the attempt and
propagates to the caller.
"""

from __future__ import annotations


class InstallError(Exception):
    """Base class for installation failures."""


class DetectionFailed(InstallError):
    """The host's OS or CPU could not be identified."""


class HostUnavailable(InstallError):
    """The host cannot run detection tasks (offline, no channel)."""


class CatalogUnavailable(InstallError):
    """The release catalog could not be obtained at all."""


class CatalogEmpty(InstallError):
    """The catalog loaded but lists no releases."""


class ReleaseNotFound(InstallError):
    """The requested release id is not in the catalog."""

    def __init__(self, release_id: str):
        super().__init__(f"Release '{release_id}' not found in the JDK catalog")
        self.release_id = release_id


class BinaryNotFound(InstallError):
    """The release has no binary for the detected platform/CPU."""

    def __init__(self, release_id: str, platform: str, cpu: str):
        super().__init__(
            f"No binary for release '{release_id}' on platform {platform} / CPU {cpu}"
        )
        self.release_id = release_id
        self.platform = platform
        self.cpu = cpu


class UnsupportedCPU(InstallError):
    """A CPU value reached the architecture table without an entry."""


class CacheReadFailure(InstallError):
    """Restoring an installation from a cache archive failed."""

    def __init__(self, location: str, bytes_read: int):
        super().__init__(
            f"Failed to unpack {location} (read {bytes_read} bytes)"
        )
        self.location = location
        self.bytes_read = bytes_read


class CacheWriteFailure(InstallError):
    """Writing an installation into the cache failed."""


class ArchiveDownloadFailure(InstallError):
    """Downloading or extracting a JDK archive failed."""
