"""
L4 Execution — Local installation cache.

Installed JDK trees are zipped into a host-independent cache keyed by
(platform, CPU, release id) so that later installs on other hosts can
skip the network download::

    <root>/caches/<product>/<platform-id>/<cpu>/<release-id>.zip

Each write goes to its own ``<file>.<random>.tmp`` beside the entry and
is renamed into place, so readers never see a partial archive; concurrent
writers of the same key simply race and the last rename wins.  The temp
file is removed on every exit path.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
import zipfile
from pathlib import Path
from typing import BinaryIO, Callable

from src.core.models.platform import CPU, Platform
from src.core.services.jdk_install.errors import CacheReadFailure, CacheWriteFailure

logger = logging.getLogger(__name__)

ARCHIVE_EXT = "zip"
TMP_SUFFIX = ".tmp"
DEFAULT_PRODUCT = "adoptopenjdk"


class _CountingReader:
    """Seekable file wrapper that counts bytes handed to the reader."""

    def __init__(self, raw: BinaryIO):
        self._raw = raw
        self.count = 0

    def read(self, size: int = -1) -> bytes:
        data = self._raw.read(size)
        self.count += len(data)
        return data

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        return self._raw.seek(offset, whence)

    def tell(self) -> int:
        return self._raw.tell()

    def seekable(self) -> bool:
        return True


class CacheStore:
    """Zip cache of installed JDK trees.

    Args:
        root: Directory holding the ``caches/`` tree (the controller's root).
        disabled: When True every read misses and every write is a no-op.
        product: Cache namespace under ``caches/``.
    """

    def __init__(self, root: Path, *, disabled: bool = False, product: str = DEFAULT_PRODUCT):
        self.base = Path(root) / "caches" / product
        self.disabled = disabled

    def path_for(self, platform: Platform, cpu: CPU, release_id: str) -> Path:
        """Cache file location for a key.  Pure function of its arguments."""
        return self.base / platform.id / cpu.value / f"{release_id}.{ARCHIVE_EXT}"

    def try_read(
        self,
        path: Path,
        destination_parent: Path,
        log: Callable[[str], None] | None = None,
    ) -> bool:
        """Restore a cached tree into ``destination_parent``.

        The archive's top-level entry is the installation directory
        itself, hence extraction one level above it.

        Returns:
            False on a miss (cache disabled or no file), True once restored.

        Raises:
            CacheReadFailure: The archive could not be extracted.
        """
        if self.disabled or not path.is_file():
            return False

        if log is not None:
            log(f"Installing JDK from cache {path} into {destination_parent}")

        with open(path, "rb") as raw:
            reader = _CountingReader(raw)
            try:
                _unzip(reader, destination_parent)
            except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as e:
                raise CacheReadFailure(path.resolve().as_uri(), reader.count) from e

        logger.info("Restored %s from cache (%d bytes)", destination_parent, reader.count)
        return True

    def write(self, installed_dir: Path, path: Path) -> None:
        """Archive ``installed_dir`` to ``path`` atomically.

        Raises:
            CacheWriteFailure: Any I/O error while writing or renaming.
        """
        if self.disabled:
            return

        tmp: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.name + ".", suffix=TMP_SUFFIX)
            tmp = Path(tmp_name)
            with os.fdopen(fd, "wb") as out:
                _zip_tree(installed_dir, out)
            os.chmod(tmp, 0o644)
            os.replace(tmp, path)
            logger.info("Cached %s at %s", installed_dir, path)
        except (OSError, zipfile.LargeZipFile, ValueError) as e:
            raise CacheWriteFailure(f"Failed to cache {installed_dir} at {path}: {e}") from e
        finally:
            if tmp is not None:
                tmp.unlink(missing_ok=True)

    def status(self) -> dict:
        """Summarize cached archives per platform/CPU.

        Returns::

            {
                "cache_dir": "/var/lib/jdk/caches/adoptopenjdk",
                "disabled": False,
                "entries": [{"platform": "linux", "cpu": "amd64",
                             "release": "jdk-17.0.2+8", "size_mb": 180.2}],
                "total_size_mb": 180.2,
            }
        """
        entries: list[dict] = []
        total = 0
        if self.base.is_dir():
            for archive in sorted(self.base.glob(f"*/*/*.{ARCHIVE_EXT}")):
                size = archive.stat().st_size
                total += size
                entries.append({
                    "platform": archive.parent.parent.name,
                    "cpu": archive.parent.name,
                    "release": archive.name[: -len(ARCHIVE_EXT) - 1],
                    "size_mb": round(size / (1024 * 1024), 1),
                })
        return {
            "cache_dir": str(self.base),
            "disabled": self.disabled,
            "entries": entries,
            "total_size_mb": round(total / (1024 * 1024), 1),
        }

    def clear(self, release_id: str | None = None) -> int:
        """Delete cached archives for one release, or everything.

        Returns:
            Number of archives removed.
        """
        if not self.base.is_dir():
            return 0
        if release_id is None:
            removed = len(list(self.base.glob(f"*/*/*.{ARCHIVE_EXT}")))
            shutil.rmtree(self.base)
            return removed
        removed = 0
        for archive in self.base.glob(f"*/*/{release_id}.{ARCHIVE_EXT}"):
            archive.unlink()
            removed += 1
        return removed


# ── Private helpers ───────────────────────────────────────

def _zip_tree(src: Path, out: BinaryIO) -> None:
    """Write ``src`` and its subtree to ``out``, rooted at ``src.name``."""
    with zipfile.ZipFile(out, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False) as zf:
        zf.write(src, src.name)
        for dirpath, dirnames, filenames in os.walk(src):
            dirnames.sort()
            here = Path(dirpath)
            for name in list(dirnames) + sorted(filenames):
                child = here / name
                arcname = (Path(src.name) / child.relative_to(src)).as_posix()
                if child.is_symlink():
                    info = zipfile.ZipInfo(arcname)
                    info.external_attr = (stat.S_IFLNK | 0o777) << 16
                    zf.writestr(info, os.readlink(child))
                else:
                    zf.write(child, arcname)


def _unzip(source: _CountingReader, dest: Path) -> None:
    """Extract a ``_zip_tree`` archive into ``dest``, restoring modes and links."""
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()
    dir_modes: list[tuple[Path, int]] = []
    with zipfile.ZipFile(source) as zf:  # type: ignore[arg-type]
        for info in zf.infolist():
            target = Path(os.path.normpath(root / info.filename))
            if target != root and root not in target.parents:
                raise ValueError(f"Archive entry escapes destination: {info.filename}")

            mode = info.external_attr >> 16
            perms = stat.S_IMODE(mode)
            if stat.S_ISLNK(mode):
                target.parent.mkdir(parents=True, exist_ok=True)
                if target.is_symlink() or target.is_file():
                    target.unlink()
                os.symlink(zf.read(info).decode("utf-8"), target)
            elif info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                if perms:
                    dir_modes.append((target, perms))
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                if perms:
                    os.chmod(target, perms)

    # Directories last, a read-only directory would block its own children
    for path, perms in reversed(dir_modes):
        os.chmod(path, perms)
