"""
L4 Execution — Archive download and extraction.

Default implementation of the download collaborator the orchestrator
calls on a cache miss.  Fetches an archive over HTTP(S), extracts it
into the target directory and records the server's ``Last-Modified``
value in ``<target>/.timestamp`` so an unchanged archive is not
fetched twice.

Supports zip and tar.gz archives.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
import tempfile
import urllib.error
import urllib.request
import zipfile
from pathlib import Path
from typing import Callable

from src.core.services.jdk_install.errors import ArchiveDownloadFailure

logger = logging.getLogger(__name__)

TIMESTAMP_FILE = ".timestamp"
_USER_AGENT = "jdk-installer/0.1"


class ArchiveDownloader:
    """Download-and-extract collaborator.

    Args:
        timeout: Socket timeout in seconds for the HTTP request.
    """

    def __init__(self, timeout: int = 60):
        self.timeout = timeout

    def install(
        self,
        url: str,
        target_dir: Path,
        log: Callable[[str], None] | None = None,
    ) -> bool:
        """Fetch ``url`` and unpack it into ``target_dir``.

        Returns:
            True if a fresh extraction happened, False if the archive
            was unchanged since the last extraction.

        Raises:
            ArchiveDownloadFailure: Network, I/O or archive format error.
        """
        target_dir = Path(target_dir)
        stamp = target_dir / TIMESTAMP_FILE
        say = log or logger.info

        target_dir.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target_dir.parent, prefix=".download_", suffix=".tmp")
        os.close(fd)
        tmp = Path(tmp_name)
        try:
            req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                last_modified = resp.headers.get("Last-Modified", "") or ""
                if last_modified and _is_current(target_dir, stamp, last_modified):
                    logger.info("%s is up to date (%s)", target_dir, last_modified)
                    return False

                say(f"Unpacking {url} to {target_dir}")
                size = 0
                with open(tmp, "wb") as f:
                    while True:
                        chunk = resp.read(8192)
                        if not chunk:
                            break
                        f.write(chunk)
                        size += len(chunk)
            logger.debug("Downloaded %d bytes from %s", size, url)

            if target_dir.exists():
                shutil.rmtree(target_dir)
            target_dir.mkdir(parents=True)
            _extract(tmp, target_dir)
            stamp.write_text(last_modified, encoding="utf-8")
            return True
        except (urllib.error.URLError, OSError, tarfile.TarError, zipfile.BadZipFile) as e:
            raise ArchiveDownloadFailure(f"Failed to install {url} to {target_dir}: {e}") from e
        finally:
            tmp.unlink(missing_ok=True)


def _is_current(target_dir: Path, stamp: Path, last_modified: str) -> bool:
    """True if ``stamp`` records ``last_modified`` and the tree has content."""
    if not stamp.is_file():
        return False
    try:
        recorded = stamp.read_text(encoding="utf-8")
    except OSError:
        return False
    has_content = any(p.name != TIMESTAMP_FILE for p in target_dir.iterdir())
    return recorded == last_modified and has_content


def _extract(archive: Path, dest: Path) -> None:
    """Unpack a zip or tar archive into ``dest``."""
    if zipfile.is_zipfile(archive):
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(dest)
        return
    if tarfile.is_tarfile(archive):
        with tarfile.open(archive, "r:*") as tf:
            tf.extractall(dest, filter="data")
        return
    raise ArchiveDownloadFailure(f"Unsupported archive format: {archive.name}")
