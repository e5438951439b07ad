"""
JDK Install — local zip cache of installed trees.
"""

from __future__ import annotations

import os
import stat
import sys
import zipfile
from pathlib import Path

import pytest

from src.core.models.platform import CPU, Platform
from src.core.services.jdk_install.errors import CacheReadFailure, CacheWriteFailure
from src.core.services.jdk_install.execution import cache_store
from src.core.services.jdk_install.execution.cache_store import CacheStore

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX modes and symlinks")


def _snapshot(root: Path) -> dict[str, tuple]:
    """Relative path → (kind, payload, mode) for every entry below root."""
    result: dict[str, tuple] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        here = Path(dirpath)
        for name in dirnames + filenames:
            path = here / name
            rel = path.relative_to(root).as_posix()
            if path.is_symlink():
                result[rel] = ("link", os.readlink(path), None)
            elif path.is_dir():
                result[rel] = ("dir", None, stat.S_IMODE(path.stat().st_mode))
            else:
                result[rel] = ("file", path.read_bytes(), stat.S_IMODE(path.stat().st_mode))
    return result


@pytest.fixture
def installed(tmp_path: Path) -> Path:
    """A small installed JDK tree at <tmp>/agent/tools/jdk17."""
    home = tmp_path / "agent" / "tools" / "jdk17"
    (home / "bin").mkdir(parents=True)
    (home / "lib" / "server").mkdir(parents=True)
    (home / "bin" / "java").write_text("#!/bin/sh\necho java\n")
    os.chmod(home / "bin" / "java", 0o755)
    (home / "lib" / "server" / "libjvm.so").write_bytes(b"\x7fELF" + bytes(range(256)) * 16)
    (home / "release").write_text('JAVA_VERSION="17.0.2"\n')
    (home / ".installedByJenkins").write_text("jdk-17.0.2+8")
    return home


@pytest.fixture
def store(tmp_path: Path) -> CacheStore:
    return CacheStore(tmp_path / "controller")


class TestPathFor:
    def test_layout(self, tmp_path: Path):
        store = CacheStore(tmp_path)
        path = store.path_for(Platform.LINUX, CPU.AMD64, "jdk-17.0.2+8")
        assert path == tmp_path / "caches" / "adoptopenjdk" / "linux" / "amd64" / "jdk-17.0.2+8.zip"

    def test_product_and_platform_id(self, tmp_path: Path):
        store = CacheStore(tmp_path, product="temurin")
        path = store.path_for(Platform.ALPINE_LINUX, CPU.ARM, "r")
        assert path.relative_to(tmp_path).as_posix() == "caches/temurin/alpine-linux/arm/r.zip"

    def test_deterministic(self, store: CacheStore):
        a = store.path_for(Platform.MACOS, CPU.ARM, "x")
        b = store.path_for(Platform.MACOS, CPU.ARM, "x")
        assert a == b
        assert a != store.path_for(Platform.MACOS, CPU.AMD64, "x")


class TestRoundTrip:
    def test_write_then_read_reproduces_tree(self, store: CacheStore, installed: Path, tmp_path: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "jdk-17.0.2+8")
        store.write(installed, path)
        assert path.is_file()

        restore_parent = tmp_path / "other-agent" / "tools"
        assert store.try_read(path, restore_parent) is True
        assert _snapshot(restore_parent / "jdk17") == _snapshot(installed)

    def test_archive_is_rooted_at_dir_name(self, store: CacheStore, installed: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        store.write(installed, path)
        with zipfile.ZipFile(path) as zf:
            names = zf.namelist()
        assert all(n.startswith("jdk17/") for n in names)
        assert "jdk17/bin/java" in names

    @posix_only
    def test_modes_and_symlinks_survive(self, store: CacheStore, installed: Path, tmp_path: Path):
        (installed / "legal").mkdir()
        os.symlink("../release", installed / "legal" / "release-link")
        os.symlink("lib", installed / "lib-alias")
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        store.write(installed, path)

        restore_parent = tmp_path / "restored"
        store.try_read(path, restore_parent)
        restored = restore_parent / "jdk17"
        assert os.access(restored / "bin" / "java", os.X_OK)
        assert os.readlink(restored / "legal" / "release-link") == "../release"
        assert (restored / "lib-alias").is_symlink()
        assert _snapshot(restored) == _snapshot(installed)

    def test_overwrites_existing_entry(self, store: CacheStore, installed: Path, tmp_path: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        path.parent.mkdir(parents=True)
        path.write_bytes(b"stale")
        store.write(installed, path)
        assert zipfile.is_zipfile(path)

    def test_no_temp_file_left(self, store: CacheStore, installed: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        store.write(installed, path)
        assert list(path.parent.glob("*.tmp")) == []


class TestTryRead:
    def test_miss_when_absent(self, store: CacheStore, tmp_path: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        assert store.try_read(path, tmp_path / "dest") is False
        assert not (tmp_path / "dest").exists()

    def test_miss_when_disabled(self, tmp_path: Path, installed: Path):
        enabled = CacheStore(tmp_path / "controller")
        path = enabled.path_for(Platform.LINUX, CPU.AMD64, "r")
        enabled.write(installed, path)

        disabled = CacheStore(tmp_path / "controller", disabled=True)
        assert disabled.try_read(path, tmp_path / "dest") is False

    def test_corrupt_archive(self, store: CacheStore, tmp_path: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        path.parent.mkdir(parents=True)
        path.write_bytes(b"PK\x03\x04 definitely not a zip" * 10)

        with pytest.raises(CacheReadFailure) as excinfo:
            store.try_read(path, tmp_path / "dest")
        err = excinfo.value
        assert err.location.startswith("file:")
        assert err.location.endswith("r.zip")
        assert err.bytes_read > 0
        assert err.__cause__ is not None

    def test_entry_escaping_destination(self, store: CacheStore, tmp_path: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        path.parent.mkdir(parents=True)
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("../evil.txt", "x")
        with pytest.raises(CacheReadFailure):
            store.try_read(path, tmp_path / "dest")
        assert not (tmp_path / "evil.txt").exists()

    def test_logs_to_sink(self, store: CacheStore, installed: Path, tmp_path: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        store.write(installed, path)
        lines: list[str] = []
        store.try_read(path, tmp_path / "dest", lines.append)
        assert any(str(path) in line for line in lines)


class TestWrite:
    def test_disabled_is_noop(self, tmp_path: Path, installed: Path):
        store = CacheStore(tmp_path / "controller", disabled=True)
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        store.write(installed, path)
        assert not path.exists()
        assert not path.parent.exists()

    def test_failure_cleans_temp(self, store: CacheStore, tmp_path: Path):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        with pytest.raises(CacheWriteFailure) as excinfo:
            store.write(tmp_path / "does-not-exist", path)
        assert excinfo.value.__cause__ is not None
        assert not path.exists()
        assert list(path.parent.glob("*.tmp")) == []

    def test_failed_rename_keeps_previous_entry(
        self, store: CacheStore, installed: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        path.parent.mkdir(parents=True)
        path.write_bytes(b"previous")

        def boom(src, dst):
            raise OSError("rename failed")

        monkeypatch.setattr("src.core.services.jdk_install.execution.cache_store.os.replace", boom)
        with pytest.raises(CacheWriteFailure):
            store.write(installed, path)
        assert path.read_bytes() == b"previous"
        assert list(path.parent.glob("*.tmp")) == []

    def test_pre_1980_mtimes(self, store: CacheStore, installed: Path, tmp_path: Path):
        os.utime(installed / "bin" / "java", (0, 0))
        os.utime(installed / "bin", (0, 0))
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        store.write(installed, path)

        restore_parent = tmp_path / "restored"
        assert store.try_read(path, restore_parent) is True
        assert (restore_parent / "jdk17" / "bin" / "java").read_text() == "#!/bin/sh\necho java\n"

    def test_archiving_error_is_write_failure(
        self, store: CacheStore, installed: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        def bad_zip(src, out):
            raise ValueError("unrepresentable entry")

        monkeypatch.setattr("src.core.services.jdk_install.execution.cache_store._zip_tree", bad_zip)
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        with pytest.raises(CacheWriteFailure, match="unrepresentable"):
            store.write(installed, path)
        assert not path.exists()
        assert list(path.parent.glob("*.tmp")) == []

    def test_interleaved_writers_same_key(
        self, store: CacheStore, installed: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ):
        other = tmp_path / "agent-b" / "tools" / "jdk17"
        other.mkdir(parents=True)
        (other / "release").write_text("from b")
        path = store.path_for(Platform.LINUX, CPU.AMD64, "r")
        real_zip_tree = cache_store._zip_tree
        calls = []

        def zip_then_let_b_finish(src, out):
            calls.append(src)
            real_zip_tree(src, out)
            if len(calls) == 1:
                store.write(other, path)

        monkeypatch.setattr(cache_store, "_zip_tree", zip_then_let_b_finish)
        store.write(installed, path)

        assert calls == [installed, other]
        restore_parent = tmp_path / "restored"
        store.try_read(path, restore_parent)
        assert (restore_parent / "jdk17" / "bin" / "java").is_file()
        assert list(path.parent.glob("*.tmp")) == []


class TestStatusAndClear:
    def test_status(self, store: CacheStore, installed: Path):
        store.write(installed, store.path_for(Platform.LINUX, CPU.AMD64, "a"))
        store.write(installed, store.path_for(Platform.MACOS, CPU.ARM, "b"))
        status = store.status()
        assert status["disabled"] is False
        keys = {(e["platform"], e["cpu"], e["release"]) for e in status["entries"]}
        assert keys == {("linux", "amd64", "a"), ("mac", "arm", "b")}

    def test_status_empty(self, store: CacheStore):
        assert store.status()["entries"] == []

    def test_clear_one_release(self, store: CacheStore, installed: Path):
        store.write(installed, store.path_for(Platform.LINUX, CPU.AMD64, "a"))
        store.write(installed, store.path_for(Platform.WINDOWS, CPU.AMD64, "a"))
        store.write(installed, store.path_for(Platform.LINUX, CPU.AMD64, "b"))
        assert store.clear("a") == 2
        assert [e["release"] for e in store.status()["entries"]] == ["b"]

    def test_clear_all(self, store: CacheStore, installed: Path):
        store.write(installed, store.path_for(Platform.LINUX, CPU.AMD64, "a"))
        assert store.clear() == 1
        assert not store.base.exists()
        assert store.clear() == 0
