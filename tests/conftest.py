"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from tests.jdk_install.fakes import FakeDownloader, FakeHost


@pytest.fixture
def linux_amd64(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make in-process probes see a glibc Linux x86_64 machine."""
    monkeypatch.setattr("platform.system", lambda: "Linux")
    monkeypatch.setattr("platform.machine", lambda: "x86_64")


@pytest.fixture
def missing_os_release(tmp_path: Path) -> Path:
    """An os-release path that does not exist."""
    return tmp_path / "no-such-os-release"


@pytest.fixture
def fake_host(tmp_path: Path) -> FakeHost:
    root = tmp_path / "agent"
    root.mkdir()
    return FakeHost(root)


@pytest.fixture
def fake_downloader() -> FakeDownloader:
    return FakeDownloader()
