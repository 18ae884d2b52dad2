from __future__ import annotations

import asyncio

import pytest
from result import Err, Ok

from fastfm.config.schema import UiConfig
from fastfm.models.entries import FsErrorCode
from fastfm.models.enums import SortKey, SortOrder
from fastfm.scan import search as search_module
from fastfm.services.api import LocalFileManagerApi
from tests.fs_mock import MemoryFileSystem


def _api(fs: MemoryFileSystem) -> LocalFileManagerApi:
    return LocalFileManagerApi(fs=fs, config_path="/cfg/key-config.json")


def test_directory_contents_use_ui_preferences() -> None:
    fs = (
        MemoryFileSystem()
        .add_file("/data/small.txt", size=1)
        .add_file("/data/big.txt", size=100)
        .add_file("/data/.secret", size=5)
    )
    api = _api(fs)
    api.apply_ui(UiConfig(show_hidden_files=True, sort_by=SortKey.SIZE, sort_order=SortOrder.DESC))

    result = asyncio.run(api.get_directory_contents("/data"))

    assert isinstance(result, Ok)
    assert [entry.name for entry in result.unwrap()] == ["big.txt", ".secret", "small.txt"]


def test_directory_contents_error() -> None:
    result = asyncio.run(_api(MemoryFileSystem()).get_directory_contents("/missing"))
    assert isinstance(result, Err)


def test_search_runs_from_home() -> None:
    fs = MemoryFileSystem(home="/home/me").add_file("/home/me/a/report.txt").add_file("/other/report.txt")
    result = asyncio.run(_api(fs).search_files("REPORT"))
    assert [item.path for item in result.unwrap()] == ["/home/me/a/report.txt"]


def test_search_passes_hooks_to_the_walk(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(search_module, "PROGRESS_EVERY", 1)
    fs = MemoryFileSystem(home="/home/me").add_file("/home/me/a/report.txt")
    seen: list[str] = []

    result = asyncio.run(
        _api(fs).search_files("report", progress_callback=lambda current, files, dirs: seen.append(current))
    )

    assert isinstance(result, Ok)
    assert "/home/me/a" in seen


def test_search_can_be_cancelled() -> None:
    fs = MemoryFileSystem(home="/home/me").add_file("/home/me/a/report.txt")
    result = asyncio.run(_api(fs).search_files("report", cancel_check=lambda: True))
    assert isinstance(result, Err)
    assert result.unwrap_err().code is FsErrorCode.CANCELLED


def test_get_config_writes_defaults_when_missing() -> None:
    fs = MemoryFileSystem()
    api = _api(fs)

    config = asyncio.run(api.get_config())

    assert config == asyncio.run(api.get_default_config())
    assert fs.exists("/cfg/key-config.json")


def test_save_then_get_config() -> None:
    fs = MemoryFileSystem()
    api = _api(fs)
    config = asyncio.run(api.get_default_config())
    config.keyboard["navigation"]["up"] = "k"

    assert isinstance(asyncio.run(api.save_config(config)), Ok)
    assert asyncio.run(api.get_config()).keyboard["navigation"]["up"] == "k"


def test_batch_operations_through_fs() -> None:
    fs = MemoryFileSystem().add_file("/a/one.txt", content="1").add_dir("/b")
    api = _api(fs)

    copied = asyncio.run(api.copy_files(["/a/one.txt"], "/b"))
    assert (copied.success_count, copied.total_count) == (1, 1)
    assert fs.read_text("/b/one.txt") == "1"

    moved = asyncio.run(api.move_files(["/b/one.txt", "/b/none.txt"], "/a"))
    assert (moved.success_count, moved.total_count) == (0, 2)

    deleted = asyncio.run(api.delete_files(["/b/one.txt"]))
    assert deleted.ok
    assert not fs.exists("/b/one.txt")


def test_create_and_preview() -> None:
    fs = MemoryFileSystem().add_dir("/w")
    api = _api(fs)
    assert isinstance(asyncio.run(api.create_file("/w/new.txt")), Ok)
    assert isinstance(asyncio.run(api.create_directory("/w/sub")), Ok)
    assert isinstance(asyncio.run(api.create_file("/w/sub")), Err)
    assert asyncio.run(api.preview_file("/w/new.txt")).unwrap() == ""
