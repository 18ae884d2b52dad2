from __future__ import annotations

import os
import sys
import tempfile

import pytest
from result import Err, Ok

from fastfm.models.entries import FsErrorCode
from fastfm.scan import search as search_module
from fastfm.scan import search_files
from fastfm.services.fs import DEFAULT_FS
from tests.fs_mock import MemoryFileSystem


def _fs() -> MemoryFileSystem:
    return (
        MemoryFileSystem()
        .add_dir("/home")
        .add_file("/home/docs/report.txt", size=3)
        .add_file("/home/docs/deep/nested/Quarterly-REPORT.pdf", size=9)
        .add_file("/home/notes.md")
        .add_file("/home/.git/report.txt")
        .add_file("/home/.report-cache")
        .add_dir("/home/reports")
    )


def test_case_insensitive_substring_on_files_only() -> None:
    result = search_files("/home", "report", _fs())
    assert isinstance(result, Ok)
    paths = sorted(item.path for item in result.unwrap())
    assert paths == [
        "/home/docs/deep/nested/Quarterly-REPORT.pdf",
        "/home/docs/report.txt",
    ]


def test_hidden_directories_are_never_entered() -> None:
    fs = _fs()
    search_files("/home", "report", fs)
    assert "/home/.git" not in fs.scanned
    assert "/home/docs/deep/nested" in fs.scanned


def test_result_carries_size() -> None:
    results = search_files("/home", "report.txt", _fs()).unwrap()
    assert [(item.name, item.size_bytes) for item in results] == [("report.txt", 3)]


def test_unreadable_directory_is_skipped() -> None:
    fs = _fs().deny("/home/docs")
    result = search_files("/home", "o", fs)
    assert isinstance(result, Ok)
    assert [item.path for item in result.unwrap()] == ["/home/notes.md"]


def test_unstatable_entry_is_skipped() -> None:
    fs = _fs().break_stat("/home/docs/report.txt")
    paths = [item.path for item in search_files("/home", "report", fs).unwrap()]
    assert paths == ["/home/docs/deep/nested/Quarterly-REPORT.pdf"]


def test_missing_root() -> None:
    result = search_files("/missing", "x", _fs())
    assert isinstance(result, Err)
    assert result.unwrap_err().code is FsErrorCode.NOT_FOUND


def test_cancel() -> None:
    result = search_files("/home", "report", _fs(), cancel_check=lambda: True)
    assert isinstance(result, Err)
    assert result.unwrap_err().code is FsErrorCode.CANCELLED


def test_progress_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(search_module, "PROGRESS_EVERY", 1)
    calls: list[tuple[str, int, int]] = []
    search_files("/home", "x", _fs(), progress_callback=lambda *args: calls.append(args))
    assert calls
    assert calls[-1][2] == len(calls)


def test_links_are_neither_entered_nor_reported() -> None:
    fs = _fs().add_file("/home/report-link").mark_link("/home/report-link").mark_link("/home/reports")
    paths = sorted(item.path for item in search_files("/home", "report", fs).unwrap())
    assert paths == [
        "/home/docs/deep/nested/Quarterly-REPORT.pdf",
        "/home/docs/report.txt",
    ]
    assert "/home/reports" not in fs.scanned


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
def test_symlinks_on_disk_do_not_loop_or_match() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        docs = os.path.join(tmp, "docs")
        os.mkdir(docs)
        report = os.path.join(docs, "report.txt")
        with open(report, "w", encoding="utf-8") as handle:
            handle.write("q3")
        os.symlink(report, os.path.join(tmp, "report_link"))
        os.symlink(tmp, os.path.join(docs, "report_loop"))

        result = search_files(tmp, "report", DEFAULT_FS)

        assert isinstance(result, Ok)
        assert [item.path for item in result.unwrap()] == [report]
