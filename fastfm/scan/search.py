from __future__ import annotations

import logging

from result import Err, Ok

from fastfm.models.entries import (
    CancelCheck,
    FsError,
    FsErrorCode,
    ProgressCallback,
    SearchResult,
    SearchResultEntry,
)
from fastfm.scan._base import is_hidden, resolve_dir
from fastfm.services.fs import DEFAULT_FS, FileSystem

LOGGER = logging.getLogger(__name__)

PROGRESS_EVERY = 100


def search_files(
    root: str,
    keyword: str,
    fs: FileSystem = DEFAULT_FS,
    progress_callback: ProgressCallback | None = None,
    cancel_check: CancelCheck | None = None,
) -> SearchResult:
    """Depth-first search below *root* for files whose name contains *keyword*.

    Matching is a case-insensitive substring test on file names only. Hidden
    entries (leading ``.``) are skipped along with everything beneath them, and
    symbolic links are neither followed nor reported. Directories that cannot
    be read and entries that cannot be stat'ed are skipped without aborting
    the walk. There is no depth limit.

    *progress_callback* receives ``(current_dir, files_seen, dirs_seen)``
    every ``PROGRESS_EVERY`` directories.
    """
    resolved = resolve_dir(root, fs)
    if isinstance(resolved, FsError):
        return Err(resolved)

    needle = keyword.lower()
    results: list[SearchResultEntry] = []
    stack: list[str] = [resolved]
    files_seen = 0
    dirs_seen = 0

    while stack:
        if cancel_check is not None and cancel_check():
            return Err(
                FsError(
                    code=FsErrorCode.CANCELLED,
                    path=resolved,
                    message="Search cancelled",
                )
            )

        directory = stack.pop()
        dirs_seen += 1
        subdirs: list[str] = []
        try:
            for entry in fs.scandir(directory):
                # Links are never followed or reported, so the walk cannot loop.
                if is_hidden(entry.name) or entry.is_symlink:
                    continue
                st = entry.stat
                if st is None:
                    continue
                if st.is_dir:
                    subdirs.append(entry.path)
                    continue
                files_seen += 1
                if needle in entry.name.lower():
                    results.append(
                        SearchResultEntry(
                            name=entry.name,
                            path=entry.path,
                            size_bytes=st.size,
                            modified_ts=st.mtime,
                        )
                    )
        except OSError as exc:
            LOGGER.debug("Skipping unreadable directory %s: %s", directory, exc)

        # Reversed so the first child is explored first, matching a recursive walk.
        stack.extend(reversed(subdirs))

        if progress_callback is not None and dirs_seen % PROGRESS_EVERY == 0:
            progress_callback(directory, files_seen, dirs_seen)

    return Ok(results)
