from __future__ import annotations

import logging

from result import Err, Ok

from fastfm.models.entries import DirectoryEntry, FsError, ListingResult, error_from_os
from fastfm.models.enums import NodeKind, SortKey, SortOrder
from fastfm.scan._base import is_hidden, resolve_dir, sort_entries
from fastfm.services.fs import DEFAULT_FS, FileSystem

LOGGER = logging.getLogger(__name__)


def list_directory(
    path: str,
    fs: FileSystem = DEFAULT_FS,
    *,
    show_hidden: bool = False,
    sort_by: SortKey = SortKey.NAME,
    order: SortOrder = SortOrder.ASC,
) -> ListingResult:
    """Immediate children of *path*, directories first.

    Entries that cannot be stat'ed are skipped. A symlink takes the kind of
    its target, so a linked folder lists as a directory.
    """
    resolved = resolve_dir(path, fs)
    if isinstance(resolved, FsError):
        return Err(resolved)

    entries: list[DirectoryEntry] = []
    try:
        for entry in fs.scandir(resolved):
            if not show_hidden and is_hidden(entry.name):
                continue
            st = entry.stat
            if st is None:
                LOGGER.debug("Skipping unreadable entry %s", entry.path)
                continue
            entries.append(
                DirectoryEntry(
                    name=entry.name,
                    path=entry.path,
                    kind=NodeKind.DIRECTORY if st.is_dir else NodeKind.FILE,
                    size_bytes=None if st.is_dir else st.size,
                    modified_ts=st.mtime,
                )
            )
    except OSError as exc:
        return Err(error_from_os(exc, resolved))

    return Ok(sort_entries(entries, sort_by, order))
