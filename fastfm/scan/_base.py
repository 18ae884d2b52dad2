from __future__ import annotations

import locale
from collections.abc import Iterable

from fastfm.models.entries import DirectoryEntry, FsError, FsErrorCode
from fastfm.models.enums import SortKey, SortOrder
from fastfm.services.fs import FileSystem


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def resolve_dir(path: str, fs: FileSystem) -> str | FsError:
    """Validate and resolve a directory to traverse.

    Returns the resolved absolute path, or an ``FsError`` on failure.
    """
    expanded = fs.expanduser(path)
    if not fs.exists(expanded):
        return FsError(
            code=FsErrorCode.NOT_FOUND,
            path=expanded,
            message="Path does not exist",
        )

    resolved = fs.absolute(expanded)
    try:
        root_stat = fs.stat(resolved)
    except PermissionError as exc:
        return FsError(
            code=FsErrorCode.PERMISSION_DENIED,
            path=resolved,
            message=f"Cannot stat directory: {exc}",
        )
    except OSError as exc:
        return FsError(
            code=FsErrorCode.IO_ERROR,
            path=resolved,
            message=f"Cannot stat directory: {exc}",
        )
    if not root_stat.is_dir:
        return FsError(
            code=FsErrorCode.NOT_DIRECTORY,
            path=resolved,
            message="Path is not a directory",
        )
    return resolved


def _name_key(entry: DirectoryEntry) -> tuple[str, str]:
    # Case-folded first; the C locale alone puts every capital ahead.
    return locale.strxfrm(entry.name.casefold()), locale.strxfrm(entry.name)


def sort_entries(
    entries: Iterable[DirectoryEntry],
    sort_by: SortKey = SortKey.NAME,
    order: SortOrder = SortOrder.ASC,
) -> list[DirectoryEntry]:
    """Directories first, then files; each group ordered by *sort_by*.

    Name order ignores case first and then uses the active ``LC_COLLATE``
    locale, so names differing only in case still sort deterministically.
    Ties on size or mtime fall back to name order.
    """
    items = sorted(entries, key=_name_key)
    if sort_by is SortKey.SIZE:
        items.sort(key=lambda entry: entry.size_bytes or 0)
    elif sort_by is SortKey.MTIME:
        items.sort(key=lambda entry: entry.modified_ts)
    if order is SortOrder.DESC:
        items.reverse()
    # Stable sort keeps the ordering above within each kind.
    items.sort(key=lambda entry: not entry.is_dir)
    return items
