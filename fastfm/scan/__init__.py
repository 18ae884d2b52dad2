from __future__ import annotations

from fastfm.scan._base import resolve_dir, sort_entries
from fastfm.scan.listing import list_directory
from fastfm.scan.search import search_files

__all__ = [
    "list_directory",
    "resolve_dir",
    "search_files",
    "sort_entries",
]
