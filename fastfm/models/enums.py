from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class Region(str, Enum):
    SEARCH = "search"
    DRIVE = "drive"
    FILE = "file"


class SortKey(str, Enum):
    NAME = "name"
    SIZE = "size"
    MTIME = "mtime"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
