from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from result import Result

from fastfm.models.enums import NodeKind


ProgressCallback = Callable[[str, int, int], None]
CancelCheck = Callable[[], bool]


@dataclass(slots=True, frozen=True)
class DirectoryEntry:
    name: str
    path: str
    kind: NodeKind
    size_bytes: int | None
    modified_ts: float

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY


@dataclass(slots=True, frozen=True)
class SearchResultEntry:
    name: str
    path: str
    size_bytes: int
    modified_ts: float


@dataclass(slots=True, frozen=True)
class Drive:
    label: str
    path: str


class FsErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    NOT_DIRECTORY = "not_directory"
    PERMISSION_DENIED = "permission_denied"
    ALREADY_EXISTS = "already_exists"
    IO_ERROR = "io_error"
    OPEN_FAILED = "open_failed"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class FsError:
    code: FsErrorCode
    path: str
    message: str


@dataclass(slots=True)
class BatchResult:
    success_count: int = 0
    total_count: int = 0
    failures: list[FsError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.success_count == self.total_count


ListingResult = Result[list[DirectoryEntry], FsError]
SearchResult = Result[list[SearchResultEntry], FsError]


def error_from_os(exc: OSError, path: str) -> FsError:
    """Classify an ``OSError`` into an ``FsError``."""
    if isinstance(exc, FileNotFoundError):
        code = FsErrorCode.NOT_FOUND
    elif isinstance(exc, PermissionError):
        code = FsErrorCode.PERMISSION_DENIED
    elif isinstance(exc, FileExistsError):
        code = FsErrorCode.ALREADY_EXISTS
    elif isinstance(exc, NotADirectoryError):
        code = FsErrorCode.NOT_DIRECTORY
    else:
        code = FsErrorCode.IO_ERROR
    return FsError(code=code, path=path, message=exc.strerror or str(exc))
