from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from fastfm.services.fs import DirEntry, StatResult


@dataclass
class _MockEntry:
    is_dir: bool
    size: int
    content: str
    mtime: float = 0.0


class MemoryFileSystem:
    def __init__(self, home: str = "/mock/home") -> None:
        self._entries: dict[str, _MockEntry] = {"/": _MockEntry(is_dir=True, size=0, content="")}
        self._home = home
        self._unreadable: set[str] = set()
        self._unstatable: set[str] = set()
        self._links: set[str] = set()
        self.scanned: list[str] = []

    def add_dir(self, path: str, mtime: float = 0.0) -> MemoryFileSystem:
        key = self._normalize(path)
        self._add_parents(key)
        self._entries[key] = _MockEntry(is_dir=True, size=0, content="", mtime=mtime)
        return self

    def add_file(
        self,
        path: str,
        size: int = 0,
        content: str = "",
        mtime: float = 0.0,
    ) -> MemoryFileSystem:
        key = self._normalize(path)
        self._add_parents(key)
        self._entries[key] = _MockEntry(
            is_dir=False,
            size=size or len(content.encode()),
            content=content,
            mtime=mtime,
        )
        return self

    def deny(self, path: str) -> MemoryFileSystem:
        """Make ``scandir`` on *path* raise ``PermissionError``."""
        self._unreadable.add(self._normalize(path))
        return self

    def break_stat(self, path: str) -> MemoryFileSystem:
        """Report *path* from ``scandir`` without stat information."""
        self._unstatable.add(self._normalize(path))
        return self

    def mark_link(self, path: str) -> MemoryFileSystem:
        """Report *path* from ``scandir`` as a symbolic link."""
        self._links.add(self._normalize(path))
        return self

    def _add_parents(self, key: str) -> None:
        # auto-create parent dirs
        for parent in reversed(PurePosixPath(key).parents):
            pk = str(parent)
            if pk not in self._entries:
                self._entries[pk] = _MockEntry(is_dir=True, size=0, content="")

    def expanduser(self, path: str) -> str:
        return path.replace("~", self._home)

    def home(self) -> str:
        return self._home

    def exists(self, path: str) -> bool:
        return self._normalize(path) in self._entries

    def absolute(self, path: str) -> str:
        return self._normalize(path)

    def _get(self, path: str) -> _MockEntry:
        key = self._normalize(path)
        entry = self._entries.get(key)
        if entry is None:
            raise FileNotFoundError(2, "No such file or directory", key)
        return entry

    def stat(self, path: str) -> StatResult:
        entry = self._get(path)
        return StatResult(size=entry.size, mtime=entry.mtime, is_dir=entry.is_dir)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return self._get(path).content

    def read_bytes(self, path: str, limit: int) -> bytes:
        entry = self._get(path)
        if entry.is_dir:
            raise IsADirectoryError(21, "Is a directory", path)
        return entry.content.encode()[:limit]

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        self.add_file(path, content=content)

    def make_dir(self, path: str, parents: bool = False) -> None:
        key = self._normalize(path)
        if key in self._entries:
            if parents:
                return
            raise FileExistsError(17, "File exists", key)
        if not parents and str(PurePosixPath(key).parent) not in self._entries:
            raise FileNotFoundError(2, "No such file or directory", key)
        self.add_dir(key)

    def create_file(self, path: str) -> None:
        key = self._normalize(path)
        if key in self._entries:
            raise FileExistsError(17, "File exists", key)
        self.add_file(key)

    def _subtree(self, key: str) -> list[str]:
        prefix = key.rstrip("/") + "/"
        return [p for p in self._entries if p == key or p.startswith(prefix)]

    def copy(self, source: str, target: str) -> None:
        src = self._normalize(source)
        dst = self._normalize(target)
        for p in self._subtree(src):
            self._entries[dst + p[len(src) :]] = _MockEntry(**vars(self._entries[p]))

    def move(self, source: str, target: str) -> None:
        self.copy(source, target)
        self.remove(source)

    def remove(self, path: str) -> None:
        key = self._normalize(path)
        self._get(key)
        for p in self._subtree(key):
            del self._entries[p]

    def scandir(self, path: str) -> list[DirEntry]:
        key = self._normalize(path)
        entry = self._get(key)
        if not entry.is_dir:
            raise NotADirectoryError(20, "Not a directory", key)
        if key in self._unreadable:
            raise PermissionError(13, "Permission denied", key)
        self.scanned.append(key)
        prefix = key.rstrip("/") + "/"
        result: list[DirEntry] = []
        for p, mock in self._entries.items():
            if not p.startswith(prefix) or p == prefix:
                continue
            remainder = p[len(prefix) :]
            if "/" in remainder:
                continue
            st = (
                StatResult(size=mock.size, mtime=mock.mtime, is_dir=mock.is_dir)
                if p not in self._unstatable
                else None
            )
            result.append(DirEntry(path=p, name=remainder, stat=st, is_symlink=p in self._links))
        return result

    @staticmethod
    def _normalize(path: str) -> str:
        return path.rstrip("/") or "/"
