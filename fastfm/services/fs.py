from __future__ import annotations

import os
import shutil
import stat as statmod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol


@dataclass(slots=True, frozen=True)
class StatResult:
    size: int
    mtime: float
    is_dir: bool


@dataclass(slots=True, frozen=True)
class DirEntry:
    path: str
    name: str
    stat: StatResult | None = None
    is_symlink: bool = False


class FileSystem(Protocol):
    def expanduser(self, path: str) -> str: ...

    def home(self) -> str: ...

    def exists(self, path: str) -> bool: ...

    def absolute(self, path: str) -> str: ...

    def stat(self, path: str) -> StatResult: ...

    def scandir(self, path: str) -> Iterable[DirEntry]: ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str: ...

    def read_bytes(self, path: str, limit: int) -> bytes: ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None: ...

    def make_dir(self, path: str, parents: bool = False) -> None: ...

    def create_file(self, path: str) -> None: ...

    def copy(self, source: str, target: str) -> None: ...

    def move(self, source: str, target: str) -> None: ...

    def remove(self, path: str) -> None: ...


class OsFileSystem:
    def expanduser(self, path: str) -> str:
        return str(Path(path).expanduser())

    def home(self) -> str:
        return str(Path.home())

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def absolute(self, path: str) -> str:
        return str(Path(path).absolute())

    def stat(self, path: str) -> StatResult:
        st = os.stat(path)
        return StatResult(
            size=st.st_size,
            mtime=st.st_mtime,
            is_dir=statmod.S_ISDIR(st.st_mode),
        )

    def scandir(self, path: str) -> Iterable[DirEntry]:
        with os.scandir(path) as entries:
            for e in entries:
                is_link = False
                try:
                    is_link = e.is_symlink()
                    # Links report their target; a dangling link has no stat.
                    st = e.stat(follow_symlinks=True)
                    sr = StatResult(
                        size=st.st_size,
                        mtime=st.st_mtime,
                        is_dir=statmod.S_ISDIR(st.st_mode),
                    )
                except OSError:
                    sr = None
                yield DirEntry(path=e.path, name=e.name, stat=sr, is_symlink=is_link)

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return Path(path).read_text(encoding=encoding)

    def read_bytes(self, path: str, limit: int) -> bytes:
        with open(path, "rb") as f:
            return f.read(limit)

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        Path(path).write_text(content, encoding=encoding)

    def make_dir(self, path: str, parents: bool = False) -> None:
        Path(path).mkdir(parents=parents, exist_ok=parents)

    def create_file(self, path: str) -> None:
        # "x" fails with FileExistsError instead of truncating.
        with open(path, "x", encoding="utf-8"):
            pass

    def copy(self, source: str, target: str) -> None:
        if os.path.isdir(source):
            shutil.copytree(source, target)
        else:
            shutil.copy2(source, target)

    def move(self, source: str, target: str) -> None:
        shutil.move(source, target)

    def remove(self, path: str) -> None:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)


DEFAULT_FS: FileSystem = OsFileSystem()
