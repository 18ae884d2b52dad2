"""Filesystem mutations and system hand-offs.

Batch operations run item by item, log and count failures, and always report
a ``BatchResult``; they never raise.
"""

from __future__ import annotations

import logging
import os
import string
import subprocess
import sys
from collections.abc import Callable, Iterable
from pathlib import Path

from result import Err, Ok, Result

from fastfm.models.entries import BatchResult, Drive, FsError, FsErrorCode, error_from_os
from fastfm.services.fs import DEFAULT_FS, FileSystem

LOGGER = logging.getLogger(__name__)

PREVIEW_MAX_BYTES = 64 * 1024

_POSIX_MOUNT_PARENTS = ("/Volumes", "/mnt")


def _basename(path: str) -> str:
    return os.path.basename(path.rstrip("/\\")) or path


def _run_batch(
    sources: Iterable[str],
    target_dir: str,
    verb: str,
    op: Callable[[str, str], None],
    fs: FileSystem,
) -> BatchResult:
    result = BatchResult()
    for source in sources:
        result.total_count += 1
        target = os.path.join(target_dir, _basename(source))
        try:
            if not fs.exists(source):
                raise FileNotFoundError(2, "No such file or directory", source)
            if fs.exists(target):
                raise FileExistsError(17, "Target already exists", target)
            op(source, target)
        except OSError as exc:
            error = error_from_os(exc, source)
            LOGGER.warning("Failed to %s %s to %s: %s", verb, source, target_dir, error.message)
            result.failures.append(error)
            continue
        LOGGER.info("%s %s -> %s", verb.capitalize(), source, target)
        result.success_count += 1
    return result


def copy_files(sources: Iterable[str], target_dir: str, fs: FileSystem = DEFAULT_FS) -> BatchResult:
    return _run_batch(sources, target_dir, "copy", fs.copy, fs)


def move_files(sources: Iterable[str], target_dir: str, fs: FileSystem = DEFAULT_FS) -> BatchResult:
    return _run_batch(sources, target_dir, "move", fs.move, fs)


def delete_files(paths: Iterable[str], fs: FileSystem = DEFAULT_FS) -> BatchResult:
    result = BatchResult()
    for path in paths:
        result.total_count += 1
        try:
            fs.remove(path)
        except OSError as exc:
            error = error_from_os(exc, path)
            LOGGER.warning("Failed to delete %s: %s", path, error.message)
            result.failures.append(error)
            continue
        LOGGER.info("Deleted %s", path)
        result.success_count += 1
    return result


def _exists_error(path: str) -> FsError:
    return FsError(
        code=FsErrorCode.ALREADY_EXISTS,
        path=path,
        message="A file or folder with that name already exists",
    )


def create_file(path: str, fs: FileSystem = DEFAULT_FS) -> Result[str, FsError]:
    if fs.exists(path):
        return Err(_exists_error(path))
    try:
        fs.create_file(path)
    except FileExistsError:
        return Err(_exists_error(path))
    except OSError as exc:
        return Err(error_from_os(exc, path))
    return Ok(path)


def create_directory(path: str, fs: FileSystem = DEFAULT_FS) -> Result[str, FsError]:
    if fs.exists(path):
        return Err(_exists_error(path))
    try:
        fs.make_dir(path)
    except FileExistsError:
        return Err(_exists_error(path))
    except OSError as exc:
        return Err(error_from_os(exc, path))
    return Ok(path)


def preview_file(path: str, fs: FileSystem = DEFAULT_FS, max_bytes: int = PREVIEW_MAX_BYTES) -> Result[str, FsError]:
    """Read the head of a file as text, replacing undecodable bytes."""
    try:
        data = fs.read_bytes(path, max_bytes)
    except OSError as exc:
        return Err(error_from_os(exc, path))
    return Ok(data.decode("utf-8", errors="replace"))


def _open_command(path: str) -> list[str]:
    if sys.platform == "darwin":
        return ["open", path]
    return ["xdg-open", path]


def open_file(path: str) -> Result[str, FsError]:
    """Hand *path* to the platform's default application."""
    if not os.path.exists(path):
        return Err(FsError(code=FsErrorCode.NOT_FOUND, path=path, message="Path does not exist"))
    try:
        if sys.platform == "win32":
            os.startfile(path)  # type: ignore[attr-defined]  # noqa: S606
        else:
            subprocess.Popen(  # noqa: S603
                _open_command(path),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
    except OSError as exc:
        LOGGER.warning("Failed to open %s: %s", path, exc)
        return Err(FsError(code=FsErrorCode.OPEN_FAILED, path=path, message=str(exc)))
    return Ok(path)


def get_drives() -> list[Drive]:
    """Drive letters on Windows; root, home and mounted volumes elsewhere."""
    if sys.platform == "win32":
        return [
            Drive(label=f"{letter}:", path=f"{letter}:\\")
            for letter in string.ascii_uppercase
            if os.path.exists(f"{letter}:\\")
        ]

    drives = [Drive(label="/", path="/"), Drive(label="~ Home", path=str(Path.home()))]
    parents = list(_POSIX_MOUNT_PARENTS)
    user = os.environ.get("USER")
    if user:
        parents.append(f"/media/{user}")
        parents.append(f"/run/media/{user}")
    for parent in parents:
        try:
            with os.scandir(parent) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError:
            continue
        for child in children:
            if child.name.startswith(".") or not child.is_dir():
                continue
            drives.append(Drive(label=child.name, path=child.path))
    return drives
