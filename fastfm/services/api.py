"""Async facade over the filesystem services.

The front end only talks to the filesystem through this object. Each call is
an independent unit of work; blocking calls run in a worker thread via
``asyncio.to_thread`` so the event loop stays responsive. Calls are not
time-limited; only a search can be stopped early, through its cancel check.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol

from result import Result

from fastfm.config import loader
from fastfm.config.defaults import default_config
from fastfm.config.schema import AppConfig, UiConfig
from fastfm.models.entries import (
    BatchResult,
    CancelCheck,
    Drive,
    FsError,
    ListingResult,
    ProgressCallback,
    SearchResult,
)
from fastfm.scan import list_directory, search_files
from fastfm.services import operations
from fastfm.services.fs import DEFAULT_FS, FileSystem


class FileManagerApi(Protocol):
    async def search_files(
        self,
        keyword: str,
        progress_callback: ProgressCallback | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> SearchResult: ...

    async def get_drives(self) -> list[Drive]: ...

    async def get_directory_contents(self, path: str) -> ListingResult: ...

    async def open_file(self, path: str) -> Result[str, FsError]: ...

    async def preview_file(self, path: str) -> Result[str, FsError]: ...

    async def copy_files(self, sources: Sequence[str], target_dir: str) -> BatchResult: ...

    async def move_files(self, sources: Sequence[str], target_dir: str) -> BatchResult: ...

    async def delete_files(self, paths: Sequence[str]) -> BatchResult: ...

    async def create_file(self, path: str) -> Result[str, FsError]: ...

    async def create_directory(self, path: str) -> Result[str, FsError]: ...

    async def get_config(self) -> AppConfig: ...

    async def save_config(self, config: AppConfig) -> Result[None, str]: ...

    async def get_default_config(self) -> AppConfig: ...


class LocalFileManagerApi:
    def __init__(
        self,
        fs: FileSystem = DEFAULT_FS,
        config_path: str | None = None,
        search_root: str | None = None,
    ) -> None:
        self._fs = fs
        self._config_path = config_path
        self._search_root = search_root
        self._ui = UiConfig()

    def apply_ui(self, ui: UiConfig) -> None:
        """Listing preferences (hidden files, sort) used by ``get_directory_contents``."""
        self._ui = ui

    async def search_files(
        self,
        keyword: str,
        progress_callback: ProgressCallback | None = None,
        cancel_check: CancelCheck | None = None,
    ) -> SearchResult:
        """Search below the home directory; the hooks are called from the worker thread."""
        root = self._search_root or self._fs.home()
        return await asyncio.to_thread(search_files, root, keyword, self._fs, progress_callback, cancel_check)

    async def get_drives(self) -> list[Drive]:
        return await asyncio.to_thread(operations.get_drives)

    async def get_directory_contents(self, path: str) -> ListingResult:
        ui = self._ui
        return await asyncio.to_thread(
            lambda: list_directory(
                path,
                self._fs,
                show_hidden=ui.show_hidden_files,
                sort_by=ui.sort_by,
                order=ui.sort_order,
            )
        )

    async def open_file(self, path: str) -> Result[str, FsError]:
        return await asyncio.to_thread(operations.open_file, path)

    async def preview_file(self, path: str) -> Result[str, FsError]:
        return await asyncio.to_thread(operations.preview_file, path, self._fs)

    async def copy_files(self, sources: Sequence[str], target_dir: str) -> BatchResult:
        return await asyncio.to_thread(operations.copy_files, list(sources), target_dir, self._fs)

    async def move_files(self, sources: Sequence[str], target_dir: str) -> BatchResult:
        return await asyncio.to_thread(operations.move_files, list(sources), target_dir, self._fs)

    async def delete_files(self, paths: Sequence[str]) -> BatchResult:
        return await asyncio.to_thread(operations.delete_files, list(paths), self._fs)

    async def create_file(self, path: str) -> Result[str, FsError]:
        return await asyncio.to_thread(operations.create_file, path, self._fs)

    async def create_directory(self, path: str) -> Result[str, FsError]:
        return await asyncio.to_thread(operations.create_directory, path, self._fs)

    async def get_config(self) -> AppConfig:
        return await asyncio.to_thread(loader.get_config, self._config_path, self._fs)

    async def save_config(self, config: AppConfig) -> Result[None, str]:
        return await asyncio.to_thread(loader.save_config, config, self._config_path, self._fs)

    async def get_default_config(self) -> AppConfig:
        return default_config()
