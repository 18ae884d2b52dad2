from __future__ import annotations

import logging
import os
from typing import override

from result import Err, Ok
from rich.markup import escape
from rich.text import Text
from textual import events, on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Input, Static

from fastfm.config.schema import AppConfig
from fastfm.keys.bindings import Action, BindingTable
from fastfm.keys.chord import KeyPress, format_chord
from fastfm.models.entries import BatchResult
from fastfm.models.enums import Region
from fastfm.navigation.machine import (
    ClearSearch,
    CopyFiles,
    DeleteFiles,
    ListDirectory,
    ListMode,
    MoveFiles,
    NavigationMachine,
    OpenFile,
    PreviewFile,
    Request,
    SearchFiles,
)
from fastfm.services.api import FileManagerApi, LocalFileManagerApi
from fastfm.services.formatting import format_bytes, format_timestamp
from fastfm.ui.widgets import EntryTable, SearchInput

LOGGER = logging.getLogger(__name__)

_REGION_LABELS: dict[Region, str] = {
    Region.SEARCH: "Search",
    Region.DRIVE: "Drives",
    Region.FILE: "Files",
}

_THEMES: dict[str, str] = {
    "dark": "textual-dark",
    "light": "textual-light",
}

_OVERLAY_CSS = """
    align: center middle;
    background: rgba(0,0,0,0.45);
"""


class HelpOverlay(ModalScreen[None]):
    CSS = (
        "HelpOverlay {"
        + _OVERLAY_CSS
        + """}
    #help-box {
        width: 80%;
        height: 86%;
        background: #282a2e;
        border: solid #81a2be;
        padding: 1 2;
        color: #c5c8c6;
    }
    """
    )

    def __init__(self, bindings: BindingTable) -> None:
        super().__init__()
        self._bindings = bindings

    @override
    def compose(self) -> ComposeResult:
        lines: list[str] = []
        category = None
        for action in Action:
            if action.category is not category:
                category = action.category
                if lines:
                    lines.append("")
                lines.append(f"[b #81a2be]{category.value}[/]")
            chord = escape(format_chord(self._bindings.lookup(action)))
            lines.append(f"  {action.config_key}: {chord}")
        lines.extend(
            [
                "",
                "[b #81a2be]Always available[/]",
                "  Tab / Shift+Tab: Next/Previous region",
                "  Enter in search box: Search home directory",
                "  F5: Refresh   F6: New file   F7: New folder",
                "  Ctrl+R: Reload key-config.json",
                "  F1: Toggle help   Ctrl+Q: Quit",
            ]
        )
        yield VerticalScroll(Static("\n".join(lines)), id="help-box")

    def key_escape(self) -> None:
        self.dismiss()

    def key_f1(self) -> None:
        self.dismiss()


class PreviewOverlay(ModalScreen[None]):
    CSS = (
        "PreviewOverlay {"
        + _OVERLAY_CSS
        + """}
    #preview-box {
        width: 90%;
        height: 90%;
        background: #1d1f21;
        border: solid #b5bd68;
        padding: 0 1;
        color: #c5c8c6;
    }
    """
    )

    def __init__(self, path: str, content: str) -> None:
        super().__init__()
        self._path = path
        self._content = content

    @override
    def compose(self) -> ComposeResult:
        box = VerticalScroll(Static(Text(self._content)), id="preview-box")
        box.border_title = self._path
        box.border_subtitle = "Esc to close"
        yield box

    def key_escape(self) -> None:
        self.dismiss()

    def key_q(self) -> None:
        self.dismiss()


class ConfirmOverlay(ModalScreen[bool]):
    CSS = (
        "ConfirmOverlay {"
        + _OVERLAY_CSS
        + """}
    #confirm-box {
        width: 60%;
        height: auto;
        max-height: 20;
        background: #282a2e;
        border: solid #cc6666;
        padding: 1 2;
        color: #c5c8c6;
    }
    """
    )

    def __init__(self, message: str) -> None:
        super().__init__()
        self._message = message

    @override
    def compose(self) -> ComposeResult:
        yield Static(f"{escape(self._message)}\n\n[b]y[/] confirm    [b]n[/] / Esc cancel", id="confirm-box")

    def key_y(self) -> None:
        self.dismiss(True)

    def key_n(self) -> None:
        self.dismiss(False)

    def key_escape(self) -> None:
        self.dismiss(False)


class PromptOverlay(ModalScreen[str]):
    CSS = (
        "PromptOverlay {"
        + _OVERLAY_CSS
        + """}
    #prompt-box {
        width: 60%;
        height: auto;
        max-height: 9;
        background: #282a2e;
        border: solid #81a2be;
        padding: 1 2;
        color: #c5c8c6;
    }
    #prompt-label {
        width: 100%;
        color: #81a2be;
        text-style: bold;
        margin-bottom: 1;
    }
    #prompt-input {
        width: 100%;
    }
    """
    )

    def __init__(self, label: str) -> None:
        super().__init__()
        self._label = label

    @override
    def compose(self) -> ComposeResult:
        yield Vertical(
            Static(f"{escape(self._label)} (Enter to create, Escape to cancel)", id="prompt-label"),
            Input(placeholder="Name…", id="prompt-input"),
            id="prompt-box",
        )

    def on_mount(self) -> None:
        self.query_one("#prompt-input", Input).focus()

    @on(Input.Submitted)
    def _on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def key_escape(self) -> None:
        self.dismiss("")


class FileManagerApp(App[None]):
    CSS = """
    #app-grid {
        height: 100%;
        padding: 0 1;
    }
    #search {
        border: round #373b41;
    }
    #search.-focused {
        border: round #cc6666;
    }
    #path-row {
        height: 1;
        color: #81a2be;
    }
    #panes {
        height: 1fr;
    }
    #drive-table {
        width: 28;
        border: round #373b41;
    }
    #file-table {
        width: 1fr;
        border: round #373b41;
    }
    EntryTable.-focused {
        border: round #cc6666;
    }
    #status-row {
        height: 1;
        color: #969896;
    }
    """

    BINDINGS = [
        Binding("tab", "cycle_region(False)", "Next region", priority=True, show=False),
        Binding("shift+tab", "cycle_region(True)", "Previous region", priority=True, show=False),
        Binding("f1", "help", "Help", show=False),
        Binding("f5", "refresh", "Refresh", show=False),
        Binding("f6", "new_file", "New file", show=False),
        Binding("f7", "new_directory", "New folder", show=False),
        Binding("ctrl+r", "reload_config", "Reload keys", show=False),
        Binding("ctrl+q", "quit", "Quit", show=False),
    ]

    def __init__(
        self,
        config: AppConfig,
        api: FileManagerApi | None = None,
        initial_path: str | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self.api: FileManagerApi = api or LocalFileManagerApi()
        if isinstance(self.api, LocalFileManagerApi):
            self.api.apply_ui(config.ui)
        self.machine = NavigationMachine.from_keyboard(config.keyboard)
        self._initial_path = initial_path
        self._status = ""
        self._rendered_files: object = None
        self._rendered_selection: frozenset[str] = frozenset()
        self._rendered_drives: object = None

    @override
    def compose(self) -> ComposeResult:
        yield Container(
            SearchInput(placeholder="Search files in your home directory (Enter)", id="search"),
            Static(id="path-row"),
            Horizontal(
                EntryTable(Region.DRIVE, id="drive-table"),
                EntryTable(Region.FILE, id="file-table"),
                id="panes",
            ),
            Static(id="status-row"),
            id="app-grid",
        )

    def on_mount(self) -> None:
        self.theme = _THEMES.get(self.config.ui.theme, "textual-dark")
        self.query_one("#drive-table", EntryTable).add_columns("DRIVE")
        self.query_one("#file-table", EntryTable).add_columns(" ", "NAME", "SIZE", "MODIFIED")
        self._sync_focus()
        self._refresh_all()
        self.run_worker(self._load_drives(), group="drives")
        if self._initial_path:
            self._dispatch(self.machine.request_listing(self._initial_path))

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _refresh_all(self) -> None:
        self._render_path_row()
        self._render_drives()
        self._render_files()
        self._render_focus_marks()
        self._render_status_row()

    def _render_path_row(self) -> None:
        state = self.machine.state
        if state.mode is ListMode.SEARCH_RESULTS:
            text = f"[#81a2be]Search:[/] {escape(state.search_keyword)}  ({len(state.files):,} results)"
        elif state.current_dir is not None:
            text = f"[#81a2be]Path:[/] {escape(state.current_dir)}"
        else:
            text = "[#81a2be]Path:[/] -"
        self.query_one("#path-row", Static).update(Text.from_markup(text))

    def _render_drives(self) -> None:
        table = self.query_one("#drive-table", EntryTable)
        drives = self.machine.state.drives
        if drives is not self._rendered_drives:
            self._rendered_drives = drives
            table.clear()
            for drive in drives:
                table.add_row(drive.label)
        index = self.machine.index(Region.DRIVE)
        table.show_cursor = index is not None
        if index is not None:
            table.move_cursor(row=index, animate=False)

    def _render_files(self) -> None:
        table = self.query_one("#file-table", EntryTable)
        state = self.machine.state
        selection = frozenset(state.selection)
        if state.files is not self._rendered_files or selection != self._rendered_selection:
            self._rendered_files = state.files
            self._rendered_selection = selection
            table.clear()
            if not state.files:
                table.add_row("", self._empty_message(), "", "")
            for entry in state.files:
                mark = "●" if entry.path in selection else ""
                if state.mode is ListMode.SEARCH_RESULTS:
                    name = entry.path
                else:
                    name = f"{entry.name}/" if entry.is_dir else entry.name
                table.add_row(mark, name, format_bytes(entry.size_bytes), format_timestamp(entry.modified_ts))
        index = self.machine.index(Region.FILE)
        table.show_cursor = bool(state.files) and index is not None
        if state.files and index is not None:
            table.move_cursor(row=index, animate=False)

    def _empty_message(self) -> str:
        mode = self.machine.state.mode
        if mode is ListMode.SEARCH_RESULTS:
            return "No matching files"
        if mode is ListMode.DIRECTORY:
            return "Directory is empty"
        return "Type a keyword above and press Enter to search, or pick a drive"

    def _render_focus_marks(self) -> None:
        region = self.machine.region
        self.query_one("#search", SearchInput).set_class(region is Region.SEARCH, "-focused")
        self.query_one("#drive-table", EntryTable).set_class(region is Region.DRIVE, "-focused")
        self.query_one("#file-table", EntryTable).set_class(region is Region.FILE, "-focused")

    def _render_status_row(self) -> None:
        state = self.machine.state
        region = self.machine.region
        left = f"{_REGION_LABELS[region]}"
        if region is not Region.SEARCH:
            total = len(state.drives) if region is Region.DRIVE else len(state.files)
            index = self.machine.index(region)
            left += f" | Row {0 if index is None else index + 1}/{total}"
        if state.selection:
            left += f" | {len(state.selection)} selected"
        if state.clipboard is not None:
            left += f" | {state.clipboard.mode.value}: {len(state.clipboard.paths)}"
        if self._status:
            left += f" | {self._status}"
        hints = "Tab regions | F1 help | Ctrl+Q quit"

        width = self.size.width - 4
        gap = 4
        max_hints_len = width - len(left) - gap
        if max_hints_len < 10:
            status = left
        else:
            if len(hints) > max_hints_len:
                hints = hints[: max_hints_len - 1] + "…"
            pad = width - len(left) - len(hints)
            status = left + " " * max(gap, pad) + hints
        self.query_one("#status-row", Static).update(Text(status))

    def _sync_focus(self) -> None:
        search = self.query_one("#search", SearchInput)
        if self.machine.region is Region.SEARCH:
            if not search.has_focus:
                search.focus()
        elif search.has_focus:
            self.set_focus(None)

    def _set_status(self, message: str) -> None:
        self._status = message
        self._render_status_row()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def action_cycle_region(self, reverse: bool) -> None:
        # Tab never moves textual's own focus chain; a rebound tab chord is a no-op here.
        if isinstance(self.screen, ModalScreen):
            return
        outcome = self.machine.handle_key(KeyPress(key="tab", shift=reverse))
        if outcome.handled:
            self._after_outcome(outcome.request, outcome.message)

    def on_key(self, event: events.Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        press = KeyPress.from_textual_key(event.key, event.character)
        outcome = self.machine.handle_key(press)
        if not outcome.handled and self.machine.region is Region.SEARCH:
            if not self.machine.bindings.matches(Action.CLEAR_SEARCH, press):
                return
            outcome = self.machine.clear_search()
        if not outcome.handled:
            return
        event.stop()
        event.prevent_default()
        self._after_outcome(outcome.request, outcome.message)

    def _after_outcome(self, request: Request | None, message: str | None) -> None:
        if message:
            self._status = message
        self._sync_focus()
        self._refresh_all()
        if request is not None:
            self._dispatch(request)

    @on(SearchInput.Entered)
    def _on_search_focused(self) -> None:
        if self.machine.region is not Region.SEARCH:
            self.machine.focus_region(Region.SEARCH)
            self._refresh_all()

    @on(Input.Submitted, "#search")
    def _on_search_submitted(self, event: Input.Submitted) -> None:
        request = self.machine.request_search(event.value)
        if request is None:
            self._set_status("Enter a search keyword")
            return
        self._dispatch(request)

    @on(EntryTable.Hovered)
    def _on_table_hovered(self, event: EntryTable.Hovered) -> None:
        self.machine.hover(event.region, event.row)
        self._refresh_all()

    @on(EntryTable.RowSelected)
    def _on_table_clicked(self, event: EntryTable.RowSelected) -> None:
        table = event.data_table
        if not isinstance(table, EntryTable):
            return
        outcome = self.machine.activate(table.region, event.cursor_row)
        self._after_outcome(outcome.request, outcome.message)

    def action_help(self) -> None:
        self.push_screen(HelpOverlay(self.machine.bindings))

    def action_refresh(self) -> None:
        request = self.machine.refresh()
        if request is not None:
            self._dispatch(request)
        self.run_worker(self._load_drives(), group="drives")

    def action_new_file(self) -> None:
        self._prompt_create("New file", directory=False)

    def action_new_directory(self) -> None:
        self._prompt_create("New folder", directory=True)

    def action_reload_config(self) -> None:
        self.run_worker(self._reload_config(), group="config")

    def _prompt_create(self, label: str, *, directory: bool) -> None:
        base = self.machine.state.current_dir
        if base is None:
            self.notify("Open a directory first", severity="warning", timeout=2)
            return

        def on_name(name: str | None) -> None:
            if name:
                self.run_worker(self._create(os.path.join(base, name), directory=directory), group="fs")

        self.push_screen(PromptOverlay(label), on_name)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _dispatch(self, request: Request) -> None:
        LOGGER.debug("Dispatching %s", request)
        if isinstance(request, ClearSearch):
            self.query_one("#search", SearchInput).value = ""
            self._refresh_all()
            return
        if isinstance(request, DeleteFiles):
            count = len(request.paths)
            noun = request.paths[0] if count == 1 else f"{count} items"

            def on_confirm(confirmed: bool | None) -> None:
                if confirmed:
                    self.run_worker(self._run_request(request), group="fs")

            self.push_screen(ConfirmOverlay(f"Delete {noun}?"), on_confirm)
            return
        self.run_worker(self._run_request(request), group="fs")

    async def _run_request(self, request: Request) -> None:
        if isinstance(request, ListDirectory):
            await self._list_directory(request)
        elif isinstance(request, SearchFiles):
            await self._search(request)
        elif isinstance(request, OpenFile):
            result = await self.api.open_file(request.path)
            if isinstance(result, Err):
                self.notify(f"Failed to open: {result.unwrap_err().message}", severity="error", timeout=3)
        elif isinstance(request, PreviewFile):
            preview = await self.api.preview_file(request.path)
            if isinstance(preview, Err):
                self.notify(f"Failed to preview: {preview.unwrap_err().message}", severity="error", timeout=3)
            else:
                self.push_screen(PreviewOverlay(request.path, preview.unwrap()))
        elif isinstance(request, CopyFiles):
            self._report_batch("Copied", await self.api.copy_files(request.sources, request.target_dir))
        elif isinstance(request, MoveFiles):
            self._report_batch("Moved", await self.api.move_files(request.sources, request.target_dir))
        elif isinstance(request, DeleteFiles):
            self._report_batch("Deleted", await self.api.delete_files(request.paths))

    async def _list_directory(self, request: ListDirectory) -> None:
        result = await self.api.get_directory_contents(request.path)
        if isinstance(result, Ok):
            if self.machine.apply_listing(request.seq, request.path, result.unwrap()):
                self._status = ""
                self._refresh_all()
            return
        error = result.unwrap_err()
        if self.machine.apply_failure(request.seq, error):
            self.notify(f"Failed to load {error.path}: {error.message}", severity="error", timeout=3)
            self._set_status(f"Failed to load directory: {error.message}")

    async def _search(self, request: SearchFiles) -> None:
        self._set_status(f"Searching for '{request.keyword}'…")

        def on_progress(current_dir: str, files: int, directories: int) -> None:
            self.call_from_thread(
                self._set_status,
                f"Searching for '{request.keyword}'… {directories:,} dirs, {files:,} files",
            )

        # Stop walking once a newer traversal supersedes this one.
        result = await self.api.search_files(
            request.keyword,
            progress_callback=on_progress,
            cancel_check=lambda: not self.machine.is_current(request.seq),
        )
        if isinstance(result, Ok):
            if self.machine.apply_search_results(request.seq, result.unwrap()):
                count = len(self.machine.state.files)
                self._status = f"{count:,} result(s)" if count else "No matching files"
                self._refresh_all()
            return
        error = result.unwrap_err()
        if self.machine.apply_failure(request.seq, error):
            self.notify(f"Search failed: {error.message}", severity="error", timeout=3)
            self._set_status("Search failed")

    def _report_batch(self, verb: str, result: BatchResult) -> None:
        text = f"{verb} {result.success_count}/{result.total_count}"
        if result.ok:
            self.notify(text, timeout=2)
        else:
            first = result.failures[0]
            self.notify(f"{text}; {first.path}: {first.message}", severity="warning", timeout=4)
        self._set_status(text)
        refresh = self.machine.refresh()
        if refresh is not None:
            self._dispatch(refresh)

    async def _create(self, path: str, *, directory: bool) -> None:
        result = await (self.api.create_directory(path) if directory else self.api.create_file(path))
        if isinstance(result, Err):
            self.notify(f"Create failed: {result.unwrap_err().message}", severity="error", timeout=3)
            return
        self.notify(f"Created {path}", timeout=2)
        refresh = self.machine.refresh()
        if refresh is not None:
            self._dispatch(refresh)

    async def _load_drives(self) -> None:
        drives = await self.api.get_drives()
        self.machine.set_drives(drives)
        self._refresh_all()

    async def _reload_config(self) -> None:
        config = await self.api.get_config()
        self.config = config
        self.machine.reload(config.keyboard)
        if isinstance(self.api, LocalFileManagerApi):
            self.api.apply_ui(config.ui)
        self.theme = _THEMES.get(config.ui.theme, "textual-dark")
        LOGGER.info("Reloaded key bindings from config")
        self.notify("Key bindings reloaded", timeout=2)
        self._refresh_all()
