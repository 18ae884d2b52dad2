"""Keyboard navigation across the search box, drive list and file list.

The machine never touches the filesystem. Key presses mutate the session
state and may return a request (list a directory, open a file, copy a batch
...) that the front end executes asynchronously and feeds back through
``apply_listing`` / ``apply_search_results`` / ``apply_failure``.

Traversal requests carry a sequence number. Only the newest traversal may
update the file list; results of older, overlapping requests are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from fastfm.keys.bindings import Action, BindingTable
from fastfm.keys.chord import MODIFIERS, KeyPress
from fastfm.models.entries import DirectoryEntry, Drive, FsError, SearchResultEntry
from fastfm.models.enums import NodeKind, Region
from fastfm.navigation.focus import FocusTracker
from fastfm.navigation.paths import parent_path

LOGGER = logging.getLogger(__name__)

REGION_CYCLE: tuple[Region, ...] = (Region.SEARCH, Region.DRIVE, Region.FILE)


class ListMode(str, Enum):
    WELCOME = "welcome"
    DIRECTORY = "directory"
    SEARCH_RESULTS = "search_results"


class ClipboardMode(str, Enum):
    COPY = "copy"
    CUT = "cut"


@dataclass(slots=True, frozen=True)
class ListDirectory:
    path: str
    seq: int


@dataclass(slots=True, frozen=True)
class SearchFiles:
    keyword: str
    seq: int


@dataclass(slots=True, frozen=True)
class OpenFile:
    path: str


@dataclass(slots=True, frozen=True)
class PreviewFile:
    path: str


@dataclass(slots=True, frozen=True)
class CopyFiles:
    sources: tuple[str, ...]
    target_dir: str


@dataclass(slots=True, frozen=True)
class MoveFiles:
    sources: tuple[str, ...]
    target_dir: str


@dataclass(slots=True, frozen=True)
class DeleteFiles:
    paths: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class ClearSearch:
    pass


type Request = ListDirectory | SearchFiles | OpenFile | PreviewFile | CopyFiles | MoveFiles | DeleteFiles | ClearSearch


@dataclass(slots=True)
class Outcome:
    handled: bool = False
    request: Request | None = None
    message: str | None = None


@dataclass(slots=True)
class Clipboard:
    paths: tuple[str, ...]
    mode: ClipboardMode


@dataclass(slots=True)
class SessionState:
    bindings: BindingTable
    tracker: FocusTracker = field(default_factory=FocusTracker)
    drives: list[Drive] = field(default_factory=list)
    files: list[DirectoryEntry] = field(default_factory=list)
    mode: ListMode = ListMode.WELCOME
    current_dir: str | None = None
    search_keyword: str = ""
    selection: set[str] = field(default_factory=set)
    clipboard: Clipboard | None = None
    last_seq: int = 0


class NavigationMachine:
    def __init__(self, bindings: BindingTable) -> None:
        self.state = SessionState(bindings=bindings)

    @classmethod
    def from_keyboard(cls, raw_keyboard: Mapping[str, Any] | None) -> NavigationMachine:
        return cls(BindingTable.build(raw_keyboard))

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def bindings(self) -> BindingTable:
        return self.state.bindings

    @property
    def region(self) -> Region:
        return self.state.tracker.current_region()

    def index(self, region: Region) -> int | None:
        return self.state.tracker.current_index(region)

    def focused_drive(self) -> Drive | None:
        idx = self.index(Region.DRIVE)
        if idx is None or idx >= len(self.state.drives):
            return None
        return self.state.drives[idx]

    def focused_entry(self) -> DirectoryEntry | None:
        idx = self.index(Region.FILE)
        if idx is None or idx >= len(self.state.files):
            return None
        return self.state.files[idx]

    def _length(self, region: Region) -> int:
        if region is Region.DRIVE:
            return len(self.state.drives)
        if region is Region.FILE:
            return len(self.state.files)
        return 0

    # ------------------------------------------------------------------
    # Session updates
    # ------------------------------------------------------------------

    def reload(self, raw_keyboard: Mapping[str, Any] | None) -> None:
        """Swap in a table compiled from fresh config."""
        self.state.bindings = BindingTable.build(raw_keyboard)

    def set_drives(self, drives: Sequence[Drive]) -> None:
        self.state.drives = list(drives)
        self.state.tracker.reclamp(Region.DRIVE, len(self.state.drives))

    def focus_region(self, region: Region) -> None:
        self.state.tracker.set_region(region)

    def _next_seq(self) -> int:
        self.state.last_seq += 1
        return self.state.last_seq

    def request_listing(self, path: str) -> ListDirectory:
        return ListDirectory(path=path, seq=self._next_seq())

    def request_search(self, keyword: str) -> SearchFiles | None:
        keyword = keyword.strip()
        if not keyword:
            return None
        self.state.search_keyword = keyword
        return SearchFiles(keyword=keyword, seq=self._next_seq())

    def refresh(self) -> ListDirectory | None:
        if self.state.mode is ListMode.DIRECTORY and self.state.current_dir is not None:
            return self.request_listing(self.state.current_dir)
        return None

    def is_current(self, seq: int) -> bool:
        return seq == self.state.last_seq

    def apply_listing(self, seq: int, path: str, entries: Sequence[DirectoryEntry]) -> bool:
        if not self.is_current(seq):
            LOGGER.debug("Dropping stale listing #%d for %s", seq, path)
            return False
        previous = self.state.current_dir
        self.state.files = list(entries)
        self.state.mode = ListMode.DIRECTORY
        self.state.current_dir = path
        self.state.selection.clear()

        target = 0
        if previous == path:
            target = self.index(Region.FILE) or 0
        # Coming back up from a child: keep that child focused.
        elif previous is not None and parent_path(previous) == path:
            for idx, entry in enumerate(self.state.files):
                if entry.path == previous:
                    target = idx
                    break
        self.state.tracker.set_focused_index(Region.FILE, target, len(self.state.files))
        return True

    def apply_search_results(self, seq: int, results: Sequence[SearchResultEntry]) -> bool:
        if not self.is_current(seq):
            LOGGER.debug("Dropping stale search #%d", seq)
            return False
        self.state.files = [
            DirectoryEntry(
                name=item.name,
                path=item.path,
                kind=NodeKind.FILE,
                size_bytes=item.size_bytes,
                modified_ts=item.modified_ts,
            )
            for item in results
        ]
        self.state.mode = ListMode.SEARCH_RESULTS
        self.state.current_dir = None
        self.state.selection.clear()
        self.state.tracker.set_focused_index(Region.FILE, 0, len(self.state.files))
        return True

    def apply_failure(self, seq: int, error: FsError) -> bool:
        """Record a failed traversal; the file list is left untouched."""
        if not self.is_current(seq):
            return False
        LOGGER.warning("Traversal failed for %s: %s", error.path, error.message)
        return True

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_key(self, event: KeyPress) -> Outcome:
        bindings = self.state.bindings
        if bindings.matches(Action.TAB, event):
            return self._cycle(1)
        if event.shift and bindings.matches(Action.TAB, event.without("shift")):
            return self._cycle(-1)

        region = self.region
        if region is Region.SEARCH:
            # Text entry and Enter belong to the search box itself.
            return Outcome()

        if bindings.matches(Action.FOCUS_SEARCH, event):
            self.state.tracker.set_region(Region.SEARCH)
            return Outcome(handled=True)

        if region is Region.DRIVE:
            outcome = self._handle_drive_key(event)
        else:
            outcome = self._handle_file_key(event)
        if outcome.handled:
            return outcome

        if bindings.matches(Action.CLEAR_SEARCH, event):
            return self.clear_search()
        return outcome

    def hover(self, region: Region, index: int) -> None:
        """Mouse hover: same as arrowing to *index*, without activating."""
        if region is Region.SEARCH:
            return
        self.state.tracker.set_focused_index(region, index, self._length(region))

    def activate(self, region: Region, index: int) -> Outcome:
        """Mouse click: focus the region and *index*, then behave like enter."""
        if region is not Region.SEARCH:
            self.state.tracker.set_region(region)
        self.hover(region, index)
        if region is Region.DRIVE:
            return self._enter_drive()
        if region is Region.FILE:
            return self._enter_entry()
        return Outcome()

    def _cycle(self, step: int) -> Outcome:
        tracker = self.state.tracker
        current = tracker.current_region()
        target = REGION_CYCLE[(REGION_CYCLE.index(current) + step) % len(REGION_CYCLE)]
        if current is Region.SEARCH and target is Region.DRIVE:
            tracker.set_focused_index(Region.DRIVE, 0, len(self.state.drives))
        tracker.set_region(target)
        return Outcome(handled=True)

    def _move(self, region: Region, delta: int) -> Outcome:
        self.state.tracker.move(region, delta, self._length(region))
        return Outcome(handled=True)

    def _handle_drive_key(self, event: KeyPress) -> Outcome:
        bindings = self.state.bindings
        if bindings.matches(Action.UP, event):
            return self._move(Region.DRIVE, -1)
        if bindings.matches(Action.DOWN, event):
            return self._move(Region.DRIVE, 1)
        if bindings.matches(Action.ENTER, event):
            return self._enter_drive()
        if bindings.matches(Action.RIGHT, event):
            self.state.tracker.set_region(Region.FILE)
            return Outcome(handled=True)
        if bindings.matches(Action.OPEN_IN_EXPLORER, event):
            drive = self.focused_drive()
            if drive is None:
                return Outcome(handled=True)
            return Outcome(handled=True, request=OpenFile(drive.path))
        return Outcome()

    def _handle_file_key(self, event: KeyPress) -> Outcome:
        bindings = self.state.bindings
        extended = self._extend_selection(event)
        if extended is not None:
            return extended
        if bindings.matches(Action.UP, event):
            return self._move(Region.FILE, -1)
        if bindings.matches(Action.DOWN, event):
            return self._move(Region.FILE, 1)
        if bindings.matches(Action.ENTER, event):
            return self._enter_entry()
        if bindings.matches(Action.BACKSPACE, event):
            return self._go_parent()
        if bindings.matches(Action.LEFT, event):
            self.state.tracker.set_region(Region.DRIVE)
            return Outcome(handled=True)
        if bindings.matches(Action.MULTI_SELECT, event):
            return self._toggle_focused()
        if bindings.matches(Action.SELECT_ALL, event):
            self.state.selection = {entry.path for entry in self.state.files}
            return Outcome(handled=True)
        if bindings.matches(Action.CLEAR_SELECTION, event) and self.state.selection:
            self.state.selection.clear()
            return Outcome(handled=True)
        if bindings.matches(Action.COPY, event):
            return self._to_clipboard(ClipboardMode.COPY)
        if bindings.matches(Action.CUT, event):
            return self._to_clipboard(ClipboardMode.CUT)
        if bindings.matches(Action.PASTE, event):
            return self._paste()
        if bindings.matches(Action.DELETE, event):
            targets = self._targets()
            if not targets:
                return Outcome(handled=True)
            return Outcome(handled=True, request=DeleteFiles(targets))
        if bindings.matches(Action.OPEN, event):
            return self._open_entry()
        if bindings.matches(Action.OPEN_IN_EXPLORER, event):
            return self._open_in_explorer()
        return Outcome()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _enter_drive(self) -> Outcome:
        drive = self.focused_drive()
        if drive is None:
            return Outcome(handled=True)
        return Outcome(handled=True, request=self.request_listing(drive.path))

    def _enter_entry(self) -> Outcome:
        entry = self.focused_entry()
        if entry is None:
            return Outcome(handled=True)
        if entry.kind is NodeKind.DIRECTORY:
            return Outcome(handled=True, request=self.request_listing(entry.path))
        return Outcome(handled=True, request=OpenFile(entry.path))

    def _open_entry(self) -> Outcome:
        entry = self.focused_entry()
        if entry is None:
            return Outcome(handled=True)
        if entry.kind is NodeKind.DIRECTORY:
            return Outcome(handled=True, request=self.request_listing(entry.path))
        return Outcome(handled=True, request=PreviewFile(entry.path))

    def _open_in_explorer(self) -> Outcome:
        if self.state.current_dir is not None:
            return Outcome(handled=True, request=OpenFile(self.state.current_dir))
        entry = self.focused_entry()
        folder = parent_path(entry.path) if entry is not None else None
        if folder is None:
            return Outcome(handled=True)
        return Outcome(handled=True, request=OpenFile(folder))

    def _go_parent(self) -> Outcome:
        current = self.state.current_dir
        if current is None:
            return Outcome(handled=True)
        parent = parent_path(current)
        if parent is None:
            return Outcome(handled=True)
        return Outcome(handled=True, request=self.request_listing(parent))

    def clear_search(self) -> Outcome:
        self.state.search_keyword = ""
        if self.state.mode is ListMode.SEARCH_RESULTS:
            self.state.files = []
            self.state.mode = ListMode.WELCOME
            self.state.selection.clear()
            self.state.tracker.set_focused_index(Region.FILE, 0, 0)
        return Outcome(handled=True, request=ClearSearch())

    def _multi_select_modifier(self) -> str | None:
        spec = self.state.bindings.lookup(Action.MULTI_SELECT)
        if spec is None or spec.modifiers or spec.key not in MODIFIERS:
            return None
        return spec.key

    def _extend_selection(self, event: KeyPress) -> Outcome | None:
        """Moving up/down with the multi-select modifier held extends the selection."""
        modifier = self._multi_select_modifier()
        if modifier is None or not event.held(modifier):
            return None
        plain = event.without(modifier)
        bindings = self.state.bindings
        if bindings.matches(Action.UP, plain):
            delta = -1
        elif bindings.matches(Action.DOWN, plain):
            delta = 1
        else:
            return None
        before = self.focused_entry()
        self.state.tracker.move(Region.FILE, delta, len(self.state.files))
        after = self.focused_entry()
        for entry in (before, after):
            if entry is not None:
                self.state.selection.add(entry.path)
        return Outcome(handled=True)

    def _toggle_focused(self) -> Outcome:
        entry = self.focused_entry()
        if entry is not None:
            if entry.path in self.state.selection:
                self.state.selection.discard(entry.path)
            else:
                self.state.selection.add(entry.path)
        return Outcome(handled=True)

    def _targets(self) -> tuple[str, ...]:
        """The selection in list order, or the focused entry when nothing is selected."""
        if self.state.selection:
            return tuple(entry.path for entry in self.state.files if entry.path in self.state.selection)
        entry = self.focused_entry()
        return (entry.path,) if entry is not None else ()

    def _to_clipboard(self, mode: ClipboardMode) -> Outcome:
        targets = self._targets()
        if not targets:
            return Outcome(handled=True)
        self.state.clipboard = Clipboard(paths=targets, mode=mode)
        verb = "Copied" if mode is ClipboardMode.COPY else "Cut"
        return Outcome(handled=True, message=f"{verb} {len(targets)} item(s)")

    def _paste(self) -> Outcome:
        clipboard = self.state.clipboard
        target_dir = self.state.current_dir
        if clipboard is None:
            return Outcome(handled=True, message="Clipboard is empty")
        if target_dir is None:
            return Outcome(handled=True, message="Open a directory to paste into")
        if clipboard.mode is ClipboardMode.CUT:
            self.state.clipboard = None
            return Outcome(handled=True, request=MoveFiles(clipboard.paths, target_dir))
        return Outcome(handled=True, request=CopyFiles(clipboard.paths, target_dir))
