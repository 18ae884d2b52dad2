"""Compiled keymap: logical actions bound to chords.

The raw ``keyboard`` section of ``key-config.json`` is compiled once into a
``BindingTable``. A reload builds a new table; tables are never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from fastfm.keys.chord import ChordSpec, KeyPress, matches, parse_chord


class ActionCategory(str, Enum):
    NAVIGATION = "navigation"
    FILE_OPERATIONS = "fileOperations"
    SELECTION = "selection"
    SEARCH = "search"


class Action(Enum):
    UP = (ActionCategory.NAVIGATION, "up")
    DOWN = (ActionCategory.NAVIGATION, "down")
    LEFT = (ActionCategory.NAVIGATION, "left")
    RIGHT = (ActionCategory.NAVIGATION, "right")
    ENTER = (ActionCategory.NAVIGATION, "enter")
    BACKSPACE = (ActionCategory.NAVIGATION, "backspace")
    TAB = (ActionCategory.NAVIGATION, "tab")

    COPY = (ActionCategory.FILE_OPERATIONS, "copy")
    PASTE = (ActionCategory.FILE_OPERATIONS, "paste")
    CUT = (ActionCategory.FILE_OPERATIONS, "cut")
    DELETE = (ActionCategory.FILE_OPERATIONS, "delete")
    OPEN = (ActionCategory.FILE_OPERATIONS, "open")
    OPEN_IN_EXPLORER = (ActionCategory.FILE_OPERATIONS, "openInExplorer")

    MULTI_SELECT = (ActionCategory.SELECTION, "multiSelect")
    SELECT_ALL = (ActionCategory.SELECTION, "selectAll")
    CLEAR_SELECTION = (ActionCategory.SELECTION, "clearSelection")

    FOCUS_SEARCH = (ActionCategory.SEARCH, "focusSearch")
    CLEAR_SEARCH = (ActionCategory.SEARCH, "clearSearch")

    @property
    def category(self) -> ActionCategory:
        return self.value[0]

    @property
    def config_key(self) -> str:
        return self.value[1]

    @property
    def label(self) -> str:
        return f"{self.category.value}.{self.config_key}"


@dataclass(slots=True, frozen=True, eq=False)
class BindingTable:
    chords: Mapping[Action, ChordSpec] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(cls, raw_keyboard: Mapping[str, Any] | None) -> BindingTable:
        """Compile the ``keyboard`` config section.

        Missing categories, missing actions, non-string values and malformed
        chords leave the action unbound. The input is not modified.
        """
        compiled: dict[Action, ChordSpec] = {}
        if isinstance(raw_keyboard, Mapping):
            for action in Action:
                section = raw_keyboard.get(action.category.value)
                if not isinstance(section, Mapping):
                    continue
                raw = section.get(action.config_key)
                if not isinstance(raw, str):
                    continue
                spec = parse_chord(raw.lower())
                if spec is not None:
                    compiled[action] = spec
        return cls(chords=MappingProxyType(compiled))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BindingTable):
            return NotImplemented
        return dict(self.chords) == dict(other.chords)

    def __hash__(self) -> int:
        return hash(frozenset(self.chords.items()))

    def lookup(self, action: Action) -> ChordSpec | None:
        return self.chords.get(action)

    def is_bound(self, action: Action) -> bool:
        return action in self.chords

    def matches(self, action: Action, event: KeyPress) -> bool:
        return matches(event, self.chords.get(action))

    def resolve(self, event: KeyPress, candidates: Iterable[Action]) -> Action | None:
        """Return the first of *candidates* whose chord matches *event*."""
        for action in candidates:
            if self.matches(action, event):
                return action
        return None
