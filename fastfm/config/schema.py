from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import Any

from fastfm.models.enums import SortKey, SortOrder

CONFIG_VERSION = "1.0.0"

_THEMES = ("dark", "light")


@dataclass(slots=True)
class UiConfig:
    theme: str = "dark"
    show_hidden_files: bool = False
    sort_by: SortKey = SortKey.NAME
    sort_order: SortOrder = SortOrder.ASC

    def to_dict(self) -> dict[str, Any]:
        return {
            "theme": self.theme,
            "showHiddenFiles": self.show_hidden_files,
            "sortBy": self.sort_by.value,
            "sortOrder": self.sort_order.value,
        }


@dataclass(slots=True)
class AppConfig:
    version: str = CONFIG_VERSION
    # Raw "keyboard" section; compiled into a BindingTable by the caller.
    keyboard: dict[str, dict[str, str]] = field(default_factory=dict)
    ui: UiConfig = field(default_factory=UiConfig)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "keyboard": copy.deepcopy(self.keyboard),
            "ui": self.ui.to_dict(),
        }


def _parse_keyboard(payload: Any) -> dict[str, dict[str, str]]:
    """Keep string bindings only; anything else is left out (unbound)."""
    if not isinstance(payload, dict):
        return {}
    keyboard: dict[str, dict[str, str]] = {}
    for category, actions in payload.items():
        if not isinstance(actions, dict):
            continue
        keyboard[str(category)] = {str(name): value for name, value in actions.items() if isinstance(value, str)}
    return keyboard


def _parse_enum[E: (SortKey, SortOrder)](enum_type: type[E], value: Any, default: E) -> E:
    try:
        return enum_type(str(value).lower())
    except ValueError:
        return default


def _ui_from_dict(payload: Any, defaults: UiConfig) -> UiConfig:
    if not isinstance(payload, dict):
        return replace(defaults)
    theme = str(payload.get("theme", defaults.theme)).lower()
    return UiConfig(
        theme=theme if theme in _THEMES else defaults.theme,
        show_hidden_files=bool(payload.get("showHiddenFiles", defaults.show_hidden_files)),
        sort_by=_parse_enum(SortKey, payload.get("sortBy", defaults.sort_by.value), defaults.sort_by),
        sort_order=_parse_enum(SortOrder, payload.get("sortOrder", defaults.sort_order.value), defaults.sort_order),
    )


def from_dict(data: dict[str, Any], defaults: AppConfig) -> AppConfig:
    """Build an ``AppConfig`` from the JSON payload.

    The keyboard section is taken as-is (not merged with defaults) so that a
    removed binding stays unbound. Missing ``keyboard`` falls back to the
    defaults.
    """
    keyboard = _parse_keyboard(data["keyboard"]) if "keyboard" in data else copy.deepcopy(defaults.keyboard)
    return AppConfig(
        version=str(data.get("version", defaults.version)),
        keyboard=keyboard,
        ui=_ui_from_dict(data.get("ui"), defaults.ui),
    )
