from __future__ import annotations

from fastfm.config.schema import CONFIG_VERSION, AppConfig, UiConfig
from fastfm.models.enums import SortKey, SortOrder


def default_config() -> AppConfig:
    keyboard = {
        "navigation": {
            "up": "w",
            "down": "s",
            "left": "a",
            "right": "d",
            "enter": "enter",
            "backspace": "backspace",
            "tab": "tab",
        },
        "fileOperations": {
            "copy": "ctrl+c",
            "paste": "ctrl+v",
            "cut": "ctrl+x",
            "delete": "delete",
            "open": "space",
            "openInExplorer": "ctrl+e",
        },
        "selection": {
            "multiSelect": "shift",
            "selectAll": "ctrl+a",
            "clearSelection": "escape",
        },
        "search": {
            "focusSearch": "ctrl+f",
            "clearSearch": "escape",
        },
    }
    return AppConfig(
        version=CONFIG_VERSION,
        keyboard=keyboard,
        ui=UiConfig(
            theme="dark",
            show_hidden_files=False,
            sort_by=SortKey.NAME,
            sort_order=SortOrder.ASC,
        ),
    )
