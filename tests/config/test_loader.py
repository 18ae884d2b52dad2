from __future__ import annotations

import json

from result import Err, Ok

from fastfm.config.defaults import default_config
from fastfm.config.loader import CONFIG_FILENAME, config_path, get_config, load_config, sample_config_json
from fastfm.config.schema import from_dict
from fastfm.models.enums import SortKey, SortOrder
from tests.fs_mock import MemoryFileSystem


def test_load_config_missing_uses_defaults() -> None:
    fs = MemoryFileSystem()
    result = load_config(path="/missing.json", fs=fs)
    assert isinstance(result, Ok)
    cfg = result.unwrap()
    assert cfg.keyboard["navigation"]["up"] == "w"
    assert cfg.ui.theme == "dark"


def test_load_config_invalid_returns_warning() -> None:
    fs = MemoryFileSystem().add_file("/config.json", content="not-json")
    result = load_config(path="/config.json", fs=fs)
    assert isinstance(result, Err)
    warning = result.unwrap_err()
    assert "failed reading config" in warning.lower()


def test_load_config_rejects_non_object() -> None:
    fs = MemoryFileSystem().add_file("/config.json", content="[1, 2]")
    result = load_config(path="/config.json", fs=fs)
    assert isinstance(result, Err)
    assert "must be a json object" in result.unwrap_err().lower()


def test_keyboard_section_is_not_merged_with_defaults() -> None:
    payload = {"keyboard": {"navigation": {"up": "k", "down": 3}}}
    fs = MemoryFileSystem().add_file("/config.json", content=json.dumps(payload))
    cfg = load_config(path="/config.json", fs=fs).unwrap()
    assert cfg.keyboard == {"navigation": {"up": "k"}}


def test_ui_values_are_validated() -> None:
    payload = {"ui": {"theme": "neon", "showHiddenFiles": True, "sortBy": "SIZE", "sortOrder": "sideways"}}
    cfg = from_dict(payload, default_config())
    assert cfg.ui.theme == "dark"
    assert cfg.ui.show_hidden_files is True
    assert cfg.ui.sort_by is SortKey.SIZE
    assert cfg.ui.sort_order is SortOrder.ASC
    assert cfg.keyboard == default_config().keyboard


def test_get_config_rewrites_malformed_file() -> None:
    fs = MemoryFileSystem().add_file("/cfg/key-config.json", content="{broken")
    cfg = get_config("/cfg/key-config.json", fs)
    assert cfg == default_config()
    assert json.loads(fs.read_text("/cfg/key-config.json")) == default_config().to_dict()


def test_get_config_keeps_valid_file() -> None:
    custom = default_config()
    custom.keyboard["navigation"]["up"] = "arrowup"
    fs = MemoryFileSystem().add_file("/cfg/key-config.json", content=json.dumps(custom.to_dict()))
    assert get_config("/cfg/key-config.json", fs).keyboard["navigation"]["up"] == "arrowup"


def test_sample_config_is_round_trippable() -> None:
    data = json.loads(sample_config_json())
    assert data["version"] == "1.0.0"
    assert data["ui"] == {"theme": "dark", "showHiddenFiles": False, "sortBy": "name", "sortOrder": "asc"}
    assert data["keyboard"]["selection"]["multiSelect"] == "shift"


def test_config_path_file_name() -> None:
    assert config_path().endswith(CONFIG_FILENAME)
