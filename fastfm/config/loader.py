from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from platformdirs import user_config_dir
from result import Err, Ok, Result

from fastfm.config.defaults import default_config
from fastfm.config.schema import AppConfig, from_dict
from fastfm.services.fs import DEFAULT_FS, FileSystem

LOGGER = logging.getLogger(__name__)

APP_NAME = "FastFileManage"
CONFIG_FILENAME = "key-config.json"


def config_path() -> str:
    return str(Path(user_config_dir(APP_NAME, appauthor=False, roaming=True)) / CONFIG_FILENAME)


def load_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[AppConfig, str]:
    resolved = path or config_path()
    if not fs.exists(resolved):
        return Ok(default_config())

    try:
        payload = json.loads(fs.read_text(resolved))
        if not isinstance(payload, dict):
            return Err(f"Config at {resolved} must be a JSON object.")
        return Ok(from_dict(payload, default_config()))
    except Exception as exc:  # noqa: BLE001
        return Err(f"Failed reading config at {resolved}: {exc}.")


def save_config(config: AppConfig, path: str | None = None, fs: FileSystem = DEFAULT_FS) -> Result[None, str]:
    resolved = path or config_path()
    try:
        fs.make_dir(os.path.dirname(resolved), parents=True)
        fs.write_text(resolved, config_json(config) + "\n")
    except OSError as exc:
        LOGGER.error("Failed saving config to %s: %s", resolved, exc)
        return Err(f"Failed saving config to {resolved}: {exc}.")
    return Ok(None)


def get_config(path: str | None = None, fs: FileSystem = DEFAULT_FS) -> AppConfig:
    """Load the config; a missing or malformed file is replaced by the defaults on disk."""
    resolved = path or config_path()
    if fs.exists(resolved):
        result = load_config(resolved, fs)
        if isinstance(result, Ok):
            return result.unwrap()
        LOGGER.warning("%s Rewriting with defaults.", result.unwrap_err())

    config = default_config()
    save_config(config, resolved, fs)
    return config


def config_json(config: AppConfig) -> str:
    return json.dumps(config.to_dict(), indent=2, ensure_ascii=False)


def sample_config_json() -> str:
    return config_json(default_config())
