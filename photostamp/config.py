from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from photostamp.errors import SetupError

CONFIG_ENV_VAR = "PHOTOSTAMP_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "input_dir": "./input",
    "output_dir": "./output",
    "report_dir": "./report",
    "font": None,
    "max_width": 0,
    "log_level": "info",
    "style": {
        "padding": 10,
        "line_height": 20,
        "font_size": 12,
        "text_color": "#FFFFFF",
        "background": "#000000",
        "background_opacity": 160,
    },
}


def get_user_config_dir() -> Path:
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "PhotoStamp"
    return Path.home() / ".config" / "PhotoStamp"


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return get_user_config_dir() / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        if path is not None:
            raise SetupError(f"config file not found: {cfg_path}")
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        loaded = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise SetupError(f"invalid config file {cfg_path}: {exc}") from exc
    if not isinstance(loaded, dict):
        loaded = {}
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path
