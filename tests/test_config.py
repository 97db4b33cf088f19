from pathlib import Path

import pytest

from photostamp.config import DEFAULT_CONFIG, get_config_path, load_config, write_default_config
from photostamp.errors import SetupError


def test_load_config_defaults_when_missing(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("PHOTOSTAMP_CONFIG", str(tmp_path / "absent.yaml"))

    cfg = load_config()

    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_load_config_deep_merges_style(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("max_width: 800\nstyle:\n  line_height: 24\n", encoding="utf-8")

    cfg = load_config(path)

    assert cfg["max_width"] == 800
    assert cfg["style"]["line_height"] == 24
    assert cfg["style"]["padding"] == 10
    assert cfg["input_dir"] == "./input"


def test_explicit_missing_config_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(SetupError):
        load_config(tmp_path / "missing.yaml")


def test_invalid_yaml_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("style: [unclosed\n", encoding="utf-8")

    with pytest.raises(SetupError):
        load_config(path)


def test_write_default_config_round_trips(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("PHOTOSTAMP_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    path = write_default_config()

    assert path == get_config_path() == tmp_path / "PhotoStamp" / "config.yaml"
    assert load_config(path) == DEFAULT_CONFIG
