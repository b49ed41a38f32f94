from __future__ import annotations

import json
from pathlib import Path

import pytest

from roster_engine.settings_store import (
    DEFAULT_BASE_URL,
    RosterSettings,
    load_settings,
    read_settings_file,
    save_settings,
)


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert load_settings(data_root=tmp_path) == RosterSettings.defaults()


def test_roundtrip(tmp_path: Path) -> None:
    settings = RosterSettings(base_url="http://localhost:3000/", log_level="debug")
    save_settings(data_root=tmp_path, settings=settings)

    loaded = load_settings(data_root=tmp_path)
    assert loaded == RosterSettings(base_url="http://localhost:3000", log_level="DEBUG")


def test_unreadable_file_gives_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("{not json", encoding="utf-8")
    assert read_settings_file(data_root=tmp_path) == RosterSettings.defaults()


def test_invalid_values_fall_back_individually(tmp_path: Path) -> None:
    payload = {"base_url": "ftp://nope", "log_level": "WARNING"}
    (tmp_path / "settings.json").write_text(json.dumps(payload), encoding="utf-8")

    loaded = read_settings_file(data_root=tmp_path)
    assert loaded.base_url == DEFAULT_BASE_URL
    assert loaded.log_level == "WARNING"


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    save_settings(
        data_root=tmp_path,
        settings=RosterSettings(base_url="http://file.test", log_level="INFO"),
    )
    monkeypatch.setenv("ROSTER_BASE_URL", "https://env.test/")
    monkeypatch.setenv("ROSTER_LOG_LEVEL", "error")

    loaded = load_settings(data_root=tmp_path)
    assert loaded == RosterSettings(base_url="https://env.test", log_level="ERROR")
    assert read_settings_file(data_root=tmp_path).base_url == "http://file.test"


def test_save_rejects_invalid_values(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        save_settings(
            data_root=tmp_path,
            settings=RosterSettings(base_url="nope", log_level="INFO"),
        )
    with pytest.raises(ValueError):
        save_settings(
            data_root=tmp_path,
            settings=RosterSettings(base_url="http://ok.test", log_level="LOUD"),
        )
    assert not (tmp_path / "settings.json").exists()
