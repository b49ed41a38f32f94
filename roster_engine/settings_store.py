from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path

from .paths import resolve_paths

DEFAULT_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_LOG_LEVEL = "INFO"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True, slots=True)
class RosterSettings:
    """
    Persisted Roster settings.

    Notes
    -----
    base_url is the root of the remote API; the collection lives at
    ``<base_url>/users``. Environment variables override persisted values when
    loaded through `load_settings`.
    """

    base_url: str
    log_level: str

    @staticmethod
    def defaults() -> "RosterSettings":
        return RosterSettings(base_url=DEFAULT_BASE_URL, log_level=DEFAULT_LOG_LEVEL)


def _clean_base_url(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip().rstrip("/")
    if not cleaned.startswith(("http://", "https://")):
        return None
    return cleaned


def _clean_log_level(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip().upper()
    return cleaned if cleaned in _LOG_LEVELS else None


def _apply_env_overrides(settings: RosterSettings) -> RosterSettings:
    base_url = _clean_base_url(os.environ.get("ROSTER_BASE_URL"))
    if base_url is not None:
        settings = replace(settings, base_url=base_url)

    log_level = _clean_log_level(os.environ.get("ROSTER_LOG_LEVEL"))
    if log_level is not None:
        settings = replace(settings, log_level=log_level)
    return settings


def read_settings_file(*, data_root: Path | None) -> RosterSettings:
    """
    Load settings from disk without environment overrides.

    Parameters
    ----------
    data_root:
        Roster data root. If None, the default is used.

    Returns
    -------
    RosterSettings
        Loaded settings, or defaults if missing/unreadable. Invalid individual
        values fall back to their defaults.
    """
    path = resolve_paths(data_root).settings_path
    defaults = RosterSettings.defaults()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return defaults
    except (OSError, ValueError):
        return defaults

    if not isinstance(payload, dict):
        return defaults

    return RosterSettings(
        base_url=_clean_base_url(payload.get("base_url")) or defaults.base_url,
        log_level=_clean_log_level(payload.get("log_level")) or defaults.log_level,
    )


def load_settings(*, data_root: Path | None) -> RosterSettings:
    """
    Load effective settings: the settings file, then environment overrides.

    ``ROSTER_BASE_URL`` and ``ROSTER_LOG_LEVEL`` take precedence over the file.
    """
    return _apply_env_overrides(read_settings_file(data_root=data_root))


def save_settings(*, data_root: Path | None, settings: RosterSettings) -> None:
    """
    Save settings to disk.

    Parameters
    ----------
    data_root:
        Roster data root. If None, the default is used.
    settings:
        Settings to persist.

    Raises
    ------
    ValueError
        If base_url is not an http(s) URL or log_level is unknown.
    """
    base_url = _clean_base_url(settings.base_url)
    if base_url is None:
        raise ValueError(f"Base URL must start with http:// or https://: {settings.base_url!r}")
    log_level = _clean_log_level(settings.log_level)
    if log_level is None:
        raise ValueError(f"Unknown log level: {settings.log_level!r}")

    path = resolve_paths(data_root).settings_path
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"base_url": base_url, "log_level": log_level}
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
