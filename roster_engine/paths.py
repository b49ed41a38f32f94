"""
Filesystem locations for Roster runtime data.

Everything Roster writes lives under a single "data root":

- ``users.json``: the local mirror slot (last known full record set).
- ``settings.json``: persisted configuration.

Nothing in the engine should choose an on-disk location without going
through this module.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

MIRROR_SLOT_NAME = "users.json"
SETTINGS_FILE_NAME = "settings.json"


@dataclass(frozen=True, slots=True)
class RosterPaths:
    """
    Concrete resolved paths for Roster runtime data.

    Attributes
    ----------
    data_root:
        Root directory for all Roster runtime data.
    mirror_path:
        The single persisted slot holding the JSON array of users.
    settings_path:
        Persisted settings file.
    """

    data_root: Path
    mirror_path: Path
    settings_path: Path


class DataRootError(RuntimeError):
    """Raised when no usable data root can be determined."""


def default_data_root() -> Path:
    """
    Resolve the default Roster data root.

    Preference order:
    1) %ROSTER_DATA_ROOT% if set
    2) %LOCALAPPDATA%\\roster
    3) %APPDATA%\\roster (Roaming)
    4) $XDG_DATA_HOME/roster
    5) ~/.local/share/roster
    """
    explicit = os.environ.get("ROSTER_DATA_ROOT")
    if explicit:
        return Path(explicit).expanduser()

    local = os.environ.get("LOCALAPPDATA")
    if local:
        return Path(local) / "roster"

    roaming = os.environ.get("APPDATA")
    if roaming:
        return Path(roaming) / "roster"

    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "roster"

    try:
        home = Path.home()
    except RuntimeError as exc:
        raise DataRootError("Could not determine a home directory for the data root.") from exc
    return home / ".local" / "share" / "roster"


def resolve_paths(data_root: Path | None = None) -> RosterPaths:
    """
    Resolve all runtime paths.

    Parameters
    ----------
    data_root:
        Optional override for the data root. If None, the default is used.

    Returns
    -------
    RosterPaths
        Resolved paths. No directories are created.
    """
    root = default_data_root() if data_root is None else Path(data_root).expanduser()
    return RosterPaths(
        data_root=root,
        mirror_path=root / MIRROR_SLOT_NAME,
        settings_path=root / SETTINGS_FILE_NAME,
    )
