"""
Local mirror of the record set.

The mirror holds one slot: a JSON array with the complete last-known record
set. It is overwritten wholesale after every successful remote call and is
never patched incrementally.

Design constraints
------------------
- Writes are atomic (temp file + replace); a reader never sees half a snapshot.
- Serialization is deterministic for a given record set.
- Write failures are not translated: the OSError reaches the caller.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol, Sequence

from .data_models import User
from .errors import MirrorReadError

logger = logging.getLogger(__name__)


class LocalMirror(Protocol):
    """Persistence surface for the full record set."""

    def save(self, records: Sequence[User]) -> None:
        """Overwrite the slot with records."""
        ...

    def load(self) -> tuple[User, ...] | None:
        """Return the persisted records, or None if nothing was ever saved."""
        ...


def encode_records(records: Sequence[User]) -> str:
    """Encode a record set as the mirror's JSON array text."""
    return json.dumps([u.to_dict() for u in records], separators=(",", ":"), ensure_ascii=False)


def decode_records(text: str) -> tuple[User, ...]:
    """
    Decode mirror JSON text.

    Raises
    ------
    ValueError
        If the text is not a JSON array of user objects.
    """
    payload = json.loads(text)
    if not isinstance(payload, list):
        raise ValueError("Mirror payload must be a JSON array")
    return tuple(User.from_dict(item) for item in payload)


class JsonFileMirror:
    """
    File-backed mirror slot.

    Parameters
    ----------
    path:
        Location of the slot, typically ``<data_root>/users.json``.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def save(self, records: Sequence[User]) -> None:
        """
        Serialize the full record set and overwrite the slot.

        Raises
        ------
        OSError
            If the slot cannot be written. The previous snapshot is left in place.
        """
        text = encode_records(records)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")

        try:
            with temp_path.open("w", encoding="utf-8", newline="\n") as handle:
                handle.write(text)
            os.replace(temp_path, self._path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug("Mirror saved: %d record(s) to %s", len(records), self._path)

    def load(self) -> tuple[User, ...] | None:
        """
        Read the slot back.

        Returns
        -------
        tuple[User, ...] | None
            Persisted records, or None if the slot does not exist.

        Raises
        ------
        MirrorReadError
            If the slot exists but cannot be read or decoded.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise MirrorReadError(f"Failed to read mirror: {self._path}") from exc

        try:
            return decode_records(text)
        except ValueError as exc:
            raise MirrorReadError(f"Invalid mirror contents: {self._path}") from exc
