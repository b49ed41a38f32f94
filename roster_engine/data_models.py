"""
Core data models for Roster.

Notes
-----
- Records are immutable. Editing produces a full replacement record.
- Identifiers are strings. Servers that emit numeric ids are normalized on read.
- Unknown keys in server payloads are ignored; only the four user fields are kept.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import InvalidUserError

UserId = str

REQUIRED_FIELDS: tuple[str, ...] = ("name", "username", "email")


def _coerce_id(value: object) -> UserId:
    """
    Normalize a server-provided identifier to a string.

    Raises
    ------
    ValueError
        If the value is missing, empty, or not a scalar identifier.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid user id: {value!r}")
    if isinstance(value, (int, str)):
        text = str(value).strip()
        if text:
            return text
    raise ValueError(f"Invalid user id: {value!r}")


def _coerce_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class UserDraft:
    """
    The editable fields of a user, without an identifier.

    Attributes
    ----------
    name:
        Display name. Search matches against this field only.
    username:
        Account handle.
    email:
        Contact address. Only presence is checked.
    """

    name: str = ""
    username: str = ""
    email: str = ""

    @staticmethod
    def blank() -> "UserDraft":
        return UserDraft()

    def missing_fields(self) -> tuple[str, ...]:
        """Return required field names that are empty after stripping."""
        return tuple(f for f in REQUIRED_FIELDS if not getattr(self, f).strip())

    def validate(self) -> None:
        """
        Check required-field presence.

        Raises
        ------
        InvalidUserError
            If name, username or email is empty.
        """
        missing = self.missing_fields()
        if missing:
            raise InvalidUserError(f"Required field(s) missing: {', '.join(missing)}")

    def replace(self, **changes: str) -> "UserDraft":
        """Return a copy with the given fields replaced."""
        unknown = set(changes) - set(REQUIRED_FIELDS)
        if unknown:
            raise InvalidUserError(f"Unknown field(s): {', '.join(sorted(unknown))}")
        values = {f: getattr(self, f) for f in REQUIRED_FIELDS}
        values.update(changes)
        return UserDraft(**values)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "username": self.username, "email": self.email}


@dataclass(frozen=True, slots=True)
class User:
    """
    A user record as confirmed by the remote store.

    Attributes
    ----------
    id:
        Server-assigned identifier; unique within a record set.
    name:
        Display name.
    username:
        Account handle.
    email:
        Contact address.
    """

    id: UserId
    name: str
    username: str
    email: str

    @property
    def draft(self) -> UserDraft:
        """The editable fields of this record."""
        return UserDraft(name=self.name, username=self.username, email=self.email)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable payload."""
        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, fallback_id: UserId | None = None) -> "User":
        """
        Build a User from a decoded JSON object.

        Parameters
        ----------
        payload:
            Decoded JSON object. Extra keys are ignored.
        fallback_id:
            Identifier to use when the payload carries none.

        Raises
        ------
        ValueError
            If the payload has no usable id and no fallback is given, or a
            field has the wrong type.
        """
        if not isinstance(payload, Mapping):
            raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")

        raw_id = payload.get("id")
        if raw_id is None or raw_id == "":
            if fallback_id is None:
                raise ValueError("User payload has no id")
            user_id = fallback_id
        else:
            user_id = _coerce_id(raw_id)

        return cls(
            id=user_id,
            name=_coerce_text(payload, "name"),
            username=_coerce_text(payload, "username"),
            email=_coerce_text(payload, "email"),
        )

    @classmethod
    def from_draft(cls, user_id: UserId, draft: UserDraft) -> "User":
        return cls(id=user_id, name=draft.name, username=draft.username, email=draft.email)


@dataclass(frozen=True, slots=True)
class PendingId:
    """
    Client-side handle for a create request that has not been answered yet.

    A PendingId is never a record key and is never sent to the server. It only
    correlates an in-flight create with its eventual result.
    """

    value: str

    @staticmethod
    def new() -> "PendingId":
        return PendingId(value=f"pending-{uuid.uuid4().hex}")

    def __str__(self) -> str:
        return self.value
