"""
Domain exceptions for Roster.

Notes
-----
Engine code maps every expected failure mode to a domain exception. Mirror
write failures are the exception: they surface as the underlying OSError.
"""

from __future__ import annotations


class RosterError(RuntimeError):
    """Base exception for all Roster domain failures."""


class InvalidUserError(RosterError, ValueError):
    """Raised when a user draft is missing a required field."""


class IllegalTransitionError(RosterError):
    """Raised when the editor workflow is driven out of order."""


class MirrorReadError(RosterError):
    """Raised when the local mirror slot exists but cannot be decoded."""
