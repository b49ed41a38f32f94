"""Domain exceptions for the remote store."""

from __future__ import annotations

from ..errors import RosterError


class RemoteStoreError(RosterError):
    """
    Raised when a remote call fails.

    Covers transport errors, non-2xx responses and response bodies that do
    not decode to the expected shape.

    Attributes
    ----------
    operation:
        Name of the failed operation ("list", "create", "update", "delete").
    status_code:
        HTTP status code when the server answered, otherwise None.
    """

    def __init__(self, operation: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
