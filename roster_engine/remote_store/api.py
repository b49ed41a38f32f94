"""
RemoteStore public API.

This module defines the surface the rest of Roster uses to talk to the remote
user collection. Callers speak only in typed domain objects; HTTP details stay
inside the implementation.

Notes
-----
- Every operation is exactly one round-trip. There are no retries.
- There is no idempotency key: repeating a create creates a second record.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from ..data_models import User, UserDraft, UserId


class RemoteStore(Protocol):
    """
    Remote collection of user records.

    Implementations raise RemoteStoreError for every failure, including
    transport errors, non-2xx responses, and malformed bodies.
    """

    def list_all(self) -> Sequence[User]:
        """
        Fetch the full collection.

        Returns
        -------
        Sequence[User]
            Records in server order.
        """
        raise NotImplementedError

    def create(self, draft: UserDraft) -> User:
        """
        Submit a new record.

        Returns
        -------
        User
            The record as stored remotely, carrying the server-assigned id.
        """
        raise NotImplementedError

    def update(self, user_id: UserId, draft: UserDraft) -> User:
        """
        Replace the record identified by user_id.

        Returns
        -------
        User
            The record as stored remotely.
        """
        raise NotImplementedError

    def delete(self, user_id: UserId) -> None:
        """Remove the record identified by user_id."""
        raise NotImplementedError
