"""
In-memory record set and its synchronization with the remote store.

Pipeline
--------
Every operation follows the same strict order:

1. one remote call,
2. on success, recompute the in-memory record set,
3. overwrite the local mirror with the full set,
4. notify.

A notification therefore never describes state that is not yet durable. On a
remote failure steps 2 and 3 are skipped entirely: the record set and the
mirror keep their last-known-good values and only an error notification is
emitted.

Two ways to drive it
--------------------
- Synchronous: `refresh`, `create`, `update`, `delete` and `submit` perform the
  remote call themselves (CLI, tests).
- Split: the GUI performs the remote call on a worker thread and hands the
  result to a `UserRecords` (`apply_*`, `report_failure`) on the GUI thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .data_models import PendingId, User, UserDraft, UserId
from .editor import EditorWorkflow, FormMode
from .errors import MirrorReadError
from .local_mirror import LocalMirror
from .notifications import Notification, NotificationLevel, Notifier
from .remote_store.api import RemoteStore
from .remote_store.errors import RemoteStoreError
from .search import filter_users

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    "list": "Failed to fetch users from API.",
    "create": "Failed to add user.",
    "update": "Failed to update user.",
    "delete": "Failed to delete user.",
}


@dataclass(frozen=True, slots=True)
class OperationResult:
    """
    Outcome of one directory operation.

    Attributes
    ----------
    operation:
        "list", "create", "update" or "delete".
    succeeded:
        True if the remote call succeeded and the new state is durable.
    message:
        Text that was handed to the notifier (or would have been, for a
        silent list).
    user:
        The confirmed record for create/update, otherwise None.
    from_cache:
        True when the record set was restored from the local mirror.
    """

    operation: str
    succeeded: bool
    message: str
    user: User | None = None
    from_cache: bool = False


class UserRecords:
    """
    Canonical in-memory record set and its commit pipeline.

    This class never talks to the network. It applies results that a caller
    obtained from the remote store.

    Parameters
    ----------
    mirror:
        Local mirror, overwritten after every successful remote call.
    notifier:
        Receives one notification per mutation and per failure.
    """

    def __init__(self, mirror: LocalMirror, notifier: Notifier) -> None:
        self._mirror = mirror
        self._notifier = notifier
        self._records: tuple[User, ...] = ()

    @property
    def records(self) -> tuple[User, ...]:
        return self._records

    def find(self, user_id: UserId) -> User | None:
        return next((u for u in self._records if u.id == user_id), None)

    def search(self, term: str) -> tuple[User, ...]:
        return filter_users(self._records, term)

    # ---------- Commit pipeline ----------
    def _commit(
        self, records: tuple[User, ...], result: OperationResult, *, notify: bool = True
    ) -> OperationResult:
        self._records = records
        self._mirror.save(records)
        logger.info("%s committed: %d record(s)", result.operation, len(records))
        if notify:
            self._notifier.notify(Notification(NotificationLevel.SUCCESS, result.message))
        return result

    def report_failure(self, operation: str, error: Exception) -> OperationResult:
        """
        Record a failed remote call without touching state or mirror.

        Parameters
        ----------
        operation:
            Name of the failed operation.
        error:
            The failure, usually a RemoteStoreError.
        """
        logger.warning("%s failed: %s", operation, error)
        message = _FAILURE_MESSAGES.get(operation, f"Failed to {operation}.")
        self._notifier.notify(Notification(NotificationLevel.ERROR, message))
        return OperationResult(operation=operation, succeeded=False, message=message)

    # ---------- Apply confirmed results (GUI thread) ----------
    def apply_listed(self, users: Sequence[User]) -> OperationResult:
        """Replace the whole record set with a freshly listed collection."""
        seen: dict[UserId, User] = {}
        for user in users:
            if user.id in seen:
                logger.warning("Duplicate id %s in listed collection; keeping the last", user.id)
            seen[user.id] = user
        records = tuple(seen.values())
        result = OperationResult(
            operation="list", succeeded=True, message=f"Loaded {len(records)} user(s)."
        )
        return self._commit(records, result, notify=False)

    def apply_created(self, user: User, *, pending_id: PendingId | None = None) -> OperationResult:
        """
        Fold a server-confirmed new record into the set.

        Notes
        -----
        The server id is authoritative. If a record with the same id is already
        present it is replaced in place so ids stay unique.
        """
        if pending_id is not None:
            logger.debug("Create %s confirmed as id %s", pending_id, user.id)

        if self.find(user.id) is not None:
            logger.warning("Server returned existing id %s for a create; replacing", user.id)
            records = tuple(user if u.id == user.id else u for u in self._records)
        else:
            records = self._records + (user,)

        result = OperationResult(
            operation="create", succeeded=True, message="User added successfully!", user=user
        )
        return self._commit(records, result)

    def apply_updated(self, user_id: UserId, user: User) -> OperationResult:
        """Replace the record identified by user_id with the server response."""
        if self.find(user_id) is None:
            logger.warning("Updated id %s is no longer in the record set", user_id)
        records = tuple(user if u.id == user_id else u for u in self._records)
        result = OperationResult(
            operation="update", succeeded=True, message="User updated successfully!", user=user
        )
        return self._commit(records, result)

    def apply_deleted(self, user_id: UserId) -> OperationResult:
        records = tuple(u for u in self._records if u.id != user_id)
        result = OperationResult(
            operation="delete", succeeded=True, message="User deleted successfully!"
        )
        return self._commit(records, result)

    def fallback_to_mirror(self, error: Exception) -> OperationResult:
        """
        Populate an empty record set from the mirror after a failed startup list.

        The mirror is read, never written, here. If the set already holds
        records, or the mirror is empty or unreadable, this behaves like
        `report_failure`.
        """
        if self._records:
            return self.report_failure("list", error)

        try:
            cached = self._mirror.load()
        except MirrorReadError as exc:
            logger.warning("Mirror fallback unavailable: %s", exc)
            cached = None

        if not cached:
            return self.report_failure("list", error)

        logger.warning("list failed: %s; showing %d cached record(s)", error, len(cached))
        self._records = cached
        message = f"Failed to fetch users from API. Showing {len(cached)} cached user(s)."
        self._notifier.notify(Notification(NotificationLevel.ERROR, message))
        return OperationResult(operation="list", succeeded=False, message=message, from_cache=True)


class UserDirectory(UserRecords):
    """
    Record set that performs its own remote calls.

    Parameters
    ----------
    store:
        Remote collection.
    mirror:
        Local mirror, overwritten after every successful remote call.
    notifier:
        Receives one notification per mutation and per failure.
    """

    def __init__(self, store: RemoteStore, mirror: LocalMirror, notifier: Notifier) -> None:
        super().__init__(mirror=mirror, notifier=notifier)
        self._store = store

    def refresh(self) -> OperationResult:
        """Reload the full collection from the remote store."""
        try:
            users = self._store.list_all()
        except RemoteStoreError as exc:
            return self.report_failure("list", exc)
        return self.apply_listed(users)

    def load_initial(self) -> OperationResult:
        """Startup load: the remote collection, else the mirror if the set is empty."""
        try:
            users = self._store.list_all()
        except RemoteStoreError as exc:
            return self.fallback_to_mirror(exc)
        return self.apply_listed(users)

    def create(self, draft: UserDraft, *, pending_id: PendingId | None = None) -> OperationResult:
        """
        Create a record remotely and fold the confirmed result into the set.

        Raises
        ------
        InvalidUserError
            If a required field is empty. No remote call is made.
        """
        draft.validate()
        try:
            user = self._store.create(draft)
        except RemoteStoreError as exc:
            return self.report_failure("create", exc)
        return self.apply_created(user, pending_id=pending_id)

    def update(self, user_id: UserId, draft: UserDraft) -> OperationResult:
        """
        Replace a record remotely and in the set.

        Raises
        ------
        InvalidUserError
            If a required field is empty. No remote call is made.
        """
        draft.validate()
        try:
            user = self._store.update(user_id, draft)
        except RemoteStoreError as exc:
            return self.report_failure("update", exc)
        return self.apply_updated(user_id, user)

    def delete(self, user_id: UserId) -> OperationResult:
        try:
            self._store.delete(user_id)
        except RemoteStoreError as exc:
            return self.report_failure("delete", exc)
        return self.apply_deleted(user_id)

    def submit(self, workflow: EditorWorkflow) -> OperationResult:
        """
        Submit the workflow's open form and settle the workflow.

        The workflow ends Idle on success and back in FormOpen, draft intact,
        on failure.

        Raises
        ------
        InvalidUserError
            If a required field is empty; the workflow stays in FormOpen.
        IllegalTransitionError
            If no form is open.
        OSError
            If the mirror write fails. The workflow is settled before it
            propagates.
        """
        state = workflow.submit()
        before = self._records
        try:
            if state.mode is FormMode.CREATE:
                result = self.create(state.draft, pending_id=state.pending_id)
            else:
                assert state.target_id is not None
                result = self.update(state.target_id, state.draft)
        except Exception:
            # A changed record set means the remote call was confirmed.
            if self._records is not before:
                workflow.succeed()
            else:
                workflow.fail()
            raise

        if result.succeeded:
            workflow.succeed()
        else:
            workflow.fail()
        return result
