"""Qt adapter for the engine RemoteStore.

The GUI talks to this adapter via signals/slots so HTTP round-trips never block
the UI thread. The adapter only performs remote calls; applying their results
to the record set and mirror happens on the GUI thread.

Threading model
--------------
- A single worker QObject lives on a dedicated QThread.
- The worker lazily creates and owns the HttpRemoteStore (and its httpx.Client)
  on that thread.
- Requests run one at a time in arrival order. Nothing is cancelled: every
  request completes or fails.
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot

from roster_engine.data_models import PendingId, UserDraft
from roster_engine.remote_store.errors import RemoteStoreError
from roster_engine.remote_store.http_store import HttpRemoteStore

logger = logging.getLogger(__name__)


class RemoteStoreWorker(QObject):
    """Worker that owns the engine RemoteStore and runs in a background thread."""

    users_listed = Signal(object)  # tuple[User, ...]
    user_created = Signal(object, object)  # PendingId, User
    user_updated = Signal(str, object)  # user_id, User
    user_deleted = Signal(str)  # user_id
    failed = Signal(str, str, object)  # operation, key, RemoteStoreError

    def __init__(self, base_url: str) -> None:
        super().__init__()
        self._base_url = base_url
        self._store: HttpRemoteStore | None = None

    def _remote(self) -> HttpRemoteStore:
        if self._store is None:
            self._store = HttpRemoteStore(self._base_url)
        return self._store

    @Slot()
    def list_all(self) -> None:
        """List the collection and emit results."""
        try:
            users = tuple(self._remote().list_all())
        except RemoteStoreError as e:
            self.failed.emit("list", "", e)
            return
        self.users_listed.emit(users)

    @Slot(object, object)
    def create(self, pending_id: object, draft: object) -> None:
        """Create a user and emit the confirmed record with its pending id."""
        assert isinstance(pending_id, PendingId)
        assert isinstance(draft, UserDraft)
        try:
            user = self._remote().create(draft)
        except RemoteStoreError as e:
            self.failed.emit("create", pending_id.value, e)
            return
        self.user_created.emit(pending_id, user)

    @Slot(str, object)
    def update(self, user_id: str, draft: object) -> None:
        """Replace user_id and emit the confirmed record."""
        assert isinstance(draft, UserDraft)
        try:
            user = self._remote().update(user_id, draft)
        except RemoteStoreError as e:
            self.failed.emit("update", user_id, e)
            return
        self.user_updated.emit(user_id, user)

    @Slot(str)
    def delete(self, user_id: str) -> None:
        """Delete user_id and emit completion."""
        try:
            self._remote().delete(user_id)
        except RemoteStoreError as e:
            self.failed.emit("delete", user_id, e)
            return
        self.user_deleted.emit(user_id)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None


class RemoteStoreAdapter(QObject):
    """Qt adapter that marshals RemoteStore calls onto a worker thread."""

    # Requests (GUI emits these; wired as queued connections to worker slots)
    request_list_all = Signal()
    request_create = Signal(object, object)
    request_update = Signal(str, object)
    request_delete = Signal(str)

    # Results (worker emits; adapter forwards)
    users_listed = Signal(object)  # tuple[User, ...]
    user_created = Signal(object, object)  # PendingId, User
    user_updated = Signal(str, object)  # user_id, User
    user_deleted = Signal(str)  # user_id
    failed = Signal(str, str, object)  # operation, key, RemoteStoreError

    def __init__(self, base_url: str) -> None:
        super().__init__()

        self._thread = QThread()
        self._worker = RemoteStoreWorker(base_url=base_url)
        self._worker.moveToThread(self._thread)

        # Queue requests onto worker thread.
        self.request_list_all.connect(
            self._worker.list_all, type=Qt.ConnectionType.QueuedConnection
        )
        self.request_create.connect(self._worker.create, type=Qt.ConnectionType.QueuedConnection)
        self.request_update.connect(self._worker.update, type=Qt.ConnectionType.QueuedConnection)
        self.request_delete.connect(self._worker.delete, type=Qt.ConnectionType.QueuedConnection)

        # Forward results to GUI.
        self._worker.users_listed.connect(self.users_listed)
        self._worker.user_created.connect(self.user_created)
        self._worker.user_updated.connect(self.user_updated)
        self._worker.user_deleted.connect(self.user_deleted)
        self._worker.failed.connect(self.failed)

        self._thread.start()
        logger.debug("Remote store worker started for %s", base_url)

    def shutdown(self) -> None:
        """Stop the worker thread cleanly and release the HTTP client."""
        self._thread.quit()
        self._thread.wait()
        self._worker.close()
