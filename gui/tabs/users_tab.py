"""
Users tab for the Roster GUI.

This tab lists users, filters them by name, and drives the add/edit form and
deletion. Remote calls go through the RemoteStoreAdapter; confirmed results
are applied to the engine record set on the GUI thread.

Notes
-----
- The collection is loaded once at startup. If that load fails, the last
  mirrored snapshot is shown instead (when one exists).
- Only one form is open at a time; its lifecycle is the engine EditorWorkflow.
- Results that arrive after the form moved on are still applied to the record
  set, but they no longer drive the form.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from gui.adapters.remote_store_adapter import RemoteStoreAdapter
from gui.dialogs.user_form_dialog import UserFormDialog
from gui.toast import ToastLabel
from roster_engine.data_models import PendingId, User, UserDraft
from roster_engine.directory import UserRecords
from roster_engine.editor import EditorWorkflow, FormMode, FormOpen, Submitting
from roster_engine.errors import IllegalTransitionError, InvalidUserError
from roster_engine.local_mirror import JsonFileMirror
from roster_engine.paths import resolve_paths
from roster_engine.remote_store.errors import RemoteStoreError

logger = logging.getLogger(__name__)

_COLUMNS = ("Name", "Username", "Email", "Actions")


class UsersTab(QWidget):
    """
    Single-page user management view.

    Responsibilities
    ----------------
    - Render the (filtered) record set.
    - Open the add/edit form and submit it through the adapter.
    - Delete records after confirmation.
    """

    def __init__(self, *, base_url: str, data_root: Path | None = None) -> None:
        super().__init__()

        self._toast = ToastLabel(self)
        self._records = UserRecords(
            mirror=JsonFileMirror(resolve_paths(data_root).mirror_path),
            notifier=self._toast,
        )
        self._workflow = EditorWorkflow()
        self._dialog: UserFormDialog | None = None
        self._initial_load_pending = True

        self._store = RemoteStoreAdapter(base_url=base_url)
        self._store.users_listed.connect(self._on_users_listed)
        self._store.user_created.connect(self._on_user_created)
        self._store.user_updated.connect(self._on_user_updated)
        self._store.user_deleted.connect(self._on_user_deleted)
        self._store.failed.connect(self._on_failed)

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.addWidget(self._toast)

        top = QHBoxLayout()
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search by name")
        self.search_edit.textChanged.connect(self._render)

        self.btn_add = QPushButton("Add User")
        self.btn_add.clicked.connect(self._open_create)

        self.btn_reload = QPushButton("Reload")
        self.btn_reload.setToolTip("Fetch the collection from the server again.")
        self.btn_reload.clicked.connect(self._reload)

        top.addWidget(self.search_edit, 1)
        top.addWidget(self.btn_reload)
        top.addWidget(self.btn_add)
        root.addLayout(top)

        self.table = QTableWidget(0, len(_COLUMNS))
        self.table.setHorizontalHeaderLabels(list(_COLUMNS))
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.verticalHeader().setVisible(False)
        header = self.table.horizontalHeader()
        for col in range(len(_COLUMNS) - 1):
            header.setSectionResizeMode(col, QHeaderView.ResizeMode.Stretch)
        header.setSectionResizeMode(len(_COLUMNS) - 1, QHeaderView.ResizeMode.ResizeToContents)
        root.addWidget(self.table, 1)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #666; padding-top: 4px;")
        root.addWidget(self.status_label)

        self._set_status("Loading…")
        self._store.request_list_all.emit()

    # ---------- Rendering ----------
    def _set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def _render(self) -> None:
        users = self._records.search(self.search_edit.text())
        self.table.setRowCount(len(users))
        for row, user in enumerate(users):
            self.table.setItem(row, 0, QTableWidgetItem(user.name))
            self.table.setItem(row, 1, QTableWidgetItem(user.username))
            self.table.setItem(row, 2, QTableWidgetItem(user.email))
            self.table.setCellWidget(row, 3, self._row_actions(user))

        total = len(self._records.records)
        self._set_status(f"{len(users)} of {total} user(s)")

    def _row_actions(self, user: User) -> QWidget:
        cell = QWidget()
        layout = QHBoxLayout(cell)
        layout.setContentsMargins(2, 2, 2, 2)

        btn_edit = QPushButton("Edit")
        btn_edit.clicked.connect(lambda _checked=False, uid=user.id: self._open_edit(uid))
        btn_delete = QPushButton("Delete")
        btn_delete.clicked.connect(lambda _checked=False, uid=user.id: self._confirm_delete(uid))

        layout.addWidget(btn_edit)
        layout.addWidget(btn_delete)
        return cell

    # ---------- Form lifecycle ----------
    def _show_form(self, state: FormOpen) -> None:
        dlg = UserFormDialog(self, mode=state.mode, draft=state.draft)
        dlg.submitted.connect(self._on_form_submitted)
        dlg.rejected.connect(self._on_form_cancelled)
        self._dialog = dlg
        dlg.open()

    def _open_create(self) -> None:
        try:
            state = self._workflow.open_create()
        except IllegalTransitionError:
            return
        self._show_form(state)

    def _open_edit(self, user_id: str) -> None:
        user = self._records.find(user_id)
        if user is None:
            return
        try:
            state = self._workflow.open_edit(user)
        except IllegalTransitionError:
            return
        self._show_form(state)

    def _on_form_submitted(self, draft_obj: object) -> None:
        draft = draft_obj
        assert isinstance(draft, UserDraft)
        dlg = self._dialog
        if dlg is None:
            return

        self._workflow.change(**draft.to_dict())
        try:
            state = self._workflow.submit()
        except InvalidUserError as exc:
            dlg.show_error(str(exc))
            return

        dlg.set_busy(True)
        if state.mode is FormMode.CREATE:
            self._set_status("Adding…")
            self._store.request_create.emit(state.pending_id, state.draft)
        else:
            self._set_status("Updating…")
            self._store.request_update.emit(state.target_id, state.draft)

    def _on_form_cancelled(self) -> None:
        if isinstance(self._workflow.state, FormOpen):
            self._workflow.cancel()
        self._dialog = None

    def _settle_form(self, succeeded: bool) -> None:
        dlg = self._dialog
        if succeeded:
            self._workflow.succeed()
            self._dialog = None
            if dlg is not None:
                dlg.finish()
        else:
            self._workflow.fail()
            if dlg is not None:
                dlg.set_busy(False)

    def _is_pending_create(self, pending_id: PendingId) -> bool:
        state = self._workflow.state
        return isinstance(state, Submitting) and state.pending_id == pending_id

    def _is_pending_update(self, user_id: str) -> bool:
        state = self._workflow.state
        return (
            isinstance(state, Submitting)
            and state.mode is FormMode.EDIT
            and state.target_id == user_id
        )

    # ---------- Delete ----------
    def _confirm_delete(self, user_id: str) -> None:
        user = self._records.find(user_id)
        if user is None:
            return
        ok = QMessageBox.question(self, "Delete user", f"Delete this user?\n\n{user.name}")
        if ok != QMessageBox.StandardButton.Yes:
            return
        self._set_status("Deleting…")
        self._store.request_delete.emit(user_id)

    def _reload(self) -> None:
        self._set_status("Loading…")
        self._store.request_list_all.emit()

    # ---------- Adapter results ----------
    def _on_users_listed(self, users_obj: object) -> None:
        users = users_obj
        assert isinstance(users, tuple)
        self._initial_load_pending = False
        self._records.apply_listed(users)
        self._render()

    def _on_user_created(self, pending_id_obj: object, user_obj: object) -> None:
        pending_id, user = pending_id_obj, user_obj
        assert isinstance(pending_id, PendingId)
        assert isinstance(user, User)
        if self._is_pending_create(pending_id):
            self._settle_form(succeeded=True)
        try:
            self._records.apply_created(user, pending_id=pending_id)
        finally:
            self._render()

    def _on_user_updated(self, user_id: str, user_obj: object) -> None:
        user = user_obj
        assert isinstance(user, User)
        if self._is_pending_update(user_id):
            self._settle_form(succeeded=True)
        try:
            self._records.apply_updated(user_id, user)
        finally:
            self._render()

    def _on_user_deleted(self, user_id: str) -> None:
        self._records.apply_deleted(user_id)
        self._render()

    def _on_failed(self, operation: str, key: str, error_obj: object) -> None:
        error = error_obj
        assert isinstance(error, RemoteStoreError)

        if operation == "list" and self._initial_load_pending:
            self._initial_load_pending = False
            result = self._records.fallback_to_mirror(error)
            self._render()
            if not result.from_cache:
                self._set_status("Could not load users.")
            return

        self._records.report_failure(operation, error)

        if operation == "create" and self._is_pending_create(PendingId(key)):
            self._settle_form(succeeded=False)
        elif operation == "update" and self._is_pending_update(key):
            self._settle_form(succeeded=False)

        self._render()

    def shutdown(self) -> None:
        """Stop the adapter worker thread."""
        self._store.shutdown()
