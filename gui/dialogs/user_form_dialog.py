"""
User form dialog (UI only).

Purpose
-------
- Collect name, username and email for a new or edited user.
- Hand the draft to the owner via `submitted` instead of closing on OK.
- Stay open with the draft intact until the owner calls `finish`.

Notes
-----
- All three fields are required; OK is disabled while any is empty.
- While a submission is in flight the dialog cannot be dismissed.
"""

from __future__ import annotations

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from roster_engine.data_models import UserDraft
from roster_engine.editor import FormMode


class UserFormDialog(QDialog):
    """
    Modal form for one user.

    Signals
    -------
    submitted(UserDraft):
        Emitted when the user presses Add/Update with every field filled.
    """

    submitted = Signal(object)

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        mode: FormMode,
        draft: UserDraft,
    ) -> None:
        super().__init__(parent)
        is_edit = mode is FormMode.EDIT
        self.setWindowTitle("Edit User" if is_edit else "Add User")
        self.setModal(True)
        self.resize(420, 200)

        self._busy = False

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)

        form = QFormLayout()
        self.name_edit = QLineEdit(draft.name)
        self.username_edit = QLineEdit(draft.username)
        self.email_edit = QLineEdit(draft.email)
        form.addRow("Name", self.name_edit)
        form.addRow("Username", self.username_edit)
        form.addRow("Email", self.email_edit)
        root.addLayout(form)

        self._error_label = QLabel("")
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet("color: #b02a37;")
        root.addWidget(self._error_label)

        self._buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self._submit_text = "Update" if is_edit else "Add"
        self._ok_button().setText(self._submit_text)
        self._buttons.accepted.connect(self.accept)
        self._buttons.rejected.connect(self.reject)
        root.addWidget(self._buttons)

        for edit in (self.name_edit, self.username_edit, self.email_edit):
            edit.textChanged.connect(self._sync_ok_enabled)
        self._sync_ok_enabled()

    def _ok_button(self):
        return self._buttons.button(QDialogButtonBox.StandardButton.Ok)

    def _sync_ok_enabled(self) -> None:
        self._ok_button().setEnabled(not self._busy and not self.draft().missing_fields())

    def draft(self) -> UserDraft:
        """Current field values."""
        return UserDraft(
            name=self.name_edit.text(),
            username=self.username_edit.text(),
            email=self.email_edit.text(),
        )

    def set_busy(self, busy: bool) -> None:
        """Lock the form while a submission is in flight."""
        self._busy = busy
        for edit in (self.name_edit, self.username_edit, self.email_edit):
            edit.setReadOnly(busy)
        self._buttons.button(QDialogButtonBox.StandardButton.Cancel).setEnabled(not busy)
        self._ok_button().setText("Loading..." if busy else self._submit_text)
        if busy:
            self._error_label.setText("")
        self._sync_ok_enabled()

    def show_error(self, message: str) -> None:
        self._error_label.setText(message)

    def accept(self) -> None:  # type: ignore[override]
        """Emit the draft; the owner decides when the dialog closes."""
        if self._busy:
            return
        self.submitted.emit(self.draft())

    def reject(self) -> None:  # type: ignore[override]
        if self._busy:
            return
        super().reject()

    def finish(self) -> None:
        """Close the dialog after a successful submission."""
        self._busy = False
        super().accept()
