"""Transient success/error banner used as the GUI notifier."""

from __future__ import annotations

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QLabel, QWidget

from roster_engine.notifications import Notification

_STYLES = {
    "success": "background:#1e7e34; color:#fff; padding:6px; border-radius:4px;",
    "error": "background:#b02a37; color:#fff; padding:6px; border-radius:4px;",
}


class ToastLabel(QLabel):
    """
    A label that shows one notification at a time and hides itself.

    Implements the engine Notifier protocol.
    """

    def __init__(self, parent: QWidget | None = None, *, timeout_ms: int = 3000) -> None:
        super().__init__(parent)
        self.setWordWrap(True)
        self.hide()

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(timeout_ms)
        self._timer.timeout.connect(self.hide)

    def notify(self, notification: Notification) -> None:
        self.setStyleSheet(_STYLES[notification.level.value])
        self.setText(notification.message)
        self.show()
        self._timer.start()
