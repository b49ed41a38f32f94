"""
Roster GUI app.

Tabbed GUI backed by engine components (record set, remote store adapter,
local mirror).
"""

from __future__ import annotations

import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QHBoxLayout, QLabel, QTabWidget, QVBoxLayout, QWidget

from gui.tabs.settings_tab import SettingsTab
from gui.tabs.users_tab import UsersTab
from roster_engine.logging_config import configure_logging
from roster_engine.settings_store import load_settings


class AppWindow(QWidget):
    """
    Main window for the Roster GUI.

    Responsibilities
    ----------------
    - Host the tabbed interface (Users, Settings)
    - Coordinate clean shutdown of tab-owned background workers
    """

    def __init__(self, *, base_url: str, data_root: Path | None = None) -> None:
        super().__init__()
        self.setWindowTitle("Roster")
        self.resize(960, 640)

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)

        header = QWidget()
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(8, 8, 8, 8)

        title = QLabel("Roster")
        f = title.font()
        f.setPointSize(16)
        f.setBold(True)
        title.setFont(f)

        subtitle = QLabel(base_url)
        subtitle.setStyleSheet("color: #666;")

        header_layout.addWidget(title)
        header_layout.addSpacing(10)
        header_layout.addWidget(subtitle)
        header_layout.addStretch(1)

        root.addWidget(header)

        tabs = QTabWidget()

        self.users_tab = UsersTab(base_url=base_url, data_root=data_root)
        tabs.addTab(self.users_tab, "Users")

        self.settings_tab = SettingsTab(data_root=data_root)
        tabs.addTab(self.settings_tab, "Settings")

        root.addWidget(tabs, 1)

    def closeEvent(self, event) -> None:  # type: ignore[override]
        """
        Handle window close by shutting down background workers.

        Parameters
        ----------
        event:
            Qt close event.
        """
        try:
            if hasattr(self, "users_tab"):
                self.users_tab.shutdown()
        finally:
            super().closeEvent(event)


def main(
    data_root: Path | None = None, *, base_url: str | None = None, log_level: str | None = None
) -> int:
    """
    Run the Roster GUI application.

    Parameters
    ----------
    data_root:
        Optional override for the Roster data root.
    base_url:
        Optional override for the API base URL.
    log_level:
        Optional override for the logging level.

    Returns
    -------
    int
        Qt application exit code.
    """
    settings = load_settings(data_root=data_root)
    configure_logging(log_level or settings.log_level)

    app = QApplication.instance() or QApplication(sys.argv)
    w = AppWindow(base_url=(base_url or settings.base_url).rstrip("/"), data_root=data_root)
    w.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
