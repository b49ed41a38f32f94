from __future__ import annotations

from pathlib import Path

from PySide6.QtWidgets import (
    QComboBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from roster_engine.paths import resolve_paths
from roster_engine.settings_store import RosterSettings, read_settings_file, save_settings


class SettingsTab(QWidget):
    """
    Settings tab for the Roster GUI.

    Responsibilities
    ----------------
    - Configure the API base URL and log level.
    - Persist settings to disk in a small JSON file under data_root.

    Notes
    -----
    Saved values apply on the next start. Environment variables still take
    precedence over the file.
    """

    def __init__(self, *, data_root: Path | None = None) -> None:
        super().__init__()

        self._data_root = data_root
        self._settings = read_settings_file(data_root=data_root)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(12, 12, 12, 12)

        box = QGroupBox("Connection")
        box_layout = QVBoxLayout(box)

        # Base URL
        self.base_url_edit = QLineEdit()
        self.base_url_edit.setPlaceholderText("https://jsonplaceholder.typicode.com")

        row = QHBoxLayout()
        row.addWidget(QLabel("API base URL:"))
        row.addWidget(self.base_url_edit, 1)
        box_layout.addLayout(row)

        # Log level
        self.log_level_combo = QComboBox()
        for level in ("DEBUG", "INFO", "WARNING", "ERROR"):
            self.log_level_combo.addItem(level.title(), level)

        row2 = QHBoxLayout()
        row2.addWidget(QLabel("Log level:"))
        row2.addWidget(self.log_level_combo, 1)
        box_layout.addLayout(row2)

        mirror_label = QLabel(f"Local copy: {resolve_paths(data_root).mirror_path}")
        mirror_label.setStyleSheet("color: #666;")
        box_layout.addWidget(mirror_label)

        # Save button
        btn_save = QPushButton("Save Settings")
        btn_save.clicked.connect(self._save)
        box_layout.addWidget(btn_save)

        layout.addWidget(box)
        layout.addStretch(1)

        self._load_into_widgets()

    def _load_into_widgets(self) -> None:
        s = self._settings
        self.base_url_edit.setText(s.base_url)
        self._select_combo_by_data(self.log_level_combo, s.log_level)

    @staticmethod
    def _select_combo_by_data(combo: QComboBox, value: str) -> None:
        for i in range(combo.count()):
            if str(combo.itemData(i)) == value:
                combo.setCurrentIndex(i)
                return

    def _save(self) -> None:
        settings = RosterSettings(
            base_url=self.base_url_edit.text().strip(),
            log_level=str(self.log_level_combo.currentData()),
        )

        try:
            save_settings(data_root=self._data_root, settings=settings)
        except (OSError, ValueError) as exc:
            QMessageBox.critical(self, "Settings", f"Failed to save settings: {exc}")
            return

        self._settings = settings
        QMessageBox.information(self, "Settings", "Saved. Restart Roster to apply.")
