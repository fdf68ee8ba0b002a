"""Theme utilities for FleetRental."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from PySide6 import QtCore, QtGui, QtWidgets

from fleet_rental.logging_config import get_logger
from fleet_rental.utils.config_store import load_config_data, save_config_data

ThemeChoice = Literal["light", "dark"]


@dataclass(frozen=True)
class ThemeSettings:
    """Persisted theme settings."""

    theme: ThemeChoice = "light"


def load_theme_settings(config_path: Path) -> ThemeSettings:
    """Load theme settings from disk."""
    data = load_config_data(config_path)
    theme = data.get("theme", "light")
    if theme not in ("light", "dark"):
        theme = "light"
    return ThemeSettings(theme=theme)


def save_theme_settings(config_path: Path, settings: ThemeSettings) -> None:
    """Save theme settings to disk."""
    payload = load_config_data(config_path)
    payload["theme"] = settings.theme
    save_config_data(config_path, payload)


class ThemeManager(QtCore.QObject):
    """Central theme manager with change notifications."""

    theme_changed = QtCore.Signal(str)

    def __init__(self, app: QtWidgets.QApplication, config_path: Path) -> None:
        super().__init__()
        self._app = app
        self._config_path = config_path
        self._settings = load_theme_settings(config_path)
        self._logger = get_logger(self.__class__.__name__)
        apply_theme(self._app, self._settings.theme)

    def is_dark(self) -> bool:
        return self._settings.theme == "dark"

    def set_theme(self, choice: ThemeChoice) -> None:
        self._settings = ThemeSettings(theme=choice)
        try:
            save_theme_settings(self._config_path, self._settings)
        except OSError:
            self._logger.warning("Não foi possível salvar a preferência de tema.")
        apply_theme(self._app, choice)
        self.theme_changed.emit(choice)


def apply_theme(app: QtWidgets.QApplication, theme_name: str) -> None:
    app.setStyle("Fusion")
    if theme_name == "dark":
        app.setPalette(_build_dark_palette())
    else:
        app.setPalette(app.style().standardPalette())


def apply_table_theme(table: QtWidgets.QTableView, theme_name: str) -> None:
    """Apply a table-specific theme without touching the global palette."""
    table.setAlternatingRowColors(True)
    if theme_name == "dark":
        palette = table.palette()
        palette.setColor(QtGui.QPalette.Base, QtGui.QColor("#1f1f1f"))
        palette.setColor(QtGui.QPalette.AlternateBase, QtGui.QColor("#242424"))
        palette.setColor(QtGui.QPalette.Text, QtGui.QColor("#f0f0f0"))
        table.setPalette(palette)
    else:
        table.setPalette(QtWidgets.QApplication.style().standardPalette())


def _build_dark_palette() -> QtGui.QPalette:
    palette = QtGui.QPalette()
    palette.setColor(QtGui.QPalette.Window, QtGui.QColor(32, 34, 40))
    palette.setColor(QtGui.QPalette.WindowText, QtGui.QColor(240, 240, 240))
    palette.setColor(QtGui.QPalette.Base, QtGui.QColor(24, 26, 31))
    palette.setColor(QtGui.QPalette.AlternateBase, QtGui.QColor(32, 34, 40))
    palette.setColor(QtGui.QPalette.Text, QtGui.QColor(240, 240, 240))
    palette.setColor(QtGui.QPalette.Button, QtGui.QColor(45, 48, 58))
    palette.setColor(QtGui.QPalette.ButtonText, QtGui.QColor(240, 240, 240))
    palette.setColor(QtGui.QPalette.Highlight, QtGui.QColor(45, 108, 223))
    palette.setColor(QtGui.QPalette.HighlightedText, QtGui.QColor(255, 255, 255))
    return palette
