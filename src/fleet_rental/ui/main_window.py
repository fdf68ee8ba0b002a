"""Main window for the FleetRental application."""

from __future__ import annotations

from PySide6 import QtGui, QtWidgets

from fleet_rental.ui.app_services import AppServices
from fleet_rental.ui.screens import BookingScreen, FleetScreen, ReservationsScreen
from fleet_rental.ui.strings import APP_NAME, format_datetime
from fleet_rental.utils.theme import ThemeChoice
from fleet_rental.version import __version__

_NAV_STYLE = """
QPushButton[nav="true"] {
    font-size: 16px;
    padding: 12px;
    text-align: left;
    border-radius: 8px;
}
"""


class MainWindow(QtWidgets.QMainWindow):
    """Sidebar navigation over the booking, agenda and fleet screens."""

    def __init__(self, services: AppServices) -> None:
        super().__init__()
        self._services = services
        self._stack = QtWidgets.QStackedWidget()
        self._snapshot_label = QtWidgets.QLabel()
        self._compliance_label = QtWidgets.QLabel()
        self.setWindowTitle(f"{APP_NAME} - v{__version__}")
        self.resize(1100, 680)
        self._build_ui()
        services.data_bus.snapshot_refreshed.connect(self._on_snapshot_refreshed)
        services.data_bus.data_changed.connect(self._update_compliance)
        self._update_compliance()

    def _build_ui(self) -> None:
        central = QtWidgets.QWidget(self)
        layout = QtWidgets.QHBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._build_sidebar())
        layout.addWidget(self._stack)
        self.setCentralWidget(central)
        self.setStyleSheet(_NAV_STYLE)
        self._build_menu()
        self._build_status_bar()
        self._stack.currentChanged.connect(self._on_screen_changed)

    def _build_sidebar(self) -> QtWidgets.QFrame:
        sidebar = QtWidgets.QFrame()
        sidebar.setObjectName("sidebar")
        sidebar.setFixedWidth(220)
        sidebar_layout = QtWidgets.QVBoxLayout(sidebar)
        sidebar_layout.setContentsMargins(16, 16, 16, 16)
        sidebar_layout.setSpacing(12)

        title = QtWidgets.QLabel(APP_NAME)
        title.setStyleSheet("font-size: 18px; font-weight: 600;")
        sidebar_layout.addWidget(title)

        button_group = QtWidgets.QButtonGroup(self)
        button_group.setExclusive(True)
        screens = [
            ("Nova Reserva", BookingScreen(self._services)),
            ("Reservas", ReservationsScreen(self._services)),
            ("Frota", FleetScreen(self._services)),
        ]
        for index, (label, screen) in enumerate(screens):
            button = QtWidgets.QPushButton(label)
            button.setCheckable(True)
            button.setChecked(index == 0)
            button.setProperty("nav", True)
            button.setMinimumHeight(52)
            button.clicked.connect(
                lambda _checked, idx=index: self._stack.setCurrentIndex(idx)
            )
            button_group.addButton(button)
            sidebar_layout.addWidget(button)
            self._stack.addWidget(screen)
        sidebar_layout.addStretch()
        return sidebar

    def _build_status_bar(self) -> None:
        status_bar = self.statusBar()
        status_bar.addWidget(self._snapshot_label)
        status_bar.addPermanentWidget(self._compliance_label)
        self._snapshot_label.setText("Disponibilidade ainda não carregada")

    def _on_screen_changed(self, index: int) -> None:
        screen = self._stack.widget(index)
        refresh = getattr(screen, "refresh", None)
        if callable(refresh):
            refresh()

    def _on_snapshot_refreshed(self, version: int) -> None:
        snapshot = self._services.snapshot_store.snapshot
        loaded_at = format_datetime(snapshot.loaded_at) if snapshot.loaded_at else "-"
        self._snapshot_label.setText(
            f"Disponibilidade v{version}: {len(snapshot.fleet)} veículos, "
            f"{len(snapshot.reservations)} reservas ({loaded_at})"
        )

    def _update_compliance(self) -> None:
        alerts = self._services.fleet_service.expiring_compliance()
        if not alerts:
            self._compliance_label.setText("")
            return
        expired = sum(1 for alert in alerts if alert.expired)
        self._compliance_label.setText(
            f"Vencimentos próximos: {len(alerts)} (vencidos: {expired})"
        )

    def _build_menu(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("Arquivo")
        exit_action = file_menu.addAction("Sair")
        exit_action.triggered.connect(self.close)

        view_menu = menu_bar.addMenu("Exibir")
        theme_menu = view_menu.addMenu("Tema")
        theme_group = QtGui.QActionGroup(self)
        theme_group.setExclusive(True)
        current = "dark" if self._services.theme_manager.is_dark() else "light"
        for key, label in (("light", "Claro"), ("dark", "Escuro")):
            action = theme_menu.addAction(label)
            action.setCheckable(True)
            action.setData(key)
            action.setChecked(key == current)
            theme_group.addAction(action)
        theme_group.triggered.connect(self._on_theme_selected)

        help_menu = menu_bar.addMenu("Ajuda")
        about_action = help_menu.addAction("Sobre")
        about_action.triggered.connect(self._show_about)

    def _on_theme_selected(self, action: QtGui.QAction) -> None:
        choice: ThemeChoice = "dark" if action.data() == "dark" else "light"
        self._services.theme_manager.set_theme(choice)

    def _show_about(self) -> None:
        QtWidgets.QMessageBox.about(
            self,
            "Sobre",
            f"{APP_NAME}\nVersão {__version__}\n"
            "Reservas de veículos com disponibilidade e preço em tempo real.",
        )
