"""Screen for booking a vehicle."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from PySide6 import QtCore, QtGui, QtWidgets

from fleet_rental.config import AVAILABILITY_DEBOUNCE_MS
from fleet_rental.domain.models import CustomerDetails, RentalWindow
from fleet_rental.logging_config import get_logger
from fleet_rental.services.booking_engine import calculate_price
from fleet_rental.services.booking_session import (
    BookingSession,
    Confirmed,
    EnteringCustomerDetails,
    MessageLevel,
    SelectingVehicle,
    SelectingWindow,
    SessionView,
)
from fleet_rental.services.errors import ServiceError
from fleet_rental.ui.app_services import AppServices
from fleet_rental.ui.screens.base_screen import BaseScreen
from fleet_rental.ui.strings import format_currency, format_datetime
from fleet_rental.utils.theme import apply_table_theme

_CUSTOMER_FIELDS = (
    ("first_name", "Nome*"),
    ("last_name", "Sobrenome*"),
    ("phone", "Telefone*"),
    ("driver_license_number", "CNH*"),
    ("email", "E-mail"),
    ("address", "Endereço"),
    ("company_id", "CNPJ"),
)


def _to_qdatetime(value: datetime) -> QtCore.QDateTime:
    return QtCore.QDateTime(
        QtCore.QDate(value.year, value.month, value.day),
        QtCore.QTime(value.hour, value.minute),
    )


def _from_qdatetime(value: QtCore.QDateTime) -> datetime:
    qdate = value.date()
    qtime = value.time()
    return datetime(
        qdate.year(), qdate.month(), qdate.day(), qtime.hour(), qtime.minute()
    )


class BookingScreen(BaseScreen):
    """Window -> vehicle -> customer -> confirm."""

    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._logger = get_logger(self.__class__.__name__)
        self._session = BookingSession(services.snapshot_store.snapshot)
        self._debounce = QtCore.QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(AVAILABILITY_DEBOUNCE_MS)
        self._debounce.timeout.connect(self._refresh_availability)
        self._window_dirty = True
        self._customer_inputs: dict[str, QtWidgets.QLineEdit] = {}
        self._build_ui()
        self._render(SessionView(state=self._session.state))
        self._debounce.start()

    def refresh(self) -> None:
        self._debounce.start()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setSpacing(18)
        layout.setContentsMargins(24, 24, 24, 24)

        title = QtWidgets.QLabel("Nova Reserva")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        layout.addWidget(title)

        now = datetime.now().replace(minute=0, second=0, microsecond=0)
        self.start_input = QtWidgets.QDateTimeEdit(_to_qdatetime(now + timedelta(hours=1)))
        self.end_input = QtWidgets.QDateTimeEdit(_to_qdatetime(now + timedelta(hours=5)))
        for widget in (self.start_input, self.end_input):
            widget.setCalendarPopup(True)
            widget.setDisplayFormat("dd/MM/yyyy HH:mm")
            widget.dateTimeChanged.connect(self._on_window_edited)

        dates_row = QtWidgets.QHBoxLayout()
        dates_row.addWidget(QtWidgets.QLabel("Retirada"))
        dates_row.addWidget(self.start_input)
        dates_row.addSpacing(12)
        dates_row.addWidget(QtWidgets.QLabel("Devolução"))
        dates_row.addWidget(self.end_input)
        dates_row.addStretch()
        layout.addLayout(dates_row)

        self.message_label = QtWidgets.QLabel("")
        self.message_label.setWordWrap(True)
        layout.addWidget(self.message_label)

        self.vehicles_group = QtWidgets.QGroupBox("Veículos")
        vehicles_layout = QtWidgets.QVBoxLayout(self.vehicles_group)
        self.vehicles_table = QtWidgets.QTableWidget(0, 3)
        self.vehicles_table.setHorizontalHeaderLabels(["Veículo", "Placa", "Preço"])
        self.vehicles_table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.vehicles_table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.vehicles_table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.vehicles_table.verticalHeader().setVisible(False)
        self.vehicles_table.horizontalHeader().setSectionResizeMode(
            0, QtWidgets.QHeaderView.Stretch
        )
        self.vehicles_table.cellDoubleClicked.connect(self._on_vehicle_chosen)
        apply_table_theme(
            self.vehicles_table,
            "dark" if self._services.theme_manager.is_dark() else "light",
        )
        self._services.theme_manager.theme_changed.connect(
            lambda theme, table=self.vehicles_table: apply_table_theme(table, theme)
        )
        self.choose_button = QtWidgets.QPushButton("Escolher veículo")
        self.choose_button.clicked.connect(self._on_vehicle_chosen)
        vehicles_layout.addWidget(self.vehicles_table)
        vehicles_layout.addWidget(self.choose_button, alignment=QtCore.Qt.AlignRight)
        layout.addWidget(self.vehicles_group)

        self.details_group = QtWidgets.QGroupBox("Dados do cliente")
        details_layout = QtWidgets.QVBoxLayout(self.details_group)
        self.summary_label = QtWidgets.QLabel("")
        self.summary_label.setStyleSheet("font-size: 16px; font-weight: 600;")
        details_layout.addWidget(self.summary_label)
        form = QtWidgets.QFormLayout()
        for field_name, label in _CUSTOMER_FIELDS:
            line_edit = QtWidgets.QLineEdit()
            self._customer_inputs[field_name] = line_edit
            form.addRow(label, line_edit)
        details_layout.addLayout(form)

        buttons = QtWidgets.QHBoxLayout()
        self.back_button = QtWidgets.QPushButton("Trocar veículo")
        self.back_button.clicked.connect(self._on_back_to_vehicle)
        self.submit_button = QtWidgets.QPushButton("Confirmar reserva")
        self.submit_button.setMinimumHeight(44)
        self.submit_button.clicked.connect(self._on_submit)
        buttons.addWidget(self.back_button)
        buttons.addStretch()
        buttons.addWidget(self.submit_button)
        details_layout.addLayout(buttons)
        layout.addWidget(self.details_group)
        layout.addStretch()

    def _current_window(self) -> RentalWindow:
        return RentalWindow(
            start=_from_qdatetime(self.start_input.dateTime()),
            end=_from_qdatetime(self.end_input.dateTime()),
        )

    def _on_window_edited(self) -> None:
        self._window_dirty = True
        self._debounce.start()

    def _refresh_availability(self) -> None:
        store = self._services.snapshot_store
        service = self._services.reservation_service
        token = store.begin_refresh()
        try:
            fleet = service.fetch_fleet()
            reservations = service.fetch_reservations(active_only=True)
        except ServiceError as exc:
            self._logger.warning("Availability refresh failed: %s", exc)
            self._show_message(str(exc), MessageLevel.ERROR)
            return
        snapshot = store.complete_refresh(token, fleet, reservations)
        if snapshot is None:
            return
        self._services.data_bus.snapshot_refreshed.emit(snapshot.version)
        view = self._session.refresh(snapshot)
        if isinstance(view.state, Confirmed):
            self._session = BookingSession(snapshot)
            self._window_dirty = True
        if self._window_dirty or isinstance(view.state, SelectingWindow):
            if isinstance(view.state, EnteringCustomerDetails):
                self._session.enter_details(self._collect_details())
            self._window_dirty = False
            self._render(self._session.change_window(self._current_window()))
        elif isinstance(view.state, SelectingVehicle):
            self._render(view)

    def _on_vehicle_chosen(self) -> None:
        row = self.vehicles_table.currentRow()
        if row < 0:
            return
        item = self.vehicles_table.item(row, 0)
        vehicle_id = item.data(QtCore.Qt.UserRole) if item else None
        if vehicle_id is None:
            return
        self._render(self._session.select_vehicle(int(vehicle_id)))

    def _on_back_to_vehicle(self) -> None:
        self._session.enter_details(self._collect_details())
        self._render(self._session.back_to_vehicle())

    def _collect_details(self) -> CustomerDetails:
        return CustomerDetails(
            **{name: widget.text() for name, widget in self._customer_inputs.items()}
        )

    def _on_submit(self) -> None:
        self._session.enter_details(self._collect_details())
        view = self._session.submit(self._services.reservation_service)
        self._render(view)
        if isinstance(view.state, Confirmed):
            self._services.data_bus.data_changed.emit()
            self._show_success(
                f"Reserva #{view.state.reservation.id} confirmada para "
                f"{view.state.vehicle.display_name}."
            )
        elif view.failure is not None and isinstance(view.state, SelectingVehicle):
            self._debounce.start()

    def _show_message(self, message: Optional[str], level: MessageLevel) -> None:
        colors = {
            MessageLevel.INFO: "#555",
            MessageLevel.WARNING: "#b26a00",
            MessageLevel.ERROR: "#c62828",
        }
        self.message_label.setText(message or "")
        self.message_label.setStyleSheet(f"color: {colors[level]}; font-size: 14px;")

    def _render(self, view: SessionView) -> None:
        state = view.state
        self._show_message(view.message, view.level)
        if view.level == MessageLevel.ERROR and view.message:
            self._show_error(view.message)
        elif view.level == MessageLevel.WARNING and view.message:
            self._show_warning(view.message)

        self.vehicles_group.setEnabled(isinstance(state, SelectingVehicle))
        self.details_group.setEnabled(isinstance(state, EnteringCustomerDetails))

        if isinstance(state, SelectingVehicle):
            self._fill_vehicles(state)
        elif not isinstance(state, EnteringCustomerDetails):
            self.vehicles_table.setRowCount(0)

        if isinstance(state, EnteringCustomerDetails):
            self.summary_label.setText(
                f"{state.vehicle.display_name}: {format_datetime(state.window.start)}"
                f" até {format_datetime(state.window.end)} - "
                f"{format_currency(state.price)}"
            )
            for name, widget in self._customer_inputs.items():
                widget.setText(getattr(state.details, name))
        elif isinstance(state, Confirmed):
            self.summary_label.setText("")
            for widget in self._customer_inputs.values():
                widget.clear()

    def _fill_vehicles(self, state: SelectingVehicle) -> None:
        self.vehicles_table.setRowCount(len(state.vehicles) + len(state.busy))
        for row, vehicle in enumerate(state.vehicles):
            name_item = QtWidgets.QTableWidgetItem(vehicle.name)
            name_item.setData(QtCore.Qt.UserRole, vehicle.id)
            self.vehicles_table.setItem(row, 0, name_item)
            self.vehicles_table.setItem(
                row, 1, QtWidgets.QTableWidgetItem(vehicle.license_plate)
            )
            self.vehicles_table.setItem(
                row,
                2,
                QtWidgets.QTableWidgetItem(
                    format_currency(calculate_price(vehicle, state.window))
                ),
            )
        # Busy vehicles are listed greyed out, without an id to choose.
        for row, entry in enumerate(state.busy, start=len(state.vehicles)):
            cells = (
                entry.vehicle.name,
                entry.vehicle.license_plate,
                f"Livre a partir de {format_datetime(entry.free_at)}",
            )
            for column, text in enumerate(cells):
                item = QtWidgets.QTableWidgetItem(text)
                item.setFlags(QtCore.Qt.ItemIsEnabled)
                item.setForeground(QtGui.QBrush(QtGui.QColor("#888")))
                self.vehicles_table.setItem(row, column, item)
