"""Screen listing reservations with check-in and check-out actions."""

from __future__ import annotations

from typing import List, Optional

from PySide6 import QtWidgets

from fleet_rental.domain.models import Reservation, ReservationStatus
from fleet_rental.services.errors import ServiceError
from fleet_rental.ui.app_services import AppServices
from fleet_rental.ui.screens.base_screen import BaseScreen
from fleet_rental.ui.strings import (
    TITLE_CONFIRMATION,
    format_currency,
    format_datetime,
    reservation_status_label,
)
from fleet_rental.utils.theme import apply_table_theme


class ReservationsScreen(BaseScreen):
    """Agenda of reservations."""

    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._reservations: List[Reservation] = []
        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)
        title = QtWidgets.QLabel("Reservas")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        layout.addWidget(title)

        self.only_open_checkbox = QtWidgets.QCheckBox("Somente agendadas/em andamento")
        self.only_open_checkbox.setChecked(True)
        self.only_open_checkbox.stateChanged.connect(self.refresh)
        layout.addWidget(self.only_open_checkbox)

        self.table = QtWidgets.QTableWidget(0, 6)
        self.table.setHorizontalHeaderLabels(
            ["#", "Veículo", "Retirada", "Devolução", "Status", "Total"]
        )
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(
            1, QtWidgets.QHeaderView.Stretch
        )
        apply_table_theme(
            self.table, "dark" if self._services.theme_manager.is_dark() else "light"
        )
        self._services.theme_manager.theme_changed.connect(
            lambda theme, table=self.table: apply_table_theme(table, theme)
        )
        layout.addWidget(self.table)

        buttons = QtWidgets.QHBoxLayout()
        self.check_in_button = QtWidgets.QPushButton("Entregar veículo")
        self.check_in_button.clicked.connect(self._on_check_in)
        self.check_out_button = QtWidgets.QPushButton("Receber veículo")
        self.check_out_button.clicked.connect(self._on_check_out)
        self.cancel_button = QtWidgets.QPushButton("Cancelar reserva")
        self.cancel_button.clicked.connect(self._on_cancel)
        buttons.addWidget(self.check_in_button)
        buttons.addWidget(self.check_out_button)
        buttons.addWidget(self.cancel_button)
        buttons.addStretch()
        layout.addLayout(buttons)

    def refresh(self) -> None:
        service = self._services.reservation_service
        try:
            vehicles = {vehicle.id: vehicle for vehicle in service.fetch_fleet()}
            self._reservations = service.fetch_reservations(
                active_only=self.only_open_checkbox.isChecked()
            )
        except ServiceError as exc:
            self._show_error(str(exc))
            return
        self.table.setRowCount(len(self._reservations))
        for row, reservation in enumerate(self._reservations):
            vehicle = vehicles.get(reservation.vehicle_id)
            values = [
                str(reservation.id),
                vehicle.display_name if vehicle else f"ID {reservation.vehicle_id}",
                format_datetime(reservation.start_date),
                format_datetime(reservation.end_date),
                reservation_status_label(reservation.status),
                format_currency(reservation.total_price),
            ]
            for column, value in enumerate(values):
                self.table.setItem(row, column, QtWidgets.QTableWidgetItem(value))

    def _selected(self) -> Optional[Reservation]:
        row = self.table.currentRow()
        if row < 0 or row >= len(self._reservations):
            self._show_warning("Selecione uma reserva.")
            return None
        return self._reservations[row]

    def _ask_mileage(self, label: str) -> Optional[int]:
        value, accepted = QtWidgets.QInputDialog.getInt(
            self, label, "Quilometragem (km):", 0, 0, 5_000_000
        )
        return value if accepted else None

    def _on_check_in(self) -> None:
        reservation = self._selected()
        if reservation is None or reservation.id is None:
            return
        if reservation.status != ReservationStatus.SCHEDULED:
            self._show_warning("Somente reservas agendadas podem ser entregues.")
            return
        mileage = self._ask_mileage("Entrega do veículo")
        if mileage is None:
            return
        try:
            self._services.reservation_service.activate_reservation(
                reservation.id, mileage
            )
        except ServiceError as exc:
            self._show_warning(str(exc))
            return
        self._services.data_bus.data_changed.emit()

    def _on_check_out(self) -> None:
        reservation = self._selected()
        if reservation is None or reservation.id is None:
            return
        mileage = self._ask_mileage("Devolução do veículo")
        if mileage is None:
            return
        try:
            settlement = self._services.reservation_service.complete_reservation(
                reservation.id, mileage
            )
        except ServiceError as exc:
            self._show_warning(str(exc))
            return
        self._services.data_bus.data_changed.emit()
        lines = [
            f"Locação: {format_currency(settlement.base_price)}",
            f"Km rodados: {settlement.km_driven} (franquia {settlement.km_allowance})",
        ]
        if settlement.surcharge:
            lines.append(
                f"Excedente: {settlement.km_over} km = "
                f"{format_currency(settlement.surcharge)}"
            )
        lines.append(f"Total: {format_currency(settlement.total)}")
        self._show_success("\n".join(lines))

    def _on_cancel(self) -> None:
        reservation = self._selected()
        if reservation is None or reservation.id is None:
            return
        response = QtWidgets.QMessageBox.question(
            self,
            TITLE_CONFIRMATION,
            f"Cancelar a reserva #{reservation.id}?",
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        )
        if response != QtWidgets.QMessageBox.Yes:
            return
        try:
            self._services.reservation_service.cancel_reservation(reservation.id)
        except ServiceError as exc:
            self._show_warning(str(exc))
            return
        self._services.data_bus.data_changed.emit()
