"""Screen for managing the fleet."""

from __future__ import annotations

from typing import List, Optional

from PySide6 import QtCore, QtWidgets

from fleet_rental.domain.models import Vehicle, VehicleStatus
from fleet_rental.services.errors import ServiceError
from fleet_rental.ui.app_services import AppServices
from fleet_rental.ui.screens.base_screen import BaseScreen
from fleet_rental.ui.strings import (
    TITLE_CONFIRMATION,
    TITLE_INFO,
    format_currency,
    vehicle_status_label,
)
from fleet_rental.utils.theme import apply_table_theme

_COMPLIANCE_LABELS = {"inspection": "Vistoria", "insurance": "Seguro"}


class VehicleDialog(QtWidgets.QDialog):
    """Dialog to register a vehicle."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Novo Veículo")
        layout = QtWidgets.QFormLayout(self)
        self.name_input = QtWidgets.QLineEdit()
        self.make_input = QtWidgets.QLineEdit()
        self.model_input = QtWidgets.QLineEdit()
        self.year_input = QtWidgets.QSpinBox()
        self.year_input.setRange(1950, 2100)
        self.year_input.setValue(QtCore.QDate.currentDate().year())
        self.plate_input = QtWidgets.QLineEdit()
        self.rate_4h_input = self._money_input()
        self.rate_12h_input = self._money_input()
        self.daily_rate_input = self._money_input()
        self.mileage_input = QtWidgets.QSpinBox()
        self.mileage_input.setRange(0, 5_000_000)
        self.mileage_input.setSuffix(" km")

        layout.addRow("Nome:", self.name_input)
        layout.addRow("Marca:", self.make_input)
        layout.addRow("Modelo:", self.model_input)
        layout.addRow("Ano:", self.year_input)
        layout.addRow("Placa:", self.plate_input)
        layout.addRow("Até 4 horas:", self.rate_4h_input)
        layout.addRow("Até 12 horas:", self.rate_12h_input)
        layout.addRow("Diária:", self.daily_rate_input)
        layout.addRow("Quilometragem:", self.mileage_input)

        buttons = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Save | QtWidgets.QDialogButtonBox.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    @staticmethod
    def _money_input() -> QtWidgets.QSpinBox:
        spin = QtWidgets.QSpinBox()
        spin.setRange(0, 1_000_000)
        spin.setPrefix("R$ ")
        return spin

    def values(self) -> dict[str, object]:
        return {
            "name": self.name_input.text(),
            "make": self.make_input.text(),
            "model": self.model_input.text(),
            "year": self.year_input.value(),
            "license_plate": self.plate_input.text(),
            "rate_4h": self.rate_4h_input.value(),
            "rate_12h": self.rate_12h_input.value(),
            "daily_rate": self.daily_rate_input.value(),
            "current_mileage": self.mileage_input.value(),
        }


class FleetScreen(BaseScreen):
    """Vehicle list with maintenance toggling and compliance alerts."""

    def __init__(self, services: AppServices) -> None:
        super().__init__(services)
        self._vehicles: List[Vehicle] = []
        self._build_ui()
        self.refresh()

    def _build_ui(self) -> None:
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(24, 24, 24, 24)
        title = QtWidgets.QLabel("Frota")
        title.setStyleSheet("font-size: 24px; font-weight: 600;")
        layout.addWidget(title)

        self.table = QtWidgets.QTableWidget(0, 6)
        self.table.setHorizontalHeaderLabels(
            ["Veículo", "Placa", "Status", "4h", "12h", "Diária"]
        )
        self.table.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.table.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.table.verticalHeader().setVisible(False)
        self.table.horizontalHeader().setSectionResizeMode(
            0, QtWidgets.QHeaderView.Stretch
        )
        apply_table_theme(
            self.table, "dark" if self._services.theme_manager.is_dark() else "light"
        )
        self._services.theme_manager.theme_changed.connect(
            lambda theme, table=self.table: apply_table_theme(table, theme)
        )
        layout.addWidget(self.table)

        buttons = QtWidgets.QHBoxLayout()
        self.new_button = QtWidgets.QPushButton("Novo veículo")
        self.new_button.clicked.connect(self._on_new_vehicle)
        self.maintenance_button = QtWidgets.QPushButton("Alternar manutenção")
        self.maintenance_button.clicked.connect(self._on_toggle_maintenance)
        self.remove_button = QtWidgets.QPushButton("Excluir")
        self.remove_button.clicked.connect(self._on_remove_vehicle)
        self.compliance_button = QtWidgets.QPushButton("Vencimentos")
        self.compliance_button.clicked.connect(self._on_show_compliance)
        buttons.addWidget(self.new_button)
        buttons.addWidget(self.maintenance_button)
        buttons.addWidget(self.remove_button)
        buttons.addWidget(self.compliance_button)
        buttons.addStretch()
        layout.addLayout(buttons)

    def refresh(self) -> None:
        try:
            self._vehicles = self._services.fleet_service.list_vehicles()
        except Exception:
            self._show_error("Não foi possível carregar a frota.")
            return
        self.table.setRowCount(len(self._vehicles))
        for row, vehicle in enumerate(self._vehicles):
            values = [
                vehicle.name,
                vehicle.license_plate,
                vehicle_status_label(vehicle.status),
                format_currency(vehicle.rate_4h),
                format_currency(vehicle.rate_12h),
                format_currency(vehicle.daily_rate),
            ]
            for column, value in enumerate(values):
                self.table.setItem(row, column, QtWidgets.QTableWidgetItem(value))

    def _selected_vehicle(self) -> Optional[Vehicle]:
        row = self.table.currentRow()
        if row < 0 or row >= len(self._vehicles):
            return None
        return self._vehicles[row]

    def _on_new_vehicle(self) -> None:
        dialog = VehicleDialog(self)
        if dialog.exec() != QtWidgets.QDialog.Accepted:
            return
        try:
            self._services.fleet_service.register_vehicle(**dialog.values())
        except ServiceError as exc:
            self._show_warning(str(exc))
            return
        self._services.data_bus.data_changed.emit()

    def _on_toggle_maintenance(self) -> None:
        vehicle = self._selected_vehicle()
        if vehicle is None or vehicle.id is None:
            self._show_warning("Selecione um veículo.")
            return
        try:
            self._services.fleet_service.set_maintenance(
                vehicle.id, vehicle.status != VehicleStatus.MAINTENANCE
            )
        except ServiceError as exc:
            self._show_warning(str(exc))
            return
        self._services.data_bus.data_changed.emit()

    def _on_remove_vehicle(self) -> None:
        vehicle = self._selected_vehicle()
        if vehicle is None or vehicle.id is None:
            self._show_warning("Selecione um veículo.")
            return
        response = QtWidgets.QMessageBox.question(
            self,
            TITLE_CONFIRMATION,
            f"Excluir o veículo {vehicle.display_name}?",
            QtWidgets.QMessageBox.Yes | QtWidgets.QMessageBox.No,
        )
        if response != QtWidgets.QMessageBox.Yes:
            return
        try:
            self._services.fleet_service.remove_vehicle(vehicle.id)
        except ServiceError as exc:
            self._show_warning(str(exc))
            return
        self._services.data_bus.data_changed.emit()

    def _on_show_compliance(self) -> None:
        alerts = self._services.fleet_service.expiring_compliance()
        if not alerts:
            message = "Nenhum vencimento nos próximos dias."
        else:
            message = "\n".join(
                "{vehicle}: {kind} até {date}{expired}".format(
                    vehicle=alert.vehicle.display_name,
                    kind=_COMPLIANCE_LABELS.get(alert.kind, alert.kind),
                    date=alert.valid_until.strftime("%d/%m/%Y"),
                    expired=" (vencido)" if alert.expired else "",
                )
                for alert in alerts
            )
        QtWidgets.QMessageBox.information(self, TITLE_INFO, message)
