"""Fleet service for vehicle rules."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta

from fleet_rental.config import COMPLIANCE_WARNING_DAYS
from fleet_rental.domain.models import Vehicle, VehicleStatus
from fleet_rental.logging_config import get_logger
from fleet_rental.repositories import VehicleRepo
from fleet_rental.services.errors import NotFoundError, ValidationError


@dataclass(frozen=True)
class ComplianceAlert:
    vehicle: Vehicle
    kind: str
    valid_until: date

    @property
    def expired(self) -> bool:
        return self.valid_until < date.today()


def _validate_rates(rate_4h: int, rate_12h: int, daily_rate: int) -> None:
    if min(rate_4h, rate_12h, daily_rate) < 0:
        raise ValidationError("Os valores de diária não podem ser negativos.")


class FleetService:
    """Service for vehicle registration and maintenance state."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._repo = VehicleRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    def list_vehicles(self) -> list[Vehicle]:
        return self._repo.list_all()

    def register_vehicle(
        self,
        name: str,
        make: str,
        model: str,
        year: int,
        license_plate: str,
        rate_4h: int,
        rate_12h: int,
        daily_rate: int,
        current_mileage: int = 0,
        inspection_valid_until: Optional[date] = None,
        insurance_valid_until: Optional[date] = None,
    ) -> Vehicle:
        if not name.strip() or not license_plate.strip():
            raise ValidationError("Nome e placa do veículo são obrigatórios.")
        _validate_rates(rate_4h, rate_12h, daily_rate)
        try:
            return self._repo.create(
                name=name.strip(),
                make=make.strip(),
                model=model.strip(),
                year=year,
                license_plate=license_plate.strip().upper(),
                rate_4h=rate_4h,
                rate_12h=rate_12h,
                daily_rate=daily_rate,
                current_mileage=current_mileage,
                inspection_valid_until=inspection_valid_until,
                insurance_valid_until=insurance_valid_until,
            )
        except sqlite3.IntegrityError as exc:
            raise ValidationError(
                f"Já existe um veículo com a placa {license_plate}."
            ) from exc

    def update_vehicle(self, vehicle: Vehicle) -> Vehicle:
        _validate_rates(vehicle.rate_4h, vehicle.rate_12h, vehicle.daily_rate)
        updated = self._repo.update(vehicle)
        if not updated:
            raise NotFoundError(f"Veículo {vehicle.id} não encontrado.")
        return updated

    def remove_vehicle(self, vehicle_id: int) -> None:
        try:
            deleted = self._repo.delete(vehicle_id)
        except sqlite3.IntegrityError as exc:
            raise ValidationError(
                "Veículo possui reservas e não pode ser excluído."
            ) from exc
        if not deleted:
            raise NotFoundError(f"Veículo {vehicle_id} não encontrado.")
        self._logger.info("Vehicle %s removed", vehicle_id)

    def set_maintenance(self, vehicle_id: int, in_maintenance: bool) -> Vehicle:
        vehicle = self._repo.get_by_id(vehicle_id)
        if not vehicle:
            raise NotFoundError(f"Veículo {vehicle_id} não encontrado.")
        if in_maintenance:
            status = VehicleStatus.MAINTENANCE
        elif vehicle.status == VehicleStatus.MAINTENANCE:
            status = VehicleStatus.AVAILABLE
        else:
            return vehicle
        self._logger.info("Vehicle %s status -> %s", vehicle_id, status.value)
        return self.update_vehicle(replace(vehicle, status=status))

    def expiring_compliance(
        self,
        reference_date: Optional[date] = None,
        within_days: int = COMPLIANCE_WARNING_DAYS,
    ) -> list[ComplianceAlert]:
        """Inspection and insurance deadlines that lapse within the horizon."""
        reference_date = reference_date or date.today()
        horizon = reference_date + relativedelta(days=within_days)
        alerts: list[ComplianceAlert] = []
        for vehicle in self._repo.list_all():
            for kind, valid_until in (
                ("inspection", vehicle.inspection_valid_until),
                ("insurance", vehicle.insurance_valid_until),
            ):
                if valid_until is not None and valid_until <= horizon:
                    alerts.append(ComplianceAlert(vehicle, kind, valid_until))
        alerts.sort(key=lambda alert: alert.valid_until)
        return alerts
