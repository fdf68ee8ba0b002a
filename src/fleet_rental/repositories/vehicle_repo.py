"""Repository for fleet persistence."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from typing import List, Optional

from fleet_rental.db.connection import transaction
from fleet_rental.domain.models import Vehicle, VehicleStatus
from fleet_rental.logging_config import get_logger
from fleet_rental.repositories.mappers import to_db_date, vehicle_from_row


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


class VehicleRepo:
    """CRUD operations for vehicles."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(
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
        status: VehicleStatus = VehicleStatus.AVAILABLE,
        inspection_valid_until: Optional[date] = None,
        insurance_valid_until: Optional[date] = None,
    ) -> Vehicle:
        created_at = _now_iso()
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    INSERT INTO vehicles (
                        name,
                        make,
                        model,
                        year,
                        license_plate,
                        status,
                        rate_4h,
                        rate_12h,
                        daily_rate,
                        current_mileage,
                        inspection_valid_until,
                        insurance_valid_until,
                        created_at,
                        updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        name,
                        make,
                        model,
                        year,
                        license_plate,
                        status.value,
                        rate_4h,
                        rate_12h,
                        daily_rate,
                        current_mileage,
                        to_db_date(inspection_valid_until),
                        to_db_date(insurance_valid_until),
                        created_at,
                        created_at,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to create vehicle plate=%s", license_plate)
            raise

        return Vehicle(
            id=cursor.lastrowid,
            name=name,
            make=make,
            model=model,
            year=year,
            license_plate=license_plate,
            status=status,
            rate_4h=rate_4h,
            rate_12h=rate_12h,
            daily_rate=daily_rate,
            current_mileage=current_mileage,
            inspection_valid_until=inspection_valid_until,
            insurance_valid_until=insurance_valid_until,
            created_at=created_at,
            updated_at=created_at,
        )

    def update(self, vehicle: Vehicle) -> Optional[Vehicle]:
        updated_at = _now_iso()
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    """
                    UPDATE vehicles
                    SET
                        name = ?,
                        make = ?,
                        model = ?,
                        year = ?,
                        license_plate = ?,
                        status = ?,
                        rate_4h = ?,
                        rate_12h = ?,
                        daily_rate = ?,
                        current_mileage = ?,
                        inspection_valid_until = ?,
                        insurance_valid_until = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        vehicle.name,
                        vehicle.make,
                        vehicle.model,
                        vehicle.year,
                        vehicle.license_plate,
                        vehicle.status.value,
                        vehicle.rate_4h,
                        vehicle.rate_12h,
                        vehicle.daily_rate,
                        vehicle.current_mileage,
                        to_db_date(vehicle.inspection_valid_until),
                        to_db_date(vehicle.insurance_valid_until),
                        updated_at,
                        vehicle.id,
                    ),
                )
        except Exception:
            self._logger.exception("Failed to update vehicle id=%s", vehicle.id)
            raise

        if cursor.rowcount == 0:
            return None
        return self.get_by_id(vehicle.id or 0)

    def set_status(
        self,
        vehicle_id: int,
        status: VehicleStatus,
        current_mileage: Optional[int] = None,
    ) -> bool:
        """Change the operational status; no commit, callers own the transaction."""
        if current_mileage is None:
            cursor = self._connection.execute(
                "UPDATE vehicles SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, _now_iso(), vehicle_id),
            )
        else:
            cursor = self._connection.execute(
                """
                UPDATE vehicles
                SET status = ?, current_mileage = ?, updated_at = ?
                WHERE id = ?
                """,
                (status.value, current_mileage, _now_iso(), vehicle_id),
            )
        return cursor.rowcount > 0

    def delete(self, vehicle_id: int) -> bool:
        try:
            with transaction(self._connection):
                cursor = self._connection.execute(
                    "DELETE FROM vehicles WHERE id = ?",
                    (vehicle_id,),
                )
        except Exception:
            self._logger.exception("Failed to delete vehicle id=%s", vehicle_id)
            raise
        return cursor.rowcount > 0

    def list_all(self) -> List[Vehicle]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM vehicles ORDER BY name, id"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list vehicles")
            raise
        return [vehicle_from_row(row) for row in rows]

    def get_by_id(self, vehicle_id: int) -> Optional[Vehicle]:
        try:
            row = self._connection.execute(
                "SELECT * FROM vehicles WHERE id = ?",
                (vehicle_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get vehicle id=%s", vehicle_id)
            raise
        return vehicle_from_row(row) if row else None
