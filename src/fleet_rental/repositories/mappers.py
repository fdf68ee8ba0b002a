"""SQLite row mappers for domain models."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser

from fleet_rental.domain.models import (
    Customer,
    Reservation,
    ReservationStatus,
    Vehicle,
    VehicleStatus,
)


def _row_value(row: sqlite3.Row, key: str) -> Any:
    return row[key] if key in row.keys() else None


def to_db_timestamp(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat(timespec="seconds")


def from_db_timestamp(value: str) -> datetime:
    return parser.isoparse(value)


def to_db_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def from_db_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return parser.isoparse(value).date()


def vehicle_from_row(row: sqlite3.Row) -> Vehicle:
    raw_status = _row_value(row, "status") or VehicleStatus.AVAILABLE.value
    try:
        status = VehicleStatus(raw_status)
    except ValueError:
        status = VehicleStatus.MAINTENANCE
    return Vehicle(
        id=_row_value(row, "id"),
        name=row["name"],
        make=row["make"],
        model=row["model"],
        year=int(row["year"]),
        license_plate=row["license_plate"],
        status=status,
        rate_4h=int(row["rate_4h"]),
        rate_12h=int(row["rate_12h"]),
        daily_rate=int(row["daily_rate"]),
        current_mileage=int(_row_value(row, "current_mileage") or 0),
        inspection_valid_until=from_db_date(_row_value(row, "inspection_valid_until")),
        insurance_valid_until=from_db_date(_row_value(row, "insurance_valid_until")),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def customer_from_row(row: sqlite3.Row) -> Customer:
    return Customer(
        id=_row_value(row, "id"),
        first_name=row["first_name"],
        last_name=row["last_name"],
        email=_row_value(row, "email"),
        phone=row["phone"],
        driver_license_number=row["driver_license_number"],
        address=_row_value(row, "address"),
        company_id=_row_value(row, "company_id"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )


def reservation_from_row(row: sqlite3.Row) -> Reservation:
    return Reservation(
        id=_row_value(row, "id"),
        vehicle_id=row["vehicle_id"],
        customer_id=row["customer_id"],
        start_date=from_db_timestamp(row["start_date"]),
        end_date=from_db_timestamp(row["end_date"]),
        status=ReservationStatus(row["status"]),
        start_mileage=_row_value(row, "start_mileage"),
        end_mileage=_row_value(row, "end_mileage"),
        notes=_row_value(row, "notes"),
        total_price=_row_value(row, "total_price"),
        created_at=_row_value(row, "created_at"),
        updated_at=_row_value(row, "updated_at"),
    )
