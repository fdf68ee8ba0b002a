"""Repository for customer persistence."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Optional

from fleet_rental.domain.models import Customer, CustomerDetails
from fleet_rental.logging_config import get_logger
from fleet_rental.repositories.mappers import customer_from_row


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _blank_to_none(value: str) -> Optional[str]:
    value = value.strip()
    return value or None


class CustomerRepo:
    """CRUD operations for customers."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def insert(self, details: CustomerDetails) -> Customer:
        """Insert without committing, for use inside a caller's transaction."""
        created_at = _now_iso()
        cursor = self._connection.execute(
            """
            INSERT INTO customers (
                first_name,
                last_name,
                email,
                phone,
                driver_license_number,
                address,
                company_id,
                created_at,
                updated_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                details.first_name.strip(),
                details.last_name.strip(),
                _blank_to_none(details.email),
                details.phone.strip(),
                details.driver_license_number.strip(),
                _blank_to_none(details.address),
                _blank_to_none(details.company_id),
                created_at,
                created_at,
            ),
        )
        return Customer(
            id=cursor.lastrowid,
            first_name=details.first_name.strip(),
            last_name=details.last_name.strip(),
            email=_blank_to_none(details.email),
            phone=details.phone.strip(),
            driver_license_number=details.driver_license_number.strip(),
            address=_blank_to_none(details.address),
            company_id=_blank_to_none(details.company_id),
            created_at=created_at,
            updated_at=created_at,
        )

    def find_by_license(self, driver_license_number: str) -> Optional[Customer]:
        try:
            row = self._connection.execute(
                """
                SELECT * FROM customers
                WHERE driver_license_number = ?
                ORDER BY id DESC
                LIMIT 1
                """,
                (driver_license_number.strip(),),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to find customer by license")
            raise
        return customer_from_row(row) if row else None

    def get_by_id(self, customer_id: int) -> Optional[Customer]:
        try:
            row = self._connection.execute(
                "SELECT * FROM customers WHERE id = ?",
                (customer_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to get customer id=%s", customer_id)
            raise
        return customer_from_row(row) if row else None
