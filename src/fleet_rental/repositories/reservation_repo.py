"""Repository helpers for reservation persistence.

Write helpers do not commit: the reservation service wraps them in a
transaction together with the checks they depend on.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, Optional

from fleet_rental.db.connection import get_connection
from fleet_rental.domain.models import BLOCKING_STATUSES, Reservation, ReservationStatus
from fleet_rental.logging_config import get_logger
from fleet_rental.paths import get_db_path
from fleet_rental.repositories.mappers import reservation_from_row, to_db_timestamp

BLOCKING_STATUS_VALUES = tuple(sorted(status.value for status in BLOCKING_STATUSES))


def _now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def _coerce_status(status: str | ReservationStatus) -> ReservationStatus:
    if isinstance(status, ReservationStatus):
        return status
    return ReservationStatus(status)


@contextmanager
def _optional_connection(
    connection: Optional[sqlite3.Connection],
) -> Iterator[sqlite3.Connection]:
    if connection is not None:
        connection.row_factory = sqlite3.Row
        yield connection
        return
    new_connection = get_connection(get_db_path())
    try:
        yield new_connection
    finally:
        new_connection.close()


def _status_placeholders(statuses: Iterable[str]) -> str:
    return ", ".join(["?"] * len(tuple(statuses)))


def find_conflicts(
    vehicle_id: int,
    start_date: datetime,
    end_date: datetime,
    *,
    connection: Optional[sqlite3.Connection] = None,
) -> list[Reservation]:
    """Blocking reservations of a vehicle overlapping ``[start_date, end_date)``."""
    logger = get_logger("reservation_repo")
    params: list[object] = [
        vehicle_id,
        *BLOCKING_STATUS_VALUES,
        to_db_timestamp(end_date),
        to_db_timestamp(start_date),
    ]
    query = f"""
        SELECT *
        FROM reservations
        WHERE vehicle_id = ?
          AND status IN ({_status_placeholders(BLOCKING_STATUS_VALUES)})
          AND start_date < ?
          AND end_date > ?
        ORDER BY start_date, id
    """
    try:
        with _optional_connection(connection) as conn:
            rows = conn.execute(query, params).fetchall()
    except Exception:
        logger.exception("Failed to check conflicts for vehicle_id=%s", vehicle_id)
        raise
    return [reservation_from_row(row) for row in rows]


def insert_reservation(
    vehicle_id: int,
    customer_id: int,
    start_date: datetime,
    end_date: datetime,
    *,
    notes: Optional[str] = None,
    connection: sqlite3.Connection,
) -> Reservation:
    created_at = _now_iso()
    cursor = connection.execute(
        """
        INSERT INTO reservations (
            vehicle_id,
            customer_id,
            start_date,
            end_date,
            status,
            notes,
            created_at,
            updated_at
        )
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            vehicle_id,
            customer_id,
            to_db_timestamp(start_date),
            to_db_timestamp(end_date),
            ReservationStatus.SCHEDULED.value,
            notes,
            created_at,
            created_at,
        ),
    )
    return Reservation(
        id=cursor.lastrowid,
        vehicle_id=vehicle_id,
        customer_id=customer_id,
        start_date=start_date.replace(microsecond=0),
        end_date=end_date.replace(microsecond=0),
        status=ReservationStatus.SCHEDULED,
        notes=notes,
        created_at=created_at,
        updated_at=created_at,
    )


def update_reservation(
    reservation_id: int,
    status: str | ReservationStatus,
    *,
    start_mileage: Optional[int] = None,
    end_mileage: Optional[int] = None,
    notes: Optional[str] = None,
    total_price: Optional[int] = None,
    connection: sqlite3.Connection,
) -> bool:
    """Set the status and any lifecycle fields given; None keeps the stored value."""
    cursor = connection.execute(
        """
        UPDATE reservations
        SET status = ?,
            start_mileage = COALESCE(?, start_mileage),
            end_mileage = COALESCE(?, end_mileage),
            notes = COALESCE(?, notes),
            total_price = COALESCE(?, total_price),
            updated_at = ?
        WHERE id = ?
        """,
        (
            _coerce_status(status).value,
            start_mileage,
            end_mileage,
            notes,
            total_price,
            _now_iso(),
            reservation_id,
        ),
    )
    return cursor.rowcount > 0


def list_reservations(
    *,
    active_only: bool = False,
    vehicle_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    connection: Optional[sqlite3.Connection] = None,
) -> list[Reservation]:
    """List reservations, optionally only blocking ones or those touching a period."""
    logger = get_logger("reservation_repo")
    clauses: list[str] = []
    params: list[object] = []
    if active_only:
        clauses.append(f"status IN ({_status_placeholders(BLOCKING_STATUS_VALUES)})")
        params.extend(BLOCKING_STATUS_VALUES)
    if vehicle_id is not None:
        clauses.append("vehicle_id = ?")
        params.append(vehicle_id)
    if end_date is not None:
        clauses.append("start_date < ?")
        params.append(to_db_timestamp(end_date))
    if start_date is not None:
        clauses.append("end_date > ?")
        params.append(to_db_timestamp(start_date))
    where_clause = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    query = f"""
        SELECT *
        FROM reservations
        {where_clause}
        ORDER BY start_date, id
    """
    try:
        with _optional_connection(connection) as conn:
            rows = conn.execute(query, params).fetchall()
    except Exception:
        logger.exception("Failed to list reservations")
        raise
    return [reservation_from_row(row) for row in rows]


def get_reservation(
    reservation_id: int,
    *,
    connection: Optional[sqlite3.Connection] = None,
) -> Optional[Reservation]:
    logger = get_logger("reservation_repo")
    try:
        with _optional_connection(connection) as conn:
            row = conn.execute(
                "SELECT * FROM reservations WHERE id = ?",
                (reservation_id,),
            ).fetchone()
    except Exception:
        logger.exception("Failed to fetch reservation id=%s", reservation_id)
        raise
    return reservation_from_row(row) if row else None
