"""Database migrations for SQLite schema versioning."""

from __future__ import annotations

from dataclasses import dataclass
import sqlite3

from fleet_rental.db.connection import transaction


@dataclass(frozen=True)
class Migration:
    version: int
    script: str


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        script="""
        CREATE TABLE IF NOT EXISTS vehicles (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            make TEXT NOT NULL,
            model TEXT NOT NULL,
            year INTEGER NOT NULL,
            license_plate TEXT NOT NULL UNIQUE,
            status TEXT NOT NULL DEFAULT 'available'
                CHECK (status IN ('available', 'rented', 'maintenance')),
            rate_4h INTEGER NOT NULL CHECK (rate_4h >= 0),
            rate_12h INTEGER NOT NULL CHECK (rate_12h >= 0),
            daily_rate INTEGER NOT NULL CHECK (daily_rate >= 0),
            current_mileage INTEGER NOT NULL DEFAULT 0,
            inspection_valid_until TEXT,
            insurance_valid_until TEXT,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT,
            phone TEXT NOT NULL,
            driver_license_number TEXT NOT NULL,
            address TEXT,
            company_id TEXT,
            created_at TEXT,
            updated_at TEXT
        );

        CREATE TABLE IF NOT EXISTS reservations (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            vehicle_id INTEGER NOT NULL,
            customer_id INTEGER NOT NULL,
            start_date TEXT NOT NULL,
            end_date TEXT NOT NULL,
            status TEXT NOT NULL
                CHECK (status IN ('scheduled', 'active', 'completed', 'cancelled')),
            start_mileage INTEGER,
            end_mileage INTEGER,
            notes TEXT,
            created_at TEXT,
            updated_at TEXT,
            FOREIGN KEY (vehicle_id) REFERENCES vehicles(id),
            FOREIGN KEY (customer_id) REFERENCES customers(id),
            CHECK (end_date > start_date)
        );

        CREATE INDEX IF NOT EXISTS idx_reservations_start_date
            ON reservations(start_date);
        CREATE INDEX IF NOT EXISTS idx_reservations_end_date
            ON reservations(end_date);
        """,
    ),
    Migration(
        version=2,
        script="""
        ALTER TABLE reservations ADD COLUMN total_price INTEGER
            CHECK (total_price IS NULL OR total_price >= 0);

        CREATE INDEX IF NOT EXISTS idx_reservations_vehicle_status
            ON reservations(vehicle_id, status);
        CREATE INDEX IF NOT EXISTS idx_customers_license
            ON customers(driver_license_number);
        """,
    ),
]


def _fetch_schema_version(connection: sqlite3.Connection) -> int:
    connection.execute(
        """
        CREATE TABLE IF NOT EXISTS app_meta (
            schema_version INTEGER NOT NULL
        );
        """
    )
    row = connection.execute(
        "SELECT schema_version FROM app_meta LIMIT 1"
    ).fetchone()
    if row is None:
        connection.execute("INSERT INTO app_meta (schema_version) VALUES (0)")
        return 0
    return int(row[0])


def get_schema_version(connection: sqlite3.Connection) -> int:
    with transaction(connection):
        return _fetch_schema_version(connection)


def apply_migrations(connection: sqlite3.Connection) -> None:
    """Apply pending database migrations."""
    current_version = get_schema_version(connection)

    for migration in MIGRATIONS:
        if migration.version <= current_version:
            continue

        with transaction(connection):
            connection.executescript(migration.script)
            connection.execute(
                "UPDATE app_meta SET schema_version = ?",
                (migration.version,),
            )

        current_version = migration.version
