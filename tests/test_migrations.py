"""Tests for schema migrations and row mapping."""

import sqlite3
from datetime import datetime

import pytest

from fleet_rental.db.connection import get_connection, transaction
from fleet_rental.db.migrations import MIGRATIONS, apply_migrations, get_schema_version
from fleet_rental.repositories import reservation_repo
from fleet_rental.repositories.mappers import from_db_timestamp, to_db_timestamp


class TestMigrations:
    """Tests for apply_migrations."""

    def test_reaches_latest_version(self, connection):
        assert get_schema_version(connection) == MIGRATIONS[-1].version

    def test_is_idempotent(self, connection):
        apply_migrations(connection)
        assert get_schema_version(connection) == MIGRATIONS[-1].version

    def test_fresh_database_starts_at_zero(self):
        conn = get_connection(":memory:")
        try:
            assert get_schema_version(conn) == 0
        finally:
            conn.close()

    def test_reservation_end_must_follow_start(self, connection, stored_vehicle):
        vehicle = stored_vehicle()
        with pytest.raises(sqlite3.IntegrityError):
            with transaction(connection):
                connection.execute(
                    "INSERT INTO customers (first_name, last_name, phone, "
                    "driver_license_number) VALUES ('A', 'B', '1', '2')"
                )
                reservation_repo.insert_reservation(
                    vehicle.id,
                    1,
                    datetime(2024, 1, 1, 14),
                    datetime(2024, 1, 1, 10),
                    connection=connection,
                )


class TestTimestamps:
    """Tests for timestamp storage format."""

    def test_seconds_precision_and_lexical_order(self):
        early = to_db_timestamp(datetime(2024, 1, 1, 9, 5, 7, 999))
        late = to_db_timestamp(datetime(2024, 1, 1, 10, 0))
        assert early == "2024-01-01T09:05:07"
        assert early < late

    def test_roundtrip_is_naive(self):
        value = from_db_timestamp("2024-01-01T09:05:07")
        assert value == datetime(2024, 1, 1, 9, 5, 7)
        assert value.tzinfo is None
