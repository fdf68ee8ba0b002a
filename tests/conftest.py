"""Shared fixtures for FleetRental tests."""

from datetime import datetime, timedelta

import pytest

from fleet_rental.db.connection import get_connection
from fleet_rental.db.migrations import apply_migrations
from fleet_rental.domain.models import (
    CustomerDetails,
    RentalWindow,
    Reservation,
    ReservationStatus,
    Vehicle,
    VehicleStatus,
)
from fleet_rental.services.fleet_service import FleetService


@pytest.fixture
def connection():
    conn = get_connection(":memory:")
    apply_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def make_vehicle():
    """Factory for in-memory vehicles priced 800 / 1800 / 1200 per day."""

    def _make(vehicle_id=1, status=VehicleStatus.AVAILABLE, **overrides):
        values = {
            "id": vehicle_id,
            "name": f"Carro {vehicle_id}",
            "make": "Fiat",
            "model": "Argo",
            "year": 2022,
            "license_plate": f"ABC{vehicle_id:04d}",
            "status": status,
            "rate_4h": 800,
            "rate_12h": 1800,
            "daily_rate": 1200,
        }
        values.update(overrides)
        return Vehicle(**values)

    return _make


@pytest.fixture
def make_reservation():
    def _make(
        vehicle_id,
        start,
        end,
        status=ReservationStatus.SCHEDULED,
        reservation_id=None,
        **overrides,
    ):
        return Reservation(
            id=reservation_id,
            vehicle_id=vehicle_id,
            customer_id=1,
            start_date=start,
            end_date=end,
            status=status,
            **overrides,
        )

    return _make


@pytest.fixture
def window():
    """Factory building a RentalWindow on 2024-01-01 from hour offsets."""

    def _make(start_hour, end_hour):
        base = datetime(2024, 1, 1)
        return RentalWindow(
            start=base + timedelta(hours=start_hour),
            end=base + timedelta(hours=end_hour),
        )

    return _make


@pytest.fixture
def details():
    return CustomerDetails(
        first_name="Ana",
        last_name="Souza",
        email="ana@example.com",
        phone="11999990000",
        driver_license_number="12345678900",
        address="Rua A, 10",
    )


@pytest.fixture
def stored_vehicle(connection):
    """Factory persisting vehicles through the fleet service."""
    service = FleetService(connection)
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "name": f"Carro {counter['n']}",
            "make": "Fiat",
            "model": "Argo",
            "year": 2022,
            "license_plate": f"XYZ{counter['n']:04d}",
            "rate_4h": 800,
            "rate_12h": 1800,
            "daily_rate": 1200,
        }
        values.update(overrides)
        return service.register_vehicle(**values)

    return _make
