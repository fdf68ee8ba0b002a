"""Tests for the SQLite-backed reservation service."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from fleet_rental.db.connection import get_connection
from fleet_rental.db.migrations import apply_migrations
from fleet_rental.domain.models import (
    CustomerDetails,
    RentalWindow,
    ReservationStatus,
    VehicleStatus,
)
from fleet_rental.repositories import CustomerRepo, VehicleRepo
from fleet_rental.services.booking_session import (
    BookingSession,
    Confirmed,
    SelectingVehicle,
)
from fleet_rental.services.errors import (
    ConflictError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from fleet_rental.services.fleet_service import FleetService
from fleet_rental.services.reservation_service import ReservationService
from fleet_rental.services.snapshot_service import SnapshotStore


@pytest.fixture
def service(connection):
    return ReservationService(connection)


class TestCreateReservation:
    """Tests for create_reservation."""

    def test_creates_scheduled_reservation(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        reservation = service.create_reservation(vehicle.id, window(10, 14), details)
        assert reservation.id is not None
        assert reservation.status == ReservationStatus.SCHEDULED
        assert reservation.window == window(10, 14)
        assert service.fetch_reservations() == [reservation]

    def test_overlap_raises_conflict(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        service.create_reservation(vehicle.id, window(10, 14), details)
        with pytest.raises(ConflictError) as excinfo:
            service.create_reservation(vehicle.id, window(13, 15), details)
        assert excinfo.value.vehicle_id == vehicle.id
        assert len(service.fetch_reservations()) == 1

    def test_adjacent_windows_are_accepted(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        service.create_reservation(vehicle.id, window(10, 14), details)
        service.create_reservation(vehicle.id, window(14, 18), details)
        service.create_reservation(vehicle.id, window(6, 10), details)
        assert len(service.fetch_reservations()) == 3

    def test_maintenance_vehicle_is_rejected(
        self, connection, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle()
        FleetService(connection).set_maintenance(vehicle.id, True)
        with pytest.raises(ValidationError):
            service.create_reservation(vehicle.id, window(10, 14), details)

    def test_unknown_vehicle(self, service, details, window):
        with pytest.raises(NotFoundError):
            service.create_reservation(999, window(10, 14), details)

    def test_invalid_window(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        with pytest.raises(ValidationError):
            service.create_reservation(vehicle.id, window(14, 14), details)

    def test_timezone_aware_window_is_rejected(
        self, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle()
        span = window(10, 14)
        aware = RentalWindow(
            span.start.replace(tzinfo=timezone.utc),
            span.end.replace(tzinfo=timezone.utc),
        )
        with pytest.raises(ValidationError, match="fuso"):
            service.create_reservation(vehicle.id, aware, details)
        assert service.fetch_reservations() == []

    def test_sub_second_window_is_rejected(
        self, service, stored_vehicle, details
    ):
        vehicle = stored_vehicle()
        start = datetime(2024, 1, 1, 10)
        tiny = RentalWindow(start, start + timedelta(microseconds=500))
        with pytest.raises(ValidationError, match="segundo"):
            service.create_reservation(vehicle.id, tiny, details)
        assert service.fetch_reservations() == []

    def test_missing_customer_fields(self, service, stored_vehicle, window):
        vehicle = stored_vehicle()
        with pytest.raises(ValidationError):
            service.create_reservation(
                vehicle.id, window(10, 14), CustomerDetails(first_name="Ana")
            )

    def test_reuses_customer_by_driver_license(
        self, connection, service, stored_vehicle, details, window
    ):
        first, second = stored_vehicle(), stored_vehicle()
        one = service.create_reservation(first.id, window(10, 14), details)
        two = service.create_reservation(second.id, window(10, 14), details)
        assert one.customer_id == two.customer_id
        customer = CustomerRepo(connection).get_by_id(one.customer_id)
        assert customer.full_name == "Ana Souza"

    def test_cancelled_reservation_frees_window(
        self, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle()
        reservation = service.create_reservation(vehicle.id, window(10, 14), details)
        service.cancel_reservation(reservation.id)
        service.create_reservation(vehicle.id, window(10, 14), details)
        assert [r.status for r in service.fetch_reservations(active_only=False)] == [
            ReservationStatus.CANCELLED,
            ReservationStatus.SCHEDULED,
        ]

    def test_second_connection_sees_conflict(self, tmp_path, details, window):
        """Two sessions working off the same stale list; only one can book."""
        db_path = tmp_path / "fleet.db"
        first_conn = get_connection(db_path)
        apply_migrations(first_conn)
        second_conn = get_connection(db_path)
        try:
            vehicle = FleetService(first_conn).register_vehicle(
                "Carro", "Fiat", "Argo", 2022, "AAA0001", 800, 1800, 1200
            )
            first = ReservationService(first_conn)
            second = ReservationService(second_conn)
            first.create_reservation(vehicle.id, window(10, 14), details)
            with pytest.raises(ConflictError):
                second.create_reservation(vehicle.id, window(12, 16), details)
        finally:
            first_conn.close()
            second_conn.close()

    def test_closed_connection_is_transport_error(self, connection):
        service = ReservationService(connection)
        connection.close()
        with pytest.raises(TransportError):
            service.fetch_fleet()


class TestLifecycle:
    """Check-in, check-out and cancellation."""

    def test_check_in_marks_vehicle_rented(
        self, connection, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle(current_mileage=1000)
        reservation = service.create_reservation(vehicle.id, window(0, 48), details)
        active = service.activate_reservation(reservation.id)
        assert active.status == ReservationStatus.ACTIVE
        assert active.start_mileage == 1000
        assert VehicleRepo(connection).get_by_id(vehicle.id).status == VehicleStatus.RENTED

    def test_check_in_requires_scheduled(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        reservation = service.create_reservation(vehicle.id, window(0, 4), details)
        service.activate_reservation(reservation.id, 10)
        with pytest.raises(ValidationError):
            service.activate_reservation(reservation.id, 10)

    def test_check_out_settles_with_surcharge(
        self, connection, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle(current_mileage=1000)
        reservation = service.create_reservation(vehicle.id, window(0, 48), details)
        service.activate_reservation(reservation.id, 1000)
        settlement = service.complete_reservation(reservation.id, 1650, notes="ok")
        assert settlement.base_price == 2400
        assert settlement.km_over == 50
        assert settlement.total == 2550
        stored = service.fetch_reservations(active_only=False)[0]
        assert stored.status == ReservationStatus.COMPLETED
        assert stored.total_price == 2550
        assert stored.end_mileage == 1650
        assert stored.notes == "ok"
        returned = VehicleRepo(connection).get_by_id(vehicle.id)
        assert returned.status == VehicleStatus.AVAILABLE
        assert returned.current_mileage == 1650

    def test_check_out_requires_active(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        reservation = service.create_reservation(vehicle.id, window(0, 4), details)
        with pytest.raises(ValidationError):
            service.complete_reservation(reservation.id, 100)

    def test_completed_reservation_does_not_block(
        self, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle()
        reservation = service.create_reservation(vehicle.id, window(0, 4), details)
        service.activate_reservation(reservation.id, 0)
        service.complete_reservation(reservation.id, 10)
        assert service.fetch_reservations() == []
        service.create_reservation(vehicle.id, window(0, 4), details)

    def test_cancel_active_frees_vehicle(
        self, connection, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle()
        reservation = service.create_reservation(vehicle.id, window(0, 4), details)
        service.activate_reservation(reservation.id, 0)
        service.cancel_reservation(reservation.id)
        assert VehicleRepo(connection).get_by_id(vehicle.id).status == VehicleStatus.AVAILABLE

    def test_cancel_twice_is_rejected(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        reservation = service.create_reservation(vehicle.id, window(0, 4), details)
        service.cancel_reservation(reservation.id)
        with pytest.raises(ValidationError):
            service.cancel_reservation(reservation.id)

    def test_unknown_reservation(self, service):
        with pytest.raises(NotFoundError):
            service.cancel_reservation(42)


class TestBookingFlow:
    """Booking session against the real store."""

    def test_two_vehicles_one_in_maintenance(self, connection, service, stored_vehicle):
        working = stored_vehicle()
        broken = stored_vehicle()
        FleetService(connection).set_maintenance(broken.id, True)
        store = SnapshotStore()
        token = store.begin_refresh()
        snapshot = store.complete_refresh(
            token, service.fetch_fleet(), service.fetch_reservations()
        )
        session = BookingSession(snapshot)
        start = datetime(2024, 3, 1, 9)
        view = session.change_window(RentalWindow(start, start + timedelta(hours=30)))
        assert [vehicle.id for vehicle in view.state.vehicles] == [working.id]

    def test_stale_list_hits_authoritative_check(
        self, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle()
        store = SnapshotStore()
        store.replace(service.fetch_fleet(), service.fetch_reservations())
        session = BookingSession(store.snapshot)
        session.change_window(window(10, 14))
        session.select_vehicle(vehicle.id)
        session.enter_details(details)

        service.create_reservation(vehicle.id, window(12, 16), details)

        view = session.submit(service)
        assert view.failure is not None and view.failure.conflict
        assert view.state.vehicles == ()
        session.refresh(
            store.replace(service.fetch_fleet(), service.fetch_reservations())
        )
        assert session.state.vehicles == ()

    def test_submit_through_store(self, service, stored_vehicle, details, window):
        vehicle = stored_vehicle()
        session = BookingSession(
            SnapshotStore().replace(service.fetch_fleet(), service.fetch_reservations())
        )
        session.change_window(window(10, 14))
        session.select_vehicle(vehicle.id)
        session.enter_details(replace(details, email=""))
        view = session.submit(service)
        assert isinstance(view.state, Confirmed)
        assert service.fetch_reservations()[0].id == view.state.reservation.id

    def test_vehicle_removed_after_selection(
        self, connection, service, stored_vehicle, details, window
    ):
        vehicle = stored_vehicle()
        spare = stored_vehicle()
        session = BookingSession(
            SnapshotStore().replace(service.fetch_fleet(), service.fetch_reservations())
        )
        session.change_window(window(10, 14))
        session.select_vehicle(vehicle.id)
        session.enter_details(details)
        FleetService(connection).remove_vehicle(vehicle.id)

        view = session.submit(service)
        assert isinstance(view.state, SelectingVehicle)
        assert [v.id for v in view.state.vehicles] == [spare.id]
        assert service.fetch_reservations() == []
        view = session.change_window(window(15, 18))
        assert isinstance(view.state, SelectingVehicle)
