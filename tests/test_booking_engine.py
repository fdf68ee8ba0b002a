"""Tests for availability filtering and pricing."""

from datetime import datetime, timedelta

import pytest

from fleet_rental.domain.models import RentalWindow, ReservationStatus, VehicleStatus
from fleet_rental.services.booking_engine import (
    PREPARATION_BUFFER,
    available_vehicles,
    busy_vehicles,
    calculate_price,
    conflicting_reservations,
    mileage_surcharge,
    next_free_at,
    rental_days,
    settle_rental,
)

JAN_1 = datetime(2024, 1, 1)


def at(hour, minute=0):
    return JAN_1 + timedelta(hours=hour, minutes=minute)


class TestInvalidWindow:
    """Windows whose end is not after their start."""

    @pytest.mark.parametrize("start_hour,end_hour", [(10, 10), (14, 10)])
    def test_no_vehicles_available(self, make_vehicle, window, start_hour, end_hour):
        fleet = [make_vehicle(1), make_vehicle(2)]
        assert available_vehicles(fleet, [], window(start_hour, end_hour)) == []

    @pytest.mark.parametrize("start_hour,end_hour", [(10, 10), (14, 10)])
    def test_price_is_none(self, make_vehicle, window, start_hour, end_hour):
        assert calculate_price(make_vehicle(), window(start_hour, end_hour)) is None

    def test_zero_price_is_not_none(self, make_vehicle, window):
        """A free vehicle quotes 0, which differs from an invalid window."""
        vehicle = make_vehicle(rate_4h=0)
        assert calculate_price(vehicle, window(10, 12)) == 0


class TestAvailability:
    """Tests for available_vehicles."""

    def test_maintenance_never_available(self, make_vehicle, window):
        fleet = [make_vehicle(1, status=VehicleStatus.MAINTENANCE)]
        assert available_vehicles(fleet, [], window(10, 14)) == []

    def test_rented_status_does_not_exclude_by_itself(self, make_vehicle, window):
        """Only reservations decide conflicts for non-maintenance vehicles."""
        vehicle = make_vehicle(1, status=VehicleStatus.RENTED)
        assert available_vehicles([vehicle], [], window(10, 14)) == [vehicle]

    def test_adjacent_reservation_does_not_conflict(
        self, make_vehicle, make_reservation, window
    ):
        vehicle = make_vehicle(1)
        reservations = [make_reservation(1, at(10), at(14))]
        assert available_vehicles([vehicle], reservations, window(14, 18)) == [vehicle]

    def test_reservation_ending_at_window_start_from_other_side(
        self, make_vehicle, make_reservation, window
    ):
        vehicle = make_vehicle(1)
        reservations = [make_reservation(1, at(14), at(18))]
        assert available_vehicles([vehicle], reservations, window(10, 14)) == [vehicle]

    def test_overlapping_reservation_conflicts(
        self, make_vehicle, make_reservation, window
    ):
        vehicle = make_vehicle(1)
        reservations = [make_reservation(1, at(10), at(14))]
        assert available_vehicles([vehicle], reservations, window(13, 15)) == []

    def test_window_containing_reservation_conflicts(
        self, make_vehicle, make_reservation, window
    ):
        reservations = [make_reservation(1, at(11), at(12))]
        assert available_vehicles([make_vehicle(1)], reservations, window(10, 14)) == []

    def test_active_reservation_blocks(self, make_vehicle, make_reservation, window):
        reservations = [
            make_reservation(1, at(10), at(14), status=ReservationStatus.ACTIVE)
        ]
        assert available_vehicles([make_vehicle(1)], reservations, window(12, 16)) == []

    @pytest.mark.parametrize(
        "status", [ReservationStatus.COMPLETED, ReservationStatus.CANCELLED]
    )
    def test_closed_reservations_do_not_block(
        self, make_vehicle, make_reservation, window, status
    ):
        vehicle = make_vehicle(1)
        reservations = [make_reservation(1, at(10), at(14), status=status)]
        assert available_vehicles([vehicle], reservations, window(12, 16)) == [vehicle]

    def test_reservation_of_other_vehicle_does_not_block(
        self, make_vehicle, make_reservation, window
    ):
        first, second = make_vehicle(1), make_vehicle(2)
        reservations = [make_reservation(2, at(10), at(14))]
        assert available_vehicles([first, second], reservations, window(12, 16)) == [
            first
        ]

    def test_preserves_fleet_order(self, make_vehicle, window):
        fleet = [make_vehicle(3), make_vehicle(1), make_vehicle(2)]
        result = available_vehicles(fleet, [], window(10, 14))
        assert [vehicle.id for vehicle in result] == [3, 1, 2]

    def test_fleet_with_one_vehicle_in_maintenance(self, make_vehicle, window):
        """Two vehicles, one in maintenance, no reservations."""
        working = make_vehicle(1)
        fleet = [working, make_vehicle(2, status=VehicleStatus.MAINTENANCE)]
        for start, end in [(0, 1), (8, 20), (0, 24 * 7)]:
            assert available_vehicles(fleet, [], window(start, end)) == [working]

    def test_is_idempotent(self, make_vehicle, make_reservation, window):
        fleet = (make_vehicle(1), make_vehicle(2))
        reservations = (make_reservation(1, at(10), at(14)),)
        first = available_vehicles(fleet, reservations, window(12, 16))
        second = available_vehicles(fleet, reservations, window(12, 16))
        assert first == second == [fleet[1]]

    def test_accepts_generators(self, make_vehicle, make_reservation, window):
        reservations = (r for r in [make_reservation(1, at(10), at(14))])
        fleet = (v for v in [make_vehicle(1), make_vehicle(2)])
        result = available_vehicles(fleet, reservations, window(12, 16))
        assert [vehicle.id for vehicle in result] == [2]


class TestConflictingReservations:
    """Tests for conflicting_reservations."""

    def test_returns_only_blocking_overlaps_of_vehicle(
        self, make_reservation, window
    ):
        overlapping = make_reservation(1, at(10), at(14), reservation_id=1)
        reservations = [
            overlapping,
            make_reservation(1, at(14), at(18), reservation_id=2),
            make_reservation(
                1, at(9), at(15), status=ReservationStatus.CANCELLED, reservation_id=3
            ),
            make_reservation(2, at(10), at(14), reservation_id=4),
        ]
        assert conflicting_reservations(1, reservations, window(12, 14)) == [
            overlapping
        ]


class TestCalculatePrice:
    """Rate tiers for 800 / 1800 / 1200 per day."""

    @pytest.mark.parametrize(
        "hours,expected",
        [
            (3, 800),
            (4, 800),
            (10, 1800),
            (12, 1800),
            (13, 1200),
            (24, 1200),
            (25, 2400),
            (48, 2400),
            (49, 3600),
        ],
    )
    def test_tiers(self, make_vehicle, window, hours, expected):
        assert calculate_price(make_vehicle(), window(0, hours)) == expected

    def test_one_microsecond_over_four_hours(self, make_vehicle):
        window = RentalWindow(at(0), at(4) + timedelta(microseconds=1))
        assert calculate_price(make_vehicle(), window) == 1800

    def test_one_microsecond_over_twelve_hours(self, make_vehicle):
        window = RentalWindow(at(0), at(12) + timedelta(microseconds=1))
        assert calculate_price(make_vehicle(), window) == 1200

    def test_exact_two_days_does_not_round_up(self, make_vehicle):
        window = RentalWindow(JAN_1, JAN_1 + timedelta(days=2))
        assert calculate_price(make_vehicle(), window) == 2 * 1200

    def test_one_second_over_two_days_bills_third_day(self, make_vehicle):
        window = RentalWindow(JAN_1, JAN_1 + timedelta(days=2, seconds=1))
        assert calculate_price(make_vehicle(), window) == 3 * 1200

    def test_long_rental_has_no_float_drift(self, make_vehicle):
        window = RentalWindow(JAN_1, JAN_1 + timedelta(days=365))
        assert calculate_price(make_vehicle(), window) == 365 * 1200

    def test_is_idempotent(self, make_vehicle, window):
        vehicle = make_vehicle()
        assert calculate_price(vehicle, window(0, 25)) == calculate_price(
            vehicle, window(0, 25)
        )


class TestNextFreeAt:
    """Tests for next_free_at."""

    def test_free_vehicle_returns_requested_instant(self, make_vehicle):
        assert next_free_at(make_vehicle(1), [], at(10)) == at(10)

    def test_maintenance_returns_none(self, make_vehicle):
        vehicle = make_vehicle(1, status=VehicleStatus.MAINTENANCE)
        assert next_free_at(vehicle, [], at(10)) is None

    def test_busy_vehicle_returns_end_plus_buffer(self, make_vehicle, make_reservation):
        reservations = [make_reservation(1, at(8), at(12))]
        assert next_free_at(make_vehicle(1), reservations, at(10)) == (
            at(12) + PREPARATION_BUFFER
        )

    def test_follows_back_to_back_reservations(self, make_vehicle, make_reservation):
        reservations = [
            make_reservation(1, at(12, 10), at(16)),
            make_reservation(1, at(8), at(12)),
        ]
        assert next_free_at(make_vehicle(1), reservations, at(10)) == at(16, 20)

    def test_cancelled_reservation_is_ignored(self, make_vehicle, make_reservation):
        reservations = [
            make_reservation(1, at(8), at(12), status=ReservationStatus.CANCELLED)
        ]
        assert next_free_at(make_vehicle(1), reservations, at(10)) == at(10)


class TestBusyVehicles:
    """Tests for busy_vehicles."""

    def test_lists_only_vehicles_taken_by_reservations(
        self, make_vehicle, make_reservation
    ):
        fleet = [
            make_vehicle(1),
            make_vehicle(2),
            make_vehicle(3, status=VehicleStatus.MAINTENANCE),
        ]
        reservations = [
            make_reservation(1, at(8), at(12)),
            make_reservation(3, at(8), at(12)),
        ]
        busy = busy_vehicles(fleet, reservations, RentalWindow(at(10), at(14)))
        assert [(entry.vehicle.id, entry.free_at) for entry in busy] == [
            (1, at(12) + PREPARATION_BUFFER)
        ]

    def test_reservation_inside_window_frees_after_its_end(
        self, make_vehicle, make_reservation
    ):
        reservations = [make_reservation(1, at(15), at(18))]
        busy = busy_vehicles(
            [make_vehicle(1)], reservations, RentalWindow(at(10), at(20))
        )
        assert busy[0].free_at == at(18, 20)

    def test_adjacent_reservation_is_not_busy(self, make_vehicle, make_reservation):
        reservations = [make_reservation(1, at(8), at(10))]
        window = RentalWindow(at(10), at(14))
        assert busy_vehicles([make_vehicle(1)], reservations, window) == []

    def test_invalid_window(self, make_vehicle, make_reservation):
        reservations = [make_reservation(1, at(8), at(12))]
        window = RentalWindow(at(14), at(10))
        assert busy_vehicles([make_vehicle(1)], reservations, window) == []


class TestSettlement:
    """Mileage allowance and surcharge at check-out."""

    def test_rental_days_minimum_one(self, window):
        assert rental_days(window(0, 3)) == 1

    def test_rental_days_rounds_up(self, window):
        assert rental_days(window(0, 25)) == 2

    def test_within_allowance_has_no_surcharge(self, window):
        assert mileage_surcharge(window(0, 24), 1000, 1300) == (300, 300, 0, 0)

    def test_over_allowance_is_charged_per_km(self, window):
        assert mileage_surcharge(window(0, 48), 1000, 1650) == (650, 600, 50, 150)

    def test_odometer_going_backwards_counts_zero(self, window):
        assert mileage_surcharge(window(0, 24), 1000, 900) == (0, 300, 0, 0)

    def test_settle_rental_totals_base_and_surcharge(self, make_vehicle, window):
        settlement = settle_rental(make_vehicle(), window(0, 25), 0, 700)
        assert settlement.base_price == 2400
        assert settlement.rental_days == 2
        assert settlement.km_over == 100
        assert settlement.surcharge == 300
        assert settlement.total == 2700
