"""Availability and pricing rules for vehicle bookings.

Everything in this module is a pure function of its arguments: the fleet and
reservation snapshots are only read, never mutated, so the functions are safe
to call on every edit of the booking form.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from fleet_rental.config import (
    EXTRA_KM_RATE,
    HOURS_PER_RENTAL_DAY,
    KM_ALLOWANCE_PER_DAY,
    PREPARATION_BUFFER_MINUTES,
    RATE_12H_MAX_HOURS,
    RATE_4H_MAX_HOURS,
)
from fleet_rental.domain.models import (
    RentalWindow,
    Reservation,
    Vehicle,
    VehicleStatus,
)

_MICROSECOND = timedelta(microseconds=1)
_HOUR_US = 3600 * 1_000_000
RATE_4H_LIMIT_US = RATE_4H_MAX_HOURS * _HOUR_US
RATE_12H_LIMIT_US = RATE_12H_MAX_HOURS * _HOUR_US
RENTAL_DAY_US = HOURS_PER_RENTAL_DAY * _HOUR_US

PREPARATION_BUFFER = timedelta(minutes=PREPARATION_BUFFER_MINUTES)


@dataclass(frozen=True, slots=True)
class Settlement:
    """Amounts due when a rental is closed."""

    base_price: int
    rental_days: int
    km_driven: int
    km_allowance: int
    km_over: int
    surcharge: int

    @property
    def total(self) -> int:
        return self.base_price + self.surcharge


def _duration_us(window: RentalWindow) -> int:
    return window.duration // _MICROSECOND


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def is_bookable(vehicle: Vehicle) -> bool:
    return vehicle.status != VehicleStatus.MAINTENANCE


def conflicting_reservations(
    vehicle_id: int,
    reservations: Iterable[Reservation],
    window: RentalWindow,
) -> list[Reservation]:
    """Return scheduled/active reservations of a vehicle overlapping ``window``."""
    return [
        reservation
        for reservation in reservations
        if reservation.vehicle_id == vehicle_id
        and reservation.is_blocking
        and window.overlaps(reservation.start_date, reservation.end_date)
    ]


@dataclass(frozen=True, slots=True)
class BusyVehicle:
    """A bookable vehicle taken during the window, with its next free instant."""

    vehicle: Vehicle
    free_at: datetime


def busy_vehicles(
    fleet: Iterable[Vehicle],
    reservations: Iterable[Reservation],
    window: RentalWindow,
) -> list[BusyVehicle]:
    """Vehicles out of service only because of overlapping reservations.

    ``free_at`` follows the reservations chained from the first overlap and
    includes the preparation buffer. Maintenance vehicles are left out.
    """
    if not window.is_valid:
        return []
    reservations = tuple(reservations)
    busy = []
    for vehicle in fleet:
        if not is_bookable(vehicle) or vehicle.id is None:
            continue
        conflicts = conflicting_reservations(vehicle.id, reservations, window)
        if not conflicts:
            continue
        first_start = min(reservation.start_date for reservation in conflicts)
        free_at = next_free_at(vehicle, reservations, max(window.start, first_start))
        if free_at is not None:
            busy.append(BusyVehicle(vehicle=vehicle, free_at=free_at))
    return busy


def available_vehicles(
    fleet: Iterable[Vehicle],
    reservations: Iterable[Reservation],
    window: RentalWindow,
) -> list[Vehicle]:
    """Return the vehicles free for the whole window, in fleet order.

    An invalid window means the query is not complete yet and yields an
    empty list.
    """
    if not window.is_valid:
        return []
    busy_ids = {
        reservation.vehicle_id
        for reservation in reservations
        if reservation.is_blocking
        and window.overlaps(reservation.start_date, reservation.end_date)
    }
    return [
        vehicle
        for vehicle in fleet
        if is_bookable(vehicle) and vehicle.id not in busy_ids
    ]


def next_free_at(
    vehicle: Vehicle,
    reservations: Iterable[Reservation],
    at: datetime,
    buffer: timedelta = PREPARATION_BUFFER,
) -> Optional[datetime]:
    """Return the first instant from ``at`` on when the vehicle can be handed out.

    Back-to-back reservations are followed until a gap opens; the preparation
    buffer is added after each one. Vehicles in maintenance have no answer.
    """
    if not is_bookable(vehicle):
        return None
    blocking = sorted(
        (
            reservation
            for reservation in reservations
            if reservation.vehicle_id == vehicle.id and reservation.is_blocking
        ),
        key=lambda reservation: reservation.start_date,
    )
    cursor = at
    moved = True
    while moved:
        moved = False
        for reservation in blocking:
            if reservation.start_date <= cursor < reservation.end_date:
                cursor = reservation.end_date + buffer
                moved = True
    return cursor


def calculate_price(vehicle: Vehicle, window: RentalWindow) -> Optional[int]:
    """Price a rental window using the vehicle's rate tiers.

    Up to 4 hours costs ``rate_4h``, up to 12 hours ``rate_12h``; longer
    rentals are billed per started 24-hour day at ``daily_rate``. Returns
    None for an invalid window, which is not the same as a free rental.
    """
    if not window.is_valid:
        return None
    duration = _duration_us(window)
    if duration <= RATE_4H_LIMIT_US:
        return vehicle.rate_4h
    if duration <= RATE_12H_LIMIT_US:
        return vehicle.rate_12h
    return _ceil_div(duration, RENTAL_DAY_US) * vehicle.daily_rate


def rental_days(window: RentalWindow) -> int:
    """Number of started rental days, never less than one."""
    if not window.is_valid:
        return 1
    return max(1, _ceil_div(_duration_us(window), RENTAL_DAY_US))


def mileage_surcharge(
    window: RentalWindow,
    start_mileage: Optional[int],
    end_mileage: int,
) -> tuple[int, int, int, int]:
    """Return ``(km_driven, km_allowance, km_over, surcharge)``."""
    start_km = start_mileage or 0
    km_driven = end_mileage - start_km if end_mileage > start_km else 0
    km_allowance = rental_days(window) * KM_ALLOWANCE_PER_DAY
    km_over = max(0, km_driven - km_allowance)
    return km_driven, km_allowance, km_over, km_over * EXTRA_KM_RATE


def settle_rental(
    vehicle: Vehicle,
    window: RentalWindow,
    start_mileage: Optional[int],
    end_mileage: int,
) -> Settlement:
    base_price = calculate_price(vehicle, window) or 0
    km_driven, km_allowance, km_over, surcharge = mileage_surcharge(
        window, start_mileage, end_mileage
    )
    return Settlement(
        base_price=base_price,
        rental_days=rental_days(window),
        km_driven=km_driven,
        km_allowance=km_allowance,
        km_over=km_over,
        surcharge=surcharge,
    )
