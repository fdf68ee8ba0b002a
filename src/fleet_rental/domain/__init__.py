"""Domain models for FleetRental."""

from fleet_rental.domain.models import (
    BLOCKING_STATUSES,
    Customer,
    CustomerDetails,
    RentalWindow,
    Reservation,
    ReservationStatus,
    Vehicle,
    VehicleStatus,
)

__all__ = [
    "BLOCKING_STATUSES",
    "Customer",
    "CustomerDetails",
    "RentalWindow",
    "Reservation",
    "ReservationStatus",
    "Vehicle",
    "VehicleStatus",
]
