"""Repositories for data access."""

from fleet_rental.repositories import reservation_repo
from fleet_rental.repositories.customer_repo import CustomerRepo
from fleet_rental.repositories.mappers import (
    customer_from_row,
    reservation_from_row,
    vehicle_from_row,
)
from fleet_rental.repositories.vehicle_repo import VehicleRepo

__all__ = [
    "CustomerRepo",
    "customer_from_row",
    "reservation_from_row",
    "reservation_repo",
    "vehicle_from_row",
    "VehicleRepo",
]
