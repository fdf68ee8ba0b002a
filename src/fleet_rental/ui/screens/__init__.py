"""Screen widgets for the FleetRental UI."""

from fleet_rental.ui.screens.booking_screen import BookingScreen
from fleet_rental.ui.screens.fleet_screen import FleetScreen
from fleet_rental.ui.screens.reservations_screen import ReservationsScreen

__all__ = [
    "BookingScreen",
    "FleetScreen",
    "ReservationsScreen",
]
