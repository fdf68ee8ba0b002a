"""Service container for the UI layer."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from fleet_rental.services.fleet_service import FleetService
from fleet_rental.services.reservation_service import ReservationService
from fleet_rental.services.snapshot_service import SnapshotStore
from fleet_rental.ui.data_bus import DataEventBus
from fleet_rental.utils.theme import ThemeManager


@dataclass(frozen=True)
class AppServices:
    """Shared services for dependency injection."""

    connection: sqlite3.Connection
    data_bus: DataEventBus
    fleet_service: FleetService
    reservation_service: ReservationService
    snapshot_store: SnapshotStore
    theme_manager: ThemeManager
