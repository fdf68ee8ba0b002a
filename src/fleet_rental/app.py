"""Application entry point."""

from __future__ import annotations

import sys

from PySide6 import QtWidgets

from fleet_rental.config import AppConfig
from fleet_rental.db.connection import get_connection
from fleet_rental.db.migrations import apply_migrations
from fleet_rental.logging_config import configure_logging, get_logger
from fleet_rental.paths import get_config_path, get_db_path, get_logs_dir
from fleet_rental.services.fleet_service import FleetService
from fleet_rental.services.reservation_service import ReservationService
from fleet_rental.services.snapshot_service import SnapshotStore
from fleet_rental.ui.app_services import AppServices
from fleet_rental.ui.data_bus import DataEventBus
from fleet_rental.ui.main_window import MainWindow
from fleet_rental.utils.theme import ThemeManager


def main() -> int:
    """Start the FleetRental application."""
    configure_logging(get_logs_dir())
    connection = get_connection(get_db_path())
    apply_migrations(connection)

    config = AppConfig()
    logger = get_logger(__name__)
    logger.info("Starting %s", config.app_name)

    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName(config.app_name)
    app.setOrganizationName(config.organization_name)
    app.setOrganizationDomain(config.organization_domain)

    services = AppServices(
        connection=connection,
        data_bus=DataEventBus(),
        fleet_service=FleetService(connection),
        reservation_service=ReservationService(connection),
        snapshot_store=SnapshotStore(),
        theme_manager=ThemeManager(app, get_config_path()),
    )

    window = MainWindow(services)
    app.aboutToQuit.connect(connection.close)
    window.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
