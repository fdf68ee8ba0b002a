"""Application configuration."""

from __future__ import annotations

from dataclasses import dataclass

from fleet_rental.version import __app_name__, __company__

APP_NAME = __app_name__
APP_DATA_DIRNAME = "FleetRental"
DB_FILENAME = "fleet_rental.db"
LOGS_DIRNAME = "logs"
LOG_FILENAME = "app.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3
LOG_LEVEL_ENV = "FLEET_RENTAL_LOG_LEVEL"
DB_BUSY_TIMEOUT_SECONDS = 5.0
CONFIG_FILENAME = "config.json"

# Booking engine
AVAILABILITY_DEBOUNCE_MS = 500
PREPARATION_BUFFER_MINUTES = 20
RATE_4H_MAX_HOURS = 4
RATE_12H_MAX_HOURS = 12
HOURS_PER_RENTAL_DAY = 24

# Check-out settlement
KM_ALLOWANCE_PER_DAY = 300
EXTRA_KM_RATE = 3

COMPLIANCE_WARNING_DAYS = 30


@dataclass(frozen=True)
class AppConfig:
    """Static configuration values for FleetRental."""

    app_name: str = APP_NAME
    organization_name: str = __company__
    organization_domain: str = "gestaointeligente.local"
