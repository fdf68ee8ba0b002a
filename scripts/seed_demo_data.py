"""Seed demo data into the FleetRental SQLite database."""

from __future__ import annotations

import argparse
import random
import sys
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path

from dateutil.relativedelta import relativedelta

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from fleet_rental.db.connection import get_connection  # noqa: E402
from fleet_rental.db.migrations import apply_migrations  # noqa: E402
from fleet_rental.domain.models import CustomerDetails, RentalWindow  # noqa: E402
from fleet_rental.logging_config import configure_logging, get_logger  # noqa: E402
from fleet_rental.paths import get_db_path  # noqa: E402
from fleet_rental.services.errors import ConflictError  # noqa: E402
from fleet_rental.services.fleet_service import FleetService  # noqa: E402
from fleet_rental.services.reservation_service import ReservationService  # noqa: E402

DEFAULT_SEED = 42


@dataclass(frozen=True)
class VehicleSeed:
    name: str
    make: str
    model: str
    year: int
    plate: str
    rate_4h: int
    rate_12h: int
    daily_rate: int


VEHICLES = [
    VehicleSeed("Mobi Branco", "Fiat", "Mobi", 2023, "DEM0A01", 90, 160, 190),
    VehicleSeed("Onix Prata", "Chevrolet", "Onix", 2022, "DEM0A02", 110, 190, 230),
    VehicleSeed("HB20 Azul", "Hyundai", "HB20", 2021, "DEM0A03", 100, 180, 220),
    VehicleSeed("Corolla Preto", "Toyota", "Corolla", 2023, "DEM0A04", 180, 320, 390),
    VehicleSeed("Compass Cinza", "Jeep", "Compass", 2022, "DEM0A05", 220, 390, 470),
    VehicleSeed("Strada Vermelha", "Fiat", "Strada", 2020, "DEM0A06", 130, 230, 280),
]

FIRST_NAMES = ["Ana", "Bruno", "Carla", "Diego", "Elisa", "Felipe", "Gabriela"]
LAST_NAMES = ["Souza", "Lima", "Oliveira", "Santos", "Pereira", "Costa"]


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo data for FleetRental")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Remove o banco atual e recria antes de inserir dados.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help="Seed para aleatoriedade.",
    )
    parser.add_argument(
        "--reservations",
        type=int,
        default=25,
        help="Quantidade de reservas a tentar criar.",
    )
    return parser.parse_args()


def _random_details(rng: random.Random) -> CustomerDetails:
    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    return CustomerDetails(
        first_name=first,
        last_name=last,
        email=f"{first.lower()}.{last.lower()}@exemplo.com",
        phone=f"(11) 9{rng.randint(1000, 9999)}-{rng.randint(1000, 9999)}",
        driver_license_number=str(rng.randint(10**10, 10**11 - 1)),
    )


def _random_window(rng: random.Random, today: datetime) -> RentalWindow:
    start = today + timedelta(days=rng.randint(-5, 20), hours=rng.randint(7, 18))
    hours = rng.choice([3, 4, 8, 12, 24, 36, 48, 72, 120])
    return RentalWindow(start, start + timedelta(hours=hours))


def main() -> None:
    args = _parse_args()
    configure_logging()
    logger = get_logger("seed_demo_data")
    db_path = get_db_path()
    if args.reset and db_path.exists():
        db_path.unlink()
        logger.info("Removed database %s", db_path)

    rng = random.Random(args.seed)
    connection = get_connection(db_path)
    try:
        apply_migrations(connection)
        fleet_service = FleetService(connection)
        reservation_service = ReservationService(connection)

        existing = {vehicle.license_plate for vehicle in fleet_service.list_vehicles()}
        vehicles = []
        for seed in VEHICLES:
            if seed.plate in existing:
                continue
            vehicles.append(
                fleet_service.register_vehicle(
                    seed.name,
                    seed.make,
                    seed.model,
                    seed.year,
                    seed.plate,
                    seed.rate_4h,
                    seed.rate_12h,
                    seed.daily_rate,
                    current_mileage=rng.randint(5_000, 80_000),
                    inspection_valid_until=date.today()
                    + relativedelta(months=rng.randint(-1, 12)),
                    insurance_valid_until=date.today()
                    + relativedelta(months=rng.randint(0, 12)),
                )
            )
        if not vehicles:
            vehicles = fleet_service.list_vehicles()
        fleet_service.set_maintenance(vehicles[-1].id or 0, True)

        today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        created = conflicts = 0
        for _ in range(args.reservations):
            vehicle = rng.choice(vehicles[:-1])
            try:
                reservation_service.create_reservation(
                    vehicle.id or 0, _random_window(rng, today), _random_details(rng)
                )
            except ConflictError:
                conflicts += 1
                continue
            created += 1
        logger.info(
            "Seeded %s vehicles, %s reservations (%s conflicts skipped)",
            len(vehicles),
            created,
            conflicts,
        )
    finally:
        connection.close()


if __name__ == "__main__":
    main()
