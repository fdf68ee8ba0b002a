"""Domain dataclasses and enums."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"


class ReservationStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


BLOCKING_STATUSES = frozenset(
    {ReservationStatus.SCHEDULED, ReservationStatus.ACTIVE}
)


@dataclass(frozen=True, slots=True)
class RentalWindow:
    """Half-open rental interval ``[start, end)``."""

    start: datetime
    end: datetime

    @property
    def is_valid(self) -> bool:
        return self.end > self.start

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Return True when ``[start, end)`` intersects this window.

        Both comparisons are strict, so a booking that ends exactly when
        another begins does not overlap it.
        """
        return self.start < end and self.end > start


@dataclass(frozen=True, slots=True)
class Vehicle:
    id: Optional[int]
    name: str
    make: str
    model: str
    year: int
    license_plate: str
    status: VehicleStatus
    rate_4h: int
    rate_12h: int
    daily_rate: int
    current_mileage: int = 0
    inspection_valid_until: Optional[date] = None
    insurance_valid_until: Optional[date] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.license_plate})"


@dataclass(frozen=True, slots=True)
class Customer:
    id: Optional[int]
    first_name: str
    last_name: str
    email: Optional[str]
    phone: str
    driver_license_number: str
    address: Optional[str]
    company_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True, slots=True)
class CustomerDetails:
    """Customer data typed into a booking before it is persisted."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    driver_license_number: str = ""
    address: str = ""
    company_id: str = ""

    def missing_fields(self) -> list[str]:
        required = {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "driver_license_number": self.driver_license_number,
        }
        return [name for name, value in required.items() if not value.strip()]

    def validation_errors(self) -> list[str]:
        errors = [f"Campo obrigatório: {name}" for name in self.missing_fields()]
        if self.email.strip() and "@" not in self.email:
            errors.append("E-mail inválido.")
        return errors


@dataclass(frozen=True, slots=True)
class Reservation:
    id: Optional[int]
    vehicle_id: int
    customer_id: int
    start_date: datetime
    end_date: datetime
    status: ReservationStatus
    start_mileage: Optional[int] = None
    end_mileage: Optional[int] = None
    notes: Optional[str] = None
    total_price: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def window(self) -> RentalWindow:
        return RentalWindow(self.start_date, self.end_date)

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES
