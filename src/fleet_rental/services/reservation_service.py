"""Reservation service for business rules."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

from fleet_rental.db.connection import transaction, write_lock
from fleet_rental.domain.models import (
    CustomerDetails,
    RentalWindow,
    Reservation,
    ReservationStatus,
    Vehicle,
    VehicleStatus,
)
from fleet_rental.logging_config import get_logger
from fleet_rental.repositories import CustomerRepo, VehicleRepo, reservation_repo
from fleet_rental.services.booking_engine import Settlement, settle_rental
from fleet_rental.services.errors import (
    ConflictError,
    NotFoundError,
    TransportError,
    ValidationError,
)


def _check_storable(window: RentalWindow) -> None:
    # Stored timestamps are naive local time at whole seconds.
    if window.start.tzinfo is not None or window.end.tzinfo is not None:
        raise ValidationError(
            "Informe o período em horário local, sem fuso horário."
        )
    if window.start.microsecond or window.end.microsecond:
        raise ValidationError(
            "O período deve ser informado sem frações de segundo."
        )


class ReservationService:
    """Data-store side of the booking flow plus the reservation lifecycle."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._vehicle_repo = VehicleRepo(connection)
        self._customer_repo = CustomerRepo(connection)
        self._logger = get_logger(self.__class__.__name__)

    @contextmanager
    def _store_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.IntegrityError as exc:
            self._logger.warning("Integrity error while %s: %s", action, exc)
            raise ValidationError(
                "Os dados informados violam uma regra do cadastro."
            ) from exc
        except sqlite3.Error as exc:
            self._logger.exception("Database error while %s", action)
            raise TransportError(
                "Falha de comunicação com o banco de dados."
            ) from exc

    def _get_reservation(self, reservation_id: int) -> Reservation:
        reservation = reservation_repo.get_reservation(
            reservation_id, connection=self._connection
        )
        if not reservation:
            raise NotFoundError(f"Reserva {reservation_id} não encontrada.")
        return reservation

    def _get_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = self._vehicle_repo.get_by_id(vehicle_id)
        if not vehicle:
            raise NotFoundError(f"Veículo {vehicle_id} não encontrado.")
        return vehicle

    def fetch_fleet(self) -> list[Vehicle]:
        with self._store_errors("fetching fleet"):
            return self._vehicle_repo.list_all()

    def fetch_reservations(self, active_only: bool = True) -> list[Reservation]:
        with self._store_errors("fetching reservations"):
            return reservation_repo.list_reservations(
                active_only=active_only, connection=self._connection
            )

    def create_reservation(
        self,
        vehicle_id: int,
        window: RentalWindow,
        details: CustomerDetails,
        notes: Optional[str] = None,
    ) -> Reservation:
        """Create a scheduled reservation after the authoritative overlap check.

        The check and the insert share one write transaction, so two sessions
        racing for the same vehicle cannot both succeed.
        """
        if not window.is_valid:
            raise ValidationError(
                "A data de término deve ser posterior à data de início."
            )
        _check_storable(window)
        errors = details.validation_errors()
        if errors:
            raise ValidationError("\n".join(errors))
        with self._store_errors("creating reservation"):
            with write_lock(self._connection):
                vehicle = self._get_vehicle(vehicle_id)
                if vehicle.status == VehicleStatus.MAINTENANCE:
                    raise ValidationError(
                        f"O veículo {vehicle.display_name} está em manutenção."
                    )
                conflicts = reservation_repo.find_conflicts(
                    vehicle_id,
                    window.start,
                    window.end,
                    connection=self._connection,
                )
                if conflicts:
                    raise ConflictError(
                        f"O veículo {vehicle.display_name} já está reservado "
                        "neste período.",
                        vehicle_id=vehicle_id,
                    )
                customer = self._customer_repo.find_by_license(
                    details.driver_license_number
                )
                if customer is None:
                    customer = self._customer_repo.insert(details)
                reservation = reservation_repo.insert_reservation(
                    vehicle_id,
                    customer.id or 0,
                    window.start,
                    window.end,
                    notes=notes,
                    connection=self._connection,
                )
        self._logger.info(
            "Reservation %s created for vehicle_id=%s customer_id=%s",
            reservation.id,
            vehicle_id,
            reservation.customer_id,
        )
        return reservation

    def activate_reservation(
        self, reservation_id: int, start_mileage: Optional[int] = None
    ) -> Reservation:
        """Check-in: hand the vehicle to the customer."""
        with self._store_errors("activating reservation"):
            reservation = self._get_reservation(reservation_id)
            if reservation.status != ReservationStatus.SCHEDULED:
                raise ValidationError(
                    "Somente reservas agendadas podem ser iniciadas."
                )
            vehicle = self._get_vehicle(reservation.vehicle_id)
            if start_mileage is None:
                start_mileage = vehicle.current_mileage
            if start_mileage < 0:
                raise ValidationError("A quilometragem não pode ser negativa.")
            with transaction(self._connection):
                reservation_repo.update_reservation(
                    reservation_id,
                    ReservationStatus.ACTIVE,
                    start_mileage=start_mileage,
                    connection=self._connection,
                )
                self._vehicle_repo.set_status(vehicle.id or 0, VehicleStatus.RENTED)
            self._logger.info(
                "Reservation %s activated at %s km", reservation_id, start_mileage
            )
            return self._get_reservation(reservation_id)

    def complete_reservation(
        self,
        reservation_id: int,
        end_mileage: int,
        notes: Optional[str] = None,
    ) -> Settlement:
        """Check-out: close the rental and return what the customer owes."""
        with self._store_errors("completing reservation"):
            reservation = self._get_reservation(reservation_id)
            if reservation.status != ReservationStatus.ACTIVE:
                raise ValidationError(
                    "Somente reservas em andamento podem ser encerradas."
                )
            if end_mileage < 0:
                raise ValidationError("A quilometragem não pode ser negativa.")
            vehicle = self._get_vehicle(reservation.vehicle_id)
            settlement = settle_rental(
                vehicle,
                reservation.window,
                reservation.start_mileage,
                end_mileage,
            )
            with transaction(self._connection):
                reservation_repo.update_reservation(
                    reservation_id,
                    ReservationStatus.COMPLETED,
                    end_mileage=end_mileage,
                    notes=notes,
                    total_price=settlement.total,
                    connection=self._connection,
                )
                self._vehicle_repo.set_status(
                    vehicle.id or 0,
                    VehicleStatus.AVAILABLE,
                    current_mileage=end_mileage,
                )
        self._logger.info(
            "Reservation %s completed: base=%s surcharge=%s",
            reservation_id,
            settlement.base_price,
            settlement.surcharge,
        )
        return settlement

    def cancel_reservation(self, reservation_id: int) -> bool:
        with self._store_errors("cancelling reservation"):
            reservation = self._get_reservation(reservation_id)
            if not reservation.is_blocking:
                raise ValidationError(
                    "Reservas concluídas ou canceladas não podem ser canceladas."
                )
            with transaction(self._connection):
                updated = reservation_repo.update_reservation(
                    reservation_id,
                    ReservationStatus.CANCELLED,
                    connection=self._connection,
                )
                if reservation.status == ReservationStatus.ACTIVE:
                    self._vehicle_repo.set_status(
                        reservation.vehicle_id, VehicleStatus.AVAILABLE
                    )
        if not updated:
            raise NotFoundError(f"Reserva {reservation_id} não encontrada.")
        self._logger.info("Reservation %s cancelled", reservation_id)
        return True
