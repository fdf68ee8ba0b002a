"""Booking session state machine.

The session walks a customer through window -> vehicle -> details -> submit.
Every state is its own frozen dataclass; transitions build a new state and
return it wrapped in a ``SessionView`` together with the message the screen
should show. No I/O happens here except in ``submit``, which delegates to a
``BookingGateway``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Protocol, Union

from fleet_rental.domain.models import (
    CustomerDetails,
    RentalWindow,
    Reservation,
    Vehicle,
)
from fleet_rental.logging_config import get_logger
from fleet_rental.services.booking_engine import (
    BusyVehicle,
    available_vehicles,
    busy_vehicles,
    calculate_price,
)
from fleet_rental.services.errors import (
    ConflictError,
    NotFoundError,
    ServiceError,
    SessionStateError,
    TransportError,
)
from fleet_rental.services.snapshot_service import FleetSnapshot

MSG_NO_AVAILABILITY = "Nenhum veículo disponível para o período selecionado."
MSG_VEHICLE_UNAVAILABLE = "O veículo selecionado não está disponível neste período."
MSG_CONFLICT = (
    "O veículo acabou de ser reservado por outra pessoa neste período. "
    "Escolha outro veículo ou altere as datas."
)
MSG_VEHICLE_REMOVED = (
    "O veículo selecionado não faz mais parte da frota. Escolha outro veículo."
)
MSG_TRANSPORT = "Não foi possível concluir a reserva. Verifique a conexão e tente novamente."
MSG_CONFIRMED = "Reserva confirmada."


class BookingGateway(Protocol):
    """Operations the booking flow needs from the data store."""

    def fetch_fleet(self) -> list[Vehicle]:
        ...

    def fetch_reservations(self, active_only: bool = True) -> list[Reservation]:
        ...

    def create_reservation(
        self, vehicle_id: int, window: RentalWindow, details: CustomerDetails
    ) -> Reservation:
        ...


class MessageLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class RetainedDetails:
    """Customer details kept aside while the user goes back a step.

    ``vehicle_id`` of None means the details may be restored for any vehicle.
    """

    details: CustomerDetails
    vehicle_id: Optional[int] = None

    def restorable_for(self, vehicle_id: Optional[int]) -> bool:
        return self.vehicle_id is None or self.vehicle_id == vehicle_id


@dataclass(frozen=True)
class SelectingWindow:
    window: Optional[RentalWindow] = None
    retained: Optional[RetainedDetails] = None


@dataclass(frozen=True)
class SelectingVehicle:
    window: RentalWindow
    vehicles: tuple[Vehicle, ...] = ()
    retained: Optional[RetainedDetails] = None
    rejected_ids: frozenset[int] = frozenset()
    busy: tuple[BusyVehicle, ...] = ()


@dataclass(frozen=True)
class EnteringCustomerDetails:
    window: RentalWindow
    vehicle: Vehicle
    price: Optional[int]
    details: CustomerDetails = CustomerDetails()


@dataclass(frozen=True)
class Submitting:
    window: RentalWindow
    vehicle: Vehicle
    price: Optional[int]
    details: CustomerDetails


@dataclass(frozen=True)
class Confirmed:
    reservation: Reservation
    vehicle: Vehicle
    price: Optional[int]


@dataclass(frozen=True)
class Failed:
    """Record of a rejected submission; the session has already moved on."""

    window: RentalWindow
    vehicle: Vehicle
    details: CustomerDetails
    error: str
    conflict: bool


SessionState = Union[
    SelectingWindow,
    SelectingVehicle,
    EnteringCustomerDetails,
    Submitting,
    Confirmed,
]


@dataclass(frozen=True)
class SessionView:
    state: SessionState
    message: Optional[str] = None
    level: MessageLevel = MessageLevel.INFO
    failure: Optional[Failed] = None


class BookingSession:
    """Step-by-step booking of one vehicle for one customer."""

    def __init__(self, snapshot: Optional[FleetSnapshot] = None) -> None:
        self._snapshot = snapshot or FleetSnapshot()
        self._state: SessionState = SelectingWindow()
        self._last_failure: Optional[Failed] = None
        self._logger = get_logger(self.__class__.__name__)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def snapshot(self) -> FleetSnapshot:
        return self._snapshot

    @property
    def last_failure(self) -> Optional[Failed]:
        return self._last_failure

    def _move(
        self,
        state: SessionState,
        message: Optional[str] = None,
        level: MessageLevel = MessageLevel.INFO,
        failure: Optional[Failed] = None,
    ) -> SessionView:
        self._state = state
        return SessionView(state=state, message=message, level=level, failure=failure)

    def _require(self, *allowed: type) -> Any:
        if not isinstance(self._state, allowed):
            raise SessionStateError(
                f"Transição inválida a partir de {type(self._state).__name__}."
            )
        return self._state

    def _vehicle_list(
        self,
        window: RentalWindow,
        retained: Optional[RetainedDetails],
        rejected_ids: frozenset[int] = frozenset(),
    ) -> SessionView:
        fleet = self._snapshot.fleet
        reservations = self._snapshot.reservations
        vehicles = tuple(
            vehicle
            for vehicle in available_vehicles(fleet, reservations, window)
            if vehicle.id not in rejected_ids
        )
        busy = tuple(
            entry
            for entry in busy_vehicles(fleet, reservations, window)
            if entry.vehicle.id not in rejected_ids
        )
        state = SelectingVehicle(
            window=window,
            vehicles=vehicles,
            retained=retained,
            rejected_ids=rejected_ids,
            busy=busy,
        )
        if not vehicles:
            return self._move(state, MSG_NO_AVAILABILITY, MessageLevel.INFO)
        return self._move(state)

    def _retained_from_state(self) -> Optional[RetainedDetails]:
        state = self._state
        if isinstance(state, EnteringCustomerDetails):
            if state.details == CustomerDetails():
                return None
            return RetainedDetails(state.details, state.vehicle.id)
        if isinstance(state, (SelectingWindow, SelectingVehicle)):
            return state.retained
        return None

    def change_window(self, window: RentalWindow) -> SessionView:
        self._require(SelectingWindow, SelectingVehicle, EnteringCustomerDetails)
        retained = self._retained_from_state()
        if not window.is_valid:
            return self._move(SelectingWindow(window=window, retained=retained))
        return self._vehicle_list(window, retained)

    def refresh(self, snapshot: FleetSnapshot) -> SessionView:
        """Swap in a newer snapshot and re-run the filter if a list is shown."""
        self._snapshot = snapshot
        state = self._state
        if isinstance(state, SelectingVehicle):
            return self._vehicle_list(state.window, state.retained)
        return SessionView(state=state)

    def select_vehicle(self, vehicle_id: int) -> SessionView:
        state = self._require(SelectingVehicle)
        vehicle = next((v for v in state.vehicles if v.id == vehicle_id), None)
        if vehicle is None:
            return SessionView(
                state=state,
                message=MSG_VEHICLE_UNAVAILABLE,
                level=MessageLevel.WARNING,
            )
        details = CustomerDetails()
        if state.retained and state.retained.restorable_for(vehicle.id):
            details = state.retained.details
        return self._move(
            EnteringCustomerDetails(
                window=state.window,
                vehicle=vehicle,
                price=calculate_price(vehicle, state.window),
                details=details,
            )
        )

    def enter_details(self, details: CustomerDetails) -> SessionView:
        state = self._require(EnteringCustomerDetails)
        return self._move(replace(state, details=details))

    def back_to_window(self) -> SessionView:
        self._require(SelectingWindow, SelectingVehicle, EnteringCustomerDetails)
        retained = self._retained_from_state()
        window = getattr(self._state, "window", None)
        return self._move(SelectingWindow(window=window, retained=retained))

    def back_to_vehicle(self) -> SessionView:
        state = self._require(EnteringCustomerDetails)
        return self._vehicle_list(state.window, self._retained_from_state())

    def begin_submit(self) -> SessionView:
        state = self._require(EnteringCustomerDetails)
        errors = state.details.validation_errors()
        if errors:
            return SessionView(
                state=state, message="\n".join(errors), level=MessageLevel.WARNING
            )
        return self._move(
            Submitting(
                window=state.window,
                vehicle=state.vehicle,
                price=state.price,
                details=state.details,
            )
        )

    def submission_succeeded(self, reservation: Reservation) -> SessionView:
        state = self._require(Submitting)
        self._last_failure = None
        return self._move(
            Confirmed(reservation=reservation, vehicle=state.vehicle, price=state.price),
            MSG_CONFIRMED,
        )

    def submission_failed(self, error: ServiceError) -> SessionView:
        state = self._require(Submitting)
        conflict = isinstance(error, ConflictError)
        vehicle_gone = isinstance(error, NotFoundError)
        if conflict:
            message = MSG_CONFLICT
        elif vehicle_gone:
            message = MSG_VEHICLE_REMOVED
        elif isinstance(error, TransportError):
            message = MSG_TRANSPORT
        else:
            message = str(error) or MSG_TRANSPORT
        failure = Failed(
            window=state.window,
            vehicle=state.vehicle,
            details=state.details,
            error=message,
            conflict=conflict,
        )
        self._last_failure = failure
        if conflict or vehicle_gone:
            rejected = frozenset({state.vehicle.id}) if state.vehicle.id is not None else frozenset()
            view = self._vehicle_list(
                state.window, RetainedDetails(state.details), rejected
            )
            return SessionView(
                state=view.state,
                message=message,
                level=MessageLevel.ERROR,
                failure=failure,
            )
        return self._move(
            EnteringCustomerDetails(
                window=state.window,
                vehicle=state.vehicle,
                price=state.price,
                details=state.details,
            ),
            message,
            MessageLevel.ERROR,
            failure,
        )

    def submit(self, gateway: BookingGateway) -> SessionView:
        """Validate, send the reservation once and settle the outcome."""
        view = self.begin_submit()
        state = view.state
        if not isinstance(state, Submitting):
            return view
        try:
            reservation = gateway.create_reservation(
                state.vehicle.id, state.window, state.details
            )
        except ConflictError as exc:
            self._logger.warning(
                "Reservation rejected by conflict check for vehicle_id=%s",
                state.vehicle.id,
            )
            return self.submission_failed(exc)
        except ServiceError as exc:
            self._logger.warning("Reservation submission failed: %s", exc)
            return self.submission_failed(exc)
        self._logger.info(
            "Reservation %s confirmed for vehicle_id=%s",
            reservation.id,
            state.vehicle.id,
        )
        return self.submission_succeeded(reservation)
