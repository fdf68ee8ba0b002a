"""Centralized UI strings for consistent communication."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fleet_rental.domain.models import ReservationStatus, VehicleStatus
from fleet_rental.version import __app_name__

APP_NAME = __app_name__

TITLE_WARNING = "Atenção"
TITLE_ERROR = "Erro"
TITLE_SUCCESS = "Sucesso"
TITLE_INFO = "Informação"
TITLE_CONFIRMATION = "Confirmação"

CURRENCY_SYMBOL = "R$"

_VEHICLE_STATUS_LABELS = {
    VehicleStatus.AVAILABLE: "Disponível",
    VehicleStatus.RENTED: "Alugado",
    VehicleStatus.MAINTENANCE: "Em manutenção",
}

_RESERVATION_STATUS_LABELS = {
    ReservationStatus.SCHEDULED: "Agendada",
    ReservationStatus.ACTIVE: "Em andamento",
    ReservationStatus.COMPLETED: "Concluída",
    ReservationStatus.CANCELLED: "Cancelada",
}


def format_currency(value: Optional[int]) -> str:
    if value is None:
        return "-"
    return f"{CURRENCY_SYMBOL} {value:,}".replace(",", ".")


def format_datetime(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M")


def vehicle_status_label(status: VehicleStatus) -> str:
    return _VEHICLE_STATUS_LABELS.get(status, status.value)


def reservation_status_label(status: ReservationStatus) -> str:
    return _RESERVATION_STATUS_LABELS.get(status, status.value)
