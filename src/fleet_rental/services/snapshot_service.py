"""Versioned fleet/reservation snapshot shared by the booking screens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from fleet_rental.domain.models import Reservation, Vehicle
from fleet_rental.logging_config import get_logger


@dataclass(frozen=True)
class FleetSnapshot:
    """Immutable fleet and reservation data used for one computation."""

    version: int = 0
    fleet: tuple[Vehicle, ...] = ()
    reservations: tuple[Reservation, ...] = ()
    loaded_at: Optional[datetime] = None


class SnapshotStore:
    """Owner of the current snapshot.

    A refresh is a two-step affair: ``begin_refresh`` hands out a token before
    the fetch starts and ``complete_refresh`` installs the fetched data. Only
    the most recent token may install a snapshot; answers to older requests are
    dropped so a slow response cannot overwrite a newer one. A token installs at
    most once.
    """

    def __init__(self, snapshot: Optional[FleetSnapshot] = None) -> None:
        self._snapshot = snapshot or FleetSnapshot()
        self._latest_token = 0
        self._open_token: Optional[int] = None
        self._logger = get_logger(self.__class__.__name__)

    @property
    def snapshot(self) -> FleetSnapshot:
        return self._snapshot

    def begin_refresh(self) -> int:
        self._latest_token += 1
        self._open_token = self._latest_token
        return self._latest_token

    def is_current(self, token: int) -> bool:
        return token == self._open_token

    def complete_refresh(
        self,
        token: int,
        fleet: Iterable[Vehicle],
        reservations: Iterable[Reservation],
    ) -> Optional[FleetSnapshot]:
        if not self.is_current(token):
            self._logger.info(
                "Discarding stale snapshot token=%s (latest=%s)",
                token,
                self._latest_token,
            )
            return None
        self._open_token = None
        self._snapshot = FleetSnapshot(
            version=self._snapshot.version + 1,
            fleet=tuple(fleet),
            reservations=tuple(reservations),
            loaded_at=datetime.now(),
        )
        return self._snapshot

    def replace(
        self, fleet: Iterable[Vehicle], reservations: Iterable[Reservation]
    ) -> FleetSnapshot:
        """Fetch-less refresh: issue a token and install immediately."""
        token = self.begin_refresh()
        return self.complete_refresh(token, fleet, reservations)  # type: ignore[return-value]
