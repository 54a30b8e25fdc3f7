from __future__ import annotations

from datetime import date, datetime, time
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import EventState
from .model import Event, EventFilters


class EventRepository(Protocol):
    def realize_overdue(self, *, today: date) -> int:
        """Flip Scheduled events dated before ``today`` to Realized.

        Single conditional UPDATE; returns the number of rows transitioned.
        """

        raise NotImplementedError

    def get(self, event_id: int, *, for_update: bool = False) -> Optional[Event]:
        raise NotImplementedError

    def list(self, filters: EventFilters) -> Sequence[Event]:
        """Newest date first."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        event_date: date,
        event_time: time,
        location: str,
        reason: str,
        created_by: int,
    ) -> int:
        """Insert a Scheduled event and return its id."""

        raise NotImplementedError

    def update_details(
        self,
        event_id: int,
        *,
        title: str,
        event_date: date,
        event_time: time,
        location: str,
        reason: str,
    ) -> bool:
        """Rewrite descriptive fields, only while the event is Scheduled."""

        raise NotImplementedError

    def transition(self, event_id: int, *, from_state: EventState, to_state: EventState) -> bool:
        """Compare-and-swap on ``state``; False when the event was not in ``from_state``."""

        raise NotImplementedError

    def delete_unless_realized(self, event_id: int) -> bool:
        raise NotImplementedError

    def count_by_state(self) -> Mapping[EventState, int]:
        raise NotImplementedError

    def list_upcoming(self, *, today: date, limit: int) -> Sequence[Event]:
        """Scheduled events dated today or later, soonest first."""

        raise NotImplementedError

    def count_created_since(self, since: datetime) -> int:
        raise NotImplementedError
