from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Mapping, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..core.constants import RECENT_EVENTS_DAYS, UPCOMING_EVENTS_LIMIT
from ..core.enums import EventState
from ..core.exceptions import ImmutableStateError, InvalidTransitionError, NotFoundError
from .model import Event, EventDetail, EventFilters, EventListing, EventStats
from .repository import EventRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "event_date", "event_time", "location", "reason")


class EventScheduler:
    """Use case: event records and their state machine.

    SCHEDULED -> REALIZED   (sweep when the date has passed, or explicit)
    SCHEDULED -> CANCELLED  (explicit only)

    Realized and Cancelled are terminal. Every transition is a conditional
    UPDATE on the current state, so concurrent callers cannot both win.
    Overdue events are swept to Realized before any read or mutation.
    """

    def __init__(self, events: EventRepository, attendance: AttendanceRepository):
        self._events = events
        self._attendance = attendance

    def sweep(self, *, today: date) -> int:
        realized = self._events.realize_overdue(today=today)
        if realized:
            logger.info("Auto-realized %s overdue event(s) dated before %s", realized, today.isoformat())
        return realized

    def _require(self, event_id: int, *, for_update: bool = False) -> Event:
        event = self._events.get(int(event_id), for_update=for_update)
        if not event:
            raise NotFoundError(f"Event {event_id} not found")
        return event

    def get(self, event_id: int, *, today: date) -> EventDetail:
        self.sweep(today=today)
        event = self._require(event_id)
        return EventDetail(event=event, roster=tuple(self._attendance.list_for_event(event.event_id)))

    def list(self, filters: EventFilters, *, today: date) -> Sequence[EventListing]:
        self.sweep(today=today)
        events = self._events.list(filters)
        sizes = self._attendance.count_for_events([e.event_id for e in events])
        return [EventListing(event=e, roster_size=int(sizes.get(e.event_id, 0))) for e in events]

    def create(
        self,
        *,
        title: str,
        event_date: date,
        event_time: time,
        location: str,
        reason: str,
        created_by: int,
    ) -> Event:
        event_id = self._events.create(
            title=title,
            event_date=event_date,
            event_time=event_time,
            location=location,
            reason=reason,
            created_by=int(created_by),
        )
        logger.info("Created event %s (%s on %s) by %s", event_id, title, event_date.isoformat(), created_by)
        return self._require(event_id)

    def require_scheduled(self, event_id: int, *, today: date, action: str = "modified") -> Event:
        """Lock the event and fail unless it is still Scheduled."""
        self.sweep(today=today)
        event = self._require(event_id, for_update=True)
        if event.state is EventState.REALIZED:
            raise ImmutableStateError(f"Event {event.event_id} has been realized and cannot be {action}")
        if event.state is EventState.CANCELLED:
            raise ImmutableStateError(f"Event {event.event_id} is cancelled and cannot be {action}")
        return event

    def update(self, event_id: int, *, changes: Mapping[str, Any], today: date) -> Event:
        current = self.require_scheduled(event_id, today=today, action="edited")
        merged = {name: changes.get(name, getattr(current, name)) for name in EDITABLE_FIELDS}

        if not self._events.update_details(current.event_id, **merged):
            raise ImmutableStateError(f"Event {current.event_id} is no longer scheduled")
        return self._require(current.event_id)

    def _transition(self, event_id: int, *, to_state: EventState, today: date, verb: str) -> Event:
        self.sweep(today=today)
        event = self._require(event_id, for_update=True)
        if not self._events.transition(event.event_id, from_state=EventState.SCHEDULED, to_state=to_state):
            latest = self._require(event.event_id)
            raise InvalidTransitionError(
                f"Event {event.event_id} is {latest.state.value.lower()}; only scheduled events can be {verb}"
            )
        logger.info("Event %s moved %s -> %s", event.event_id, EventState.SCHEDULED.value, to_state.value)
        return self._require(event.event_id)

    def cancel(self, event_id: int, *, today: date) -> Event:
        return self._transition(event_id, to_state=EventState.CANCELLED, today=today, verb="cancelled")

    def realize(self, event_id: int, *, today: date) -> Event:
        return self._transition(event_id, to_state=EventState.REALIZED, today=today, verb="realized")

    def delete(self, event_id: int, *, today: date) -> None:
        self.sweep(today=today)
        event = self._require(event_id, for_update=True)
        if event.state is EventState.REALIZED or not self._events.delete_unless_realized(event.event_id):
            raise ImmutableStateError(f"Event {event.event_id} has been realized and cannot be deleted")
        logger.info("Deleted event %s (%s)", event.event_id, event.state.value)

    def stats(self, *, today: date, now: Optional[datetime] = None) -> EventStats:
        self.sweep(today=today)
        now = now or datetime.combine(today, time.min)
        by_state = self._events.count_by_state()
        upcoming = self._events.list_upcoming(today=today, limit=UPCOMING_EVENTS_LIMIT)
        sizes = self._attendance.count_for_events([e.event_id for e in upcoming])
        return EventStats(
            by_state={state.value: int(by_state.get(state, 0)) for state in EventState},
            upcoming=tuple(EventListing(event=e, roster_size=int(sizes.get(e.event_id, 0))) for e in upcoming),
            created_last_30_days=self._events.count_created_since(now - timedelta(days=RECENT_EVENTS_DAYS)),
        )
