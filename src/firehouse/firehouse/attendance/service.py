from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..core.enums import EventState
from ..core.exceptions import (
    DomainError,
    ImmutableStateError,
    InvalidAttendeeError,
    NotFoundError,
    NotOnRosterError,
)
from ..events.model import Event
from ..events.repository import EventRepository
from ..persons.model import Person
from ..persons.repository import PersonRegistry
from .model import AttendanceEntry, AttendanceSummary, AttendanceUpdate, BulkAttendanceResult, BulkFailure
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceTracker:
    """Use case: event rosters and attendance outcomes.

    Roster membership changes are only requested by the orchestrator after the
    scheduler has locked the event in the Scheduled state. Outcomes may be
    recorded on Scheduled and Realized events (attendance is usually taken
    after the fact) but never on Cancelled ones.
    """

    def __init__(self, attendance: AttendanceRepository, events: EventRepository, persons: PersonRegistry):
        self._attendance = attendance
        self._events = events
        self._persons = persons

    def resolve_attendees(self, person_ids: Sequence[int]) -> List[Person]:
        ids = list(dict.fromkeys(int(p) for p in person_ids))
        found = self._persons.get_active_many(ids)
        missing = [p for p in ids if p not in found]
        if missing:
            raise InvalidAttendeeError(missing)
        return [found[p] for p in ids]

    def enroll(self, event_id: int, person_ids: Sequence[int]) -> Sequence[AttendanceEntry]:
        people = self.resolve_attendees(person_ids)
        self._attendance.add_many(int(event_id), [p.person_id for p in people])
        return self._attendance.list_for_event(int(event_id))

    def replace_roster(self, event_id: int, person_ids: Sequence[int]) -> Sequence[AttendanceEntry]:
        # Resolve before deleting so a bad id leaves the roster untouched.
        people = self.resolve_attendees(person_ids)
        removed = self._attendance.delete_for_event(int(event_id))
        self._attendance.add_many(int(event_id), [p.person_id for p in people])
        logger.info("Replaced roster of event %s (%s removed, %s enrolled)", event_id, removed, len(people))
        return self._attendance.list_for_event(int(event_id))

    def _require_recordable(self, event_id: int) -> Event:
        # Locked so a concurrent cancel cannot slip in before the outcome is written.
        event = self._events.get(int(event_id), for_update=True)
        if not event:
            raise NotFoundError(f"Event {event_id} not found")
        if event.state is EventState.CANCELLED:
            raise ImmutableStateError(f"Event {event.event_id} is cancelled; attendance cannot be recorded")
        return event

    def _apply(self, event: Event, person_id: int, attended: Optional[bool], notes: Optional[str]) -> AttendanceEntry:
        entry = self._attendance.get(event.event_id, int(person_id), for_update=True)
        if not entry:
            raise NotOnRosterError(event.event_id, int(person_id))
        if not self._attendance.set_outcome(event.event_id, entry.person_id, attended=attended, notes=notes):
            raise NotOnRosterError(event.event_id, entry.person_id)
        updated = self._attendance.get(event.event_id, entry.person_id)
        if updated is None:
            raise NotOnRosterError(event.event_id, entry.person_id)
        return updated

    def set_attendance(
        self,
        *,
        event_id: int,
        person_id: int,
        attended: Optional[bool],
        notes: Optional[str] = None,
    ) -> AttendanceEntry:
        event = self._require_recordable(event_id)
        return self._apply(event, person_id, attended, notes)

    def bulk_set(self, *, event_id: int, updates: Sequence[AttendanceUpdate]) -> BulkAttendanceResult:
        event = self._require_recordable(event_id)
        applied: list[AttendanceEntry] = []
        failures: list[BulkFailure] = []

        for item in updates:
            try:
                applied.append(self._apply(event, item.person_id, item.attended, item.notes))
            except DomainError as e:
                failures.append(BulkFailure(person_id=item.person_id, code=e.code, message=str(e)))

        if failures:
            logger.info(
                "Bulk attendance on event %s: %s applied, %s rejected",
                event.event_id,
                len(applied),
                len(failures),
            )
        return BulkAttendanceResult(event_id=event.event_id, applied=tuple(applied), failures=tuple(failures))

    def summary(self, event_id: int) -> AttendanceSummary:
        event = self._events.get(int(event_id))
        if not event:
            raise NotFoundError(f"Event {event_id} not found")
        return AttendanceSummary.from_entries(event.event_id, self._attendance.list_for_event(event.event_id))
