from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from .model import AttendanceEntry


class AttendanceRepository(Protocol):
    def list_for_event(self, event_id: int) -> Sequence[AttendanceEntry]:
        """Roster of one event in enrolment order."""

        raise NotImplementedError

    def get(self, event_id: int, person_id: int, *, for_update: bool = False) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def add_many(self, event_id: int, person_ids: Sequence[int]) -> int:
        """Enrol people as pending attendees; returns rows inserted."""

        raise NotImplementedError

    def delete_for_event(self, event_id: int) -> int:
        raise NotImplementedError

    def set_outcome(self, event_id: int, person_id: int, *, attended: Optional[bool], notes: Optional[str]) -> bool:
        """Record the outcome; ``notes=None`` keeps the stored notes."""

        raise NotImplementedError

    def count_for_events(self, event_ids: Sequence[int]) -> Mapping[int, int]:
        raise NotImplementedError
