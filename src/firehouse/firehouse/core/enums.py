from __future__ import annotations

from enum import Enum


class Branch(str, Enum):
    """Branch of the organization a position belongs to."""

    ADMINISTRATIVE = "ADMINISTRATIVE"
    OPERATIONAL = "OPERATIONAL"
    DISCIPLINARY_COUNCIL = "DISCIPLINARY_COUNCIL"


class EventState(str, Enum):
    """Event (citation) lifecycle state stored in the database."""

    SCHEDULED = "SCHEDULED"
    REALIZED = "REALIZED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not EventState.SCHEDULED


class AttendanceOutcome(str, Enum):
    """Read-side label for the nullable ``attended`` flag."""

    PENDING = "PENDING"
    ATTENDED = "ATTENDED"
    ABSENT = "ABSENT"
