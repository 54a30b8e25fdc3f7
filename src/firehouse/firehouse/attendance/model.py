from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..core.enums import AttendanceOutcome


@dataclass(frozen=True)
class AttendanceEntry:
    """Roster membership of one person in one event.

    ``attended`` is None while pending, True when present, False when absent.
    """

    event_id: int
    person_id: int
    attended: Optional[bool] = None
    notes: Optional[str] = None
    person_name: Optional[str] = None
    person_rank: Optional[str] = None

    @property
    def outcome(self) -> AttendanceOutcome:
        if self.attended is None:
            return AttendanceOutcome.PENDING
        return AttendanceOutcome.ATTENDED if self.attended else AttendanceOutcome.ABSENT

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "person_id": self.person_id,
            "person_name": self.person_name,
            "person_rank": self.person_rank,
            "attended": self.attended,
            "outcome": self.outcome.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class AttendanceUpdate:
    person_id: int
    attended: Optional[bool]
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceSummary:
    event_id: int
    invited: int = 0
    attended: int = 0
    absent: int = 0
    pending: int = 0

    @classmethod
    def from_entries(cls, event_id: int, entries: Sequence[AttendanceEntry]) -> "AttendanceSummary":
        outcomes = [e.outcome for e in entries]
        return cls(
            event_id=event_id,
            invited=len(outcomes),
            attended=outcomes.count(AttendanceOutcome.ATTENDED),
            absent=outcomes.count(AttendanceOutcome.ABSENT),
            pending=outcomes.count(AttendanceOutcome.PENDING),
        )

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "invited": self.invited,
            "attended": self.attended,
            "absent": self.absent,
            "pending": self.pending,
        }


@dataclass(frozen=True)
class BulkFailure:
    person_id: int
    code: str
    message: str

    def to_dict(self) -> dict:
        return {"person_id": self.person_id, "code": self.code, "message": self.message}


@dataclass(frozen=True)
class BulkAttendanceResult:
    event_id: int
    applied: Sequence[AttendanceEntry] = field(default_factory=tuple)
    failures: Sequence[BulkFailure] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "applied": [e.to_dict() for e in self.applied],
            "failures": [f.to_dict() for f in self.failures],
        }
