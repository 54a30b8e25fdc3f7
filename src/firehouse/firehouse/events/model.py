from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..attendance.model import AttendanceEntry
from ..common.datetime_utils import format_date, format_datetime, format_time
from ..core.constants import DEFAULT_EVENT_LIST_LIMIT
from ..core.enums import EventState


@dataclass(frozen=True)
class Event:
    """Domain entity: a citation (meeting, drill, summons) owning a roster."""

    event_id: int
    title: str
    event_date: date
    event_time: time
    location: str
    reason: str
    state: EventState
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "title": self.title,
            "date": format_date(self.event_date),
            "time": format_time(self.event_time),
            "location": self.location,
            "reason": self.reason,
            "state": self.state.value,
            "created_by": self.created_by,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }


@dataclass(frozen=True)
class EventDetail:
    event: Event
    roster: Sequence[AttendanceEntry] = ()

    def to_dict(self) -> dict:
        data = self.event.to_dict()
        data["roster"] = [entry.to_dict() for entry in self.roster]
        return data


@dataclass(frozen=True)
class EventListing:
    event: Event
    roster_size: int = 0

    def to_dict(self) -> dict:
        data = self.event.to_dict()
        data["roster_size"] = self.roster_size
        return data


@dataclass(frozen=True)
class EventFilters:
    state: Optional[EventState] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: int = DEFAULT_EVENT_LIST_LIMIT


@dataclass(frozen=True)
class EventStats:
    by_state: dict = field(default_factory=dict)
    upcoming: Sequence[EventListing] = ()
    created_last_30_days: int = 0

    def to_dict(self) -> dict:
        return {
            "by_state": dict(self.by_state),
            "total": sum(self.by_state.values()),
            "upcoming": [item.to_dict() for item in self.upcoming],
            "created_last_30_days": self.created_last_30_days,
        }
