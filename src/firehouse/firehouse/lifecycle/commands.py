"""Typed commands accepted by the lifecycle orchestrator.

Each command is parsed from a JSON-like payload with ``from_payload`` and
rejects unknown or missing fields with ValidationError before any store is
touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Mapping, Optional, Tuple

from ..attendance.model import AttendanceUpdate
from ..common.validators import (
    optional_bool,
    optional_text,
    reject_unknown_fields,
    require_bool,
    require_date,
    require_fields,
    require_id_list,
    require_int,
    require_length,
    require_mapping,
    require_positive_id,
    require_time,
)
from ..core.constants import (
    DEFAULT_EVENT_LIST_LIMIT,
    DESCRIPTION_MAX,
    EVENT_LOCATION_MAX,
    EVENT_LOCATION_MIN,
    EVENT_REASON_MAX,
    EVENT_REASON_MIN,
    EVENT_TITLE_MAX,
    EVENT_TITLE_MIN,
    MAX_EVENT_LIST_LIMIT,
    NOTES_MAX,
    PERIOD_YEAR_MAX,
    PERIOD_YEAR_MIN,
    POSITION_MAX_OCCUPANTS_LIMIT,
    POSITION_NAME_MAX,
    POSITION_NAME_MIN,
    POSITION_RANK_MAX,
    POSITION_RANK_MIN,
)
from ..core.enums import Branch, EventState
from ..core.exceptions import ValidationError
from ..events.model import EventFilters


def _branch(value: Any) -> Branch:
    if isinstance(value, Branch):
        return value
    if isinstance(value, str):
        try:
            return Branch(value.strip().upper())
        except ValueError:
            pass
    allowed = ", ".join(b.value for b in Branch)
    raise ValidationError(f"branch must be one of: {allowed}")


def _event_state(value: Any) -> EventState:
    if isinstance(value, str):
        try:
            return EventState(value.strip().upper())
        except ValueError:
            pass
    allowed = ", ".join(s.value for s in EventState)
    raise ValidationError(f"state must be one of: {allowed}")


def _flag(value: Any, field_name: str) -> bool:
    """Query-string friendly boolean."""
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes"):
            return True
        if lowered in ("0", "false", "no"):
            return False
    return require_bool(value, field_name)


def _position_fields(payload: Mapping[str, Any]) -> dict:
    parsed: dict = {}
    if "name" in payload:
        parsed["name"] = require_length(payload["name"], "name", min_len=POSITION_NAME_MIN, max_len=POSITION_NAME_MAX)
    if "description" in payload:
        parsed["description"] = optional_text(payload["description"], "description", max_len=DESCRIPTION_MAX)
    if "branch" in payload:
        parsed["branch"] = _branch(payload["branch"])
    if "hierarchy_rank" in payload:
        parsed["hierarchy_rank"] = require_int(
            payload["hierarchy_rank"], "hierarchy_rank", min_value=POSITION_RANK_MIN, max_value=POSITION_RANK_MAX
        )
    if "max_occupants" in payload:
        parsed["max_occupants"] = require_int(
            payload["max_occupants"], "max_occupants", min_value=1, max_value=POSITION_MAX_OCCUPANTS_LIMIT
        )
    if "is_active" in payload:
        parsed["is_active"] = require_bool(payload["is_active"], "is_active")
    return parsed


POSITION_FIELDS = ("name", "description", "branch", "hierarchy_rank", "max_occupants", "is_active")


@dataclass(frozen=True)
class CreatePositionCommand:
    name: str
    branch: Branch
    hierarchy_rank: int
    max_occupants: int = 1
    description: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_payload(cls, payload: Any) -> "CreatePositionCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, POSITION_FIELDS)
        require_fields(payload, ("name", "branch", "hierarchy_rank"))
        return cls(**_position_fields(payload))


@dataclass(frozen=True)
class UpdatePositionCommand:
    position_id: int
    fields: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, position_id: Any, payload: Any) -> "UpdatePositionCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, POSITION_FIELDS)
        parsed = _position_fields(payload)
        if not parsed:
            raise ValidationError("No fields to update")
        return cls(position_id=require_positive_id(position_id, "position_id"), fields=parsed)

    def changes(self) -> dict:
        return dict(self.fields)


@dataclass(frozen=True)
class AssignCommand:
    """``start_date`` and ``period_year`` default to today when omitted."""

    position_id: int
    person_id: int
    start_date: Optional[date] = None
    period_year: Optional[int] = None
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, position_id: Any, payload: Any) -> "AssignCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, ("person_id", "start_date", "period_year", "notes"))
        require_fields(payload, ("person_id",))
        start_date = payload.get("start_date")
        period_year = payload.get("period_year")
        return cls(
            position_id=require_positive_id(position_id, "position_id"),
            person_id=require_positive_id(payload["person_id"], "person_id"),
            start_date=require_date(start_date, "start_date") if start_date is not None else None,
            period_year=(
                require_int(period_year, "period_year", min_value=PERIOD_YEAR_MIN, max_value=PERIOD_YEAR_MAX)
                if period_year is not None
                else None
            ),
            notes=optional_text(payload.get("notes"), "notes", max_len=NOTES_MAX),
        )


@dataclass(frozen=True)
class ReleaseCommand:
    position_id: int
    end_date: Optional[date] = None
    notes: Optional[str] = None
    person_id: Optional[int] = None

    @classmethod
    def from_payload(cls, position_id: Any, payload: Any) -> "ReleaseCommand":
        payload = require_mapping(payload or {})
        reject_unknown_fields(payload, ("end_date", "notes", "person_id"))
        end_date = payload.get("end_date")
        person_id = payload.get("person_id")
        return cls(
            position_id=require_positive_id(position_id, "position_id"),
            end_date=require_date(end_date, "end_date") if end_date is not None else None,
            notes=optional_text(payload.get("notes"), "notes", max_len=NOTES_MAX),
            person_id=require_positive_id(person_id, "person_id") if person_id is not None else None,
        )


def _event_fields(payload: Mapping[str, Any]) -> dict:
    parsed: dict = {}
    if "title" in payload:
        parsed["title"] = require_length(payload["title"], "title", min_len=EVENT_TITLE_MIN, max_len=EVENT_TITLE_MAX)
    if "date" in payload:
        parsed["event_date"] = require_date(payload["date"], "date")
    if "time" in payload:
        parsed["event_time"] = require_time(payload["time"], "time")
    if "location" in payload:
        parsed["location"] = require_length(
            payload["location"], "location", min_len=EVENT_LOCATION_MIN, max_len=EVENT_LOCATION_MAX
        )
    if "reason" in payload:
        parsed["reason"] = require_length(
            payload["reason"], "reason", min_len=EVENT_REASON_MIN, max_len=EVENT_REASON_MAX
        )
    return parsed


EVENT_FIELDS = ("title", "date", "time", "location", "reason")


@dataclass(frozen=True)
class CreateEventCommand:
    title: str
    event_date: date
    event_time: time
    location: str
    reason: str
    created_by: int
    attendee_ids: Tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any, *, actor_id: Any) -> "CreateEventCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, EVENT_FIELDS + ("attendee_ids",))
        require_fields(payload, EVENT_FIELDS)
        attendees = payload.get("attendee_ids")
        return cls(
            created_by=require_positive_id(actor_id, "created_by"),
            attendee_ids=require_id_list(attendees, "attendee_ids") if attendees is not None else (),
            **_event_fields(payload),
        )


@dataclass(frozen=True)
class UpdateEventCommand:
    """Partial edit; ``attendee_ids`` (when present) replaces the roster too."""

    event_id: int
    fields: Mapping[str, Any] = field(default_factory=dict)
    attendee_ids: Optional[Tuple[int, ...]] = None

    @classmethod
    def from_payload(cls, event_id: Any, payload: Any) -> "UpdateEventCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, EVENT_FIELDS + ("attendee_ids",))
        parsed = _event_fields(payload)
        attendees = payload.get("attendee_ids")
        if not parsed and attendees is None:
            raise ValidationError("No fields to update")
        return cls(
            event_id=require_positive_id(event_id, "event_id"),
            fields=parsed,
            attendee_ids=require_id_list(attendees, "attendee_ids") if attendees is not None else None,
        )

    def changes(self) -> dict:
        return dict(self.fields)


@dataclass(frozen=True)
class ReplaceRosterCommand:
    event_id: int
    attendee_ids: Tuple[int, ...] = ()

    @classmethod
    def from_payload(cls, event_id: Any, payload: Any) -> "ReplaceRosterCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, ("attendee_ids",))
        if "attendee_ids" not in payload:
            raise ValidationError("Missing required field(s): attendee_ids")
        return cls(
            event_id=require_positive_id(event_id, "event_id"),
            attendee_ids=require_id_list(payload["attendee_ids"], "attendee_ids"),
        )


def _attendance_update(person_id: Any, payload: Mapping[str, Any]) -> AttendanceUpdate:
    # attended must be present; null puts the entry back to pending
    if "attended" not in payload:
        raise ValidationError("Missing required field(s): attended")
    return AttendanceUpdate(
        person_id=require_positive_id(person_id, "person_id"),
        attended=optional_bool(payload["attended"], "attended"),
        notes=optional_text(payload.get("notes"), "notes", max_len=NOTES_MAX),
    )


@dataclass(frozen=True)
class SetAttendanceCommand:
    event_id: int
    person_id: int
    attended: Optional[bool]
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, event_id: Any, person_id: Any, payload: Any) -> "SetAttendanceCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, ("attended", "notes"))
        update = _attendance_update(person_id, payload)
        return cls(
            event_id=require_positive_id(event_id, "event_id"),
            person_id=update.person_id,
            attended=update.attended,
            notes=update.notes,
        )


@dataclass(frozen=True)
class BulkAttendanceCommand:
    event_id: int
    updates: Tuple[AttendanceUpdate, ...] = ()

    @classmethod
    def from_payload(cls, event_id: Any, payload: Any) -> "BulkAttendanceCommand":
        payload = require_mapping(payload)
        reject_unknown_fields(payload, ("entries",))
        entries = payload.get("entries")
        if not isinstance(entries, list) or not entries:
            raise ValidationError("entries must be a non-empty list")

        updates = []
        for item in entries:
            item = require_mapping(item)
            reject_unknown_fields(item, ("person_id", "attended", "notes"))
            require_fields(item, ("person_id",))
            updates.append(_attendance_update(item["person_id"], item))
        return cls(event_id=require_positive_id(event_id, "event_id"), updates=tuple(updates))


def parse_event_filters(args: Mapping[str, Any]) -> EventFilters:
    reject_unknown_fields(args, ("state", "date_from", "date_to", "limit"))
    state = args.get("state")
    date_from = args.get("date_from")
    date_to = args.get("date_to")
    limit = args.get("limit")

    filters = EventFilters(
        state=_event_state(state) if state else None,
        date_from=require_date(date_from, "date_from") if date_from else None,
        date_to=require_date(date_to, "date_to") if date_to else None,
        limit=(
            require_int(limit, "limit", min_value=1, max_value=MAX_EVENT_LIST_LIMIT)
            if limit is not None
            else DEFAULT_EVENT_LIST_LIMIT
        ),
    )
    if filters.date_from and filters.date_to and filters.date_from > filters.date_to:
        raise ValidationError("date_from cannot be after date_to")
    return filters


def parse_position_filters(args: Mapping[str, Any]) -> Tuple[Optional[Branch], Optional[bool]]:
    reject_unknown_fields(args, ("branch", "active"))
    branch = args.get("branch")
    active = args.get("active")
    return (
        _branch(branch) if branch else None,
        _flag(active, "active") if active not in (None, "") else None,
    )
