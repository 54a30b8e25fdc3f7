from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import format_date, format_datetime


@dataclass(frozen=True)
class Assignment:
    """Time-bounded binding of one person to one position.

    Note: Rows are never deleted. Releasing only closes them.
    """

    assignment_id: int
    position_id: int
    person_id: int
    start_date: date
    period_year: int
    is_active: bool = True
    end_date: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    person_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "assignment_id": self.assignment_id,
            "position_id": self.position_id,
            "person_id": self.person_id,
            "person_name": self.person_name,
            "start_date": format_date(self.start_date),
            "end_date": format_date(self.end_date),
            "is_active": self.is_active,
            "period_year": self.period_year,
            "notes": self.notes,
            "created_at": format_datetime(self.created_at),
        }


def history_sort_key(a: Assignment) -> tuple:
    """Newest start date first, ties broken by newest id."""
    return (-a.start_date.toordinal(), -a.assignment_id)


def seniority_sort_key(a: Assignment) -> tuple:
    """Longest-serving holder first."""
    return (a.start_date.toordinal(), a.assignment_id)
