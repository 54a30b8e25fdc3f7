from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Sequence

from ..common.datetime_utils import format_datetime
from ..core.enums import Branch

if TYPE_CHECKING:
    from ..assignments.model import Assignment


@dataclass(frozen=True)
class Position:
    """Named organizational role with a bounded number of seats."""

    position_id: int
    name: str
    branch: Branch
    hierarchy_rank: int
    max_occupants: int = 1
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "position_id": self.position_id,
            "name": self.name,
            "description": self.description,
            "branch": self.branch.value,
            "hierarchy_rank": self.hierarchy_rank,
            "max_occupants": self.max_occupants,
            "is_active": self.is_active,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }


@dataclass(frozen=True)
class PositionStats:
    total_positions: int
    occupied: int
    vacant: int
    total_assignments: int
    by_branch: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_positions": self.total_positions,
            "occupied": self.occupied,
            "vacant": self.vacant,
            "total_assignments": self.total_assignments,
            "by_branch": dict(self.by_branch),
        }


@dataclass(frozen=True)
class PositionListing:
    """Catalog row: a position with the number of seats currently taken."""

    position: Position
    active_count: int = 0

    @property
    def vacancies(self) -> int:
        return max(self.position.max_occupants - self.active_count, 0)

    def to_dict(self) -> dict:
        data = self.position.to_dict()
        data["active_count"] = self.active_count
        data["vacancies"] = self.vacancies
        return data


@dataclass(frozen=True)
class PositionDetail:
    position: Position
    holders: Sequence["Assignment"] = ()

    @property
    def vacancies(self) -> int:
        return max(self.position.max_occupants - len(self.holders), 0)

    def to_dict(self) -> dict:
        data = self.position.to_dict()
        data["holders"] = [h.to_dict() for h in self.holders]
        data["active_count"] = len(self.holders)
        data["vacancies"] = self.vacancies
        return data
