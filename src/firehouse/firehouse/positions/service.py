from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Mapping, Optional, Sequence

from ..assignments.repository import AssignmentRepository
from ..core.enums import Branch
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Position, PositionListing, PositionStats
from .repository import PositionRepository

logger = logging.getLogger(__name__)

# Fields that define the seat layout; frozen once any assignment exists.
STRUCTURAL_FIELDS = ("branch", "max_occupants")
EDITABLE_FIELDS = ("name", "description", "branch", "hierarchy_rank", "max_occupants", "is_active")


class PositionCatalog:
    """Use case: administer the set of positions.

    The catalog owns no assignment rules; it only reads the ledger to refuse
    changes that would orphan or reshape occupied seats.
    """

    def __init__(self, positions: PositionRepository, assignments: AssignmentRepository):
        self._positions = positions
        self._assignments = assignments

    def _require(self, position_id: int, *, for_update: bool = False) -> Position:
        position = self._positions.get(int(position_id), for_update=for_update)
        if not position:
            raise NotFoundError(f"Position {position_id} not found")
        return position

    def create(
        self,
        *,
        name: str,
        branch: Branch,
        hierarchy_rank: int,
        max_occupants: int = 1,
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> Position:
        if self._positions.get_by_name(name):
            raise ConflictError(f"A position named {name!r} already exists")

        position_id = self._positions.create(
            name=name,
            description=description,
            branch=branch,
            hierarchy_rank=int(hierarchy_rank),
            max_occupants=int(max_occupants),
            is_active=bool(is_active),
        )
        logger.info("Created position %s (%s, %s seat(s))", position_id, name, max_occupants)
        return self._require(position_id)

    def update(self, position_id: int, *, changes: Mapping[str, Any]) -> Position:
        current = self._require(position_id, for_update=True)
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        merged = {name: changes.get(name, getattr(current, name)) for name in EDITABLE_FIELDS}

        structural = [f for f in STRUCTURAL_FIELDS if merged[f] != getattr(current, f)]
        if structural and self._assignments.count_for_position(current.position_id) > 0:
            raise ConflictError(
                f"Position {current.position_id} has assignment history; "
                f"{', '.join(structural)} can no longer change"
            )

        if merged["name"] != current.name:
            clash = self._positions.get_by_name(merged["name"])
            if clash and clash.position_id != current.position_id:
                raise ConflictError(f"A position named {merged['name']!r} already exists")

        self._positions.update(current.position_id, **merged)
        return self._require(current.position_id)

    def deactivate(self, position_id: int) -> Position:
        position = self._require(position_id, for_update=True)
        if position.is_active:
            self._positions.set_active(position.position_id, is_active=False)
            logger.info("Deactivated position %s", position.position_id)
        return self._require(position.position_id)

    def delete(self, position_id: int) -> None:
        position = self._require(position_id, for_update=True)
        holders = self._assignments.list_active_for_position(position.position_id, for_update=True)
        if holders:
            raise ConflictError(
                f"Position {position.position_id} has {len(holders)} active assignment(s); release them first"
            )
        if not self._positions.delete(position.position_id):
            raise NotFoundError(f"Position {position_id} not found")
        logger.info("Deleted position %s; assignment history kept", position.position_id)

    def get(self, position_id: int) -> Position:
        return self._require(position_id)

    def list(self, *, branch: Optional[Branch] = None, active: Optional[bool] = None) -> Sequence[PositionListing]:
        counts = self._assignments.count_active_by_position()
        return [
            PositionListing(position=p, active_count=int(counts.get(p.position_id, 0)))
            for p in self._positions.list(branch=branch, active=active)
        ]

    @staticmethod
    def group_by_branch(listings: Sequence[PositionListing]) -> "OrderedDict[str, list]":
        grouped: "OrderedDict[str, list]" = OrderedDict((b.value, []) for b in Branch)
        for item in listings:
            grouped[item.position.branch.value].append(item)
        return grouped

    def stats(self) -> PositionStats:
        listings = self.list()
        occupied = sum(1 for item in listings if item.active_count > 0)
        by_branch = {b.value: 0 for b in Branch}
        for item in listings:
            by_branch[item.position.branch.value] += 1
        return PositionStats(
            total_positions=len(listings),
            occupied=occupied,
            vacant=len(listings) - occupied,
            total_assignments=self._assignments.count_all(),
            by_branch=by_branch,
        )
