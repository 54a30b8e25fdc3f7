from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..core.exceptions import (
    AlreadyAssignedError,
    CapacityExceededError,
    NoActiveAssignmentError,
    NotFoundError,
    ValidationError,
)
from ..persons.repository import PersonRegistry
from ..positions.model import Position
from ..positions.repository import PositionRepository
from .model import Assignment
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)


class AssignmentLedger:
    """Use case: who holds which position.

    Invariants enforced here, inside the caller's transaction:
    - active assignments on a position never exceed its ``max_occupants``;
    - a person holds at most one active assignment across all positions.

    The position row is locked before counting so two assigns on the same
    position serialize; the one-active-per-person unique key in storage
    backs the exclusivity check against assigns on different positions.
    """

    def __init__(self, positions: PositionRepository, assignments: AssignmentRepository, persons: PersonRegistry):
        self._positions = positions
        self._assignments = assignments
        self._persons = persons

    def _require_position(self, position_id: int, *, for_update: bool = False) -> Position:
        position = self._positions.get(int(position_id), for_update=for_update)
        if not position:
            raise NotFoundError(f"Position {position_id} not found")
        return position

    def assign(
        self,
        *,
        position_id: int,
        person_id: int,
        start_date: date,
        period_year: int,
        notes: Optional[str] = None,
    ) -> Assignment:
        position = self._require_position(position_id, for_update=True)
        if not position.is_active:
            raise ValidationError(f"Position {position.name!r} is not active")

        person = self._persons.get_active(int(person_id))
        if not person:
            raise NotFoundError(f"Person {person_id} not found or not active")

        current = self._assignments.get_active_for_person(person.person_id, for_update=True)
        if current:
            held = self._positions.get(current.position_id)
            raise AlreadyAssignedError(
                person_id=person.person_id,
                current_position_id=current.position_id,
                current_position_name=held.name if held else None,
            )

        holders = self._assignments.list_active_for_position(position.position_id, for_update=True)
        if len(holders) >= position.max_occupants:
            raise CapacityExceededError(position.position_id, position.max_occupants)

        assignment_id = self._assignments.create_active(
            position_id=position.position_id,
            person_id=person.person_id,
            start_date=start_date,
            period_year=int(period_year),
            notes=notes,
        )
        logger.info(
            "Assigned person %s to position %s (assignment %s)",
            person.person_id,
            position.position_id,
            assignment_id,
        )
        created = self._assignments.get(assignment_id)
        if created is None:
            raise NotFoundError(f"Assignment {assignment_id} not found after insert")
        return created

    def release(
        self,
        *,
        position_id: int,
        end_date: date,
        notes: Optional[str] = None,
        person_id: Optional[int] = None,
    ) -> Assignment:
        position = self._require_position(position_id, for_update=True)
        holders = self._assignments.list_active_for_position(position.position_id, for_update=True)

        if person_id is not None:
            holders = [h for h in holders if h.person_id == int(person_id)]
        if not holders:
            raise NoActiveAssignmentError(position.position_id)

        target = holders[0]
        if end_date < target.start_date:
            raise ValidationError("End date cannot be earlier than the start date")

        # Zero rows means a concurrent release won the race.
        if not self._assignments.close(target.assignment_id, end_date=end_date, notes=notes):
            raise NoActiveAssignmentError(position.position_id)

        logger.info(
            "Released position %s from person %s (assignment %s)",
            position.position_id,
            target.person_id,
            target.assignment_id,
        )
        closed = self._assignments.get(target.assignment_id)
        if closed is None:
            raise NotFoundError(f"Assignment {target.assignment_id} not found after release")
        return closed

    def history(self, position_id: int) -> Sequence[Assignment]:
        rows = self._assignments.list_for_position(int(position_id))
        # Deleted positions keep their history; only a fully unknown id is an error.
        if not rows:
            self._require_position(position_id)
        return list(rows)

    def active_holders(self, position_id: int) -> Sequence[Assignment]:
        position = self._require_position(position_id)
        return list(self._assignments.list_active_for_position(position.position_id))

    def active_holder(self, position_id: int) -> Optional[Assignment]:
        holders = self.active_holders(position_id)
        return holders[0] if holders else None
