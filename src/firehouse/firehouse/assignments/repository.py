from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .model import Assignment


class AssignmentRepository(Protocol):
    """Storage of current and historical position holders.

    Note: Only the assignment ledger service writes through this interface.
    """

    def get(self, assignment_id: int) -> Optional[Assignment]:
        raise NotImplementedError

    def get_active_for_person(self, person_id: int, *, for_update: bool = False) -> Optional[Assignment]:
        raise NotImplementedError

    def list_active_for_position(self, position_id: int, *, for_update: bool = False) -> Sequence[Assignment]:
        """Active holders, longest-serving first."""

        raise NotImplementedError

    def list_for_position(self, position_id: int) -> Sequence[Assignment]:
        """Full history, newest start date first, ties by id descending."""

        raise NotImplementedError

    def count_for_position(self, position_id: int) -> int:
        raise NotImplementedError

    def create_active(
        self,
        *,
        position_id: int,
        person_id: int,
        start_date: date,
        period_year: int,
        notes: Optional[str],
    ) -> int:
        """Insert an active assignment.

        Raises AlreadyAssignedError when the storage-level one-active-per-person
        guard rejects the row.
        """

        raise NotImplementedError

    def close(self, assignment_id: int, *, end_date: date, notes: Optional[str]) -> bool:
        """Conditionally release an assignment that is still active.

        ``notes=None`` keeps the stored notes. Returns False when no active row matched.
        """

        raise NotImplementedError

    def count_active_by_position(self) -> Mapping[int, int]:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError
