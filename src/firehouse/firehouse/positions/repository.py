from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Branch
from .model import Position


class PositionRepository(Protocol):
    def get(self, position_id: int, *, for_update: bool = False) -> Optional[Position]:
        """Fetch one position; ``for_update`` takes a row lock until commit."""

        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Position]:
        raise NotImplementedError

    def list(self, *, branch: Optional[Branch] = None, active: Optional[bool] = None) -> Sequence[Position]:
        """Ordered by branch, then hierarchy rank, then name."""

        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        description: Optional[str],
        branch: Branch,
        hierarchy_rank: int,
        max_occupants: int,
        is_active: bool = True,
    ) -> int:
        """Insert a position and return its id.

        Raises ConflictError when the name is already taken.
        """

        raise NotImplementedError

    def update(
        self,
        position_id: int,
        *,
        name: str,
        description: Optional[str],
        branch: Branch,
        hierarchy_rank: int,
        max_occupants: int,
        is_active: bool,
    ) -> bool:
        raise NotImplementedError

    def set_active(self, position_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def delete(self, position_id: int) -> bool:
        raise NotImplementedError
