from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Person:
    """Roster member as seen by this subsystem.

    Note: Personnel records are owned by the roster application; only the
    fields needed for lookups and display are read here.
    """

    person_id: int
    display_name: str
    rank: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {"person_id": self.person_id, "display_name": self.display_name, "rank": self.rank}
