from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from .model import Person


class PersonRegistry(Protocol):
    """Read-only view of the personnel roster.

    Note (DIP): services depend on this interface, never on a concrete table.
    """

    def get_active(self, person_id: int) -> Optional[Person]:
        """Return the person only if it exists and is active."""

        raise NotImplementedError

    def get_active_many(self, person_ids: Sequence[int]) -> Mapping[int, Person]:
        """Resolve several ids at once; unknown or inactive ids are absent from the result."""

        raise NotImplementedError
