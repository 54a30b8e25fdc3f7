from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable ``code`` and the HTTP ``status`` the API
    layer answers with.
    """

    code = "domain_error"
    status = 400

    def details(self) -> dict:
        return {}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"
    status = 400


class NotFoundError(DomainError):
    """Raised when an entity id is unknown."""

    code = "not_found"
    status = 404


class ConflictError(DomainError):
    """Raised when the current state of an entity forbids the operation."""

    code = "conflict"
    status = 409


class AlreadyAssignedError(ConflictError):
    code = "already_assigned"

    def __init__(
        self,
        person_id: int,
        current_position_id: Optional[int],
        current_position_name: Optional[str] = None,
    ):
        self.person_id = person_id
        self.current_position_id = current_position_id
        self.current_position_name = current_position_name
        label = current_position_name or (f"#{current_position_id}" if current_position_id else "another position")
        super().__init__(f"Person {person_id} already holds the position {label}; release it first")

    def details(self) -> dict:
        return {
            "person_id": self.person_id,
            "current_position_id": self.current_position_id,
            "current_position_name": self.current_position_name,
        }


class CapacityExceededError(ConflictError):
    code = "capacity_exceeded"

    def __init__(self, position_id: int, max_occupants: int):
        self.position_id = position_id
        self.max_occupants = max_occupants
        super().__init__(
            f"Position {position_id} already has its maximum of {max_occupants} occupant(s); release a seat first"
        )

    def details(self) -> dict:
        return {"position_id": self.position_id, "max_occupants": self.max_occupants}


class NoActiveAssignmentError(ConflictError):
    code = "no_active_assignment"

    def __init__(self, position_id: int):
        self.position_id = position_id
        super().__init__(f"Position {position_id} has no active assignment to release")

    def details(self) -> dict:
        return {"position_id": self.position_id}


class ImmutableStateError(ConflictError):
    """Raised when an edit targets an event that can no longer change."""

    code = "immutable_state"


class InvalidTransitionError(ConflictError):
    """Raised on an illegal event state machine move."""

    code = "invalid_transition"


class InvalidAttendeeError(DomainError):
    code = "invalid_attendee"
    status = 422

    def __init__(self, person_ids: Sequence[int]):
        self.person_ids = list(person_ids)
        joined = ", ".join(str(p) for p in self.person_ids)
        super().__init__(f"Attendees not found or inactive: {joined}")

    def details(self) -> dict:
        return {"person_ids": self.person_ids}


class NotOnRosterError(DomainError):
    code = "not_on_roster"
    status = 404

    def __init__(self, event_id: int, person_id: int):
        self.event_id = event_id
        self.person_id = person_id
        super().__init__(f"Person {person_id} is not on the roster of event {event_id}")

    def details(self) -> dict:
        return {"event_id": self.event_id, "person_id": self.person_id}
