from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.firehouse.firehouse.core.enums import EventState
from src.firehouse.firehouse.core.exceptions import (
    AlreadyAssignedError,
    CapacityExceededError,
    ImmutableStateError,
    InvalidAttendeeError,
    NoActiveAssignmentError,
)
from src.firehouse.firehouse.lifecycle.commands import (
    AssignCommand,
    BulkAttendanceCommand,
    CreateEventCommand,
    CreatePositionCommand,
    ReleaseCommand,
    ReplaceRosterCommand,
    SetAttendanceCommand,
    UpdateEventCommand,
)

TODAY = date(2026, 3, 10)


def _position(orchestrator, name, *, seats=1, branch="ADMINISTRATIVE"):
    return orchestrator.create_position(
        CreatePositionCommand.from_payload(
            {"name": name, "branch": branch, "hierarchy_rank": 3, "max_occupants": seats}
        )
    )


def _event(orchestrator, *, on, attendees=(1, 2)):
    return orchestrator.create_event_with_roster(
        CreateEventCommand.from_payload(
            {
                "title": "General assembly",
                "date": on.isoformat(),
                "time": "19:00",
                "location": "Station 1 hall",
                "reason": "Annual general assembly of members",
                "attendee_ids": list(attendees),
            },
            actor_id=1,
        )
    )


def _assign(orchestrator, position_id, person_id):
    return orchestrator.assign_to_position(AssignCommand.from_payload(position_id, {"person_id": person_id}))


def test_treasurer_scenario(orchestrator):
    treasurer = _position(orchestrator, "Treasurer")

    first = _assign(orchestrator, treasurer.position_id, 1)
    assert first.start_date == TODAY
    assert first.period_year == 2026

    with pytest.raises(CapacityExceededError):
        _assign(orchestrator, treasurer.position_id, 2)

    orchestrator.release_position(ReleaseCommand.from_payload(treasurer.position_id, None))
    second = _assign(orchestrator, treasurer.position_id, 2)

    assert orchestrator.active_holder(treasurer.position_id).assignment_id == second.assignment_id


def test_assign_release_history_round_trip(orchestrator):
    p = _position(orchestrator, "Secretary")

    created = _assign(orchestrator, p.position_id, 3)
    assert orchestrator.active_holder(p.position_id) == created

    released = orchestrator.release_position(
        ReleaseCommand.from_payload(p.position_id, {"end_date": "2026-03-10", "notes": "Resigned"})
    )
    assert orchestrator.active_holder(p.position_id) is None
    assert released.start_date == created.start_date

    history = orchestrator.position_history(p.position_id)
    assert [h.assignment_id for h in history] == [created.assignment_id]
    assert history[0].is_active is False

    with pytest.raises(NoActiveAssignmentError):
        orchestrator.release_position(ReleaseCommand.from_payload(p.position_id, {}))


def test_conflicting_assign_leaves_state_unchanged(orchestrator, store, tx):
    president = _position(orchestrator, "President")
    chief = _position(orchestrator, "Chief", branch="OPERATIONAL")
    _assign(orchestrator, president.position_id, 4)
    before = dict(store.assignments)

    with pytest.raises(AlreadyAssignedError) as exc:
        _assign(orchestrator, chief.position_id, 4)

    assert exc.value.current_position_name == "President"
    assert store.assignments == before
    assert tx.rollbacks == 1


def test_yesterday_event_is_realized_and_immutable(orchestrator):
    created = _event(orchestrator, on=TODAY - timedelta(days=1))

    assert created.event.state is EventState.REALIZED
    fetched = orchestrator.get_event(created.event.event_id)
    assert fetched.event.state is EventState.REALIZED
    assert len(fetched.roster) == 2

    with pytest.raises(ImmutableStateError):
        orchestrator.update_event(UpdateEventCommand.from_payload(created.event.event_id, {"title": "Renamed"}))
    with pytest.raises(ImmutableStateError):
        orchestrator.replace_roster(ReplaceRosterCommand.from_payload(created.event.event_id, {"attendee_ids": [3]}))


def test_create_event_is_all_or_nothing(orchestrator, store):
    with pytest.raises(InvalidAttendeeError) as exc:
        _event(orchestrator, on=TODAY + timedelta(days=5), attendees=(5, 999))

    assert exc.value.person_ids == [999]
    assert store.events == {}
    assert store.attendance == {}


def test_repeated_reads_realize_once(orchestrator, clock, store):
    event = _event(orchestrator, on=TODAY)
    clock.now = datetime(2026, 3, 11, 8, 0)

    states = {orchestrator.get_event(event.event.event_id).event.state for _ in range(5)}
    orchestrator.list_events()

    assert states == {EventState.REALIZED}
    assert len(store.events) == 1


def test_update_event_fields_and_roster_together(orchestrator):
    created = _event(orchestrator, on=TODAY + timedelta(days=3))

    updated = orchestrator.update_event(
        UpdateEventCommand.from_payload(
            created.event.event_id, {"location": "Station 2 hall", "attendee_ids": [3, 4, 5]}
        )
    )

    assert updated.event.location == "Station 2 hall"
    assert [e.person_id for e in updated.roster] == [3, 4, 5]


def test_update_event_with_bad_attendee_rolls_back_fields(orchestrator):
    created = _event(orchestrator, on=TODAY + timedelta(days=3))

    with pytest.raises(InvalidAttendeeError):
        orchestrator.update_event(
            UpdateEventCommand.from_payload(created.event.event_id, {"title": "Moved", "attendee_ids": [6]})
        )

    fetched = orchestrator.get_event(created.event.event_id)
    assert fetched.event.title == "General assembly"
    assert [e.person_id for e in fetched.roster] == [1, 2]


def test_attendance_after_the_fact(orchestrator, clock):
    created = _event(orchestrator, on=TODAY, attendees=(1, 2, 3))
    clock.now = datetime(2026, 3, 12, 10, 0)
    event_id = created.event.event_id

    orchestrator.set_attendance(SetAttendanceCommand.from_payload(event_id, 1, {"attended": True}))
    result = orchestrator.bulk_set_attendance(
        BulkAttendanceCommand.from_payload(
            event_id,
            {"entries": [{"person_id": 2, "attended": False}, {"person_id": 9, "attended": True}]},
        )
    )

    assert [f.person_id for f in result.failures] == [9]
    summary = orchestrator.attendance_summary(event_id)
    assert summary.to_dict() == {"event_id": event_id, "invited": 3, "attended": 1, "absent": 1, "pending": 1}
    assert orchestrator.get_event(event_id).event.state is EventState.REALIZED


def test_cancelled_event_can_be_deleted_but_not_realized(orchestrator, store):
    created = _event(orchestrator, on=TODAY + timedelta(days=10))
    event_id = created.event.event_id

    assert orchestrator.cancel_event(event_id).state is EventState.CANCELLED
    orchestrator.delete_event(event_id)

    assert event_id not in store.events
    assert store.attendance == {}


def test_position_detail_and_stats(orchestrator):
    board = _position(orchestrator, "Board Member", seats=3)
    _assign(orchestrator, board.position_id, 1)
    _assign(orchestrator, board.position_id, 2)

    detail = orchestrator.get_position(board.position_id)
    assert [h.person_id for h in detail.holders] == [1, 2]
    assert detail.vacancies == 1

    stats = orchestrator.position_stats()
    assert (stats.total_positions, stats.occupied, stats.total_assignments) == (1, 1, 2)

    stats_events = orchestrator.event_stats()
    assert stats_events.by_state["SCHEDULED"] == 0


def test_attendance_operations_realize_overdue_events(orchestrator, clock, store):
    first = _event(orchestrator, on=TODAY).event.event_id
    second = _event(orchestrator, on=TODAY).event.event_id
    clock.now = datetime(2026, 3, 11, 8, 0)

    orchestrator.attendance_summary(first)

    assert store.events[first].state is EventState.REALIZED
    assert store.events[second].state is EventState.REALIZED
