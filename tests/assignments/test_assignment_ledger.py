from __future__ import annotations

from datetime import date

import pytest

from src.firehouse.firehouse.assignments.service import AssignmentLedger
from src.firehouse.firehouse.core.enums import Branch
from src.firehouse.firehouse.core.exceptions import (
    AlreadyAssignedError,
    CapacityExceededError,
    NoActiveAssignmentError,
    NotFoundError,
    ValidationError,
)
from src.firehouse.firehouse.positions.service import PositionCatalog


@pytest.fixture
def catalog(uow):
    return PositionCatalog(uow.positions, uow.assignments)


@pytest.fixture
def ledger(uow):
    return AssignmentLedger(uow.positions, uow.assignments, uow.persons)


def _assign(ledger, position_id, person_id, start=date(2026, 1, 1)):
    return ledger.assign(position_id=position_id, person_id=person_id, start_date=start, period_year=start.year)


def test_assign_creates_active_assignment(catalog, ledger):
    p = catalog.create(name="Treasurer", branch=Branch.ADMINISTRATIVE, hierarchy_rank=3)

    a = ledger.assign(
        position_id=p.position_id,
        person_id=2,
        start_date=date(2026, 2, 1),
        period_year=2026,
        notes="Elected",
    )

    assert a.is_active
    assert a.end_date is None
    assert a.person_name == "Tomas Ibarra"
    assert a.notes == "Elected"


def test_capacity_is_enforced(catalog, ledger):
    p = catalog.create(name="Deputy Chief", branch=Branch.OPERATIONAL, hierarchy_rank=2, max_occupants=2)
    _assign(ledger, p.position_id, 1)
    _assign(ledger, p.position_id, 2)

    with pytest.raises(CapacityExceededError) as exc:
        _assign(ledger, p.position_id, 3)

    assert exc.value.max_occupants == 2
    assert len(ledger.active_holders(p.position_id)) == 2


def test_person_holds_one_position_at_a_time(catalog, ledger):
    treasurer = catalog.create(name="Treasurer", branch=Branch.ADMINISTRATIVE, hierarchy_rank=3)
    secretary = catalog.create(name="Secretary", branch=Branch.ADMINISTRATIVE, hierarchy_rank=2)
    _assign(ledger, treasurer.position_id, 5)

    with pytest.raises(AlreadyAssignedError) as exc:
        _assign(ledger, secretary.position_id, 5)

    assert exc.value.current_position_id == treasurer.position_id
    assert exc.value.current_position_name == "Treasurer"
    assert ledger.active_holder(secretary.position_id) is None


def test_assign_rejects_inactive_position(catalog, ledger):
    p = catalog.create(name="Librarian", branch=Branch.ADMINISTRATIVE, hierarchy_rank=9, is_active=False)

    with pytest.raises(ValidationError):
        _assign(ledger, p.position_id, 1)


@pytest.mark.parametrize("person_id", [6, 999])
def test_assign_rejects_inactive_or_unknown_person(catalog, ledger, person_id):
    p = catalog.create(name="President", branch=Branch.ADMINISTRATIVE, hierarchy_rank=1)

    with pytest.raises(NotFoundError):
        _assign(ledger, p.position_id, person_id)


def test_assign_unknown_position(ledger):
    with pytest.raises(NotFoundError):
        _assign(ledger, 77, 1)


def test_release_closes_and_frees_the_seat(catalog, ledger):
    p = catalog.create(name="President", branch=Branch.ADMINISTRATIVE, hierarchy_rank=1)
    _assign(ledger, p.position_id, 1)

    closed = ledger.release(position_id=p.position_id, end_date=date(2026, 6, 30), notes="Term ended")

    assert closed.is_active is False
    assert closed.end_date == date(2026, 6, 30)
    assert closed.notes == "Term ended"
    assert ledger.active_holder(p.position_id) is None
    with pytest.raises(NoActiveAssignmentError):
        ledger.release(position_id=p.position_id, end_date=date(2026, 7, 1))


def test_release_without_notes_keeps_existing_notes(catalog, ledger):
    p = catalog.create(name="President", branch=Branch.ADMINISTRATIVE, hierarchy_rank=1)
    ledger.assign(position_id=p.position_id, person_id=1, start_date=date(2026, 1, 1), period_year=2026, notes="Elected")

    closed = ledger.release(position_id=p.position_id, end_date=date(2026, 3, 1))

    assert closed.notes == "Elected"


def test_release_end_date_before_start_is_rejected(catalog, ledger):
    p = catalog.create(name="President", branch=Branch.ADMINISTRATIVE, hierarchy_rank=1)
    _assign(ledger, p.position_id, 1, start=date(2026, 5, 1))

    with pytest.raises(ValidationError):
        ledger.release(position_id=p.position_id, end_date=date(2026, 4, 30))


def test_release_picks_longest_serving_or_named_holder(catalog, ledger):
    p = catalog.create(name="Council Member", branch=Branch.DISCIPLINARY_COUNCIL, hierarchy_rank=1, max_occupants=3)
    _assign(ledger, p.position_id, 3, start=date(2025, 6, 1))
    _assign(ledger, p.position_id, 1, start=date(2024, 6, 1))
    _assign(ledger, p.position_id, 2, start=date(2026, 1, 1))

    assert ledger.active_holder(p.position_id).person_id == 1

    named = ledger.release(position_id=p.position_id, end_date=date(2026, 3, 1), person_id=2)
    assert named.person_id == 2

    oldest = ledger.release(position_id=p.position_id, end_date=date(2026, 3, 1))
    assert oldest.person_id == 1
    assert [h.person_id for h in ledger.active_holders(p.position_id)] == [3]

    with pytest.raises(NoActiveAssignmentError):
        ledger.release(position_id=p.position_id, end_date=date(2026, 3, 1), person_id=5)


def test_history_newest_first_with_id_tiebreak(catalog, ledger):
    p = catalog.create(name="Secretary", branch=Branch.ADMINISTRATIVE, hierarchy_rank=2)
    _assign(ledger, p.position_id, 1, start=date(2024, 1, 1))
    ledger.release(position_id=p.position_id, end_date=date(2024, 1, 1))
    _assign(ledger, p.position_id, 2, start=date(2024, 1, 1))
    ledger.release(position_id=p.position_id, end_date=date(2025, 1, 1))
    _assign(ledger, p.position_id, 3, start=date(2025, 1, 1))

    history = ledger.history(p.position_id)

    assert [h.person_id for h in history] == [3, 2, 1]
    assert [h.is_active for h in history] == [True, False, False]


def test_history_unknown_position(ledger):
    with pytest.raises(NotFoundError):
        ledger.history(123)
