from __future__ import annotations

from datetime import date

import pytest
from mysql.connector import errors

from src.firehouse.firehouse.assignments.mysql_assignment_repository import MySQLAssignmentRepository
from src.firehouse.firehouse.core.enums import EventState
from src.firehouse.firehouse.core.exceptions import AlreadyAssignedError
from src.firehouse.firehouse.events.mysql_event_repository import MySQLEventRepository
from src.firehouse.firehouse.persons.mysql_person_registry import MySQLPersonRegistry


class ScriptedCursor:
    """Replays queued results; an exception in the queue is raised by execute."""

    def __init__(self, *script):
        self.script = list(script)
        self.executed: list[tuple[str, tuple]] = []
        self.rowcount = 0
        self.lastrowid = None
        self._rows: list = []

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), tuple(params)))
        step = self.script.pop(0) if self.script else {}
        if isinstance(step, Exception):
            raise step
        self._rows = list(step.get("rows", []))
        self.rowcount = step.get("rowcount", len(self._rows))
        self.lastrowid = step.get("lastrowid")

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return self._rows


def test_duplicate_active_person_maps_to_already_assigned():
    cur = ScriptedCursor(
        errors.IntegrityError(msg="Duplicate entry '4' for key 'uq_assignments_active_person'", errno=1062),
        {
            "rows": [
                {
                    "assignment_id": 7,
                    "position_id": 2,
                    "person_id": 4,
                    "start_date": date(2026, 1, 1),
                    "end_date": None,
                    "is_active": 1,
                    "period_year": 2026,
                    "notes": None,
                    "created_at": None,
                    "person_name": "Andres Rojas",
                }
            ]
        },
    )
    repo = MySQLAssignmentRepository(cur)

    with pytest.raises(AlreadyAssignedError) as exc:
        repo.create_active(position_id=3, person_id=4, start_date=date(2026, 3, 1), period_year=2026, notes=None)

    assert exc.value.current_position_id == 2


def test_other_integrity_errors_propagate():
    cur = ScriptedCursor(errors.IntegrityError(msg="Check constraint violated", errno=3819))

    with pytest.raises(errors.IntegrityError):
        MySQLAssignmentRepository(cur).create_active(
            position_id=3, person_id=4, start_date=date(2026, 3, 1), period_year=1990, notes=None
        )


def test_close_is_conditional_on_active_row():
    cur = ScriptedCursor({"rowcount": 0})

    assert MySQLAssignmentRepository(cur).close(9, end_date=date(2026, 3, 1), notes=None) is False
    sql, params = cur.executed[0]
    assert "WHERE assignment_id=%s AND is_active=1" in sql
    assert "COALESCE(%s, notes)" in sql
    assert params == (date(2026, 3, 1), None, 9)


def test_sweep_is_a_single_conditional_update():
    cur = ScriptedCursor({"rowcount": 3})

    assert MySQLEventRepository(cur).realize_overdue(today=date(2026, 3, 10)) == 3
    sql, params = cur.executed[0]
    assert sql.startswith("UPDATE events SET state=%s WHERE state=%s AND event_date < %s")
    assert params == ("REALIZED", "SCHEDULED", date(2026, 3, 10))


def test_transition_reports_compare_and_swap_result():
    cur = ScriptedCursor({"rowcount": 1}, {"rowcount": 0})
    repo = MySQLEventRepository(cur)

    assert repo.transition(5, from_state=EventState.SCHEDULED, to_state=EventState.CANCELLED) is True
    assert repo.transition(5, from_state=EventState.SCHEDULED, to_state=EventState.CANCELLED) is False
    assert cur.executed[0][1] == ("CANCELLED", 5, "SCHEDULED")


def test_get_active_many_skips_query_for_empty_input():
    cur = ScriptedCursor()

    assert MySQLPersonRegistry(cur).get_active_many([]) == {}
    assert cur.executed == []
