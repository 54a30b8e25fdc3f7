from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Sequence

import mysql.connector

from ..core.exceptions import AlreadyAssignedError
from ..database.mysql_base import fetchall, fetchone, is_duplicate_key
from .model import Assignment
from .repository import AssignmentRepository

_SELECT = """
    SELECT a.assignment_id, a.position_id, a.person_id, a.start_date, a.end_date,
           a.is_active, a.period_year, a.notes, a.created_at,
           p.display_name AS person_name
    FROM assignments a
    LEFT JOIN persons p ON p.person_id = a.person_id
"""


def _row_to_assignment(r: dict) -> Assignment:
    return Assignment(
        assignment_id=int(r["assignment_id"]),
        position_id=int(r["position_id"]),
        person_id=int(r["person_id"]),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        is_active=bool(r["is_active"]),
        period_year=int(r["period_year"]),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
        person_name=r.get("person_name"),
    )


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, cur):
        self._cur = cur

    def get(self, assignment_id: int) -> Optional[Assignment]:
        self._cur.execute(f"{_SELECT} WHERE a.assignment_id=%s", (int(assignment_id),))
        r = fetchone(self._cur)
        return _row_to_assignment(r) if r else None

    def get_active_for_person(self, person_id: int, *, for_update: bool = False) -> Optional[Assignment]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(
            f"{_SELECT} WHERE a.person_id=%s AND a.is_active=1 ORDER BY a.assignment_id ASC LIMIT 1{lock}",
            (int(person_id),),
        )
        r = fetchone(self._cur)
        return _row_to_assignment(r) if r else None

    def list_active_for_position(self, position_id: int, *, for_update: bool = False) -> Sequence[Assignment]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(
            f"""
            {_SELECT}
            WHERE a.position_id=%s AND a.is_active=1
            ORDER BY a.start_date ASC, a.assignment_id ASC{lock}
            """,
            (int(position_id),),
        )
        return [_row_to_assignment(r) for r in fetchall(self._cur)]

    def list_for_position(self, position_id: int) -> Sequence[Assignment]:
        self._cur.execute(
            f"""
            {_SELECT}
            WHERE a.position_id=%s
            ORDER BY a.start_date DESC, a.assignment_id DESC
            """,
            (int(position_id),),
        )
        return [_row_to_assignment(r) for r in fetchall(self._cur)]

    def count_for_position(self, position_id: int) -> int:
        self._cur.execute("SELECT COUNT(*) AS n FROM assignments WHERE position_id=%s", (int(position_id),))
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def create_active(
        self,
        *,
        position_id: int,
        person_id: int,
        start_date: date,
        period_year: int,
        notes: Optional[str],
    ) -> int:
        try:
            self._cur.execute(
                """
                INSERT INTO assignments(position_id, person_id, start_date, period_year, notes, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                """,
                (int(position_id), int(person_id), start_date, int(period_year), notes),
            )
        except mysql.connector.IntegrityError as e:
            if not is_duplicate_key(e):
                raise
            # uq_assignments_active_person fired: a concurrent assign committed first.
            current = self.get_active_for_person(person_id)
            raise AlreadyAssignedError(
                person_id=int(person_id),
                current_position_id=current.position_id if current else None,
            ) from e
        return int(self._cur.lastrowid)

    def close(self, assignment_id: int, *, end_date: date, notes: Optional[str]) -> bool:
        self._cur.execute(
            """
            UPDATE assignments
            SET is_active=0, end_date=%s, notes=COALESCE(%s, notes)
            WHERE assignment_id=%s AND is_active=1
            """,
            (end_date, notes, int(assignment_id)),
        )
        return self._cur.rowcount > 0

    def count_active_by_position(self) -> Dict[int, int]:
        self._cur.execute(
            """
            SELECT position_id, COUNT(*) AS n
            FROM assignments
            WHERE is_active=1
            GROUP BY position_id
            """
        )
        return {int(r["position_id"]): int(r["n"]) for r in fetchall(self._cur)}

    def count_all(self) -> int:
        self._cur.execute("SELECT COUNT(*) AS n FROM assignments")
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0
