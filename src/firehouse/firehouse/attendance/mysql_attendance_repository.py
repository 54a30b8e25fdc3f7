from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..database.mysql_base import fetchall, fetchone, in_clause
from .model import AttendanceEntry
from .repository import AttendanceRepository

_SELECT = """
    SELECT ae.event_id, ae.person_id, ae.attended, ae.notes,
           p.display_name AS person_name, p.rank_title AS person_rank
    FROM attendance_entries ae
    LEFT JOIN persons p ON p.person_id = ae.person_id
"""


def _attended(value) -> Optional[bool]:
    return None if value is None else bool(value)


def _row_to_entry(r: dict) -> AttendanceEntry:
    return AttendanceEntry(
        event_id=int(r["event_id"]),
        person_id=int(r["person_id"]),
        attended=_attended(r.get("attended")),
        notes=r.get("notes"),
        person_name=r.get("person_name"),
        person_rank=r.get("person_rank"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, cur):
        self._cur = cur

    def list_for_event(self, event_id: int) -> Sequence[AttendanceEntry]:
        self._cur.execute(
            f"{_SELECT} WHERE ae.event_id=%s ORDER BY ae.created_at ASC, ae.person_id ASC",
            (int(event_id),),
        )
        return [_row_to_entry(r) for r in fetchall(self._cur)]

    def get(self, event_id: int, person_id: int, *, for_update: bool = False) -> Optional[AttendanceEntry]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(
            f"{_SELECT} WHERE ae.event_id=%s AND ae.person_id=%s{lock}",
            (int(event_id), int(person_id)),
        )
        r = fetchone(self._cur)
        return _row_to_entry(r) if r else None

    def add_many(self, event_id: int, person_ids: Sequence[int]) -> int:
        if not person_ids:
            return 0
        self._cur.executemany(
            "INSERT INTO attendance_entries(event_id, person_id, attended) VALUES(%s,%s,NULL)",
            [(int(event_id), int(p)) for p in person_ids],
        )
        return len(person_ids)

    def delete_for_event(self, event_id: int) -> int:
        self._cur.execute("DELETE FROM attendance_entries WHERE event_id=%s", (int(event_id),))
        return int(self._cur.rowcount or 0)

    def set_outcome(self, event_id: int, person_id: int, *, attended: Optional[bool], notes: Optional[str]) -> bool:
        self._cur.execute(
            """
            UPDATE attendance_entries
            SET attended=%s, notes=COALESCE(%s, notes)
            WHERE event_id=%s AND person_id=%s
            """,
            (None if attended is None else int(attended), notes, int(event_id), int(person_id)),
        )
        return self._cur.rowcount > 0

    def count_for_events(self, event_ids: Sequence[int]) -> Dict[int, int]:
        ids = [int(e) for e in event_ids]
        if not ids:
            return {}
        self._cur.execute(
            f"""
            SELECT event_id, COUNT(*) AS n
            FROM attendance_entries
            WHERE event_id IN ({in_clause(ids)})
            GROUP BY event_id
            """,
            tuple(ids),
        )
        return {int(r["event_id"]): int(r["n"]) for r in fetchall(self._cur)}
