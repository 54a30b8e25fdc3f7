from __future__ import annotations

from typing import Dict, Optional, Sequence

from ..database.mysql_base import fetchall, fetchone, in_clause
from .model import Person
from .repository import PersonRegistry


def _row_to_person(row: dict) -> Person:
    return Person(
        person_id=int(row["person_id"]),
        display_name=row["display_name"],
        rank=row.get("rank_title"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLPersonRegistry(PersonRegistry):
    def __init__(self, cur):
        self._cur = cur

    def get_active(self, person_id: int) -> Optional[Person]:
        self._cur.execute(
            """
            SELECT person_id, display_name, rank_title, is_active
            FROM persons
            WHERE person_id=%s AND is_active=1
            """,
            (int(person_id),),
        )
        row = fetchone(self._cur)
        return _row_to_person(row) if row else None

    def get_active_many(self, person_ids: Sequence[int]) -> Dict[int, Person]:
        ids = [int(p) for p in person_ids]
        if not ids:
            return {}
        # LOCK IN SHARE MODE keeps the people active until the roster commits.
        self._cur.execute(
            f"""
            SELECT person_id, display_name, rank_title, is_active
            FROM persons
            WHERE person_id IN ({in_clause(ids)}) AND is_active=1
            LOCK IN SHARE MODE
            """,
            tuple(ids),
        )
        return {int(r["person_id"]): _row_to_person(r) for r in fetchall(self._cur)}
