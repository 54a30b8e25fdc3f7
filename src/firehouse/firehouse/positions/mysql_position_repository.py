from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import Branch
from ..core.exceptions import ConflictError
from ..database.mysql_base import fetchall, fetchone, is_duplicate_key
from .model import Position
from .repository import PositionRepository

_COLUMNS = """
    position_id, name, description, branch, hierarchy_rank,
    max_occupants, is_active, created_at, updated_at
"""


def _row_to_position(r: dict) -> Position:
    return Position(
        position_id=int(r["position_id"]),
        name=r["name"],
        description=r.get("description"),
        branch=Branch(r["branch"]),
        hierarchy_rank=int(r["hierarchy_rank"]),
        max_occupants=int(r["max_occupants"]),
        is_active=bool(r["is_active"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLPositionRepository(PositionRepository):
    def __init__(self, cur):
        self._cur = cur

    def get(self, position_id: int, *, for_update: bool = False) -> Optional[Position]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM positions WHERE position_id=%s{lock}",
            (int(position_id),),
        )
        r = fetchone(self._cur)
        return _row_to_position(r) if r else None

    def get_by_name(self, name: str) -> Optional[Position]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM positions WHERE name=%s", (name,))
        r = fetchone(self._cur)
        return _row_to_position(r) if r else None

    def list(self, *, branch: Optional[Branch] = None, active: Optional[bool] = None) -> Sequence[Position]:
        clauses = ["1=1"]
        params: list[object] = []

        if branch is not None:
            clauses.append("branch=%s")
            params.append(branch.value)
        if active is not None:
            clauses.append("is_active=%s")
            params.append(1 if active else 0)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM positions
            WHERE {where}
            ORDER BY FIELD(branch, 'ADMINISTRATIVE', 'OPERATIONAL', 'DISCIPLINARY_COUNCIL'),
                     hierarchy_rank ASC, name ASC
            """,
            tuple(params),
        )
        return [_row_to_position(r) for r in fetchall(self._cur)]

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
        try:
            self._cur.execute(
                """
                INSERT INTO positions(name, description, branch, hierarchy_rank, max_occupants, is_active)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (name, description, branch.value, int(hierarchy_rank), int(max_occupants), 1 if is_active else 0),
            )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(f"A position named {name!r} already exists") from e
            raise
        return int(self._cur.lastrowid)

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
        try:
            self._cur.execute(
                """
                UPDATE positions
                SET name=%s, description=%s, branch=%s, hierarchy_rank=%s, max_occupants=%s, is_active=%s
                WHERE position_id=%s
                """,
                (
                    name,
                    description,
                    branch.value,
                    int(hierarchy_rank),
                    int(max_occupants),
                    1 if is_active else 0,
                    int(position_id),
                ),
            )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(f"A position named {name!r} already exists") from e
            raise
        return self._cur.rowcount > 0

    def set_active(self, position_id: int, *, is_active: bool) -> bool:
        self._cur.execute(
            "UPDATE positions SET is_active=%s WHERE position_id=%s",
            (1 if is_active else 0, int(position_id)),
        )
        return self._cur.rowcount > 0

    def delete(self, position_id: int) -> bool:
        self._cur.execute("DELETE FROM positions WHERE position_id=%s", (int(position_id),))
        return self._cur.rowcount > 0
