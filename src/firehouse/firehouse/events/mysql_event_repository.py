from __future__ import annotations

from datetime import date, datetime, time
from typing import Dict, Optional, Sequence

from ..core.enums import EventState
from ..database.mysql_base import fetchall, fetchone, normalize_mysql_time
from .model import Event, EventFilters
from .repository import EventRepository

_COLUMNS = """
    event_id, title, event_date, event_time, location, reason,
    state, created_by, created_at, updated_at
"""


def _row_to_event(r: dict) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        title=r["title"],
        event_date=r["event_date"],
        event_time=normalize_mysql_time(r["event_time"]),
        location=r["location"],
        reason=r["reason"],
        state=EventState(r["state"]),
        created_by=int(r["created_by"]),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, cur):
        self._cur = cur

    def realize_overdue(self, *, today: date) -> int:
        self._cur.execute(
            """
            UPDATE events
            SET state=%s
            WHERE state=%s AND event_date < %s
            """,
            (EventState.REALIZED.value, EventState.SCHEDULED.value, today),
        )
        return int(self._cur.rowcount or 0)

    def get(self, event_id: int, *, for_update: bool = False) -> Optional[Event]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_id=%s{lock}", (int(event_id),))
        r = fetchone(self._cur)
        return _row_to_event(r) if r else None

    def list(self, filters: EventFilters) -> Sequence[Event]:
        clauses = ["1=1"]
        params: list[object] = []

        if filters.state is not None:
            clauses.append("state=%s")
            params.append(filters.state.value)
        if filters.date_from is not None:
            clauses.append("event_date >= %s")
            params.append(filters.date_from)
        if filters.date_to is not None:
            clauses.append("event_date <= %s")
            params.append(filters.date_to)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM events
            WHERE {where}
            ORDER BY event_date DESC, event_time DESC, event_id DESC
            LIMIT %s
            """,
            tuple(params + [int(filters.limit)]),
        )
        return [_row_to_event(r) for r in fetchall(self._cur)]

    def create(
        self,
        *,
        title: str,
        event_date: date,
        event_time: time,
        location: str,
        reason: str,
        created_by: int,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO events(title, event_date, event_time, location, reason, state, created_by)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (title, event_date, event_time, location, reason, EventState.SCHEDULED.value, int(created_by)),
        )
        return int(self._cur.lastrowid)

    def update_details(
        self,
        event_id: int,
        *,
        title: str,
        event_date: date,
        event_time: time,
        location: str,
        reason: str,
    ) -> bool:
        self._cur.execute(
            """
            UPDATE events
            SET title=%s, event_date=%s, event_time=%s, location=%s, reason=%s
            WHERE event_id=%s AND state=%s
            """,
            (title, event_date, event_time, location, reason, int(event_id), EventState.SCHEDULED.value),
        )
        return self._cur.rowcount > 0

    def transition(self, event_id: int, *, from_state: EventState, to_state: EventState) -> bool:
        self._cur.execute(
            "UPDATE events SET state=%s WHERE event_id=%s AND state=%s",
            (to_state.value, int(event_id), from_state.value),
        )
        return self._cur.rowcount > 0

    def delete_unless_realized(self, event_id: int) -> bool:
        # attendance_entries go with it (ON DELETE CASCADE)
        self._cur.execute(
            "DELETE FROM events WHERE event_id=%s AND state<>%s",
            (int(event_id), EventState.REALIZED.value),
        )
        return self._cur.rowcount > 0

    def count_by_state(self) -> Dict[EventState, int]:
        self._cur.execute("SELECT state, COUNT(*) AS n FROM events GROUP BY state")
        counts = {state: 0 for state in EventState}
        for r in fetchall(self._cur):
            counts[EventState(r["state"])] = int(r["n"])
        return counts

    def list_upcoming(self, *, today: date, limit: int) -> Sequence[Event]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM events
            WHERE state=%s AND event_date >= %s
            ORDER BY event_date ASC, event_time ASC, event_id ASC
            LIMIT %s
            """,
            (EventState.SCHEDULED.value, today, int(limit)),
        )
        return [_row_to_event(r) for r in fetchall(self._cur)]

    def count_created_since(self, since: datetime) -> int:
        self._cur.execute("SELECT COUNT(*) AS n FROM events WHERE created_at >= %s", (since,))
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0
