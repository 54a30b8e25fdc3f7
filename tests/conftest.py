from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.firehouse.firehouse.assignments.model import Assignment, history_sort_key, seniority_sort_key
from src.firehouse.firehouse.attendance.model import AttendanceEntry
from src.firehouse.firehouse.core.enums import Branch, EventState
from src.firehouse.firehouse.core.exceptions import AlreadyAssignedError, ConflictError
from src.firehouse.firehouse.events.model import Event, EventFilters
from src.firehouse.firehouse.lifecycle.orchestrator import LifecycleOrchestrator
from src.firehouse.firehouse.persons.model import Person
from src.firehouse.firehouse.positions.model import Position

TODAY = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 9, 0, 0)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@dataclass
class InMemoryStore:
    clock: FakeClock
    persons: dict = field(default_factory=dict)
    positions: dict = field(default_factory=dict)
    assignments: dict = field(default_factory=dict)
    events: dict = field(default_factory=dict)
    attendance: dict = field(default_factory=dict)
    seq: dict = field(default_factory=lambda: {"position": 0, "assignment": 0, "event": 0})

    def next_id(self, kind: str) -> int:
        self.seq[kind] += 1
        return self.seq[kind]

    def add_person(self, person_id: int, name: str, *, rank: Optional[str] = None, active: bool = True) -> Person:
        person = Person(person_id=person_id, display_name=name, rank=rank, is_active=active)
        self.persons[person_id] = person
        return person


class InMemoryPersons:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get_active(self, person_id):
        p = self._s.persons.get(int(person_id))
        return p if p and p.is_active else None

    def get_active_many(self, person_ids):
        found = {}
        for pid in person_ids:
            p = self.get_active(pid)
            if p:
                found[p.person_id] = p
        return found


_BRANCH_ORDER = {b: i for i, b in enumerate(Branch)}


class InMemoryPositions:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def get(self, position_id, *, for_update=False):
        return self._s.positions.get(int(position_id))

    def get_by_name(self, name):
        for p in self._s.positions.values():
            if p.name.lower() == name.lower():
                return p
        return None

    def list(self, *, branch=None, active=None):
        items = [
            p
            for p in self._s.positions.values()
            if (branch is None or p.branch is branch) and (active is None or p.is_active == active)
        ]
        return sorted(items, key=lambda p: (_BRANCH_ORDER[p.branch], p.hierarchy_rank, p.name))

    def create(self, *, name, description, branch, hierarchy_rank, max_occupants, is_active=True):
        if self.get_by_name(name):
            raise ConflictError(f"A position named {name!r} already exists")
        pid = self._s.next_id("position")
        self._s.positions[pid] = Position(
            position_id=pid,
            name=name,
            description=description,
            branch=branch,
            hierarchy_rank=hierarchy_rank,
            max_occupants=max_occupants,
            is_active=is_active,
            created_at=self._s.clock(),
        )
        return pid

    def update(self, position_id, **fields):
        current = self._s.positions.get(int(position_id))
        if not current:
            return False
        self._s.positions[current.position_id] = replace(current, **fields)
        return True

    def set_active(self, position_id, *, is_active):
        return self.update(position_id, is_active=is_active)

    def delete(self, position_id):
        return self._s.positions.pop(int(position_id), None) is not None


class InMemoryAssignments:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def _named(self, a: Assignment) -> Assignment:
        person = self._s.persons.get(a.person_id)
        return replace(a, person_name=person.display_name if person else None)

    def get(self, assignment_id):
        a = self._s.assignments.get(int(assignment_id))
        return self._named(a) if a else None

    def get_active_for_person(self, person_id, *, for_update=False):
        for a in self._s.assignments.values():
            if a.person_id == int(person_id) and a.is_active:
                return self._named(a)
        return None

    def list_active_for_position(self, position_id, *, for_update=False):
        items = [a for a in self._s.assignments.values() if a.position_id == int(position_id) and a.is_active]
        return [self._named(a) for a in sorted(items, key=seniority_sort_key)]

    def list_for_position(self, position_id):
        items = [a for a in self._s.assignments.values() if a.position_id == int(position_id)]
        return [self._named(a) for a in sorted(items, key=history_sort_key)]

    def count_for_position(self, position_id):
        return sum(1 for a in self._s.assignments.values() if a.position_id == int(position_id))

    def create_active(self, *, position_id, person_id, start_date, period_year, notes):
        # unique key on active_person_id
        held = self.get_active_for_person(person_id)
        if held:
            raise AlreadyAssignedError(int(person_id), held.position_id)
        aid = self._s.next_id("assignment")
        self._s.assignments[aid] = Assignment(
            assignment_id=aid,
            position_id=int(position_id),
            person_id=int(person_id),
            start_date=start_date,
            period_year=int(period_year),
            notes=notes,
            created_at=self._s.clock(),
        )
        return aid

    def close(self, assignment_id, *, end_date, notes):
        a = self._s.assignments.get(int(assignment_id))
        if not a or not a.is_active:
            return False
        self._s.assignments[a.assignment_id] = replace(
            a, is_active=False, end_date=end_date, notes=notes if notes is not None else a.notes
        )
        return True

    def count_active_by_position(self):
        counts: dict[int, int] = {}
        for a in self._s.assignments.values():
            if a.is_active:
                counts[a.position_id] = counts.get(a.position_id, 0) + 1
        return counts

    def count_all(self):
        return len(self._s.assignments)


class InMemoryEvents:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def realize_overdue(self, *, today):
        n = 0
        for e in list(self._s.events.values()):
            if e.state is EventState.SCHEDULED and e.event_date < today:
                self._s.events[e.event_id] = replace(e, state=EventState.REALIZED)
                n += 1
        return n

    def get(self, event_id, *, for_update=False):
        return self._s.events.get(int(event_id))

    def list(self, filters: EventFilters):
        items = [
            e
            for e in self._s.events.values()
            if (filters.state is None or e.state is filters.state)
            and (filters.date_from is None or e.event_date >= filters.date_from)
            and (filters.date_to is None or e.event_date <= filters.date_to)
        ]
        items.sort(key=lambda e: (e.event_date, e.event_time, e.event_id), reverse=True)
        return items[: filters.limit]

    def create(self, *, title, event_date, event_time, location, reason, created_by):
        eid = self._s.next_id("event")
        self._s.events[eid] = Event(
            event_id=eid,
            title=title,
            event_date=event_date,
            event_time=event_time,
            location=location,
            reason=reason,
            state=EventState.SCHEDULED,
            created_by=created_by,
            created_at=self._s.clock(),
        )
        return eid

    def update_details(self, event_id, **fields):
        e = self._s.events.get(int(event_id))
        if not e or e.state is not EventState.SCHEDULED:
            return False
        self._s.events[e.event_id] = replace(e, **fields)
        return True

    def transition(self, event_id, *, from_state, to_state):
        e = self._s.events.get(int(event_id))
        if not e or e.state is not from_state:
            return False
        self._s.events[e.event_id] = replace(e, state=to_state)
        return True

    def delete_unless_realized(self, event_id):
        e = self._s.events.get(int(event_id))
        if not e or e.state is EventState.REALIZED:
            return False
        del self._s.events[e.event_id]
        for key in [k for k in self._s.attendance if k[0] == e.event_id]:
            del self._s.attendance[key]
        return True

    def count_by_state(self):
        counts = {s: 0 for s in EventState}
        for e in self._s.events.values():
            counts[e.state] += 1
        return counts

    def list_upcoming(self, *, today, limit):
        items = [e for e in self._s.events.values() if e.state is EventState.SCHEDULED and e.event_date >= today]
        items.sort(key=lambda e: (e.event_date, e.event_time, e.event_id))
        return items[:limit]

    def count_created_since(self, since):
        return sum(1 for e in self._s.events.values() if e.created_at and e.created_at >= since)


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self._s = store

    def _named(self, entry: AttendanceEntry) -> AttendanceEntry:
        person = self._s.persons.get(entry.person_id)
        if not person:
            return entry
        return replace(entry, person_name=person.display_name, person_rank=person.rank)

    def list_for_event(self, event_id):
        return [self._named(v) for (eid, _), v in self._s.attendance.items() if eid == int(event_id)]

    def get(self, event_id, person_id, *, for_update=False):
        entry = self._s.attendance.get((int(event_id), int(person_id)))
        return self._named(entry) if entry else None

    def add_many(self, event_id, person_ids):
        for pid in person_ids:
            self._s.attendance[(int(event_id), int(pid))] = AttendanceEntry(event_id=int(event_id), person_id=int(pid))
        return len(person_ids)

    def delete_for_event(self, event_id):
        keys = [k for k in self._s.attendance if k[0] == int(event_id)]
        for key in keys:
            del self._s.attendance[key]
        return len(keys)

    def set_outcome(self, event_id, person_id, *, attended, notes):
        entry = self._s.attendance.get((int(event_id), int(person_id)))
        if not entry:
            return False
        self._s.attendance[(entry.event_id, entry.person_id)] = replace(
            entry, attended=attended, notes=notes if notes is not None else entry.notes
        )
        return True

    def count_for_events(self, event_ids):
        counts: dict[int, int] = {}
        for eid, _ in self._s.attendance:
            if eid in event_ids:
                counts[eid] = counts.get(eid, 0) + 1
        return counts


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore):
        self.persons = InMemoryPersons(store)
        self.positions = InMemoryPositions(store)
        self.assignments = InMemoryAssignments(store)
        self.events = InMemoryEvents(store)
        self.attendance = InMemoryAttendance(store)


class InMemoryTransactionRunner:
    """Commit on return, restore the snapshot on any exception."""

    def __init__(self, store: InMemoryStore):
        self.store = store
        self.runs = 0
        self.rollbacks = 0

    def run(self, work):
        self.runs += 1
        snapshot = copy.deepcopy(
            {k: getattr(self.store, k) for k in ("persons", "positions", "assignments", "events", "attendance", "seq")}
        )
        try:
            return work(InMemoryUnitOfWork(self.store))
        except Exception:
            self.rollbacks += 1
            for name, value in snapshot.items():
                setattr(self.store, name, value)
            raise


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryStore:
    s = InMemoryStore(clock=clock)
    s.add_person(1, "Carla Mendez", rank="Captain")
    s.add_person(2, "Tomas Ibarra", rank="Lieutenant")
    s.add_person(3, "Lucia Ferrer", rank="Sergeant")
    s.add_person(4, "Andres Rojas", rank="Firefighter")
    s.add_person(5, "Paula Quiroga", rank="Firefighter")
    s.add_person(6, "Diego Salas", rank="Firefighter", active=False)
    return s


@pytest.fixture
def uow(store) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store)


@pytest.fixture
def tx(store) -> InMemoryTransactionRunner:
    return InMemoryTransactionRunner(store)


@pytest.fixture
def orchestrator(tx, clock) -> LifecycleOrchestrator:
    return LifecycleOrchestrator(tx, clock=clock)


def make_event(store: InMemoryStore, *, on: date, state: EventState = EventState.SCHEDULED, title: str = "Drill") -> Event:
    eid = store.next_id("event")
    event = Event(
        event_id=eid,
        title=title,
        event_date=on,
        event_time=time(19, 30),
        location="Station 1",
        reason="Monthly training session",
        state=state,
        created_by=1,
        created_at=store.clock(),
    )
    store.events[eid] = event
    return event


@pytest.fixture
def event_factory(store):
    def factory(*, on: date, state: EventState = EventState.SCHEDULED, title: str = "Drill") -> Event:
        return make_event(store, on=on, state=state, title=title)

    return factory
