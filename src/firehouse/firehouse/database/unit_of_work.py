from __future__ import annotations

from typing import Protocol

from ..assignments.mysql_assignment_repository import MySQLAssignmentRepository
from ..assignments.repository import AssignmentRepository
from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
from ..attendance.repository import AttendanceRepository
from ..events.mysql_event_repository import MySQLEventRepository
from ..events.repository import EventRepository
from ..persons.mysql_person_registry import MySQLPersonRegistry
from ..persons.repository import PersonRegistry
from ..positions.mysql_position_repository import MySQLPositionRepository
from ..positions.repository import PositionRepository


class UnitOfWork(Protocol):
    """Repositories that all see the same open transaction."""

    persons: PersonRegistry
    positions: PositionRepository
    assignments: AssignmentRepository
    events: EventRepository
    attendance: AttendanceRepository


class MySQLUnitOfWork:
    def __init__(self, cur):
        self.persons = MySQLPersonRegistry(cur)
        self.positions = MySQLPositionRepository(cur)
        self.assignments = MySQLAssignmentRepository(cur)
        self.events = MySQLEventRepository(cur)
        self.attendance = MySQLAttendanceRepository(cur)
