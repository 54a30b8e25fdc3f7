from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Optional, Protocol, Sequence, TypeVar

from ..assignments.model import Assignment
from ..assignments.service import AssignmentLedger
from ..attendance.model import AttendanceEntry, AttendanceSummary, BulkAttendanceResult
from ..attendance.service import AttendanceTracker
from ..common.datetime_utils import now_local
from ..core.enums import Branch
from ..database.unit_of_work import UnitOfWork
from ..events.model import Event, EventDetail, EventFilters, EventListing, EventStats
from ..events.service import EventScheduler
from ..positions.model import Position, PositionDetail, PositionListing, PositionStats
from ..positions.service import PositionCatalog
from .commands import (
    AssignCommand,
    BulkAttendanceCommand,
    CreateEventCommand,
    CreatePositionCommand,
    ReleaseCommand,
    ReplaceRosterCommand,
    SetAttendanceCommand,
    UpdateEventCommand,
    UpdatePositionCommand,
)

T = TypeVar("T")


class TransactionalRunner(Protocol):
    def run(self, work: Callable[[UnitOfWork], T]) -> T:
        raise NotImplementedError


class LifecycleOrchestrator:
    """Entry point for every position, assignment, event and attendance command.

    Each public method is one transaction: services are bound to the unit of
    work handed out by ``tx.run`` so everything they read and write commits or
    rolls back together. Domain errors propagate to the caller unchanged.
    """

    def __init__(self, tx: TransactionalRunner, *, clock: Callable[[], datetime] = now_local):
        self._tx = tx
        self._clock = clock

    def _today(self) -> date:
        return self._clock().date()

    # -- positions -------------------------------------------------------

    def create_position(self, cmd: CreatePositionCommand) -> Position:
        def work(uow: UnitOfWork) -> Position:
            return PositionCatalog(uow.positions, uow.assignments).create(
                name=cmd.name,
                branch=cmd.branch,
                hierarchy_rank=cmd.hierarchy_rank,
                max_occupants=cmd.max_occupants,
                description=cmd.description,
                is_active=cmd.is_active,
            )

        return self._tx.run(work)

    def update_position(self, cmd: UpdatePositionCommand) -> Position:
        return self._tx.run(
            lambda uow: PositionCatalog(uow.positions, uow.assignments).update(cmd.position_id, changes=cmd.changes())
        )

    def deactivate_position(self, position_id: int) -> Position:
        return self._tx.run(lambda uow: PositionCatalog(uow.positions, uow.assignments).deactivate(position_id))

    def delete_position(self, position_id: int) -> None:
        self._tx.run(lambda uow: PositionCatalog(uow.positions, uow.assignments).delete(position_id))

    def get_position(self, position_id: int) -> PositionDetail:
        def work(uow: UnitOfWork) -> PositionDetail:
            position = PositionCatalog(uow.positions, uow.assignments).get(position_id)
            holders = AssignmentLedger(uow.positions, uow.assignments, uow.persons).active_holders(position.position_id)
            return PositionDetail(position=position, holders=tuple(holders))

        return self._tx.run(work)

    def list_positions(
        self,
        *,
        branch: Optional[Branch] = None,
        active: Optional[bool] = None,
    ) -> Sequence[PositionListing]:
        return self._tx.run(
            lambda uow: PositionCatalog(uow.positions, uow.assignments).list(branch=branch, active=active)
        )

    def position_stats(self) -> PositionStats:
        return self._tx.run(lambda uow: PositionCatalog(uow.positions, uow.assignments).stats())

    # -- assignments -----------------------------------------------------

    def assign_to_position(self, cmd: AssignCommand) -> Assignment:
        today = self._today()

        def work(uow: UnitOfWork) -> Assignment:
            return AssignmentLedger(uow.positions, uow.assignments, uow.persons).assign(
                position_id=cmd.position_id,
                person_id=cmd.person_id,
                start_date=cmd.start_date or today,
                period_year=cmd.period_year or today.year,
                notes=cmd.notes,
            )

        return self._tx.run(work)

    def release_position(self, cmd: ReleaseCommand) -> Assignment:
        today = self._today()

        def work(uow: UnitOfWork) -> Assignment:
            return AssignmentLedger(uow.positions, uow.assignments, uow.persons).release(
                position_id=cmd.position_id,
                end_date=cmd.end_date or today,
                notes=cmd.notes,
                person_id=cmd.person_id,
            )

        return self._tx.run(work)

    def position_history(self, position_id: int) -> Sequence[Assignment]:
        return self._tx.run(lambda uow: AssignmentLedger(uow.positions, uow.assignments, uow.persons).history(position_id))

    def active_holder(self, position_id: int) -> Optional[Assignment]:
        return self._tx.run(
            lambda uow: AssignmentLedger(uow.positions, uow.assignments, uow.persons).active_holder(position_id)
        )

    def active_holders(self, position_id: int) -> Sequence[Assignment]:
        return self._tx.run(
            lambda uow: AssignmentLedger(uow.positions, uow.assignments, uow.persons).active_holders(position_id)
        )

    # -- events ----------------------------------------------------------

    def create_event_with_roster(self, cmd: CreateEventCommand) -> EventDetail:
        today = self._today()

        def work(uow: UnitOfWork) -> EventDetail:
            scheduler = EventScheduler(uow.events, uow.attendance)
            tracker = AttendanceTracker(uow.attendance, uow.events, uow.persons)
            # Resolve first: an unknown attendee must leave no event row behind.
            tracker.resolve_attendees(cmd.attendee_ids)
            event = scheduler.create(
                title=cmd.title,
                event_date=cmd.event_date,
                event_time=cmd.event_time,
                location=cmd.location,
                reason=cmd.reason,
                created_by=cmd.created_by,
            )
            tracker.enroll(event.event_id, cmd.attendee_ids)
            return scheduler.get(event.event_id, today=today)

        return self._tx.run(work)

    def update_event(self, cmd: UpdateEventCommand) -> EventDetail:
        today = self._today()

        def work(uow: UnitOfWork) -> EventDetail:
            scheduler = EventScheduler(uow.events, uow.attendance)
            event = scheduler.require_scheduled(cmd.event_id, today=today, action="edited")
            if cmd.attendee_ids is not None:
                AttendanceTracker(uow.attendance, uow.events, uow.persons).replace_roster(
                    event.event_id, cmd.attendee_ids
                )
            if cmd.fields:
                scheduler.update(event.event_id, changes=cmd.changes(), today=today)
            return scheduler.get(event.event_id, today=today)

        return self._tx.run(work)

    def replace_roster(self, cmd: ReplaceRosterCommand) -> EventDetail:
        today = self._today()

        def work(uow: UnitOfWork) -> EventDetail:
            scheduler = EventScheduler(uow.events, uow.attendance)
            event = scheduler.require_scheduled(cmd.event_id, today=today, action="re-rostered")
            AttendanceTracker(uow.attendance, uow.events, uow.persons).replace_roster(event.event_id, cmd.attendee_ids)
            return scheduler.get(event.event_id, today=today)

        return self._tx.run(work)

    def cancel_event(self, event_id: int) -> Event:
        today = self._today()
        return self._tx.run(lambda uow: EventScheduler(uow.events, uow.attendance).cancel(event_id, today=today))

    def realize_event(self, event_id: int) -> Event:
        today = self._today()
        return self._tx.run(lambda uow: EventScheduler(uow.events, uow.attendance).realize(event_id, today=today))

    def delete_event(self, event_id: int) -> None:
        today = self._today()
        self._tx.run(lambda uow: EventScheduler(uow.events, uow.attendance).delete(event_id, today=today))

    def get_event(self, event_id: int) -> EventDetail:
        today = self._today()
        return self._tx.run(lambda uow: EventScheduler(uow.events, uow.attendance).get(event_id, today=today))

    def list_events(self, filters: Optional[EventFilters] = None) -> Sequence[EventListing]:
        today = self._today()
        filters = filters or EventFilters()
        return self._tx.run(lambda uow: EventScheduler(uow.events, uow.attendance).list(filters, today=today))

    def event_stats(self) -> EventStats:
        now = self._clock()
        return self._tx.run(
            lambda uow: EventScheduler(uow.events, uow.attendance).stats(today=now.date(), now=now)
        )

    # -- attendance ------------------------------------------------------

    def set_attendance(self, cmd: SetAttendanceCommand) -> AttendanceEntry:
        today = self._today()

        def work(uow: UnitOfWork) -> AttendanceEntry:
            EventScheduler(uow.events, uow.attendance).sweep(today=today)
            return AttendanceTracker(uow.attendance, uow.events, uow.persons).set_attendance(
                event_id=cmd.event_id,
                person_id=cmd.person_id,
                attended=cmd.attended,
                notes=cmd.notes,
            )

        return self._tx.run(work)

    def bulk_set_attendance(self, cmd: BulkAttendanceCommand) -> BulkAttendanceResult:
        today = self._today()

        def work(uow: UnitOfWork) -> BulkAttendanceResult:
            EventScheduler(uow.events, uow.attendance).sweep(today=today)
            return AttendanceTracker(uow.attendance, uow.events, uow.persons).bulk_set(
                event_id=cmd.event_id, updates=cmd.updates
            )

        return self._tx.run(work)

    def attendance_summary(self, event_id: int) -> AttendanceSummary:
        today = self._today()

        def work(uow: UnitOfWork) -> AttendanceSummary:
            EventScheduler(uow.events, uow.attendance).sweep(today=today)
            return AttendanceTracker(uow.attendance, uow.events, uow.persons).summary(event_id)

        return self._tx.run(work)
