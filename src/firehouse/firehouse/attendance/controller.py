from __future__ import annotations

from flask import Flask, request

from ..api.auth import actor_required
from ..api.errors import ok
from ..container import Container
from ..lifecycle.commands import BulkAttendanceCommand, SetAttendanceCommand


def register(app: Flask, container: Container) -> None:
    orchestrator = container.orchestrator

    @app.route(
        "/api/events/<int:event_id>/attendance/<int:person_id>",
        methods=["PUT"],
        endpoint="set_attendance",
    )
    @actor_required
    def set_attendance(event_id: int, person_id: int):
        cmd = SetAttendanceCommand.from_payload(event_id, person_id, request.get_json(silent=True))
        return ok(orchestrator.set_attendance(cmd).to_dict())

    @app.route("/api/events/<int:event_id>/attendance", methods=["PUT"], endpoint="bulk_set_attendance")
    @actor_required
    def bulk_set_attendance(event_id: int):
        cmd = BulkAttendanceCommand.from_payload(event_id, request.get_json(silent=True))
        return ok(orchestrator.bulk_set_attendance(cmd).to_dict())

    @app.route("/api/events/<int:event_id>/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @actor_required
    def attendance_summary(event_id: int):
        return ok(orchestrator.attendance_summary(event_id).to_dict())
