from __future__ import annotations

from flask import Flask, g, request

from ..api.auth import actor_required
from ..api.errors import ok
from ..container import Container
from ..lifecycle.commands import CreateEventCommand, ReplaceRosterCommand, UpdateEventCommand, parse_event_filters


def register(app: Flask, container: Container) -> None:
    orchestrator = container.orchestrator

    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    @actor_required
    def list_events():
        filters = parse_event_filters(request.args.to_dict())
        return ok([item.to_dict() for item in orchestrator.list_events(filters)])

    @app.route("/api/events/stats", methods=["GET"], endpoint="event_stats")
    @actor_required
    def event_stats():
        return ok(orchestrator.event_stats().to_dict())

    @app.route("/api/events/<int:event_id>", methods=["GET"], endpoint="get_event")
    @actor_required
    def get_event(event_id: int):
        return ok(orchestrator.get_event(event_id).to_dict())

    @app.route("/api/events", methods=["POST"], endpoint="create_event")
    @actor_required
    def create_event():
        cmd = CreateEventCommand.from_payload(request.get_json(silent=True), actor_id=g.actor_id)
        return ok(orchestrator.create_event_with_roster(cmd).to_dict(), 201)

    @app.route("/api/events/<int:event_id>", methods=["PUT"], endpoint="update_event")
    @actor_required
    def update_event(event_id: int):
        cmd = UpdateEventCommand.from_payload(event_id, request.get_json(silent=True))
        return ok(orchestrator.update_event(cmd).to_dict())

    @app.route("/api/events/<int:event_id>/cancel", methods=["POST"], endpoint="cancel_event")
    @actor_required
    def cancel_event(event_id: int):
        return ok(orchestrator.cancel_event(event_id).to_dict())

    @app.route("/api/events/<int:event_id>/realize", methods=["POST"], endpoint="realize_event")
    @actor_required
    def realize_event(event_id: int):
        return ok(orchestrator.realize_event(event_id).to_dict())

    @app.route("/api/events/<int:event_id>", methods=["DELETE"], endpoint="delete_event")
    @actor_required
    def delete_event(event_id: int):
        orchestrator.delete_event(event_id)
        return ok({"event_id": event_id, "deleted": True})

    @app.route("/api/events/<int:event_id>/roster", methods=["PUT"], endpoint="replace_roster")
    @actor_required
    def replace_roster(event_id: int):
        cmd = ReplaceRosterCommand.from_payload(event_id, request.get_json(silent=True))
        return ok(orchestrator.replace_roster(cmd).to_dict())
