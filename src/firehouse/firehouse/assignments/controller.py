from __future__ import annotations

from flask import Flask, request

from ..api.auth import actor_required
from ..api.errors import ok
from ..container import Container
from ..lifecycle.commands import AssignCommand, ReleaseCommand


def register(app: Flask, container: Container) -> None:
    orchestrator = container.orchestrator

    @app.route("/api/positions/<int:position_id>/assign", methods=["POST"], endpoint="assign_position")
    @actor_required
    def assign_position(position_id: int):
        cmd = AssignCommand.from_payload(position_id, request.get_json(silent=True))
        return ok(orchestrator.assign_to_position(cmd).to_dict(), 201)

    @app.route("/api/positions/<int:position_id>/release", methods=["PUT"], endpoint="release_position")
    @actor_required
    def release_position(position_id: int):
        cmd = ReleaseCommand.from_payload(position_id, request.get_json(silent=True))
        return ok(orchestrator.release_position(cmd).to_dict())

    @app.route("/api/positions/<int:position_id>/history", methods=["GET"], endpoint="position_history")
    @actor_required
    def position_history(position_id: int):
        return ok([a.to_dict() for a in orchestrator.position_history(position_id)])

    @app.route("/api/positions/<int:position_id>/holder", methods=["GET"], endpoint="position_holder")
    @actor_required
    def position_holder(position_id: int):
        holders = orchestrator.active_holders(position_id)
        return ok(
            {
                "holder": holders[0].to_dict() if holders else None,
                "holders": [a.to_dict() for a in holders],
            }
        )
