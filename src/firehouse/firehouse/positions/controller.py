from __future__ import annotations

from flask import Flask, request

from ..api.auth import actor_required
from ..api.errors import ok
from ..container import Container
from ..lifecycle.commands import CreatePositionCommand, UpdatePositionCommand, parse_position_filters
from .service import PositionCatalog


def register(app: Flask, container: Container) -> None:
    orchestrator = container.orchestrator

    @app.route("/api/positions", methods=["GET"], endpoint="list_positions")
    @actor_required
    def list_positions():
        branch, active = parse_position_filters(request.args.to_dict())
        listings = orchestrator.list_positions(branch=branch, active=active)
        grouped = PositionCatalog.group_by_branch(listings)
        return ok(
            {
                "positions": [item.to_dict() for item in listings],
                "by_branch": {name: [item.to_dict() for item in items] for name, items in grouped.items()},
            }
        )

    @app.route("/api/positions/stats", methods=["GET"], endpoint="position_stats")
    @actor_required
    def position_stats():
        return ok(orchestrator.position_stats().to_dict())

    @app.route("/api/positions/<int:position_id>", methods=["GET"], endpoint="get_position")
    @actor_required
    def get_position(position_id: int):
        return ok(orchestrator.get_position(position_id).to_dict())

    @app.route("/api/positions", methods=["POST"], endpoint="create_position")
    @actor_required
    def create_position():
        cmd = CreatePositionCommand.from_payload(request.get_json(silent=True))
        return ok(orchestrator.create_position(cmd).to_dict(), 201)

    @app.route("/api/positions/<int:position_id>", methods=["PUT"], endpoint="update_position")
    @actor_required
    def update_position(position_id: int):
        cmd = UpdatePositionCommand.from_payload(position_id, request.get_json(silent=True))
        return ok(orchestrator.update_position(cmd).to_dict())

    @app.route("/api/positions/<int:position_id>/deactivate", methods=["POST"], endpoint="deactivate_position")
    @actor_required
    def deactivate_position(position_id: int):
        return ok(orchestrator.deactivate_position(position_id).to_dict())

    @app.route("/api/positions/<int:position_id>", methods=["DELETE"], endpoint="delete_position")
    @actor_required
    def delete_position(position_id: int):
        orchestrator.delete_position(position_id)
        return ok({"position_id": position_id, "deleted": True})
