"""Example: drive the lifecycle orchestrator without Flask.

Controllers are thin; every rule lives behind the orchestrator.
"""

import importlib

from config import get_settings_module

from src.firehouse.firehouse.container import build_container
from src.firehouse.firehouse.core.exceptions import DomainError
from src.firehouse.firehouse.lifecycle.commands import AssignCommand, CreateEventCommand


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    orchestrator = container.orchestrator

    for item in orchestrator.list_positions():
        print(item.position.name, f"{item.active_count}/{item.position.max_occupants}")

    try:
        assignment = orchestrator.assign_to_position(
            AssignCommand.from_payload(3, {"person_id": 2, "notes": "Elected at annual assembly"})
        )
        print("Assigned:", assignment.to_dict())
    except DomainError as e:
        print("Rejected:", e.code, e)

    event = orchestrator.create_event_with_roster(
        CreateEventCommand.from_payload(
            {
                "title": "Monthly drill",
                "date": "2030-03-14",
                "time": "19:30",
                "location": "Station 1 yard",
                "reason": "Hose handling and ladder practice",
                "attendee_ids": [1, 2, 3],
            },
            actor_id=1,
        )
    )
    print(event.to_dict())


if __name__ == "__main__":
    main()
