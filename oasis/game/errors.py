# oasis/game/errors.py
from __future__ import annotations

from typing import Any, Optional


class GameError(Exception):
    """Base for every rejection the game core can raise.

    ``code`` is stable and machine readable; ``message`` is what the player
    sees. ``detail`` carries structured context (costs, the blocking building)
    so the client can pick the right affordance.
    """

    code = "game_error"
    status_code = 400
    default_message = "Request rejected"

    def __init__(self, message: Optional[str] = None, **detail: Any) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, **self.detail}


class NotFound(GameError):
    code = "not_found"
    status_code = 404
    default_message = "Not found"


class UnknownBuildingType(GameError):
    code = "unknown_building_type"
    default_message = "Invalid building type"


class QueueBusy(GameError):
    code = "queue_busy"
    status_code = 409
    default_message = "Build queue is full: another building is already under construction"


class SlotOccupied(GameError):
    code = "slot_occupied"
    status_code = 409
    default_message = "This slot is already occupied"


class InsufficientResources(GameError):
    code = "insufficient_resources"
    default_message = "Not enough resources"


class MaxLevelReached(GameError):
    code = "max_level_reached"
    default_message = "Building is already at max level"


class AlreadyUpgrading(GameError):
    code = "already_upgrading"
    status_code = 409
    default_message = "Building is already being upgraded"


class ValidationError(GameError):
    code = "validation_error"
    default_message = "Missing or invalid fields"


class RepositoryFailure(GameError):
    """The record store itself failed. Never retried by the core."""

    code = "repository_failure"
    status_code = 500
    default_message = "Storage failure"


class StorageConflict(RepositoryFailure):
    """A uniqueness guard in the schema rejected a write."""

    code = "storage_conflict"
    status_code = 409
    default_message = "Conflicting write"
