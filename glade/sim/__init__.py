"""World model, action engine, pathfinding and movement."""

from glade.sim.contracts import (
    Action,
    ActionKind,
    DialogueRequest,
    DialogueResponse,
    DialogueTurn,
    NewGameRequest,
    NewGameResponse,
    WorldPayload,
    parse_action,
)
from glade.sim.movement import MovementScheduler
from glade.sim.mutation import Mutation, apply_action, resolve_action_kind
from glade.sim.pathfinding import PathFinder, find_path
from glade.sim.validation import CounterIds, MapValidationError, UuidIds
from glade.sim.world_state import DialogueHistory, Tile, World, WorldStore

__all__ = [
    "Action",
    "ActionKind",
    "CounterIds",
    "DialogueHistory",
    "DialogueRequest",
    "DialogueResponse",
    "DialogueTurn",
    "MapValidationError",
    "MovementScheduler",
    "Mutation",
    "NewGameRequest",
    "NewGameResponse",
    "PathFinder",
    "Tile",
    "UuidIds",
    "World",
    "WorldPayload",
    "WorldStore",
    "apply_action",
    "find_path",
    "parse_action",
    "resolve_action_kind",
]
