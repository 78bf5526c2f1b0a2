"""Apply one normalized action to a World."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, assert_never

from glade.sim.contracts import (
    Action,
    ActionKind,
    CreateMapAction,
    DialogueOptionsAction,
    GiveQuestsAction,
    ModifyTilesAction,
    PlaceItemAction,
    SetWaypointAction,
    SpawnEnemyAction,
    SpawnNpcAction,
)
from glade.sim.validation import (
    IdProvider,
    MapValidationError,
    normalize_dialogue_options,
    normalize_place_item,
    normalize_quests,
    normalize_spawn_enemy,
    normalize_spawn_npc,
    normalize_tile_changes,
    normalize_waypoint,
    validate_create_map,
)
from glade.sim.world_state import Tile, World

logger = logging.getLogger(__name__)

# Tool names the generator may use that differ from the action type.
TOOL_ALIASES: dict[str, ActionKind] = {
    "offer_replies": ActionKind.DIALOGUE_OPTIONS,
    "spawn_item": ActionKind.PLACE_ITEM,
}


@dataclass(frozen=True)
class Mutation:
    """Outcome of one application.

    `result` is the acknowledgement sent back to the generator; `action` is
    the normalized echo for the client-visible action log, or None when
    nothing was applied.
    """

    result: dict[str, Any]
    action: Action | None = None

    @property
    def applied(self) -> bool:
        return self.action is not None


def resolve_action_kind(name: str) -> ActionKind | None:
    if name in TOOL_ALIASES:
        return TOOL_ALIASES[name]
    try:
        return ActionKind(name)
    except ValueError:
        return None


def apply_action(
    kind: ActionKind, args: dict[str, Any], world: World, *, ids: IdProvider
) -> Mutation:
    kind = ActionKind(kind)
    if not isinstance(args, dict):
        args = {}

    if kind is ActionKind.CREATE_MAP:
        try:
            spec = validate_create_map(
                args.get("w"), args.get("h"), args.get("rows"), args.get("legend")
            )
        except MapValidationError as exc:
            logger.warning("Rejected create_map: %s", exc)
            return Mutation(result={"ok": False, "error": "invalid map"})
        world.replace_grid(spec)
        return Mutation(
            result={"ok": True, "w": spec.w, "h": spec.h},
            action=CreateMapAction(payload=spec),
        )

    if kind is ActionKind.SPAWN_NPC:
        npc = normalize_spawn_npc(
            args, ids=ids, taken=[existing.id for existing in world.npcs]
        )
        world.npcs.append(npc)
        return Mutation(
            result={"ok": True, "npc": npc.model_dump()},
            action=SpawnNpcAction(payload=npc),
        )

    if kind is ActionKind.SPAWN_ENEMY:
        enemy = normalize_spawn_enemy(
            args, ids=ids, taken=[existing.id for existing in world.enemies]
        )
        world.enemies.append(enemy)
        return Mutation(
            result={"ok": True, "enemy": enemy.model_dump()},
            action=SpawnEnemyAction(payload=enemy),
        )

    if kind is ActionKind.PLACE_ITEM:
        item = normalize_place_item(
            args, ids=ids, taken=[existing.id for existing in world.items]
        )
        world.items.append(item)
        return Mutation(
            result={"ok": True, "item": item.model_dump()},
            action=PlaceItemAction(payload=item),
        )

    if kind is ActionKind.SET_WAYPOINT:
        waypoint = normalize_waypoint(args)
        world.waypoint = waypoint
        return Mutation(
            result={"ok": True, "waypoint": waypoint.model_dump()},
            action=SetWaypointAction(payload=waypoint),
        )

    if kind is ActionKind.GIVE_QUESTS:
        quests = normalize_quests(args, ids=ids)
        return Mutation(
            result={
                "ok": True,
                "quests": [quest.model_dump(mode="json") for quest in quests],
            },
            action=GiveQuestsAction(payload=quests),
        )

    if kind is ActionKind.MODIFY_TILES:
        changes = normalize_tile_changes(args)
        applied = 0
        for change in changes.changes:
            if world.in_bounds(change.x, change.y):
                world.grid[change.y][change.x] = Tile.coerce(change.tile)
                applied += 1
        return Mutation(
            result={
                "ok": True,
                "applied": applied,
                "dropped": len(changes.changes) - applied,
                "note": changes.note,
            },
            action=ModifyTilesAction(payload=changes),
        )

    if kind is ActionKind.DIALOGUE_OPTIONS:
        options = normalize_dialogue_options(args)
        return Mutation(
            result={
                "ok": True,
                "options": [option.model_dump() for option in options],
            },
            action=DialogueOptionsAction(payload=options),
        )

    assert_never(kind)
