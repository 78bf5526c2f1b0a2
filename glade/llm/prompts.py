"""Prompt context building and parsing helpers."""

from __future__ import annotations

import json
from typing import Any, Iterable

from glade.llm.base import GeneratorContext, Mode, ToolResult
from glade.llm.tools import tools_for
from glade.sim.contracts import (
    DialogueRequest,
    DialogueTurn,
    NewGameRequest,
    Speaker,
    WorldPayload,
)
from glade.sim.world_state import REQUEST_HISTORY

SUMMARY_LIMIT = 6

WORLD_INSTRUCTION = (
    "You direct the opening location of an RPG. "
    "Create the map ({w}x{h}), 1-2 friendly NPCs, 1-3 enemies, 1-3 items and a "
    "waypoint. Use the functions. Do not place entities on impassable tiles."
)
DIALOGUE_INSTRUCTION = (
    "You are an NPC in a tile-based RPG. Answer briefly and to the point. "
    "When it fits, use the functions: give_quests, set_waypoint, place_item, "
    "spawn_enemy, spawn_npc, modify_tiles. "
    "After your line, almost always offer the player 2-4 replies (offer_replies)."
)
WORLD_NARRATION = "Write a short opening line now that the location exists."
DIALOGUE_NARRATION = "Write the NPC's short line after the tools were applied."
APPLIED_PREFIX = (
    "Already applied (do not repeat these; call more functions only if something "
    "is still missing):"
)


def narration_instruction(mode: Mode) -> str:
    if mode is Mode.DIALOGUE:
        return DIALOGUE_NARRATION
    return WORLD_NARRATION


def format_tool_results(results: Iterable[ToolResult]) -> str:
    applied = [
        {
            "name": result.call.name,
            "arguments": result.call.arguments,
            "output": result.output,
        }
        for result in results
    ]
    return f"{APPLIED_PREFIX} {_dump(applied)}"


def world_generation_context(
    request: NewGameRequest, *, temperature: float = 0.8
) -> GeneratorContext:
    size = request.size
    return GeneratorContext(
        mode=Mode.WORLD,
        messages=[
            {
                "role": "system",
                "content": WORLD_INSTRUCTION.format(w=size.w, h=size.h),
            },
            {
                "role": "user",
                "content": f"Theme: {request.theme_hint}. Size: {size.w}x{size.h}.",
            },
        ],
        tools=tools_for(Mode.WORLD),
        temperature=temperature,
    )


def dialogue_context(
    request: DialogueRequest, *, temperature: float = 0.9
) -> GeneratorContext:
    npc = request.npc
    summary = summarize_world(request.world)
    history = format_history(request.history, npc_name=npc.name)
    npc_card = _dump({"name": npc.name, "role": npc.role})
    return GeneratorContext(
        mode=Mode.DIALOGUE,
        messages=[
            {"role": "system", "content": DIALOGUE_INSTRUCTION},
            {"role": "user", "content": f"NPC: {npc_card}"},
            {"role": "user", "content": f"World state (brief): {_dump(summary)}"},
            {"role": "user", "content": f"Dialogue so far:\n{history or '-'}"},
            {"role": "user", "content": f"Player: {request.player_message}"},
        ],
        tools=tools_for(Mode.DIALOGUE),
        temperature=temperature,
    )


def summarize_world(world: WorldPayload) -> dict[str, Any]:
    return {
        "map": {"w": world.map.w, "h": world.map.h},
        "npcs": [
            {"name": npc.name, "x": npc.x, "y": npc.y}
            for npc in world.npcs[:SUMMARY_LIMIT]
        ],
        "enemies": [
            {"kind": enemy.kind, "x": enemy.x, "y": enemy.y}
            for enemy in world.enemies[:SUMMARY_LIMIT]
        ],
        "items": [item.model_dump() for item in world.items[:SUMMARY_LIMIT]],
    }


def format_history(
    history: Iterable[DialogueTurn],
    *,
    npc_name: str,
    limit: int = REQUEST_HISTORY,
) -> str:
    labels = {Speaker.PLAYER: "Player", Speaker.NPC: npc_name or "NPC"}
    turns = list(history)[-limit:] if limit > 0 else []
    return "\n".join(
        f"{labels.get(turn.speaker, 'System')}: {turn.text}" for turn in turns
    )


def extract_json(text: str) -> dict[str, Any] | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        return None
    snippet = text[start : end + 1]
    try:
        loaded = json.loads(snippet)
    except json.JSONDecodeError:
        return None
    if isinstance(loaded, dict):
        return loaded
    return None


def _dump(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False)
