"""Deterministic generator for tests, demos and offline runs."""

from __future__ import annotations

import copy
import random
from dataclasses import dataclass
from typing import Any

from glade.llm.base import (
    GeneratorContext,
    Mode,
    Narration,
    Proposal,
    ToolCall,
    ToolResult,
)
from glade.sim.world_state import Tile, generate_grid, grid_to_rows

QUEST_WORDS = ("work", "quest", "job", "help")

STARTER_QUESTS = [
    {
        "id": "quest-rats",
        "title": "Rat trouble",
        "desc": "Help the innkeeper clear out the cellar.",
    },
    {
        "id": "quest-ring",
        "title": "The lost ring",
        "desc": "Find the ring dropped on the eastern trail.",
    },
]


@dataclass
class FakeGenerator:
    seed: int = 7

    def propose(self, context: GeneratorContext) -> Proposal:
        if context.mode is Mode.DIALOGUE:
            return self._propose_dialogue(context)
        if any(message["role"] == "assistant" for message in context.messages):
            return Proposal()
        return self._propose_world(context)

    def narrate(
        self, context: GeneratorContext, results: list[ToolResult]
    ) -> Narration:
        if context.mode is Mode.DIALOGUE:
            if any(result.call.name == "give_quests" for result in results):
                return Narration(narration="There is always work for steady hands.")
            return Narration(narration="Good to see a new face around here.")
        spawned = sum(1 for result in results if result.call.name.startswith("spawn"))
        return Narration(
            narration=f"You wake in a glade. {spawned} figures stir nearby."
        )

    def _propose_world(self, context: GeneratorContext) -> Proposal:
        width, height = _requested_size(context)
        rng = random.Random(self.seed)
        grid = generate_grid(width, height, rng=rng)
        open_cells = [
            (x, y)
            for y, row in enumerate(grid)
            for x, tile in enumerate(row)
            if tile == Tile.GRASS
        ]
        npc_cell, enemy_cell, item_cell, waypoint_cell = rng.sample(open_cells, 4)
        calls = [
            (
                "create_map",
                {"w": width, "h": height, "rows": grid_to_rows(grid)},
            ),
            (
                "spawn_npc",
                {
                    "x": npc_cell[0],
                    "y": npc_cell[1],
                    "name": "Griddle",
                    "role": "trader",
                    "persona": "greedy but charming",
                },
            ),
            (
                "spawn_enemy",
                {
                    "x": enemy_cell[0],
                    "y": enemy_cell[1],
                    "kind": "rat",
                    "stats": {"hp": 4, "atk": 1},
                },
            ),
            ("place_item", {"x": item_cell[0], "y": item_cell[1], "kind": "gold"}),
            (
                "set_waypoint",
                {"x": waypoint_cell[0], "y": waypoint_cell[1], "note": "The tavern"},
            ),
        ]
        return Proposal(tool_calls=_to_calls(calls))

    def _propose_dialogue(self, context: GeneratorContext) -> Proposal:
        message = context.messages[-1]["content"].lower()
        calls: list[tuple[str, dict[str, Any]]] = []
        if any(word in message for word in QUEST_WORDS):
            calls.append(("give_quests", {"quests": STARTER_QUESTS}))
        calls.append(
            (
                "offer_replies",
                {
                    "options": [
                        {"text": "Tell me about this place."},
                        {"text": "Any work for me?"},
                        {"text": "Goodbye."},
                    ]
                },
            )
        )
        return Proposal(tool_calls=_to_calls(calls))


def _to_calls(calls: list[tuple[str, dict[str, Any]]]) -> list[ToolCall]:
    return [
        ToolCall(id=f"call-{index}", name=name, arguments=copy.deepcopy(args))
        for index, (name, args) in enumerate(calls, start=1)
    ]


def _requested_size(context: GeneratorContext) -> tuple[int, int]:
    for message in context.messages:
        content = message["content"]
        if "Size: " in content:
            size = content.split("Size: ", 1)[1].rstrip(".")
            width, _, height = size.partition("x")
            if width.isdigit() and height.isdigit():
                return int(width), int(height)
    return 24, 24
