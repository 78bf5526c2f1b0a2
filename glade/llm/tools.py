"""JSON-schema tool definitions offered to the generator."""

from __future__ import annotations

from typing import Any

from glade.llm.base import Mode

_COORDS = {
    "x": {"type": "integer", "minimum": 0},
    "y": {"type": "integer", "minimum": 0},
}

CREATE_MAP = {
    "name": "create_map",
    "description": "Create the game map.",
    "parameters": {
        "type": "object",
        "properties": {
            "w": {"type": "integer", "minimum": 8, "maximum": 48},
            "h": {"type": "integer", "minimum": 8, "maximum": 48},
            "legend": {
                "type": "object",
                "description": "Maps row characters to tiles (grass, wall, water).",
                "additionalProperties": {"type": "string"},
            },
            "rows": {
                "type": "array",
                "description": "h strings of length w using only '0', '1', '2'.",
                "items": {"type": "string"},
            },
        },
        "required": ["w", "h", "rows"],
    },
}

SPAWN_NPC = {
    "name": "spawn_npc",
    "description": "Place a friendly NPC at the given tile.",
    "parameters": {
        "type": "object",
        "properties": {
            **_COORDS,
            "name": {"type": "string"},
            "role": {"type": "string"},
            "persona": {"type": "string", "description": "Speech and manner."},
        },
        "required": ["x", "y", "name"],
    },
}

SPAWN_ENEMY = {
    "name": "spawn_enemy",
    "description": "Place an enemy at the given tile.",
    "parameters": {
        "type": "object",
        "properties": {
            **_COORDS,
            "kind": {"type": "string"},
            "stats": {
                "type": "object",
                "properties": {
                    "hp": {"type": "integer", "minimum": 1, "default": 5},
                    "atk": {"type": "integer", "minimum": 1, "default": 1},
                },
            },
        },
        "required": ["x", "y", "kind"],
    },
}

PLACE_ITEM = {
    "name": "place_item",
    "description": "Put an item on a tile.",
    "parameters": {
        "type": "object",
        "properties": {**_COORDS, "kind": {"type": "string"}},
        "required": ["x", "y", "kind"],
    },
}

SET_WAYPOINT = {
    "name": "set_waypoint",
    "description": "Mark a target location for the player.",
    "parameters": {
        "type": "object",
        "properties": {**_COORDS, "note": {"type": "string"}},
        "required": ["x", "y"],
    },
}

GIVE_QUESTS = {
    "name": "give_quests",
    "description": "Offer the player up to 3 quests.",
    "parameters": {
        "type": "object",
        "properties": {
            "quests": {
                "type": "array",
                "maxItems": 3,
                "items": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "title": {"type": "string"},
                        "desc": {"type": "string"},
                    },
                    "required": ["title", "desc"],
                },
            }
        },
        "required": ["quests"],
    },
}

MODIFY_TILES = {
    "name": "modify_tiles",
    "description": "Change a set of map tiles (bridges, doors, trails).",
    "parameters": {
        "type": "object",
        "properties": {
            "changes": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        **_COORDS,
                        "tile": {
                            "type": "integer",
                            "description": "0=grass, 1=wall, 2=water",
                        },
                    },
                    "required": ["x", "y", "tile"],
                },
            },
            "note": {"type": "string", "description": "Short note for the player."},
        },
        "required": ["changes"],
    },
}

OFFER_REPLIES = {
    "name": "offer_replies",
    "description": "Offer the player 2-4 short reply options.",
    "parameters": {
        "type": "object",
        "properties": {
            "options": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "text": {"type": "string"},
                    },
                    "required": ["text"],
                },
            }
        },
        "required": ["options"],
    },
}

WORLD_TOOLS: list[dict[str, Any]] = [
    CREATE_MAP,
    SPAWN_NPC,
    SPAWN_ENEMY,
    PLACE_ITEM,
    SET_WAYPOINT,
    GIVE_QUESTS,
    MODIFY_TILES,
    OFFER_REPLIES,
]

# The map itself is fixed while talking.
DIALOGUE_TOOLS: list[dict[str, Any]] = [
    tool for tool in WORLD_TOOLS if tool is not CREATE_MAP
]


def tools_for(mode: Mode) -> list[dict[str, Any]]:
    if mode is Mode.DIALOGUE:
        return list(DIALOGUE_TOOLS)
    return list(WORLD_TOOLS)
