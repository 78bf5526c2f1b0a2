"""Coercion and validation of untrusted generator arguments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol
from uuid import uuid4

from glade.sim.contracts import (
    STANDARD_LEGEND,
    DialogueOption,
    Enemy,
    EnemyStats,
    Item,
    MapSpec,
    Npc,
    Quest,
    QuestStatus,
    TileChange,
    TileChanges,
    Waypoint,
)

_TILE_CODES = {"grass": "0", "wall": "1", "water": "2", "0": "0", "1": "1", "2": "2"}


class MapValidationError(ValueError):
    """Raised when a create_map payload does not describe a w x h grid."""


class IdProvider(Protocol):
    def new_id(self, prefix: str) -> str:
        """Return a fresh id for an entity of the given kind."""


@dataclass
class UuidIds(IdProvider):
    def new_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid4().hex[:6]}"


@dataclass
class CounterIds(IdProvider):
    _counts: dict[str, int] = field(default_factory=dict)

    def new_id(self, prefix: str) -> str:
        count = self._counts.get(prefix, 0) + 1
        self._counts[prefix] = count
        return f"{prefix}-{count}"


def to_int(value: Any, default: int = 0) -> int:
    """Coerce to int, truncating toward zero. Garbage becomes `default`."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return str(value)


def validate_create_map(
    w: Any, h: Any, rows: Any, legend: dict[str, Any] | None = None
) -> MapSpec:
    width = to_int(w)
    height = to_int(h)
    if not isinstance(rows, list):
        raise MapValidationError("rows must be a list of strings")
    if len(rows) != height:
        raise MapValidationError(f"expected {height} rows, got {len(rows)}")
    for index, row in enumerate(rows):
        if not isinstance(row, str):
            raise MapValidationError(f"row {index} is not a string")
        if len(row) != width:
            raise MapValidationError(
                f"row {index} has length {len(row)}, expected {width}"
            )

    mapping = dict(STANDARD_LEGEND)
    if isinstance(legend, dict):
        mapping.update({str(key): str(value) for key, value in legend.items()})
    codes = {
        char: _TILE_CODES.get(name.strip().lower(), "0")
        for char, name in mapping.items()
    }
    normalized = ["".join(codes.get(char, "0") for char in row) for row in rows]
    return MapSpec(w=width, h=height, legend=dict(STANDARD_LEGEND), rows=normalized)


def _entity_id(
    args: dict[str, Any], prefix: str, *, ids: IdProvider, taken: Iterable[str]
) -> str:
    supplied = args.get("id")
    if isinstance(supplied, str) and supplied and supplied not in set(taken):
        return supplied
    return ids.new_id(prefix)


def normalize_spawn_npc(
    args: dict[str, Any], *, ids: IdProvider, taken: Iterable[str] = ()
) -> Npc:
    return Npc(
        id=_entity_id(args, "npc", ids=ids, taken=taken),
        x=to_int(args.get("x")),
        y=to_int(args.get("y")),
        name=_text(args.get("name"), "NPC"),
        role=_text(args.get("role")),
        persona=_text(args.get("persona")),
    )


def normalize_spawn_enemy(
    args: dict[str, Any], *, ids: IdProvider, taken: Iterable[str] = ()
) -> Enemy:
    stats = args.get("stats")
    if not isinstance(stats, dict):
        stats = {}
    return Enemy(
        id=_entity_id(args, "en", ids=ids, taken=taken),
        x=to_int(args.get("x")),
        y=to_int(args.get("y")),
        kind=_text(args.get("kind"), "rat"),
        stats=EnemyStats(
            hp=max(1, to_int(stats.get("hp"), 5)),
            atk=max(1, to_int(stats.get("atk"), 1)),
        ),
    )


def normalize_place_item(
    args: dict[str, Any], *, ids: IdProvider, taken: Iterable[str] = ()
) -> Item:
    return Item(
        id=_entity_id(args, "it", ids=ids, taken=taken),
        x=to_int(args.get("x")),
        y=to_int(args.get("y")),
        kind=_text(args.get("kind"), "gold"),
    )


def normalize_waypoint(args: dict[str, Any]) -> Waypoint:
    return Waypoint(
        x=to_int(args.get("x")),
        y=to_int(args.get("y")),
        note=_text(args.get("note")),
    )


def normalize_tile_changes(args: dict[str, Any]) -> TileChanges:
    raw = args.get("changes")
    changes = []
    if isinstance(raw, list):
        changes = [
            TileChange(
                x=to_int(change.get("x")),
                y=to_int(change.get("y")),
                tile=to_int(change.get("tile")),
            )
            for change in raw
            if isinstance(change, dict)
        ]
    return TileChanges(changes=changes, note=_text(args.get("note")))


def normalize_dialogue_options(args: dict[str, Any]) -> list[DialogueOption]:
    raw = args.get("options")
    if not isinstance(raw, list):
        return []
    options = []
    for index, option in enumerate(raw):
        if not isinstance(option, dict):
            option = {"text": option}
        options.append(
            DialogueOption(
                id=_text(option.get("id"), f"opt{index + 1}"),
                text=_text(option.get("text"), "..."),
            )
        )
    return options


def normalize_quests(args: dict[str, Any], *, ids: IdProvider) -> list[Quest]:
    raw = args.get("quests")
    if not isinstance(raw, list):
        return []
    quests = []
    for quest in raw:
        if not isinstance(quest, dict):
            continue
        try:
            status = QuestStatus(quest.get("status", QuestStatus.NEW.value))
        except ValueError:
            status = QuestStatus.NEW
        quests.append(
            Quest(
                id=_text(quest.get("id")) or ids.new_id("quest"),
                title=_text(quest.get("title"), "Quest"),
                desc=_text(quest.get("desc"), "No description."),
                status=status,
            )
        )
    return quests
