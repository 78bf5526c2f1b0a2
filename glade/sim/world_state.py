"""World aggregate, tile grid and the store that owns it."""

from __future__ import annotations

import random
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Iterator

from glade.sim.contracts import (
    STANDARD_LEGEND,
    ActionKind,
    DialogueTurn,
    Enemy,
    Item,
    MapSpec,
    Npc,
    Waypoint,
    WorldPayload,
)

if TYPE_CHECKING:
    from glade.sim.mutation import Mutation
    from glade.sim.validation import IdProvider

Position = tuple[int, int]

HISTORY_LIMIT = 12
REQUEST_HISTORY = 6


class Tile(IntEnum):
    GRASS = 0
    WALL = 1
    WATER = 2

    @classmethod
    def coerce(cls, value: int) -> "Tile":
        if value == cls.WALL:
            return cls.WALL
        if value == cls.WATER:
            return cls.WATER
        return cls.GRASS


def rows_to_grid(rows: list[str]) -> list[list[Tile]]:
    codes = {"1": Tile.WALL, "2": Tile.WATER}
    return [[codes.get(ch, Tile.GRASS) for ch in row] for row in rows]


def grid_to_rows(grid: list[list[Tile]]) -> list[str]:
    return ["".join(str(int(tile)) for tile in row) for row in grid]


def generate_grid(
    width: int = 24, height: int = 24, *, rng: random.Random | None = None
) -> list[list[Tile]]:
    """Random fallback terrain: walled border, scattered walls and water."""
    rng = rng or random.Random()
    grid: list[list[Tile]] = []
    for y in range(height):
        row = []
        for x in range(width):
            tile = Tile.GRASS
            if x in (0, width - 1) or y in (0, height - 1):
                tile = Tile.WALL
            elif rng.random() < 0.08:
                tile = Tile.WALL
            elif rng.random() < 0.03:
                tile = Tile.WATER
            row.append(tile)
        grid.append(row)
    if width > 13 and height > 13:
        for x, y in ((12, 12), (13, 12), (12, 13), (13, 13)):
            grid[y][x] = Tile.GRASS
    return grid


@dataclass
class World:
    width: int
    height: int
    grid: list[list[Tile]] = field(default_factory=list)
    npcs: list[Npc] = field(default_factory=list)
    enemies: list[Enemy] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    waypoint: Waypoint | None = None

    @property
    def grid_width(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def grid_height(self) -> int:
        return len(self.grid)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.grid_width and 0 <= y < self.grid_height

    def tile_at(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            return Tile.WALL
        return self.grid[y][x]

    def is_passable(self, position: Position) -> bool:
        return self.tile_at(*position) == Tile.GRASS

    def replace_grid(self, spec: MapSpec) -> None:
        self.grid = rows_to_grid(spec.rows)
        self.width = spec.w
        self.height = spec.h

    def npc_near(self, position: Position, *, radius: int = 1) -> Npc | None:
        px, py = position
        for npc in self.npcs:
            if abs(npc.x - px) + abs(npc.y - py) <= radius:
                return npc
        return None

    def to_payload(self) -> WorldPayload:
        return WorldPayload(
            map=MapSpec(
                w=self.width,
                h=self.height,
                legend=dict(STANDARD_LEGEND),
                rows=grid_to_rows(self.grid),
            ),
            npcs=[npc.model_copy() for npc in self.npcs],
            enemies=[enemy.model_copy(deep=True) for enemy in self.enemies],
            items=[item.model_copy() for item in self.items],
            waypoint=self.waypoint.model_copy() if self.waypoint else None,
        )

    @classmethod
    def from_payload(cls, payload: WorldPayload) -> "World":
        return cls(
            width=payload.map.w,
            height=payload.map.h,
            grid=rows_to_grid(payload.map.rows),
            npcs=list(payload.npcs),
            enemies=list(payload.enemies),
            items=list(payload.items),
            waypoint=payload.waypoint,
        )


class WorldStore:
    """Single owner of a World; every read or write goes through its lock."""

    def __init__(self, world: World) -> None:
        self._world = world
        self._lock = threading.RLock()

    @contextmanager
    def locked(self) -> Iterator[World]:
        with self._lock:
            yield self._world

    def replace(self, world: World) -> None:
        with self._lock:
            self._world = world

    def snapshot(self) -> WorldPayload:
        with self._lock:
            return self._world.to_payload()

    def is_passable(self, position: Position) -> bool:
        with self._lock:
            return self._world.is_passable(position)

    def apply(
        self, kind: ActionKind, args: dict[str, Any], *, ids: IdProvider
    ) -> Mutation:
        from glade.sim.mutation import apply_action

        with self._lock:
            return apply_action(kind, args, self._world, ids=ids)


class DialogueHistory:
    def __init__(self, limit: int = HISTORY_LIMIT) -> None:
        self._turns: deque[DialogueTurn] = deque(maxlen=limit)

    def append(self, turn: DialogueTurn) -> None:
        self._turns.append(turn)

    def recent(self, count: int = REQUEST_HISTORY) -> list[DialogueTurn]:
        if count <= 0:
            return []
        return list(self._turns)[-count:]

    def __len__(self) -> int:
        return len(self._turns)
