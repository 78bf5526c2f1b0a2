"""Grid-based pathfinding (A*)."""

from __future__ import annotations

import heapq
import itertools
from typing import Callable

from glade.sim.world_state import Position, World

Passable = Callable[[Position], bool]


def find_path(start: Position, goal: Position, passable: Passable) -> list[Position]:
    """Shortest 4-connected path from `start` to `goal`.

    The result excludes `start` and ends at `goal`. It is empty when the goal
    is the start, is impassable or cannot be reached. Ties on f-score are
    broken by discovery order, so the same grid always yields the same path.
    """
    if start == goal:
        return []
    if not passable(goal):
        return []

    sequence = itertools.count()
    open_set: list[tuple[int, int, Position]] = []
    heapq.heappush(open_set, (_heuristic(start, goal), next(sequence), start))
    came_from: dict[Position, Position | None] = {start: None}
    g_score: dict[Position, int] = {start: 0}
    closed: set[Position] = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)
        if current in closed:
            continue
        if current == goal:
            return _reconstruct_path(came_from, current)
        closed.add(current)

        for neighbor in _neighbors(current, passable):
            tentative = g_score[current] + 1
            if tentative < g_score.get(neighbor, 1_000_000):
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                f_score = tentative + _heuristic(neighbor, goal)
                heapq.heappush(open_set, (f_score, next(sequence), neighbor))

    return []


class PathFinder:
    def __init__(self, world: World) -> None:
        self._world = world

    def find_path(self, start: Position, goal: Position) -> list[Position]:
        return find_path(start, goal, self._world.is_passable)


def _neighbors(current: Position, passable: Passable) -> list[Position]:
    x, y = current
    candidates = [(x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)]
    return [pos for pos in candidates if passable(pos)]


def _heuristic(a: Position, b: Position) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def _reconstruct_path(
    came_from: dict[Position, Position | None], current: Position
) -> list[Position]:
    path = []
    while came_from.get(current) is not None:
        path.append(current)
        current = came_from[current]
    path.reverse()
    return path
