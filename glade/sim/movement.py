"""Fixed-tick movement along precomputed paths."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

from glade.sim.pathfinding import Passable, find_path
from glade.sim.world_state import Position

logger = logging.getLogger(__name__)

TICK_SECONDS = 0.1


class MovementScheduler:
    """Walks one entity along its current path, one cell per tick.

    A new path replaces the old one wholesale. Passability is only checked
    when a path is computed; cells that change afterwards are walked onto
    anyway.
    """

    def __init__(
        self,
        position: Position,
        *,
        period: float = TICK_SECONDS,
        on_step: Callable[[Position], None] | None = None,
    ) -> None:
        self._position = position
        self._path: list[Position] = []
        self._period = period
        self._on_step = on_step
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._worker: threading.Thread | None = None

    @property
    def position(self) -> Position:
        with self._lock:
            return self._position

    @property
    def path(self) -> list[Position]:
        with self._lock:
            return list(self._path)

    @property
    def running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def set_path(self, path: Iterable[Position]) -> None:
        with self._lock:
            self._path = list(path)

    def teleport(self, position: Position) -> None:
        with self._lock:
            self._position = position
            self._path = []

    def navigate(self, goal: Position, passable: Passable) -> list[Position]:
        path = find_path(self.position, goal, passable)
        self.set_path(path)
        logger.debug("Path to %s has %d steps", goal, len(path))
        return path

    def step(self) -> Position | None:
        with self._lock:
            if not self._path:
                return None
            self._position = self._path.pop(0)
            position = self._position
        if self._on_step is not None:
            self._on_step(position)
        return position

    def run_until_idle(self, *, max_steps: int = 10_000) -> int:
        steps = 0
        while steps < max_steps and self.step() is not None:
            steps += 1
        return steps

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._worker = threading.Thread(target=self._tick_loop, daemon=True)
        self._worker.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        self._stop_event.set()
        if self._worker is not None:
            self._worker.join(timeout)
        self._worker = None

    def _tick_loop(self) -> None:
        while not self._stop_event.wait(self._period):
            self.step()
