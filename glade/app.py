"""Application wiring: generator selection, logging and a scripted session run."""

from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass, field

from rich.logging import RichHandler

from glade.llm.base import DEFAULT_TIMEOUT, GeneratorClient, GeneratorConfig
from glade.llm.fake_generator import FakeGenerator
from glade.llm.mlx_generator import MlxGenerator
from glade.llm.openai_generator import OpenAIGenerator
from glade.session import DEFAULT_THEME, GameSession
from glade.sim.world_state import Position

logger = logging.getLogger(__name__)

DEFAULT_GENERATOR = "fake"
DEFAULT_OPENAI_MODEL_ID = "gpt-4o-mini"
DEFAULT_MLX_MODEL_ID = "mlx-community/Qwen2.5-3B-Instruct-4bit"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_SIZE = (24, 24)


@dataclass
class SessionReport:
    intro: str
    replies: list[str] = field(default_factory=list)
    path: list[Position] = field(default_factory=list)


def configure_logging(level: str | None = None) -> None:
    name = (level or os.getenv("GLADE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=name if name in logging.getLevelNamesMapping() else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def resolve_timeout(timeout: float | None = None) -> float:
    if timeout is not None:
        return timeout
    raw = os.getenv("GLADE_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid GLADE_TIMEOUT=%r", raw)
        return DEFAULT_TIMEOUT


def resolve_generator(
    backend: str | None = None,
    model_id: str | None = None,
    *,
    timeout: float | None = None,
    seed: int | None = None,
) -> GeneratorClient:
    name = (backend or os.getenv("GLADE_GENERATOR") or DEFAULT_GENERATOR).lower()
    model = model_id or os.getenv("GLADE_MODEL_ID")
    if name == "openai":
        config = GeneratorConfig(
            model_id=model or DEFAULT_OPENAI_MODEL_ID,
            timeout=resolve_timeout(timeout),
        )
        return OpenAIGenerator(config)
    if name == "mlx":
        config = GeneratorConfig(
            model_id=model or DEFAULT_MLX_MODEL_ID,
            timeout=resolve_timeout(timeout),
        )
        return MlxGenerator(config=config)
    if seed is None:
        return FakeGenerator()
    return FakeGenerator(seed=seed)


def run_session(
    session: GameSession,
    *,
    size: tuple[int, int] = DEFAULT_SIZE,
    theme: str = DEFAULT_THEME,
    messages: list[str] | None = None,
    goto: Position | None = None,
) -> SessionReport:
    """Create a world, then optionally talk to the nearest NPC and walk to a goal."""
    report = SessionReport(intro=session.new_game(size=size, theme_hint=theme))
    if messages:
        _approach_npc(session)
        for message in messages:
            reply = session.talk(message)
            if reply is not None:
                report.replies.append(reply)
    if goto is not None:
        report.path = session.navigate(goto)
        session.player.run_until_idle()
    return report


def build_session(
    generator: GeneratorClient,
    *,
    timeout: float | None = None,
    seed: int | None = None,
) -> GameSession:
    rng = random.Random(seed) if seed is not None else None
    return GameSession(generator, timeout=resolve_timeout(timeout), rng=rng)


def _approach_npc(session: GameSession) -> None:
    if session.nearest_npc() is not None:
        return
    with session.store.locked() as world:
        targets = [npc.position for npc in world.npcs]
    for target in targets:
        for goal in _neighbours(target):
            if session.navigate(goal):
                session.player.run_until_idle()
                return


def _neighbours(position: Position) -> list[Position]:
    x, y = position
    return [(x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)]
