"""Module entry point for `python -m glade`."""

from __future__ import annotations

import argparse

from rich.console import Console

from glade.app import (
    DEFAULT_SIZE,
    build_session,
    configure_logging,
    resolve_generator,
    run_session,
)
from glade.render.viewer import render_world
from glade.session import DEFAULT_THEME
from glade.sim.contracts import MapSize


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Generate and explore a Glade world.")
    parser.add_argument(
        "--theme",
        default=DEFAULT_THEME,
        help="Theme hint passed to world generation.",
    )
    parser.add_argument(
        "--size",
        type=_parse_size,
        default=DEFAULT_SIZE,
        help="Map size as WxH (each between 8 and 48).",
    )
    parser.add_argument(
        "--generator",
        default=None,
        help="Generator backend to use: fake, openai, or mlx.",
    )
    parser.add_argument(
        "--model-id",
        default=None,
        help="Model ID for the openai or mlx backends.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each generator call.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for the fake generator and fallback terrain.",
    )
    parser.add_argument(
        "--say",
        action="append",
        default=None,
        help="Say something to the nearest NPC (repeatable).",
    )
    parser.add_argument(
        "--goto",
        type=_parse_position,
        default=None,
        help="Walk the player to X,Y after the world is created.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (defaults to GLADE_LOG_LEVEL or WARNING).",
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    generator = resolve_generator(
        args.generator, args.model_id, timeout=args.timeout, seed=args.seed
    )
    session = build_session(generator, timeout=args.timeout, seed=args.seed)
    report = run_session(
        session,
        size=args.size,
        theme=args.theme,
        messages=args.say,
        goto=args.goto,
    )

    console = Console()
    with session.store.locked() as world:
        console.print(
            render_world(
                world,
                player=session.player.position,
                narration=session.narration or report.intro,
                log=session.log,
                quests=session.quests,
                options=session.dialogue_options,
            )
        )
    if args.goto is not None and not report.path:
        console.print(f"No path to {args.goto[0]},{args.goto[1]}.")


def _parse_size(value: str) -> tuple[int, int]:
    width, sep, height = value.lower().partition("x")
    try:
        size = MapSize(w=int(width), h=int(height)) if sep else None
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid size {value!r}") from exc
    if size is None:
        raise argparse.ArgumentTypeError(f"size must look like WxH, got {value!r}")
    return size.w, size.h


def _parse_position(value: str) -> tuple[int, int]:
    x, _, y = value.partition(",")
    try:
        return int(x), int(y)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("position must look like X,Y") from exc


if __name__ == "__main__":
    main()
