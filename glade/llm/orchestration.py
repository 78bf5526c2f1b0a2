"""Bounded propose -> apply -> narrate rounds against a generator."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from statemachine import State, StateMachine

from glade.llm.base import (
    DEFAULT_TIMEOUT,
    GeneratorCallError,
    GeneratorClient,
    GeneratorContext,
    Mode,
    ToolCall,
    ToolResult,
)
from glade.llm.prompts import (
    dialogue_context,
    format_tool_results,
    world_generation_context,
)
from glade.sim.contracts import (
    Action,
    ActionKind,
    DialogueRequest,
    DialogueResponse,
    NewGameRequest,
    NewGameResponse,
)
from glade.sim.mutation import resolve_action_kind
from glade.sim.validation import IdProvider, UuidIds
from glade.sim.world_state import World, WorldStore

logger = logging.getLogger(__name__)

WORLD_ROUNDS = 4
DIALOGUE_ROUNDS = 1
WORLD_TEMPERATURE = 0.8
DIALOGUE_TEMPERATURE = 0.9
WORLD_FALLBACK = "You arrive at a quiet glade..."
DIALOGUE_FALLBACK = "{name} nods silently."

T = TypeVar("T")


class OrchestrationError(RuntimeError):
    """The interaction was aborted; mutations applied so far are kept."""


class RoundMachine(StateMachine):
    awaiting_proposal = State(initial=True)
    applying = State()
    awaiting_narration = State()
    done = State(final=True)
    failed = State(final=True)

    proposed = awaiting_proposal.to(applying)
    settled = awaiting_proposal.to(done)
    applied = applying.to(awaiting_narration)
    narrated = awaiting_narration.to(done, cond="rounds_exhausted") | (
        awaiting_narration.to(awaiting_proposal)
    )
    abort = (
        awaiting_proposal.to(failed)
        | applying.to(failed)
        | awaiting_narration.to(failed)
    )

    def __init__(self, max_rounds: int) -> None:
        self.max_rounds = max_rounds
        self.rounds = 0
        super().__init__()

    def rounds_exhausted(self) -> bool:
        return self.rounds >= self.max_rounds

    @property
    def finished(self) -> bool:
        return self.done.is_active or self.failed.is_active

    def finish_round(self) -> None:
        self.rounds += 1
        self.narrated()


@dataclass
class LoopOutcome:
    narration: str
    actions: list[Action] = field(default_factory=list)
    results: list[ToolResult] = field(default_factory=list)
    rounds: int = 0


class OrchestrationLoop:
    def __init__(
        self,
        generator: GeneratorClient,
        store: WorldStore,
        *,
        mode: Mode,
        max_rounds: int | None = None,
        ids: IdProvider | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        fallback: str = WORLD_FALLBACK,
    ) -> None:
        self._generator = generator
        self._store = store
        self._mode = mode
        self._max_rounds = max_rounds or (
            DIALOGUE_ROUNDS if mode is Mode.DIALOGUE else WORLD_ROUNDS
        )
        self._ids = ids or UuidIds()
        self._timeout = timeout
        self._fallback = fallback

    def run(self, context: GeneratorContext) -> LoopOutcome:
        machine = RoundMachine(self._max_rounds)
        outcome = LoopOutcome(narration=self._fallback)
        narration: str | None = None
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="generator")
        logger.info(
            "Starting %s interaction (max %d rounds)",
            self._mode.value,
            self._max_rounds,
        )
        try:
            while not machine.finished:
                proposal = self._call(executor, self._generator.propose, context)
                if proposal.narration:
                    narration = proposal.narration
                if not proposal.tool_calls:
                    machine.settled()
                    break

                machine.proposed()
                round_results = [
                    self._apply(call, outcome) for call in proposal.tool_calls
                ]
                outcome.results.extend(round_results)
                machine.applied()

                reply = self._call(
                    executor, self._generator.narrate, context, round_results
                )
                if reply.narration:
                    narration = reply.narration
                machine.finish_round()
                if machine.finished:
                    logger.warning("Round limit %d reached", self._max_rounds)
                    break
                context = context.with_message(
                    "assistant", narration or self._fallback
                ).with_message("user", format_tool_results(round_results))
        except (GeneratorCallError, TimeoutError) as exc:
            machine.abort()
            logger.exception("Generator call failed after %d rounds", machine.rounds)
            raise OrchestrationError(f"{self._mode.value} interaction failed") from exc
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        outcome.rounds = machine.rounds
        outcome.narration = narration or self._fallback
        logger.info(
            "Finished %s interaction: %d rounds, %d actions",
            self._mode.value,
            outcome.rounds,
            len(outcome.actions),
        )
        return outcome

    def _call(
        self, executor: ThreadPoolExecutor, fn: Callable[..., T], *args: Any
    ) -> T:
        future = executor.submit(fn, *args)
        return future.result(timeout=self._timeout)

    def _apply(self, call: ToolCall, outcome: LoopOutcome) -> ToolResult:
        kind = resolve_action_kind(call.name)
        if kind is None:
            logger.warning("Ignoring unknown tool %r", call.name)
            return ToolResult(call=call, output={"ok": True, "ignored": True})
        if self._mode is Mode.DIALOGUE and kind is ActionKind.CREATE_MAP:
            return ToolResult(
                call=call,
                output={"ok": False, "error": "map change disabled in dialogue"},
            )

        mutation = self._store.apply(kind, call.arguments, ids=self._ids)
        logger.debug("Applied %s ok=%s", kind.value, mutation.result.get("ok"))
        if mutation.action is not None:
            outcome.actions.append(mutation.action)
        return ToolResult(call=call, output=mutation.result)


def run_world_generation(
    request: NewGameRequest,
    generator: GeneratorClient,
    *,
    store: WorldStore | None = None,
    ids: IdProvider | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    temperature: float = WORLD_TEMPERATURE,
) -> NewGameResponse:
    fresh = World(width=request.size.w, height=request.size.h)
    if store is None:
        store = WorldStore(fresh)
    else:
        store.replace(fresh)
    loop = OrchestrationLoop(
        generator, store, mode=Mode.WORLD, ids=ids, timeout=timeout
    )
    outcome = loop.run(world_generation_context(request, temperature=temperature))
    return NewGameResponse(
        narration=outcome.narration, world=store.snapshot(), actions=outcome.actions
    )


def run_dialogue_turn(
    request: DialogueRequest,
    generator: GeneratorClient,
    *,
    store: WorldStore | None = None,
    ids: IdProvider | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    temperature: float = DIALOGUE_TEMPERATURE,
) -> DialogueResponse:
    if store is None:
        store = WorldStore(World.from_payload(request.world))
    loop = OrchestrationLoop(
        generator,
        store,
        mode=Mode.DIALOGUE,
        ids=ids,
        timeout=timeout,
        fallback=DIALOGUE_FALLBACK.format(name=request.npc.name or "NPC"),
    )
    outcome = loop.run(dialogue_context(request, temperature=temperature))
    return DialogueResponse(narration=outcome.narration, actions=outcome.actions)
