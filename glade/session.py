"""Client-side game session: world, player movement, quests and dialogue."""

from __future__ import annotations

import logging
import random
import threading
from collections import deque
from typing import Iterable

from glade.llm.base import DEFAULT_TIMEOUT, GeneratorClient
from glade.llm.orchestration import (
    OrchestrationError,
    run_dialogue_turn,
    run_world_generation,
)
from glade.sim.contracts import (
    Action,
    DialogueOption,
    DialogueOptionsAction,
    DialogueRequest,
    DialogueTurn,
    GiveQuestsAction,
    MapSize,
    ModifyTilesAction,
    NewGameRequest,
    Npc,
    NpcRef,
    Quest,
    QuestStatus,
    Speaker,
)
from glade.sim.movement import MovementScheduler
from glade.sim.validation import IdProvider, UuidIds
from glade.sim.world_state import (
    DialogueHistory,
    Position,
    World,
    WorldStore,
    generate_grid,
)

logger = logging.getLogger(__name__)

QUEST_LIMIT = 6
LOG_LIMIT = 20
PLAYER_START = (2, 2)
DEFAULT_THEME = "a forest glade by a tavern"
OPENING_LINE = "Hello! Any work or somewhere to go?"
WORLD_FAILURE = "Could not create the world."
DIALOGUE_FAILURE = "The connection to the storyteller was lost."


class GameSession:
    def __init__(
        self,
        generator: GeneratorClient,
        *,
        ids: IdProvider | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        rng: random.Random | None = None,
    ) -> None:
        self._generator = generator
        self._ids = ids or UuidIds()
        self._timeout = timeout
        self._rng = rng or random.Random()
        self._interaction_lock = threading.Lock()
        world = World(width=24, height=24, grid=generate_grid(rng=self._rng))
        self.store = WorldStore(world)
        self.player = MovementScheduler(PLAYER_START)
        self.quests: list[Quest] = []
        self.log: deque[str] = deque(maxlen=LOG_LIMIT)
        self.histories: dict[str, DialogueHistory] = {}
        self.dialogue_options: list[DialogueOption] = []
        self.current_npc_id: str | None = None
        self.narration = ""

    def new_game(
        self, *, size: tuple[int, int] = (24, 24), theme_hint: str = DEFAULT_THEME
    ) -> str:
        request = NewGameRequest(
            size=MapSize(w=size[0], h=size[1]), theme_hint=theme_hint
        )
        with self._interaction_lock:
            try:
                response = run_world_generation(
                    request,
                    self._generator,
                    store=self.store,
                    ids=self._ids,
                    timeout=self._timeout,
                )
            except OrchestrationError:
                logger.warning("World generation failed, keeping partial world")
                self._fill_missing_grid(size)
                self._push_log(WORLD_FAILURE)
                return WORLD_FAILURE

        self._fill_missing_grid(size)
        self.player.teleport(PLAYER_START)
        self.quests = []
        self.dialogue_options = []
        self.histories = {}
        self.current_npc_id = None
        self.narration = response.narration
        self._push_log("A new location was created.")
        self._push_log(f"Intro: {response.narration}")
        self.consume(response.actions)
        return response.narration

    def nearest_npc(self) -> Npc | None:
        with self.store.locked() as world:
            return world.npc_near(self.player.position)

    def talk(self, message: str | None = None) -> str | None:
        npc = self.nearest_npc()
        if npc is None:
            self._push_log("No NPC nearby.")
            return None
        self.current_npc_id = npc.id
        self.dialogue_options = []
        return self._converse(npc, message or OPENING_LINE)

    def choose_reply(self, option: DialogueOption) -> str | None:
        if self.current_npc_id is None:
            return None
        with self.store.locked() as world:
            npc = next((n for n in world.npcs if n.id == self.current_npc_id), None)
        if npc is None:
            return None
        self.dialogue_options = []
        return self._converse(npc, option.text)

    def navigate(self, goal: Position) -> list[Position]:
        return self.player.navigate(goal, self.store.is_passable)

    def start(self) -> None:
        """Walk the player along its path in real time, one cell per tick.

        Without this the path only advances through `player.step()` or
        `player.run_until_idle()`, which is how the CLI drives it.
        """
        self.player.start()

    def stop(self) -> None:
        self.player.stop()

    def history_for(self, npc_id: str) -> DialogueHistory:
        return self.histories.setdefault(npc_id, DialogueHistory())

    def consume(self, actions: Iterable[Action]) -> None:
        """Apply the client-visible side of each action."""
        for action in actions:
            if isinstance(action, GiveQuestsAction):
                fresh = [
                    quest.model_copy(update={"status": QuestStatus.NEW})
                    for quest in action.payload
                ]
                self.quests = (fresh + self.quests)[:QUEST_LIMIT]
            elif isinstance(action, DialogueOptionsAction):
                self.dialogue_options = list(action.payload)
            elif isinstance(action, ModifyTilesAction) and action.payload.note:
                self._push_log(action.payload.note)

    def _converse(self, npc: Npc, message: str) -> str:
        history = self.history_for(npc.id)
        request = DialogueRequest(
            world=self.store.snapshot(),
            npc=NpcRef(id=npc.id, name=npc.name, role=npc.role),
            history=history.recent(),
            player_message=message,
        )
        history.append(DialogueTurn(speaker=Speaker.PLAYER, text=message))
        with self._interaction_lock:
            try:
                response = run_dialogue_turn(
                    request,
                    self._generator,
                    store=self.store,
                    ids=self._ids,
                    timeout=self._timeout,
                )
            except OrchestrationError:
                logger.warning("Dialogue with %s failed", npc.id)
                self._push_log(DIALOGUE_FAILURE)
                return DIALOGUE_FAILURE

        history.append(DialogueTurn(speaker=Speaker.NPC, text=response.narration))
        self.narration = response.narration
        self._push_log(f"{npc.name}: {_truncate(response.narration, 140)}")
        self.consume(response.actions)
        return response.narration

    def _fill_missing_grid(self, size: tuple[int, int]) -> None:
        with self.store.locked() as world:
            if world.grid_width and world.grid_height:
                return
            world.width, world.height = size
            world.grid = generate_grid(*size, rng=self._rng)

    def _push_log(self, line: str) -> None:
        self.log.appendleft(line)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"
