"""Wire contracts for world content, actions and orchestration requests."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

STANDARD_LEGEND: dict[str, str] = {"0": "grass", "1": "wall", "2": "water"}


class ActionKind(str, Enum):
    CREATE_MAP = "create_map"
    SPAWN_NPC = "spawn_npc"
    SPAWN_ENEMY = "spawn_enemy"
    PLACE_ITEM = "place_item"
    SET_WAYPOINT = "set_waypoint"
    GIVE_QUESTS = "give_quests"
    MODIFY_TILES = "modify_tiles"
    DIALOGUE_OPTIONS = "dialogue_options"


class QuestStatus(str, Enum):
    NEW = "new"
    ACTIVE = "active"
    DONE = "done"


class Speaker(str, Enum):
    PLAYER = "player"
    NPC = "npc"
    SYSTEM = "system"


class MapSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    w: int
    h: int
    legend: dict[str, str] = Field(default_factory=lambda: dict(STANDARD_LEGEND))
    rows: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_rows(self) -> "MapSpec":
        # No rows means the map has not been created yet.
        if not self.rows:
            return self
        if len(self.rows) != self.h:
            raise ValueError(f"expected {self.h} rows, got {len(self.rows)}")
        for index, row in enumerate(self.rows):
            if len(row) != self.w:
                raise ValueError(
                    f"row {index} has length {len(row)}, expected {self.w}"
                )
        return self


class Npc(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    x: int
    y: int
    name: str = "NPC"
    role: str = ""
    persona: str = ""

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)


class EnemyStats(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hp: int = Field(default=5, ge=1)
    atk: int = Field(default=1, ge=1)


class Enemy(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    x: int
    y: int
    kind: str = "rat"
    stats: EnemyStats = Field(default_factory=EnemyStats)

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)


class Item(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    x: int
    y: int
    kind: str = "gold"

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)


class Waypoint(BaseModel):
    model_config = ConfigDict(extra="forbid")

    x: int
    y: int
    note: str = ""

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)


class Quest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    desc: str
    status: QuestStatus = QuestStatus.NEW


class TileChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    x: int
    y: int
    tile: int


class TileChanges(BaseModel):
    model_config = ConfigDict(extra="forbid")

    changes: list[TileChange] = Field(default_factory=list)
    note: str = ""


class DialogueOption(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    text: str


class DialogueTurn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    speaker: Speaker
    text: str


class CreateMapAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["create_map"] = "create_map"
    payload: MapSpec


class SpawnNpcAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["spawn_npc"] = "spawn_npc"
    payload: Npc


class SpawnEnemyAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["spawn_enemy"] = "spawn_enemy"
    payload: Enemy


class PlaceItemAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["place_item"] = "place_item"
    payload: Item


class SetWaypointAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["set_waypoint"] = "set_waypoint"
    payload: Waypoint


class GiveQuestsAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["give_quests"] = "give_quests"
    payload: list[Quest]


class ModifyTilesAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["modify_tiles"] = "modify_tiles"
    payload: TileChanges


class DialogueOptionsAction(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["dialogue_options"] = "dialogue_options"
    payload: list[DialogueOption]


Action = Annotated[
    Union[
        CreateMapAction,
        SpawnNpcAction,
        SpawnEnemyAction,
        PlaceItemAction,
        SetWaypointAction,
        GiveQuestsAction,
        ModifyTilesAction,
        DialogueOptionsAction,
    ],
    Field(discriminator="type"),
]

ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(raw: Any) -> Action:
    """Validate a `{type, payload}` envelope into its tagged variant."""
    return ACTION_ADAPTER.validate_python(raw)


class WorldPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    map: MapSpec
    npcs: list[Npc] = Field(default_factory=list)
    enemies: list[Enemy] = Field(default_factory=list)
    items: list[Item] = Field(default_factory=list)
    waypoint: Waypoint | None = None


class MapSize(BaseModel):
    model_config = ConfigDict(extra="forbid")

    w: int = Field(default=24, ge=8, le=48)
    h: int = Field(default=24, ge=8, le=48)


class NewGameRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    size: MapSize = Field(default_factory=MapSize)
    theme_hint: str = Field(
        default="a forest glade by a tavern", alias="themeHint"
    )


class NewGameResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    narration: str
    world: WorldPayload
    actions: list[Action] = Field(default_factory=list)


class NpcRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = "NPC"
    role: str = ""


class DialogueRequest(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    world: WorldPayload
    npc: NpcRef
    history: list[DialogueTurn] = Field(default_factory=list)
    player_message: str = Field(alias="playerMessage")


class DialogueResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    narration: str
    actions: list[Action] = Field(default_factory=list)
