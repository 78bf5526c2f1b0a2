"""Rich rendering for a World and the session panels around it."""

from __future__ import annotations

from typing import Iterable

from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from glade.sim.contracts import DialogueOption, Quest
from glade.sim.world_state import Position, Tile, World

TILE_GLYPHS = {Tile.GRASS: ".", Tile.WALL: "#", Tile.WATER: "~"}

TILE_STYLES = {
    Tile.GRASS: "green3",
    Tile.WALL: "grey50",
    Tile.WATER: "blue",
}

PLAYER_STYLE = "bold bright_white"
NPC_STYLE = "bright_cyan"
ENEMY_STYLE = "bold red"
ITEM_STYLE = "bright_yellow"
WAYPOINT_STYLE = "bold magenta"


def render_world(
    world: World,
    *,
    player: Position | None = None,
    narration: str | None = None,
    log: Iterable[str] = (),
    quests: Iterable[Quest] = (),
    options: Iterable[DialogueOption] = (),
) -> RenderableType:
    grid = Panel(render_grid(world, player=player), title="World")
    side = Group(
        _render_entities(world),
        _render_quests(list(quests)),
        _render_options(list(options)),
    )
    parts: list[RenderableType] = []
    if narration:
        parts.append(Panel(Text(narration), title="Narration"))
    parts.append(Columns([grid, side]))
    log_lines = list(log)
    if log_lines:
        parts.append(Panel(Text("\n".join(log_lines)), title="Log"))
    return Group(*parts)


def render_grid(world: World, *, player: Position | None = None) -> Text:
    overlays = _overlay_glyphs(world, player)
    text = Text()
    for y, row in enumerate(world.grid):
        for x, tile in enumerate(row):
            overlay = overlays.get((x, y))
            if overlay is not None:
                text.append(*overlay)
            else:
                text.append(TILE_GLYPHS[tile], style=TILE_STYLES[tile])
        if y < len(world.grid) - 1:
            text.append("\n")
    return text


def _overlay_glyphs(
    world: World, player: Position | None
) -> dict[Position, tuple[str, str]]:
    # Later layers win: waypoint < item < enemy < npc < player.
    overlays: dict[Position, tuple[str, str]] = {}
    if world.waypoint is not None:
        overlays[(world.waypoint.x, world.waypoint.y)] = ("X", WAYPOINT_STYLE)
    for item in world.items:
        overlays[(item.x, item.y)] = ("*", ITEM_STYLE)
    for enemy in world.enemies:
        overlays[(enemy.x, enemy.y)] = ("E", ENEMY_STYLE)
    for npc in world.npcs:
        overlays[(npc.x, npc.y)] = ("N", NPC_STYLE)
    if player is not None:
        overlays[player] = ("@", PLAYER_STYLE)
    return overlays


def _render_entities(world: World) -> RenderableType:
    table = Table(title="Entities", show_header=True, header_style="bold")
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("At")

    for npc in world.npcs:
        label = f"{npc.name} ({npc.role})" if npc.role else npc.name
        table.add_row("NPC", label, _at(npc.x, npc.y))
    for enemy in world.enemies:
        stats = f"{enemy.kind} hp {enemy.stats.hp} atk {enemy.stats.atk}"
        table.add_row("Enemy", stats, _at(enemy.x, enemy.y))
    for item in world.items:
        table.add_row("Item", item.kind, _at(item.x, item.y))
    if world.waypoint is not None:
        waypoint = world.waypoint
        table.add_row("Waypoint", waypoint.note or "-", _at(waypoint.x, waypoint.y))
    if table.row_count == 0:
        table.add_row("-", "None", "-")
    return table


def _render_quests(quests: list[Quest]) -> RenderableType:
    if not quests:
        return Panel(Text("No quests yet."), title="Quests")
    table = Table(show_header=False)
    table.add_column("Status")
    table.add_column("Quest")
    for quest in quests:
        table.add_row(quest.status.value, f"{quest.title}: {quest.desc}")
    return Panel(table, title="Quests")


def _render_options(options: list[DialogueOption]) -> RenderableType:
    if not options:
        return Text("")
    lines = [f"{index}. {option.text}" for index, option in enumerate(options, 1)]
    return Panel(Text("\n".join(lines)), title="Replies")


def _at(x: int, y: int) -> str:
    return f"{x},{y}"
