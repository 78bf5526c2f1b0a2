import random

from glade.sim.contracts import DialogueTurn, Npc, Speaker
from glade.sim.world_state import (
    DialogueHistory,
    Tile,
    World,
    generate_grid,
    grid_to_rows,
    rows_to_grid,
)


def test_generated_grid_has_walled_border_and_clear_center() -> None:
    grid = generate_grid(24, 24, rng=random.Random(3))

    assert len(grid) == 24
    assert all(len(row) == 24 for row in grid)
    assert all(tile == Tile.WALL for tile in grid[0])
    assert all(row[0] == Tile.WALL and row[-1] == Tile.WALL for row in grid)
    for x, y in ((12, 12), (13, 12), (12, 13), (13, 13)):
        assert grid[y][x] == Tile.GRASS


def test_generated_grid_is_seeded() -> None:
    first = generate_grid(16, 16, rng=random.Random(11))
    second = generate_grid(16, 16, rng=random.Random(11))

    assert grid_to_rows(first) == grid_to_rows(second)


def test_tile_lookup_and_passability() -> None:
    world = World(width=3, height=1, grid=rows_to_grid(["012"]))

    assert world.tile_at(0, 0) == Tile.GRASS
    assert world.tile_at(1, 0) == Tile.WALL
    assert world.tile_at(2, 0) == Tile.WATER
    assert world.tile_at(3, 0) == Tile.WALL
    assert world.is_passable((0, 0))
    assert not world.is_passable((2, 0))
    assert not world.is_passable((0, -1))


def test_npc_near_uses_manhattan_distance() -> None:
    world = World(width=8, height=8, grid=generate_grid(8, 8, rng=random.Random(1)))
    world.npcs.append(Npc(id="npc-1", x=4, y=4, name="Griddle"))

    assert world.npc_near((4, 5)) is not None
    assert world.npc_near((5, 4)) is not None
    assert world.npc_near((5, 5)) is None


def test_payload_round_trip_keeps_entities() -> None:
    world = World(width=3, height=2, grid=rows_to_grid(["010", "200"]))
    world.npcs.append(Npc(id="npc-1", x=0, y=0))

    restored = World.from_payload(world.to_payload())

    assert grid_to_rows(restored.grid) == ["010", "200"]
    assert restored.npcs[0].id == "npc-1"
    assert (restored.width, restored.height) == (3, 2)


def test_dialogue_history_is_bounded() -> None:
    history = DialogueHistory()
    for index in range(20):
        history.append(DialogueTurn(speaker=Speaker.PLAYER, text=f"line {index}"))

    assert len(history) == 12
    recent = history.recent()
    assert [turn.text for turn in recent] == [f"line {i}" for i in range(14, 20)]
    assert history.recent(0) == []
