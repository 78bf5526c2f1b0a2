from glade.sim.pathfinding import PathFinder, find_path
from glade.sim.world_state import Tile, World, rows_to_grid


def test_open_grid_path_is_shortest() -> None:
    world = _build_world(["00000"] * 5)
    path = find_path((0, 0), (4, 4), world.is_passable)

    assert len(path) == 8
    assert path[-1] == (4, 4)
    assert (0, 0) not in path
    assert all(world.tile_at(x, y) == Tile.GRASS for x, y in path)
    for (ax, ay), (bx, by) in zip([(0, 0), *path], path):
        assert abs(ax - bx) + abs(ay - by) == 1


def test_wall_goal_and_self_return_empty() -> None:
    world = _build_world(["00000", "00100", "00000"])

    assert find_path((0, 0), (2, 1), world.is_passable) == []
    assert find_path((3, 2), (3, 2), world.is_passable) == []


def test_unreachable_goal_returns_empty() -> None:
    world = _build_world(["00100", "00100", "00100"])

    assert find_path((0, 0), (4, 2), world.is_passable) == []


def test_out_of_bounds_counts_as_wall() -> None:
    world = _build_world(["000", "000"])

    assert find_path((0, 0), (5, 0), world.is_passable) == []
    assert find_path((0, 0), (-1, 0), world.is_passable) == []


def test_path_routes_around_walls_and_water() -> None:
    world = _build_world(
        [
            "00000",
            "01110",
            "00020",
            "11010",
            "00000",
        ]
    )
    finder = PathFinder(world)
    path = finder.find_path((0, 0), (2, 4))

    assert path[-1] == (2, 4)
    assert all(world.is_passable(position) for position in path)


def test_paths_are_deterministic() -> None:
    world = _build_world(["0000", "0000", "0000", "0000"])

    first = find_path((0, 0), (3, 3), world.is_passable)
    second = find_path((0, 0), (3, 3), world.is_passable)

    assert first == second


def _build_world(rows: list[str]) -> World:
    return World(width=len(rows[0]), height=len(rows), grid=rows_to_grid(rows))
