import threading

from glade.sim.movement import MovementScheduler
from glade.sim.world_state import Tile, World, rows_to_grid


def test_step_pops_path_head() -> None:
    scheduler = MovementScheduler((0, 0))
    scheduler.set_path([(1, 0), (2, 0)])

    assert scheduler.step() == (1, 0)
    assert scheduler.position == (1, 0)
    assert scheduler.path == [(2, 0)]
    assert scheduler.step() == (2, 0)
    assert scheduler.step() is None
    assert scheduler.position == (2, 0)


def test_new_path_replaces_old_one() -> None:
    scheduler = MovementScheduler((0, 0))
    scheduler.set_path([(1, 0), (2, 0), (3, 0)])
    scheduler.step()
    scheduler.set_path([(1, 1)])

    assert scheduler.path == [(1, 1)]
    assert scheduler.run_until_idle() == 1
    assert scheduler.position == (1, 1)


def test_walks_onto_cells_that_became_impassable() -> None:
    world = World(width=4, height=1, grid=rows_to_grid(["0000"]))
    scheduler = MovementScheduler((0, 0))
    path = scheduler.navigate((3, 0), world.is_passable)
    assert path == [(1, 0), (2, 0), (3, 0)]

    world.grid[0][2] = Tile.WALL
    scheduler.run_until_idle()

    assert scheduler.position == (3, 0)


def test_navigate_to_wall_clears_path() -> None:
    world = World(width=3, height=1, grid=rows_to_grid(["001"]))
    scheduler = MovementScheduler((0, 0))
    scheduler.set_path([(1, 0)])

    assert scheduler.navigate((2, 0), world.is_passable) == []
    assert scheduler.path == []


def test_teleport_discards_path() -> None:
    scheduler = MovementScheduler((0, 0))
    scheduler.set_path([(1, 0)])
    scheduler.teleport((2, 2))

    assert scheduler.position == (2, 2)
    assert scheduler.path == []


def test_tick_thread_walks_the_path() -> None:
    arrived = threading.Event()

    def on_step(position: tuple[int, int]) -> None:
        if position == (2, 0):
            arrived.set()

    scheduler = MovementScheduler((0, 0), period=0.01, on_step=on_step)
    scheduler.set_path([(1, 0), (2, 0)])
    scheduler.start()
    try:
        assert arrived.wait(2.0)
    finally:
        scheduler.stop()

    assert not scheduler.running
    assert scheduler.position == (2, 0)
