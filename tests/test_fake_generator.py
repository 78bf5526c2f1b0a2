from glade.llm.fake_generator import FakeGenerator
from glade.llm.orchestration import run_dialogue_turn, run_world_generation
from glade.sim.contracts import DialogueRequest, NewGameRequest, NpcRef
from glade.sim.validation import CounterIds
from glade.sim.world_state import World, WorldStore


def test_fake_world_generation_is_deterministic() -> None:
    request = NewGameRequest.model_validate({"size": {"w": 16, "h": 12}})

    first = run_world_generation(request, FakeGenerator(), ids=CounterIds())
    second = run_world_generation(request, FakeGenerator(), ids=CounterIds())

    assert first == second
    assert first.narration == "You wake in a glade. 2 figures stir nearby."
    assert (first.world.map.w, first.world.map.h) == (16, 12)
    assert len(first.world.map.rows) == 12
    assert [npc.name for npc in first.world.npcs] == ["Griddle"]
    assert len(first.world.enemies) == 1
    assert len(first.world.items) == 1
    assert first.world.waypoint is not None


def test_fake_entities_stand_on_grass() -> None:
    store = WorldStore(World(width=24, height=24))
    run_world_generation(NewGameRequest(), FakeGenerator(seed=3), store=store)

    with store.locked() as world:
        entities = [*world.npcs, *world.enemies, *world.items]
        assert all(world.is_passable(entity.position) for entity in entities)


def test_fake_dialogue_offers_quests_on_request() -> None:
    world = run_world_generation(NewGameRequest(), FakeGenerator()).world
    npc = world.npcs[0]
    request = DialogueRequest(
        world=world,
        npc=NpcRef(id=npc.id, name=npc.name, role=npc.role),
        player_message="Do you have any work?",
    )

    response = run_dialogue_turn(request, FakeGenerator())

    assert response.narration == "There is always work for steady hands."
    assert [action.type for action in response.actions] == [
        "give_quests",
        "dialogue_options",
    ]
    assert len(response.actions[1].payload) == 3


def test_fake_dialogue_small_talk_has_no_quests() -> None:
    world = run_world_generation(NewGameRequest(), FakeGenerator()).world
    npc = world.npcs[0]
    request = DialogueRequest(
        world=world,
        npc=NpcRef(id=npc.id, name=npc.name),
        player_message="Nice weather.",
    )

    response = run_dialogue_turn(request, FakeGenerator())

    assert response.narration == "Good to see a new face around here."
    assert [action.type for action in response.actions] == ["dialogue_options"]
