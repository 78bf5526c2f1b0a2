from glade.llm.base import Mode, ToolCall, ToolResult
from glade.llm.prompts import (
    dialogue_context,
    extract_json,
    format_history,
    format_tool_results,
    summarize_world,
    world_generation_context,
)
from glade.llm.tools import tools_for
from glade.sim.contracts import (
    DialogueRequest,
    DialogueTurn,
    Item,
    MapSpec,
    NewGameRequest,
    NpcRef,
    Speaker,
    WorldPayload,
)


def test_world_context_carries_theme_and_size() -> None:
    request = NewGameRequest.model_validate(
        {"size": {"w": 12, "h": 10}, "themeHint": "misty swamp"}
    )

    context = world_generation_context(request)

    assert context.mode is Mode.WORLD
    assert context.messages[0]["role"] == "system"
    assert "12x10" in context.messages[0]["content"]
    assert context.messages[1]["content"] == "Theme: misty swamp. Size: 12x10."
    assert [tool["name"] for tool in context.tools][0] == "create_map"


def test_dialogue_context_includes_npc_history_and_message() -> None:
    request = DialogueRequest(
        world=_build_payload(),
        npc=NpcRef(id="npc-1", name="Griddle", role="trader"),
        history=[
            DialogueTurn(speaker=Speaker.PLAYER, text="Hi"),
            DialogueTurn(speaker=Speaker.NPC, text="Welcome."),
        ],
        player_message="Any work?",
    )

    context = dialogue_context(request)
    contents = [message["content"] for message in context.messages]

    assert context.mode is Mode.DIALOGUE
    assert context.temperature == 0.9
    assert any('"Griddle"' in content for content in contents)
    assert "Player: Hi\nGriddle: Welcome." in contents[3]
    assert contents[-1] == "Player: Any work?"


def test_history_formatting_keeps_recent_turns() -> None:
    turns = [
        DialogueTurn(speaker=Speaker.PLAYER, text=f"line {index}") for index in range(9)
    ]

    text = format_history(turns, npc_name="Griddle")

    assert text.splitlines()[0] == "Player: line 3"
    assert len(text.splitlines()) == 6
    assert format_history([], npc_name="Griddle") == ""


def test_world_summary_is_bounded() -> None:
    payload = _build_payload()
    payload.items.extend(Item(id=f"it-{index}", x=1, y=1) for index in range(10))

    summary = summarize_world(payload)

    assert summary["map"] == {"w": 8, "h": 8}
    assert len(summary["items"]) == 6


def test_extract_json_finds_embedded_object() -> None:
    assert extract_json('Here: {"a": 1} done') == {"a": 1}
    assert extract_json("[1, 2]") is None
    assert extract_json("{broken") is None


def test_dialogue_tools_exclude_map_creation() -> None:
    world_names = {tool["name"] for tool in tools_for(Mode.WORLD)}
    dialogue_names = {tool["name"] for tool in tools_for(Mode.DIALOGUE)}

    assert world_names - dialogue_names == {"create_map"}
    assert "offer_replies" in dialogue_names


def test_tool_results_summary_lists_each_call() -> None:
    results = [
        ToolResult(
            call=ToolCall(id="a", name="place_item", arguments={"x": 1, "y": 2}),
            output={"ok": True, "id": "item-1"},
        ),
        ToolResult(call=ToolCall(id="b", name="nope"), output={"ok": True}),
    ]

    text = format_tool_results(results)

    assert text.startswith("Already applied")
    assert '"name": "place_item"' in text
    assert '"id": "item-1"' in text
    assert '"name": "nope"' in text


def _build_payload() -> WorldPayload:
    return WorldPayload(map=MapSpec(w=8, h=8, rows=["0" * 8] * 8))
