import pytest
from pydantic import ValidationError

from glade.sim.contracts import (
    DialogueOptionsAction,
    DialogueRequest,
    MapSize,
    MapSpec,
    NewGameRequest,
    SetWaypointAction,
    SpawnNpcAction,
    parse_action,
)


def test_parse_action_dispatches_on_type() -> None:
    action = parse_action(
        {"type": "spawn_npc", "payload": {"id": "npc-1", "x": 2, "y": 3}}
    )
    assert isinstance(action, SpawnNpcAction)
    assert action.payload.name == "NPC"
    assert action.payload.position == (2, 3)

    waypoint = parse_action(
        {"type": "set_waypoint", "payload": {"x": 1, "y": 1, "note": "Inn"}}
    )
    assert isinstance(waypoint, SetWaypointAction)
    assert waypoint.payload.note == "Inn"


def test_parse_action_rejects_unknown_type() -> None:
    with pytest.raises(ValidationError):
        parse_action({"type": "fly", "payload": {}})


def test_dialogue_options_round_trip_through_json() -> None:
    action = DialogueOptionsAction(
        payload=[{"id": "opt1", "text": "Hello"}, {"id": "opt2", "text": "Bye"}]
    )
    restored = parse_action(action.model_dump(mode="json"))
    assert restored == action


def test_request_aliases_and_size_bounds() -> None:
    request = NewGameRequest.model_validate(
        {"size": {"w": 16, "h": 12}, "themeHint": "swamp"}
    )
    assert request.theme_hint == "swamp"
    assert (request.size.w, request.size.h) == (16, 12)
    assert NewGameRequest().size == MapSize(w=24, h=24)

    with pytest.raises(ValidationError):
        MapSize(w=4, h=24)
    with pytest.raises(ValidationError):
        MapSize(w=24, h=64)


def test_dialogue_request_accepts_camel_case_message() -> None:
    request = DialogueRequest.model_validate(
        {
            "world": {"map": {"w": 8, "h": 8, "rows": ["0" * 8] * 8}},
            "npc": {"id": "npc-1", "name": "Griddle"},
            "history": [{"speaker": "player", "text": "Hi"}],
            "playerMessage": "Any work?",
        }
    )
    assert request.player_message == "Any work?"
    assert request.history[0].text == "Hi"
    assert request.npc.role == ""


def test_map_rows_must_match_declared_size() -> None:
    with pytest.raises(ValidationError):
        MapSpec(w=8, h=2, rows=["0" * 8, "00"])
    with pytest.raises(ValidationError):
        MapSpec(w=4, h=3, rows=["0000", "0000"])

    assert MapSpec(w=8, h=8).rows == []
    assert MapSpec(w=2, h=1, rows=["01"]).rows == ["01"]


def test_dialogue_request_rejects_ragged_map() -> None:
    with pytest.raises(ValidationError):
        DialogueRequest.model_validate(
            {
                "world": {"map": {"w": 8, "h": 2, "rows": ["0" * 8, "00"]}},
                "npc": {"id": "npc-1", "name": "Griddle"},
                "playerMessage": "Any work?",
            }
        )
