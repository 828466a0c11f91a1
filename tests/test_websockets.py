import pytest

from delve import app, socketio
from delve.websockets.validation import GAME_ACTION, JOIN_GAME, validate


@pytest.fixture()
def client(fresh_sessions):
    # Flask-SocketIO provides a test client we can use against the global socketio instance
    test_client = socketio.test_client(app, flask_test_client=app.test_client())
    yield test_client
    test_client.disconnect()


def _extract(event_name, received):
    return [p["args"][0] for p in received if p["name"] == event_name]


def test_join_game_starts_a_session(client):
    client.emit("join_game", {"room": "room1"})
    rec = client.get_received()
    assert any("joined the game" in s["msg"] for s in _extract("status", rec))
    events = _extract("game_event", rec)
    assert events and events[0]["type"] == "dungeon-generated"
    state = _extract("game_state", rec)[-1]
    assert state["session_id"] == "room1"
    assert state["run"]["started"] is True


def test_game_action_move_emits_events_and_state(client):
    client.emit("join_game", {"room": "room2"})
    client.get_received()
    client.emit("game_action", {"room": "room2", "action": "move", "direction": "up"})
    rec = client.get_received()
    assert [e["type"] for e in _extract("game_event", rec)] == ["boundary-blocked"]
    states = _extract("game_state", rec)
    assert states and states[-1]["player"]["x"] == 0


def test_query_action_attaches_result_to_state(client):
    client.emit("join_game", {"room": "room3"})
    client.get_received()
    client.emit("game_action", {"room": "room3", "action": "status"})
    state = _extract("game_state", client.get_received())[-1]
    assert state["status"]["health"] == 100


def test_invalid_payloads_emit_errors(client):
    client.emit("game_action", {"action": "move"})
    err = _extract("error", client.get_received())[-1]
    assert err["field"] == "room" and err["code"] == "required"

    client.emit("game_action", {"room": "room4", "action": "dance"})
    err = _extract("error", client.get_received())[-1]
    assert err["field"] == "action" and err["code"] == "choices"

    client.emit("game_action", {"room": "ghost", "action": "status"})
    err = _extract("error", client.get_received())[-1]
    assert err["code"] == "unknown_session"


def test_rejected_action_reports_session_error(client):
    client.emit("join_game", {"room": "room5"})
    client.get_received()
    client.emit("game_action", {"room": "room5", "action": "acknowledge"})
    err = _extract("error", client.get_received())[-1]
    assert err["code"] == "nothing_to_acknowledge"


def test_leave_game_notifies_room(client):
    other = socketio.test_client(app, flask_test_client=app.test_client())
    try:
        client.emit("join_game", {"room": "room6"})
        other.emit("join_game", {"room": "room6"})
        client.get_received()
        other.get_received()
        client.emit("leave_game", {"room": "room6"})
        status_msgs = _extract("status", other.get_received())
        assert any("left the game" in s["msg"] for s in status_msgs)
    finally:
        other.disconnect()


def test_validate_normalizes_choices():
    ok, data = validate({"room": " r ", "action": "MOVE", "direction": "North"}, GAME_ACTION)
    assert ok
    assert data == {"room": "r", "action": "move", "direction": "north"}
    ok, err = validate({"room": ""}, JOIN_GAME)
    assert not ok and err["code"] == "empty"
    ok, err = validate("nope", JOIN_GAME)
    assert not ok and err["field"] == "__root__"


def test_validate_rejects_non_string_fields():
    ok, err = validate({"room": 5}, JOIN_GAME)
    assert not ok and err == {"field": "room", "error": "expected str", "code": "type"}
    ok, err = validate({"room": "r", "action": "move", "direction": ["up"]}, GAME_ACTION)
    assert not ok and err["field"] == "direction" and err["code"] == "type"
