"""Socket.IO game handlers.

Events:
    - join_game: Bind the socket to a game session; payload { room }
    - leave_game: Leave a game room; payload { room }
    - game_action: Submit an action; payload { room, action, direction?, difficulty? }

Emits:
    - status: Room status updates (join/leave)
    - game_event: One per tagged event produced by the action
    - game_state: Session snapshot after every accepted action
    - error: { message, field, code } for rejected payloads or actions
"""

import time

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from delve import socketio
from delve.logging_utils import get_logger
from delve.routes.game_api import get_or_create_session, get_session

from .validation import GAME_ACTION, JOIN_GAME, LEAVE_GAME, validate

_log = get_logger("delve.ws")

# Track active game rooms with simple membership counts for diagnostics
# Structure: { room_name: { 'members': set([sid,...]), 'created': timestamp } }
active_games = {}

_QUERY_KEYS = ("status", "location", "map")


def _emit_invalid(event_name, result):
    emit(
        "error",
        {"message": f"Invalid {event_name}: {result['error']}", "field": result["field"], "code": result["code"]},
    )


@socketio.on("join_game")
def handle_join_game(data):
    ok, result = validate(data or {}, JOIN_GAME)
    if not ok:
        _emit_invalid("join_game", result)
        return
    room = result["room"]
    join_room(room)
    info = active_games.setdefault(room, {"members": set(), "created": time.time()})
    info["members"].add(request.sid)
    session = get_or_create_session(room)
    if not session.run.started:
        difficulty = current_app.config.get("DELVE_DEFAULT_DIFFICULTY", "normal")
        started = session.dispatch("start", difficulty=difficulty)
        if "error" in started:
            emit("error", {"message": "Could not start game", "field": "difficulty", "code": started["error"]})
            return
        for ev in started["events"]:
            emit("game_event", ev, to=room)
    emit("status", {"msg": "A player has joined the game.", "room": room}, to=room)
    emit("game_state", session.snapshot(), to=room)
    _log.info(event="join_game", room=room, members=len(info["members"]))


@socketio.on("leave_game")
def handle_leave_game(data):
    ok, result = validate(data or {}, LEAVE_GAME)
    if not ok:
        _emit_invalid("leave_game", result)
        return
    room = result["room"]
    leave_room(room)
    info = active_games.get(room)
    if info:
        info["members"].discard(request.sid)
        if not info["members"]:
            active_games.pop(room, None)
    emit("status", {"msg": "A player has left the game.", "room": room}, to=room)
    _log.info(event="leave_game", room=room, remaining=len(info["members"]) if info else 0)


@socketio.on("game_action")
def handle_game_action(data):
    ok, result = validate(data or {}, GAME_ACTION)
    if not ok:
        _emit_invalid("game_action", result)
        return
    room = result["room"]
    action = result["action"]
    session = get_session(room)
    if session is None:
        emit("error", {"message": "Join a game first", "field": "room", "code": "unknown_session"})
        return
    outcome = session.dispatch(action, direction=result.get("direction"), difficulty=result.get("difficulty"))
    if "error" in outcome:
        emit("error", {"message": f"Action rejected: {outcome['error']}", "field": "action", "code": outcome["error"]})
        return
    for ev in outcome.get("events", []):
        emit("game_event", ev, to=room)
    state = dict(outcome.get("state") or session.snapshot())
    for key in _QUERY_KEYS:
        if key in outcome:
            state[key] = outcome[key]
    emit("game_state", state, to=room)
    _log.info(event="game_action", room=room, action=action, events=len(outcome.get("events", [])))
