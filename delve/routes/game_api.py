"""Game session HTTP API.

Thin JSON shell over :class:`delve.services.game_session.GameSession`. Every
route resolves a session from the in-process store, forwards one action to
``GameSession.dispatch`` and maps error codes onto HTTP statuses.

Routes:
    GET  /api/difficulties
    POST /api/game                         { difficulty }
    POST /api/game/<id>/move               { direction }
    GET  /api/game/<id>/status | location | map | metrics | grid
    POST /api/game/<id>/acknowledge | restart
    POST /api/game/<id>/difficulty         { difficulty }
"""

import threading
from typing import Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from delve.dungeon.config import DIFFICULTY_SETTINGS, SURVIVAL
from delve.logging_utils import get_logger
from delve.services.game_session import GameSession

log = get_logger("delve.api")

bp_game = Blueprint("game", __name__)

# Simple in-process session store, insertion ordered; oldest entries are
# evicted once the configured cap is exceeded.
_sessions: Dict[str, GameSession] = {}
_sessions_lock = threading.Lock()

_ERROR_STATUS = {
    "unknown_action": 400,
    "invalid_direction": 400,
    "missing_difficulty": 400,
    "unknown_difficulty": 400,
    "not_started": 409,
    "not_playing": 409,
    "nothing_to_acknowledge": 409,
    "busy": 409,
}


def _max_sessions() -> int:
    return int(current_app.config.get("DELVE_MAX_SESSIONS", 64))


def register_session(session: GameSession) -> GameSession:
    cap = _max_sessions()
    with _sessions_lock:
        _sessions[session.id] = session
        while len(_sessions) > cap:
            oldest = next(iter(_sessions))
            _sessions.pop(oldest, None)
            log.info(event="session_evicted", session=oldest)
    return session


def get_session(session_id: str) -> Optional[GameSession]:
    with _sessions_lock:
        return _sessions.get(session_id)


def get_or_create_session(session_id: str) -> GameSession:
    with _sessions_lock:
        existing = _sessions.get(session_id)
    if existing is not None:
        return existing
    return register_session(GameSession(session_id=session_id))


def clear_sessions() -> None:
    with _sessions_lock:
        _sessions.clear()


def _respond(result: dict, status: int = 200):
    if "error" in result:
        return jsonify(result), _ERROR_STATUS.get(result["error"], 400)
    return jsonify(result), status


def _dispatch(session_id: str, action: str, **payload):
    session = get_session(session_id)
    if session is None:
        return jsonify({"error": "unknown_session"}), 404
    return _respond(session.dispatch(action, **payload))


@bp_game.route("/api/difficulties")
def list_difficulties():
    return jsonify(
        {
            "tiers": [t.to_dict() for t in DIFFICULTY_SETTINGS.values()],
            "modes": [SURVIVAL],
            "default": current_app.config.get("DELVE_DEFAULT_DIFFICULTY", "normal"),
        }
    )


@bp_game.route("/api/game", methods=["POST"])
def create_game():
    data = request.get_json(silent=True) or {}
    difficulty = data.get("difficulty") or current_app.config.get("DELVE_DEFAULT_DIFFICULTY", "normal")
    if not isinstance(difficulty, str):
        return jsonify({"error": "unknown_difficulty"}), 400
    session = GameSession()
    result = session.dispatch("start", difficulty=difficulty)
    if "error" in result:
        return _respond(result)
    register_session(session)
    log.info(event="game_created", session=session.id, difficulty=difficulty)
    result["session_id"] = session.id
    return jsonify(result), 201


@bp_game.route("/api/game/<session_id>/move", methods=["POST"])
def move(session_id):
    data = request.get_json(silent=True) or {}
    direction = data.get("direction")
    if not isinstance(direction, str):
        return jsonify({"error": "invalid_direction"}), 400
    return _dispatch(session_id, "move", direction=direction)


@bp_game.route("/api/game/<session_id>/status")
def status(session_id):
    return _dispatch(session_id, "status")


@bp_game.route("/api/game/<session_id>/location")
def location(session_id):
    return _dispatch(session_id, "location")


@bp_game.route("/api/game/<session_id>/map")
def map_overview(session_id):
    return _dispatch(session_id, "map")


@bp_game.route("/api/game/<session_id>/acknowledge", methods=["POST"])
def acknowledge(session_id):
    return _dispatch(session_id, "acknowledge")


@bp_game.route("/api/game/<session_id>/restart", methods=["POST"])
def restart(session_id):
    return _dispatch(session_id, "restart")


@bp_game.route("/api/game/<session_id>/difficulty", methods=["POST"])
def change_difficulty(session_id):
    data = request.get_json(silent=True) or {}
    difficulty = data.get("difficulty")
    if not isinstance(difficulty, str) or not difficulty:
        return jsonify({"error": "missing_difficulty"}), 400
    return _dispatch(session_id, "change_difficulty", difficulty=difficulty)


@bp_game.route("/api/game/<session_id>/metrics")
def metrics(session_id):
    session = get_session(session_id)
    if session is None:
        return jsonify({"error": "unknown_session"}), 404
    data = session.last_metrics()
    if data is None:
        return jsonify({"error": "not_started"}), 409
    return jsonify({"metrics": data})


@bp_game.route("/api/game/<session_id>/grid")
def grid(session_id):
    session = get_session(session_id)
    if session is None:
        return jsonify({"error": "unknown_session"}), 404
    rows = session.revealed_grid()
    if rows is None:
        return jsonify({"error": "not_started"}), 409
    return jsonify({"size": len(rows), "rows": rows})
