"""Flask application and core extensions setup.

This module wires together the Flask app and Flask-SocketIO and registers the
HTTP game API and the Socket.IO game handlers. Configuration is sourced from
environment variables with reasonable defaults for development. A local
``instance/`` directory holds runtime files such as the server log.
"""

import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_socketio import SocketIO

# Load .env if present so `SECRET_KEY`, `DUNGEON_SEED`, etc. can be supplied
# without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only checkouts still work; only the file log handler needs it
    pass


def _env_optional(name):
    raw = os.getenv(name)
    return raw if raw not in (None, "") else None


def _int_env(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    DELVE_DEFAULT_DIFFICULTY=os.getenv("DELVE_DEFAULT_DIFFICULTY", "normal"),
    DELVE_MAX_SESSIONS=_int_env("DELVE_MAX_SESSIONS", 64),
    # Dungeon generation overrides; None defers to DungeonConfig / environment
    DUNGEON_SEED=_env_optional("DUNGEON_SEED"),
    DUNGEON_VOID_CHANCE=_env_optional("DUNGEON_VOID_CHANCE"),
    DUNGEON_ENABLE_GENERATION_METRICS=bool(os.getenv("DUNGEON_ENABLE_GENERATION_METRICS", "1") == "1"),
)

# Let Flask-SocketIO select best async_mode based on installed deps (eventlet/gevent/threading)
socketio = SocketIO(
    app,
    async_mode=os.getenv("SOCKETIO_ASYNC_MODE") or None,
    cors_allowed_origins=os.getenv("CORS_ALLOWED_ORIGINS", "*"),
    engineio_logger=bool(os.getenv("ENGINEIO_LOGGER", "0") == "1"),
    ping_interval=20,
    ping_timeout=10,
)

# Register HTTP blueprints
from delve.routes.game_api import bp_game  # noqa: E402

app.register_blueprint(bp_game)

# Import websocket handlers so their event decorators register with Socket.IO (side-effect)
from delve.websockets import game as _ws_game  # noqa: F401,E402


@app.route("/healthz")
def healthz():
    return jsonify({"ok": True})


def create_app():
    """Return the configured Flask app instance."""
    return app
