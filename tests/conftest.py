import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from delve import create_app  # noqa: E402
from delve.routes.game_api import clear_sessions  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture(autouse=True)
def _isolate_generation_env(monkeypatch):
    # Host environment must not leak fixed seeds or void odds into tests
    for name in ("DUNGEON_SEED", "DUNGEON_VOID_CHANCE", "DUNGEON_ENABLE_GENERATION_METRICS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def fresh_sessions():
    clear_sessions()
    yield
    clear_sessions()
