import importlib
import json
import os
import sys

import pytest

# Import run.py as a module and exercise parse_args + main with a patched
# start_server so we do not actually start networking.


@pytest.fixture()
def run_module():
    if "run" in sys.modules:
        del sys.modules["run"]
    return importlib.import_module("run")


@pytest.fixture()
def fake_server(monkeypatch):
    calls = {}

    def fake_start_server(host, port, debug):  # signature match
        calls["host"] = host
        calls["port"] = port
        calls["debug"] = debug

    import delve.server as server_mod

    monkeypatch.setattr(server_mod, "start_server", fake_start_server)
    return calls


def test_version_flag_outputs_version(run_module, capsys):
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args(["--version"])
    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert run_module.__version__ in out
    assert "Delve Dungeon Server" in out


def test_default_command_is_server(run_module):
    assert run_module.parse_args([]).command == "server"


def test_server_main_uses_env_host_and_port(monkeypatch, run_module, fake_server):
    monkeypatch.setenv("PORT", "5555")
    monkeypatch.setenv("HOST", "127.0.0.1")
    assert run_module.main(["server"]) == 0
    assert fake_server == {"host": "127.0.0.1", "port": 5555, "debug": False}


def test_server_flags_override_env(monkeypatch, run_module, fake_server):
    monkeypatch.setenv("PORT", "5555")
    run_module.main(["server", "--port", "6000", "--debug"])
    assert fake_server["port"] == 6000
    assert fake_server["debug"] is True


def test_env_file_argument(monkeypatch, tmp_path, run_module, fake_server):
    monkeypatch.delenv("PORT", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=6001\n")
    try:
        run_module.main(["--env-file", str(env_file), "server"])
    finally:
        # load_dotenv writes straight into os.environ
        os.environ.pop("PORT", None)
    assert fake_server["port"] == 6001


def test_generate_prints_json(run_module):
    lines = []
    assert run_module.generate_command("easy", 21, out=lines.append) == 0
    data = json.loads(lines[0])
    assert data["tier"] == "easy" and data["seed"] == 21
    assert len(data["rows"]) == 5 and data["rows"][0][0] == "P"
    assert any(e["id"] == "key" for e in data["entities"])
    assert "attempts" in data["metrics"]


def test_generate_unknown_difficulty(run_module):
    lines = []
    assert run_module.generate_command("nightmare", 1, out=lines.append) == 1
    assert "Unknown difficulty" in lines[0]


def test_play_loop_scripted(run_module):
    script = iter(["up", "status", "look", "map", "bogus", "quit"])
    lines = []
    code = run_module.play_command("easy", 5, input_fn=lambda prompt: next(script), out=lines.append)
    assert code == 0
    text = "\n".join(lines)
    assert "dungeon takes shape" in text
    assert "the dungeon ends there" in text
    assert '"health": 100' in text
    assert "[invalid_direction]" in text


def test_play_loop_stops_at_end_of_input(run_module):
    def eof(prompt):
        raise EOFError

    assert run_module.play_command("normal", 1, input_fn=eof, out=lambda *_: None) == 0


def test_play_unknown_difficulty(run_module):
    lines = []
    assert run_module.play_command("nightmare", 1, out=lines.append) == 1


def test_render_grid_hides_unseen_tiles(run_module):
    text = run_module.render_grid([["P", None], [None, "#"]])
    assert text.splitlines()[0].startswith("P")
    assert len(text.splitlines()) == 2


def test_every_event_has_a_description(run_module):
    from delve.services.events import EVENT_TAGS

    samples = {
        "monster-encountered": {"archetype": "ghoul", "tier_index": 2},
        "combat-result": {
            "damage_dealt": 20,
            "damage_taken": 5,
            "monster_health": 30,
            "monster_max_health": 50,
            "player_health": 95,
            "monster_defeated": False,
        },
        "item-collected": {"kind": "health", "healed": 30, "player_health": 100},
        "round-advance": {"round": 8, "tier": "adventurer", "extra_monsters": 1},
        "moved": {"first_visit": True},
        "dungeon-generated": {"size": 6, "tier": "normal"},
    }
    for tag in EVENT_TAGS:
        text = run_module.describe_event({"type": tag, **samples.get(tag, {})})
        assert text and not text.startswith("{")
