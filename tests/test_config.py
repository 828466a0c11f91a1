import pytest

from delve.dungeon.config import (
    DIFFICULTY_SETTINGS,
    DungeonConfig,
    UnknownDifficulty,
    get_tier,
)


def test_default_tiers_match_the_difficulty_table():
    table = {
        name: (t.side_length, t.monster_count, t.potion_count, t.wall_multiplier)
        for name, t in DIFFICULTY_SETTINGS.items()
    }
    assert table == {
        "easy": (5, 3, 1, 1.5),
        "normal": (6, 4, 1, 1.5),
        "hard": (8, 6, 2, 2.0),
        "adventurer": (10, 10, 3, 2.5),
    }


def test_wall_budget():
    assert DungeonConfig.from_tier(DIFFICULTY_SETTINGS["normal"]).wall_budget == 5
    assert DungeonConfig.from_tier(DIFFICULTY_SETTINGS["hard"]).wall_budget == 9


def test_get_tier_unknown():
    with pytest.raises(UnknownDifficulty):
        get_tier("survival")
    assert issubclass(UnknownDifficulty, ValueError)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DUNGEON_SEED", "123")
    monkeypatch.setenv("DUNGEON_VOID_CHANCE", "5")
    monkeypatch.setenv("DUNGEON_ENABLE_GENERATION_METRICS", "0")
    cfg = DungeonConfig().apply_env_overrides()
    assert cfg.seed == 123
    assert cfg.void_chance == 1.0
    assert cfg.enable_metrics is False


def test_explicit_seed_beats_env(monkeypatch):
    monkeypatch.setenv("DUNGEON_SEED", "123")
    assert DungeonConfig(seed=9).apply_env_overrides().seed == 9


def test_garbage_env_values_are_ignored(monkeypatch):
    monkeypatch.setenv("DUNGEON_SEED", "abc")
    monkeypatch.setenv("DUNGEON_VOID_CHANCE", "lots")
    cfg = DungeonConfig().apply_env_overrides()
    assert cfg.seed is None
    assert cfg.void_chance == 0.25


def test_app_config_takes_precedence(monkeypatch, test_app):
    monkeypatch.setenv("DUNGEON_VOID_CHANCE", "0.9")
    monkeypatch.setenv("DUNGEON_ENABLE_GENERATION_METRICS", "0")
    monkeypatch.setitem(test_app.config, "DUNGEON_VOID_CHANCE", 0.5)
    monkeypatch.setitem(test_app.config, "DUNGEON_SEED", "42")
    monkeypatch.setitem(test_app.config, "DUNGEON_ENABLE_GENERATION_METRICS", True)
    with test_app.app_context():
        cfg = DungeonConfig().apply_env_overrides()
    assert cfg.void_chance == 0.5
    assert cfg.seed == 42
    assert cfg.enable_metrics is True


def test_from_tier_overrides():
    cfg = DungeonConfig.from_tier(DIFFICULTY_SETTINGS["easy"], extra_monsters=2, seed=5, void_chance=0.0)
    assert (cfg.side_length, cfg.monster_count, cfg.seed, cfg.void_chance) == (5, 5, 5, 0.0)
