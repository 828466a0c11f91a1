import threading

import pytest

from delve.services.turn_engine import (
    OUTCOME_DEFEAT,
    OUTCOME_NONE,
    OUTCOME_VICTORY,
    OUTCOME_VOID_FALL,
    parse_direction,
)
from dungeon_test_utils import engine_for, types

ROWS_4 = ["....", "....", "....", "...."]


def _rows(first_row):
    return [first_row] + ROWS_4[1:]


def test_wall_bump_marks_visited_without_moving():
    eng = engine_for(_rows("P#.E"))
    before = str(eng.grid)
    res = eng.apply_move(1, 0)
    assert res.outcome == OUTCOME_NONE
    assert types(res.events) == ["wall-bump"]
    assert eng.player.position == (0, 0)
    assert eng.grid.is_visited(1, 0)
    assert str(eng.grid) == before


def test_boundary_blocked_changes_nothing():
    eng = engine_for(_rows("P..E"))
    revealed = eng.grid.revealed_count()
    res = eng.apply_move(-1, 0)
    assert types(res.events) == ["boundary-blocked"]
    res = eng.apply_move(0, -1)
    assert types(res.events) == ["boundary-blocked"]
    assert eng.player.position == (0, 0)
    assert eng.grid.revealed_count() == revealed


def test_locked_exit_then_victory_with_key():
    eng = engine_for(_rows("PE.."))
    res = eng.apply_move(1, 0)
    assert res.outcome == OUTCOME_NONE
    assert types(res.events) == ["exit-locked"]
    assert eng.player.position == (0, 0)
    assert eng.registry.get("exit").discovered is True
    assert eng.grid.is_visited(1, 0)

    eng.player.has_key = True
    res = eng.apply_move(1, 0)
    assert res.outcome == OUTCOME_VICTORY
    assert types(res.events) == ["victory"]


def test_key_pickup_moves_player():
    eng = engine_for(_rows("PK.E"))
    res = eng.apply_move(1, 0)
    assert types(res.events) == ["item-collected"]
    assert res.events[0].data["kind"] == "key"
    assert eng.player.has_key is True
    assert "key" not in eng.registry
    assert eng.player.position == (1, 0)
    assert eng.grid.get(0, 0) == "."
    assert eng.grid.get(1, 0) == "P"


@pytest.mark.parametrize("start_health,expected", [(90, 100), (50, 80), (100, 100)])
def test_potion_heals_with_clamp(start_health, expected):
    eng = engine_for(_rows("PH.E"), player_health=start_health)
    res = eng.apply_move(1, 0)
    assert types(res.events) == ["item-collected"]
    assert res.events[0].data["kind"] == "health"
    assert res.events[0].data["healed"] == expected - start_health
    assert eng.player.health == expected
    assert eng.registry.of_kind("health") == []
    assert eng.player.position == (1, 0)


def test_void_fall_is_reported_without_moving():
    eng = engine_for(_rows("PV.E"))
    res = eng.apply_move(1, 0)
    assert res.outcome == OUTCOME_VOID_FALL
    assert types(res.events) == ["void-fall"]
    assert eng.player.position == (0, 0)
    assert eng.grid.get(1, 0) == "V"


def test_moved_reports_first_visit_once():
    eng = engine_for(_rows("P..E"))
    first = eng.apply_move(1, 0)
    assert types(first.events) == ["moved"]
    assert first.events[0].data == {"x": 1, "y": 0, "first_visit": True}
    back = eng.apply_move(-1, 0)
    assert back.events[0].data["first_visit"] is False
    again = eng.apply_move(1, 0)
    assert again.events[0].data["first_visit"] is False


def test_encounter_tier_index_caps_at_three():
    eng = engine_for(_rows("PM.E"), monsters={(1, 0): (5, 100, "troll")})
    tiers = []
    for _ in range(4):
        res = eng.apply_move(1, 0)
        enc = res.events[0]
        assert enc.type == "monster-encountered"
        assert enc.data["archetype"] == "troll"
        tiers.append(enc.data["tier_index"])
        assert eng.player.position == (0, 0)
    assert tiers == [1, 2, 3, 3]
    monster = eng.registry.get("enemy-0")
    assert monster.encounter_count == 4
    assert monster.health == 20
    assert eng.player.health == 80


def test_fatal_counter_attack_ends_in_defeat():
    eng = engine_for(_rows("PM.E"), monsters={(1, 0): (20, 60)}, player_health=10)
    res = eng.apply_move(1, 0)
    assert res.outcome == OUTCOME_DEFEAT
    assert types(res.events) == ["monster-encountered", "combat-result", "defeat"]
    assert eng.player.health == 0


def test_reentrant_move_from_event_sink_is_rejected():
    nested = []

    def sink(event):
        nested.append(eng.apply_move(0, 1))

    eng = engine_for(_rows("P..E"), event_sink=sink)
    res = eng.apply_move(1, 0)
    assert types(res.events) == ["moved"]
    assert nested == [None]
    assert eng.player.position == (1, 0)


def test_move_rejected_while_another_thread_holds_the_turn():
    eng = engine_for(_rows("P..E"))
    eng._lock.acquire()
    try:
        result = []
        t = threading.Thread(target=lambda: result.append(eng.apply_move(1, 0)))
        t.start()
        t.join()
        assert result == [None]
        assert eng.player.position == (0, 0)
    finally:
        eng._lock.release()
    assert eng.apply_move(1, 0) is not None


def test_non_unit_step_is_a_programming_error():
    eng = engine_for(_rows("P..E"))
    with pytest.raises(ValueError):
        eng.apply_move(1, 1)


def test_parse_direction_aliases():
    assert parse_direction("up") == parse_direction("north") == (0, -1)
    assert parse_direction("Down") == (0, 1)
    assert parse_direction(" west ") == (-1, 0)
    assert parse_direction("right") == (1, 0)
    assert parse_direction("sideways") is None
    assert parse_direction(None) is None
