import pytest

from delve.dungeon.config import DIFFICULTY_SETTINGS, DifficultyTier, UnknownDifficulty
from delve.models.run_state import LOST, PLAYING, WON
from delve.services.run_controller import RunController, extra_monsters_for_round, tier_for_round


def test_ramp_table_for_first_ten_rounds():
    rounds = range(1, 11)
    assert [tier_for_round(r) for r in rounds] == ["normal"] * 3 + ["hard"] * 3 + ["adventurer"] * 4
    assert [extra_monsters_for_round(r) for r in rounds] == [0, 0, 0, 0, 0, 0, 0, 1, 2, 3]


def test_survival_ten_round_progression():
    rc = RunController()
    req = rc.start_game("survival")
    assert rc.state.survival and rc.state.round == 1
    assert req.tier.name == "normal" and req.monster_count == 4
    seen = []
    for _ in range(9):
        events = rc.record_victory()
        assert rc.state.status == WON and rc.state.pending_next_round
        assert [e.type for e in events] == ["round-advance"]
        req = rc.acknowledge_next_round()
        assert rc.state.status == PLAYING and not rc.state.pending_next_round
        seen.append((events[0].data["round"], req.tier.name, req.extra_monsters, req.monster_count))
    assert seen[0] == (2, "normal", 0, 4)
    assert seen[2] == (4, "hard", 0, 6)
    assert seen[5] == (7, "adventurer", 0, 10)
    assert seen[6] == (8, "adventurer", 1, 11)
    assert seen[8] == (10, "adventurer", 3, 13)


def test_survival_defeat_resets_but_stays_in_survival():
    rc = RunController()
    rc.start_game("survival")
    for _ in range(4):
        rc.record_victory()
        rc.acknowledge_next_round()
    assert rc.state.tier == "hard"
    rc.record_defeat()
    assert rc.state.status == LOST
    assert rc.state.survival is True
    assert (rc.state.round, rc.state.tier, rc.state.extra_monsters) == (1, "normal", 0)
    req = rc.restart()
    assert rc.state.status == PLAYING
    assert req.tier.name == "normal"


def test_single_game_victory_is_terminal():
    rc = RunController()
    rc.start_game("hard")
    assert rc.record_victory() == []
    assert rc.state.status == WON
    assert rc.acknowledge_next_round() is None
    assert rc.state.status == WON


def test_acknowledge_without_pending_round_is_noop():
    rc = RunController()
    rc.start_game("survival")
    assert rc.acknowledge_next_round() is None
    assert rc.state.round == 1 and rc.state.status == PLAYING


def test_void_fall_soft_reset_vs_survival_loss():
    rc = RunController()
    rc.start_game("easy")
    assert rc.record_void_fall() is True
    assert rc.state.status == PLAYING
    assert rc.dungeon_request().tier.name == "easy"

    rc.start_game("survival")
    rc.record_victory()
    rc.acknowledge_next_round()
    assert rc.record_void_fall() is False
    assert rc.state.status == LOST
    assert rc.state.round == 1


def test_restart_uses_selected_tier():
    rc = RunController()
    rc.start_game("adventurer")
    rc.record_defeat()
    req = rc.restart()
    assert rc.state.status == PLAYING
    assert req.tier.name == "adventurer" and req.extra_monsters == 0


def test_change_difficulty_returns_to_selection():
    rc = RunController()
    rc.start_game("survival")
    rc.record_victory()
    rc.change_difficulty()
    assert rc.state.started is False
    assert rc.state.status == PLAYING
    assert rc.state.pending_next_round is False


def test_unknown_difficulty_raises():
    rc = RunController()
    with pytest.raises(UnknownDifficulty):
        rc.start_game("nightmare")
    with pytest.raises(ValueError):
        rc.start_game("")


def test_injected_tier_table_drives_requests():
    tiers = dict(DIFFICULTY_SETTINGS)
    tiers["hard"] = DifficultyTier("hard", 9, 2, 1, 1.0)
    rc = RunController(tiers)
    rc.start_game("survival")
    for _ in range(3):
        rc.record_victory()
        req = rc.acknowledge_next_round()
    assert req.tier.side_length == 9
    assert req.monster_count == 2
