"""Run-level state machine: game status, survival rounds and tier ramp.

The controller never generates dungeons itself. It answers "what should the
next dungeon look like" through :meth:`RunController.dungeon_request` and
records terminal outcomes reported by the session.

Survival ramp:
    rounds 1-3   normal
    rounds 4-6   hard
    rounds 7+    adventurer, with ``round - 7`` extra monsters
"""

from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional

from delve.dungeon.config import (
    DIFFICULTY_SETTINGS,
    SURVIVAL,
    DifficultyTier,
    UnknownDifficulty,
    get_tier,
)
from delve.logging_utils import get_logger
from delve.models.run_state import LOST, PLAYING, WON, RunState

from . import events as ev

log = get_logger("delve.run")

SURVIVAL_START_TIER = "normal"
HARD_FROM_ROUND = 4
ADVENTURER_FROM_ROUND = 7


def tier_for_round(round_no: int) -> str:
    if round_no >= ADVENTURER_FROM_ROUND:
        return "adventurer"
    if round_no >= HARD_FROM_ROUND:
        return "hard"
    return SURVIVAL_START_TIER


def extra_monsters_for_round(round_no: int) -> int:
    return max(0, round_no - ADVENTURER_FROM_ROUND)


class DungeonRequest(NamedTuple):
    tier: DifficultyTier
    monster_count: int
    extra_monsters: int


class RunController:
    def __init__(self, tiers: Optional[Dict[str, DifficultyTier]] = None, state: Optional[RunState] = None):
        self.tiers = tiers if tiers is not None else DIFFICULTY_SETTINGS
        self.state = state or RunState()

    # -- lifecycle -------------------------------------------------------
    def start_game(self, tier_name: str) -> DungeonRequest:
        st = self.state
        if tier_name == SURVIVAL:
            st.survival = True
            st.reset_survival()
            st.tier = tier_for_round(st.round)
        else:
            if tier_name not in self.tiers:
                raise UnknownDifficulty(tier_name)
            st.survival = False
            st.reset_survival()
            st.tier = tier_name
            st.selected_tier = tier_name
        st.status = PLAYING
        st.started = True
        log.info(event="game_started", mode=SURVIVAL if st.survival else "single", tier=st.tier)
        return self.dungeon_request()

    def record_victory(self) -> List[ev.GameEvent]:
        st = self.state
        st.status = WON
        if not st.survival:
            log.info(event="game_won", tier=st.tier)
            return []
        st.pending_next_round = True
        st.round += 1
        st.tier = tier_for_round(st.round)
        st.extra_monsters = extra_monsters_for_round(st.round)
        log.info(event="round_advance", round=st.round, tier=st.tier, extra_monsters=st.extra_monsters)
        return [ev.event(ev.ROUND_ADVANCE, round=st.round, tier=st.tier, extra_monsters=st.extra_monsters)]

    def record_defeat(self) -> None:
        st = self.state
        st.status = LOST
        if st.survival:
            log.info(event="survival_lost", round=st.round, tier=st.tier)
            st.reset_survival()
        else:
            log.info(event="game_lost", tier=st.tier)

    def record_void_fall(self) -> bool:
        """Record a fall; returns True when the caller must regenerate in place."""
        if self.state.survival:
            self.record_defeat()
            return False
        log.info(event="void_soft_reset", tier=self.state.tier)
        return True

    def acknowledge_next_round(self) -> Optional[DungeonRequest]:
        st = self.state
        if not (st.survival and st.status == WON and st.pending_next_round):
            return None
        st.pending_next_round = False
        st.status = PLAYING
        return self.dungeon_request()

    def restart(self) -> DungeonRequest:
        st = self.state
        if st.survival:
            st.reset_survival()
            st.tier = tier_for_round(st.round)
        else:
            st.tier = st.selected_tier
        st.status = PLAYING
        st.started = True
        log.info(event="game_restarted", survival=st.survival, tier=st.tier)
        return self.dungeon_request()

    def change_difficulty(self) -> None:
        st = self.state
        st.started = False
        st.status = PLAYING
        st.pending_next_round = False

    # -- queries ---------------------------------------------------------
    def dungeon_request(self) -> DungeonRequest:
        st = self.state
        tier = get_tier(st.tier, self.tiers)
        extra = st.extra_monsters if st.survival else 0
        return DungeonRequest(tier, tier.monster_count + extra, extra)


__all__ = [
    "RunController",
    "DungeonRequest",
    "tier_for_round",
    "extra_monsters_for_round",
    "HARD_FROM_ROUND",
    "ADVENTURER_FROM_ROUND",
]
