"""Run-level state that outlives a single dungeon instance."""

from __future__ import annotations

from dataclasses import dataclass

PLAYING = "playing"
WON = "won"
LOST = "lost"


@dataclass
class RunState:
    status: str = PLAYING
    started: bool = False
    survival: bool = False
    # Survival bookkeeping; round/tier/extra only move while survival is on
    round: int = 1
    tier: str = "normal"
    extra_monsters: int = 0
    pending_next_round: bool = False
    # Tier picked for non-survival play (restart target)
    selected_tier: str = "normal"

    def reset_survival(self) -> None:
        self.round = 1
        self.tier = "normal"
        self.extra_monsters = 0
        self.pending_next_round = False

    def to_dict(self):
        data = {
            "status": self.status,
            "started": self.started,
            "survival": self.survival,
            "tier": self.tier,
        }
        if self.survival:
            data.update(
                round=self.round,
                extra_monsters=self.extra_monsters,
                pending_next_round=self.pending_next_round,
            )
        return data


__all__ = ["RunState", "PLAYING", "WON", "LOST"]
