"""Difficulty tiers and per-generation dungeon configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional

from flask import current_app, has_app_context

MAX_ATTEMPTS = 150
MAX_WALL_ATTEMPTS = 25
# Scales the nominal per-tier wall multiplier down to keep layouts open
WALL_OPENNESS = 0.6
VOID_CHANCE = 0.25
MIN_SIDE_LENGTH = 4

SURVIVAL = "survival"


class UnknownDifficulty(ValueError):
    """Raised when a difficulty name is not in the tier table."""


@dataclass(frozen=True)
class DifficultyTier:
    name: str
    side_length: int
    monster_count: int
    potion_count: int
    wall_multiplier: float
    label: str = ""

    def __post_init__(self):
        if self.side_length < MIN_SIDE_LENGTH:
            raise ValueError(f"tier {self.name}: side_length must be >= {MIN_SIDE_LENGTH}")
        if self.monster_count < 0 or self.potion_count < 0:
            raise ValueError(f"tier {self.name}: counts must be non-negative")
        if self.wall_multiplier < 0:
            raise ValueError(f"tier {self.name}: wall_multiplier must be non-negative")

    def to_dict(self):
        return {
            "name": self.name,
            "side_length": self.side_length,
            "monster_count": self.monster_count,
            "potion_count": self.potion_count,
            "wall_multiplier": self.wall_multiplier,
            "label": self.label,
        }


DIFFICULTY_SETTINGS: Dict[str, DifficultyTier] = {
    "easy": DifficultyTier("easy", 5, 3, 1, 1.5, "Easy (5x5 grid, fewer monsters)"),
    "normal": DifficultyTier("normal", 6, 4, 1, 1.5, "Normal (6x6 grid, balanced challenge)"),
    "hard": DifficultyTier("hard", 8, 6, 2, 2.0, "Hard (8x8 grid, more monsters and walls)"),
    "adventurer": DifficultyTier("adventurer", 10, 10, 3, 2.5, "Adventurer (10x10 grid, complex maze)"),
}


@dataclass
class DungeonConfig:
    side_length: int = 6
    monster_count: int = 4
    potion_count: int = 1
    wall_multiplier: float = 1.5
    void_chance: float = VOID_CHANCE
    seed: Optional[int] = None
    enable_metrics: bool = True

    @classmethod
    def from_tier(cls, tier: DifficultyTier, extra_monsters: int = 0, **overrides) -> "DungeonConfig":
        cfg = cls(
            side_length=tier.side_length,
            monster_count=tier.monster_count + max(0, extra_monsters),
            potion_count=tier.potion_count,
            wall_multiplier=tier.wall_multiplier,
        )
        for k, v in overrides.items():
            setattr(cfg, k, v)
        return cfg

    @property
    def wall_budget(self) -> int:
        return int(self.side_length * self.wall_multiplier * WALL_OPENNESS)

    def apply_env_overrides(self) -> "DungeonConfig":
        """Apply DUNGEON_* environment variables, then Flask app config (highest precedence)."""
        seed_raw = os.environ.get("DUNGEON_SEED")
        if self.seed is None and seed_raw not in (None, ""):
            try:
                self.seed = int(seed_raw)
            except ValueError:
                pass
        chance_raw = os.environ.get("DUNGEON_VOID_CHANCE")
        if chance_raw not in (None, ""):
            try:
                self.void_chance = min(1.0, max(0.0, float(chance_raw)))
            except ValueError:
                pass
        if "DUNGEON_ENABLE_GENERATION_METRICS" in os.environ:
            val = os.environ.get("DUNGEON_ENABLE_GENERATION_METRICS", "").lower()
            self.enable_metrics = val not in {"0", "false", "no", ""}
        if has_app_context():
            cfg = current_app.config
            try:
                if cfg.get("DUNGEON_SEED") is not None and self.seed is None:
                    self.seed = int(cfg["DUNGEON_SEED"])
                if cfg.get("DUNGEON_VOID_CHANCE") is not None:
                    self.void_chance = min(1.0, max(0.0, float(cfg["DUNGEON_VOID_CHANCE"])))
            except (TypeError, ValueError):
                pass
            if "DUNGEON_ENABLE_GENERATION_METRICS" in cfg:
                self.enable_metrics = bool(cfg["DUNGEON_ENABLE_GENERATION_METRICS"])
        return self


def get_tier(name: str, tiers: Optional[Dict[str, DifficultyTier]] = None) -> DifficultyTier:
    table = tiers if tiers is not None else DIFFICULTY_SETTINGS
    try:
        return table[name]
    except KeyError:
        raise UnknownDifficulty(name) from None


__all__ = [
    "DifficultyTier",
    "DungeonConfig",
    "DIFFICULTY_SETTINGS",
    "MAX_ATTEMPTS",
    "MAX_WALL_ATTEMPTS",
    "WALL_OPENNESS",
    "VOID_CHANCE",
    "MIN_SIDE_LENGTH",
    "SURVIVAL",
    "UnknownDifficulty",
    "get_tier",
]
