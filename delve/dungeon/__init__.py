"""Public dungeon package interface.

Grid, tile constants, validity checks and the generator live in sibling
modules; the common import surface is re-exported here.
"""

from .config import (
    DIFFICULTY_SETTINGS,
    SURVIVAL,
    DifficultyTier,
    DungeonConfig,
    UnknownDifficulty,
    get_tier,
)  # noqa: F401
from .connectivity import is_valid_dungeon  # noqa: F401
from .generator import DungeonGenerator, GeneratedDungeon, generate_dungeon  # noqa: F401
from .grid import DIRECTIONS, Grid  # noqa: F401
from .tiles import EMPTY, EXIT, KEY, MONSTER, PLAYER, POTION, VOID, WALL  # noqa: F401

__all__ = [
    "DIFFICULTY_SETTINGS",
    "SURVIVAL",
    "DifficultyTier",
    "DungeonConfig",
    "UnknownDifficulty",
    "get_tier",
    "is_valid_dungeon",
    "DungeonGenerator",
    "GeneratedDungeon",
    "generate_dungeon",
    "DIRECTIONS",
    "Grid",
    "EMPTY",
    "EXIT",
    "KEY",
    "MONSTER",
    "PLAYER",
    "POTION",
    "VOID",
    "WALL",
]
