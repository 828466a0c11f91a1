"""Models package exports."""

from .entities import Entity, EntityRegistry  # noqa: F401
from .player import Player  # noqa: F401
from .run_state import LOST, PLAYING, WON, RunState  # noqa: F401

__all__ = ["Entity", "EntityRegistry", "Player", "RunState", "PLAYING", "WON", "LOST"]
