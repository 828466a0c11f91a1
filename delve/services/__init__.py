"""Game services: turn engine, combat, run controller, queries and sessions."""

from .game_session import GameNotStarted, GameSession  # noqa: F401
from .run_controller import RunController  # noqa: F401
from .turn_engine import MoveResult, TurnEngine  # noqa: F401

__all__ = ["GameSession", "GameNotStarted", "RunController", "TurnEngine", "MoveResult"]
