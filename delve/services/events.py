"""Tagged events emitted by the turn engine, run controller and session.

Each event is a tag plus a flat payload; ``to_dict`` produces the wire shape
``{"type": tag, **data}`` shared by the HTTP API, Socket.IO and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

BOUNDARY_BLOCKED = "boundary-blocked"
WALL_BUMP = "wall-bump"
VOID_FALL = "void-fall"
MONSTER_ENCOUNTERED = "monster-encountered"
COMBAT_RESULT = "combat-result"
ITEM_COLLECTED = "item-collected"
EXIT_LOCKED = "exit-locked"
VICTORY = "victory"
DEFEAT = "defeat"
ROUND_ADVANCE = "round-advance"
MOVED = "moved"
DUNGEON_GENERATED = "dungeon-generated"
DUNGEON_RESET = "dungeon-reset"
MAP_REVEALED = "map-revealed"

EVENT_TAGS = frozenset(
    {
        BOUNDARY_BLOCKED,
        WALL_BUMP,
        VOID_FALL,
        MONSTER_ENCOUNTERED,
        COMBAT_RESULT,
        ITEM_COLLECTED,
        EXIT_LOCKED,
        VICTORY,
        DEFEAT,
        ROUND_ADVANCE,
        MOVED,
        DUNGEON_GENERATED,
        DUNGEON_RESET,
        MAP_REVEALED,
    }
)


@dataclass(frozen=True)
class GameEvent:
    type: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.type not in EVENT_TAGS:
            raise ValueError(f"unknown event tag {self.type!r}")

    def to_dict(self) -> Dict[str, Any]:
        out = {"type": self.type}
        out.update(self.data)
        return out


def event(tag: str, **data) -> GameEvent:
    return GameEvent(tag, data)


__all__ = [
    "GameEvent",
    "event",
    "EVENT_TAGS",
    "BOUNDARY_BLOCKED",
    "WALL_BUMP",
    "VOID_FALL",
    "MONSTER_ENCOUNTERED",
    "COMBAT_RESULT",
    "ITEM_COLLECTED",
    "EXIT_LOCKED",
    "VICTORY",
    "DEFEAT",
    "ROUND_ADVANCE",
    "MOVED",
    "DUNGEON_GENERATED",
    "DUNGEON_RESET",
    "MAP_REVEALED",
]
