"""Turn resolution for one dungeon instance.

``TurnEngine.apply_move`` resolves a single orthogonal step against the grid,
in a fixed order: bounds, wall, void, monster, potion, key, exit, empty. Every
mutation of a turn happens inside one critical section; a move requested while
another is still being resolved (for instance from an event sink callback) is
rejected and returns ``None`` without touching state.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from delve.dungeon.grid import Grid
from delve.dungeon.tiles import EMPTY, EXIT, KEY, MONSTER, PLAYER, POTION, VOID, WALL
from delve.logging_utils import get_logger
from delve.models.entities import ENEMY, HEALTH, EntityRegistry
from delve.models.entities import EXIT as EXIT_KIND
from delve.models.entities import KEY as KEY_KIND
from delve.models.player import POTION_HEAL, Player

from . import events as ev
from .combat_service import resolve_exchange

log = get_logger("delve.turn_engine")

OUTCOME_NONE = "none"
OUTCOME_VOID_FALL = "void-fall"
OUTCOME_VICTORY = "victory"
OUTCOME_DEFEAT = "defeat"

DIRECTION_VECTORS: Dict[str, Tuple[int, int]] = {
    "up": (0, -1),
    "north": (0, -1),
    "down": (0, 1),
    "south": (0, 1),
    "left": (-1, 0),
    "west": (-1, 0),
    "right": (1, 0),
    "east": (1, 0),
}

_UNIT_STEPS = frozenset({(0, -1), (0, 1), (-1, 0), (1, 0)})


def parse_direction(name) -> Optional[Tuple[int, int]]:
    if not isinstance(name, str):
        return None
    return DIRECTION_VECTORS.get(name.strip().lower())


class MoveResult(NamedTuple):
    outcome: str
    events: List[ev.GameEvent]


class TurnEngine:
    def __init__(
        self,
        grid: Grid,
        registry: EntityRegistry,
        player: Player,
        event_sink: Optional[Callable[[ev.GameEvent], None]] = None,
    ):
        self.grid = grid
        self.registry = registry
        self.player = player
        self.event_sink = event_sink
        self._lock = threading.Lock()

    def apply_move(self, dx: int, dy: int) -> Optional[MoveResult]:
        if (dx, dy) not in _UNIT_STEPS:
            raise ValueError(f"not an orthogonal unit step: ({dx}, {dy})")
        if not self._lock.acquire(blocking=False):
            log.debug(event="move_rejected_reentrant", dx=dx, dy=dy)
            return None
        try:
            return self._resolve(dx, dy)
        finally:
            self._lock.release()

    # ------------------------------------------------------------------
    def _emit(self, out: List[ev.GameEvent], item: ev.GameEvent) -> None:
        out.append(item)
        if self.event_sink is not None:
            self.event_sink(item)

    def _step_player(self, tx: int, ty: int) -> bool:
        px, py = self.player.position
        self.grid.set(px, py, EMPTY)
        self.grid.set(tx, ty, PLAYER)
        self.player.x, self.player.y = tx, ty
        return self.grid.mark_described(tx, ty)

    def _resolve(self, dx: int, dy: int) -> MoveResult:
        grid, player = self.grid, self.player
        tx, ty = player.x + dx, player.y + dy
        out: List[ev.GameEvent] = []

        if not grid.in_bounds(tx, ty):
            self._emit(out, ev.event(ev.BOUNDARY_BLOCKED, x=tx, y=ty))
            return MoveResult(OUTCOME_NONE, out)

        tile = grid.get(tx, ty)
        if tile == WALL:
            grid.mark_visited(tx, ty)
            self._emit(out, ev.event(ev.WALL_BUMP, x=tx, y=ty))
            return MoveResult(OUTCOME_NONE, out)

        grid.mark_visited(tx, ty)

        if tile == VOID:
            self._emit(out, ev.event(ev.VOID_FALL, x=tx, y=ty))
            return MoveResult(OUTCOME_VOID_FALL, out)

        if tile == MONSTER:
            return self._encounter(tx, ty, out)

        if tile == POTION:
            potion = self.registry.at(tx, ty, HEALTH)
            if potion is not None:
                self.registry.remove(potion.id)
            before = player.health
            player.heal(POTION_HEAL)
            self._step_player(tx, ty)
            self._emit(
                out,
                ev.event(
                    ev.ITEM_COLLECTED,
                    kind=HEALTH,
                    id=potion.id if potion else None,
                    x=tx,
                    y=ty,
                    healed=player.health - before,
                    player_health=player.health,
                ),
            )
            return MoveResult(OUTCOME_NONE, out)

        if tile == KEY:
            key = self.registry.at(tx, ty, KEY_KIND)
            if key is not None:
                self.registry.remove(key.id)
            player.has_key = True
            self._step_player(tx, ty)
            self._emit(out, ev.event(ev.ITEM_COLLECTED, kind=KEY_KIND, id="key", x=tx, y=ty))
            return MoveResult(OUTCOME_NONE, out)

        if tile == EXIT:
            exit_entity = self.registry.at(tx, ty, EXIT_KIND)
            if exit_entity is not None:
                exit_entity.discovered = True
            if player.has_key:
                self._emit(out, ev.event(ev.VICTORY, x=tx, y=ty))
                return MoveResult(OUTCOME_VICTORY, out)
            self._emit(out, ev.event(ev.EXIT_LOCKED, x=tx, y=ty))
            return MoveResult(OUTCOME_NONE, out)

        first_visit = self._step_player(tx, ty)
        self._emit(out, ev.event(ev.MOVED, x=tx, y=ty, first_visit=first_visit))
        return MoveResult(OUTCOME_NONE, out)

    def _encounter(self, tx: int, ty: int, out: List[ev.GameEvent]) -> MoveResult:
        monster = self.registry.at(tx, ty, ENEMY)
        if monster is None:
            log.warn(event="monster_tile_without_entity", x=tx, y=ty)
            return MoveResult(OUTCOME_NONE, out)
        monster.encounter_count += 1
        self._emit(
            out,
            ev.event(
                ev.MONSTER_ENCOUNTERED,
                id=monster.id,
                archetype=monster.archetype,
                tier_index=min(monster.encounter_count, 3),
            ),
        )
        result = resolve_exchange(self.player, monster.id, self.registry, self.grid)
        for item in result.events:
            self._emit(out, item)
        return MoveResult(OUTCOME_DEFEAT if result.player_defeated else OUTCOME_NONE, out)


__all__ = [
    "TurnEngine",
    "MoveResult",
    "DIRECTION_VECTORS",
    "parse_direction",
    "OUTCOME_NONE",
    "OUTCOME_VOID_FALL",
    "OUTCOME_VICTORY",
    "OUTCOME_DEFEAT",
]
