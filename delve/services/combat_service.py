"""Single-exchange melee resolution.

One call is one exchange: the player strikes first; a surviving monster hits
back with its full attack. No randomness is involved once the monster has
been spawned, so a given state always resolves the same way.
"""

from __future__ import annotations

from typing import List, NamedTuple

from delve.dungeon.grid import Grid
from delve.dungeon.tiles import EMPTY
from delve.logging_utils import get_logger
from delve.models.entities import ENEMY, EntityRegistry
from delve.models.player import Player

from .events import COMBAT_RESULT, DEFEAT, GameEvent, event

log = get_logger("delve.combat")


class ExchangeResult(NamedTuple):
    events: List[GameEvent]
    monster_defeated: bool = False
    player_defeated: bool = False


def resolve_exchange(player: Player, monster_id: str, registry: EntityRegistry, grid: Grid) -> ExchangeResult:
    """Resolve one exchange between ``player`` and the monster ``monster_id``.

    A stale id (already removed, or not a monster) resolves to nothing.
    """
    monster = registry.get(monster_id)
    if monster is None or monster.kind != ENEMY:
        log.debug(event="combat_stale_reference", monster_id=monster_id)
        return ExchangeResult([])

    damage_dealt = player.attack
    remaining = (monster.health or 0) - damage_dealt

    if remaining <= 0:
        registry.remove(monster.id)
        grid.set(monster.x, monster.y, EMPTY)
        monster.health = 0
        log.info(event="monster_defeated", monster_id=monster.id, archetype=monster.archetype)
        return ExchangeResult(
            [
                event(
                    COMBAT_RESULT,
                    monster_id=monster.id,
                    damage_dealt=damage_dealt,
                    damage_taken=0,
                    monster_health=0,
                    monster_max_health=monster.max_health,
                    player_health=player.health,
                    monster_defeated=True,
                    player_defeated=False,
                )
            ],
            monster_defeated=True,
        )

    monster.health = remaining
    monster.has_been_attacked = True
    damage_taken = monster.attack or 0
    player.take_damage(damage_taken)
    player_defeated = player.health <= 0

    events = [
        event(
            COMBAT_RESULT,
            monster_id=monster.id,
            damage_dealt=damage_dealt,
            damage_taken=damage_taken,
            monster_health=monster.health,
            monster_max_health=monster.max_health,
            player_health=player.health,
            monster_defeated=False,
            player_defeated=player_defeated,
        )
    ]
    if player_defeated:
        events.append(event(DEFEAT, monster_id=monster.id, archetype=monster.archetype))
        log.info(event="player_defeated", monster_id=monster.id, archetype=monster.archetype)
    return ExchangeResult(events, player_defeated=player_defeated)


__all__ = ["ExchangeResult", "resolve_exchange"]
