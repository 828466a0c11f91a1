"""Pure read queries over the current dungeon and run state.

None of these mutate anything; they back the ``status``, ``location`` and
``map`` actions and feed the narration layer its raw material.
"""

from __future__ import annotations

from typing import Any, Dict, List

from delve.dungeon.grid import DIRECTIONS, Grid
from delve.dungeon.monsters import archetype_name
from delve.dungeon.tiles import EMPTY, EXIT, KEY, MONSTER, POTION, VOID, WALL
from delve.models.entities import ENEMY, HEALTH, EntityRegistry
from delve.models.entities import EXIT as EXIT_KIND
from delve.models.player import PLAYER_MAX_HEALTH, Player
from delve.models.run_state import RunState

SURROUNDING_CATEGORIES = ("open", "blocked", "growling", "glow", "exit", "ancient", "key", "mysterious", "wall")

_TILE_CATEGORY = {
    EMPTY: "open",
    WALL: "blocked",
    MONSTER: "growling",
    POTION: "glow",
    KEY: "key",
    VOID: "mysterious",
}


def status_report(player: Player, run: RunState) -> Dict[str, Any]:
    report = {
        "health": player.health,
        "max_health": PLAYER_MAX_HEALTH,
        "attack": player.attack,
        "has_key": player.has_key,
        "status": run.status,
    }
    if run.survival:
        report["round"] = run.round
        report["tier"] = run.tier
    return report


def location_report(grid: Grid, registry: EntityRegistry, player: Player) -> Dict[str, Any]:
    surroundings: Dict[str, List[str]] = {c: [] for c in SURROUNDING_CATEGORIES}
    for dx, dy, name in DIRECTIONS:
        nx, ny = player.x + dx, player.y + dy
        if not grid.in_bounds(nx, ny):
            surroundings["wall"].append(name)
            continue
        tile = grid.get(nx, ny)
        if tile == EXIT:
            exit_entity = registry.at(nx, ny, EXIT_KIND)
            category = "exit" if exit_entity is not None and exit_entity.discovered else "ancient"
        else:
            category = _TILE_CATEGORY.get(tile, "open")
        surroundings[category].append(name)
    return {"x": player.x, "y": player.y, "surroundings": surroundings}


def map_overview(grid: Grid, registry: EntityRegistry, player: Player, run: RunState) -> Dict[str, Any]:
    monsters = []
    for e in registry.of_kind(ENEMY):
        if grid.is_visited(e.x, e.y):
            monsters.append(
                {
                    "id": e.id,
                    "archetype": e.archetype,
                    "name": archetype_name(e.archetype),
                    "x": e.x,
                    "y": e.y,
                }
            )
    potions = sum(1 for e in registry.of_kind(HEALTH) if grid.is_visited(e.x, e.y))
    overview = {
        "size": grid.size,
        "player": {"x": player.x, "y": player.y},
        "revealed": grid.revealed_count(),
        "total": grid.size * grid.size,
        "monsters": monsters,
        "potions": potions,
    }
    if run.survival:
        overview["round"] = run.round
    return overview


__all__ = ["status_report", "location_report", "map_overview", "SURROUNDING_CATEGORIES"]
