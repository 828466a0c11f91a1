"""In-memory dungeon entity models.

``Entity`` carries the mutable per-object state (monster health, encounter
count, exit discovery) for everything on the grid that is not the player;
``EntityRegistry`` keys them by id and answers position lookups. Entity
positions always mirror the grid cell holding the matching tile.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

ENEMY = "enemy"
HEALTH = "health"
KEY = "key"
EXIT = "exit"
VOID = "void"
WALL = "wall"

ENTITY_KINDS = frozenset({ENEMY, HEALTH, KEY, EXIT, VOID, WALL})


@dataclass
class Entity:
    id: str
    kind: str
    x: int
    y: int
    # enemy-only
    health: Optional[int] = None
    max_health: Optional[int] = None
    attack: Optional[int] = None
    archetype: Optional[str] = None
    has_been_attacked: bool = False
    encounter_count: int = 0
    # exit-only
    discovered: bool = False

    @property
    def position(self):
        return self.x, self.y

    def to_dict(self):
        data = {"id": self.id, "kind": self.kind, "x": self.x, "y": self.y}
        if self.kind == ENEMY:
            data.update(
                health=self.health,
                max_health=self.max_health,
                attack=self.attack,
                archetype=self.archetype,
                has_been_attacked=self.has_been_attacked,
                encounter_count=self.encounter_count,
            )
        elif self.kind == EXIT:
            data["discovered"] = self.discovered
        return data


def make_monster(entity_id: str, x: int, y: int, archetype: str, attack: int, health: int) -> Entity:
    return Entity(
        id=entity_id,
        kind=ENEMY,
        x=x,
        y=y,
        health=health,
        max_health=health,
        attack=attack,
        archetype=archetype,
    )


class EntityRegistry:
    """Entities keyed by id, insertion ordered."""

    def __init__(self, entities: Optional[List[Entity]] = None):
        self._by_id: Dict[str, Entity] = {}
        for e in entities or []:
            self.add(e)

    def add(self, entity: Entity) -> Entity:
        if entity.kind not in ENTITY_KINDS:
            raise ValueError(f"unknown entity kind {entity.kind!r}")
        if entity.id in self._by_id:
            raise ValueError(f"duplicate entity id {entity.id!r}")
        self._by_id[entity.id] = entity
        return entity

    def get(self, entity_id: str) -> Optional[Entity]:
        return self._by_id.get(entity_id)

    def remove(self, entity_id: str) -> Optional[Entity]:
        return self._by_id.pop(entity_id, None)

    def at(self, x: int, y: int, kind: Optional[str] = None) -> Optional[Entity]:
        for e in self._by_id.values():
            if e.x == x and e.y == y and (kind is None or e.kind == kind):
                return e
        return None

    def of_kind(self, kind: str) -> List[Entity]:
        return [e for e in self._by_id.values() if e.kind == kind]

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._by_id

    def __iter__(self) -> Iterator[Entity]:
        return iter(list(self._by_id.values()))

    def __len__(self) -> int:
        return len(self._by_id)

    def to_list(self):
        return [e.to_dict() for e in self._by_id.values()]


__all__ = [
    "Entity",
    "EntityRegistry",
    "make_monster",
    "ENEMY",
    "HEALTH",
    "KEY",
    "EXIT",
    "VOID",
    "WALL",
    "ENTITY_KINDS",
]
