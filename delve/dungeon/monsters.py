"""Monster archetype catalog and spawn stat tables.

Flavor text lives with the narration layer; the core only needs a stable slug
to reference and a display name for queries.
"""

from __future__ import annotations

import random
from typing import Dict, List, NamedTuple, Optional

ATTACK_POWERS = (5, 10, 20)
HEALTH_VALUES = (40, 50, 60)


class MonsterArchetype(NamedTuple):
    slug: str
    name: str


MONSTER_ARCHETYPES: List[MonsterArchetype] = [
    MonsterArchetype("goblin", "Goblin"),
    MonsterArchetype("skeleton", "Skeleton"),
    MonsterArchetype("giant-rat", "Giant Rat"),
    MonsterArchetype("slime", "Slime"),
    MonsterArchetype("cave-spider", "Cave Spider"),
    MonsterArchetype("zombie", "Zombie"),
    MonsterArchetype("kobold", "Kobold"),
    MonsterArchetype("ghoul", "Ghoul"),
    MonsterArchetype("mimic", "Mimic"),
    MonsterArchetype("wraith", "Wraith"),
    MonsterArchetype("troll", "Troll"),
    MonsterArchetype("basilisk", "Basilisk"),
    MonsterArchetype("harpy", "Harpy"),
    MonsterArchetype("gelatinous-cube", "Gelatinous Cube"),
    MonsterArchetype("banshee", "Banshee"),
    MonsterArchetype("gargoyle", "Gargoyle"),
]

_BY_SLUG: Dict[str, MonsterArchetype] = {m.slug: m for m in MONSTER_ARCHETYPES}


def archetype_name(slug: str) -> str:
    arch = _BY_SLUG.get(slug)
    return arch.name if arch else slug


def roll_monster_stats(rng: Optional[random.Random] = None) -> dict:
    """Draw archetype, attack and health for one spawn (health doubles as max)."""
    rng = rng or random
    arch = rng.choice(MONSTER_ARCHETYPES)
    attack = rng.choice(ATTACK_POWERS)
    health = rng.choice(HEALTH_VALUES)
    return {"archetype": arch.slug, "attack": attack, "health": health}


__all__ = ["MonsterArchetype", "MONSTER_ARCHETYPES", "ATTACK_POWERS", "HEALTH_VALUES", "archetype_name", "roll_monster_stats"]
