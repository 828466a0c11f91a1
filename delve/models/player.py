from __future__ import annotations

from dataclasses import dataclass

PLAYER_MAX_HEALTH = 100
PLAYER_ATTACK = 20
POTION_HEAL = 30


@dataclass
class Player:
    x: int = 0
    y: int = 0
    health: int = PLAYER_MAX_HEALTH
    attack: int = PLAYER_ATTACK
    has_key: bool = False

    @property
    def position(self):
        return self.x, self.y

    def heal(self, amount: int) -> int:
        self.health = min(PLAYER_MAX_HEALTH, self.health + amount)
        return self.health

    def take_damage(self, amount: int) -> int:
        self.health = max(0, self.health - amount)
        return self.health

    def to_dict(self):
        return {
            "x": self.x,
            "y": self.y,
            "health": self.health,
            "max_health": PLAYER_MAX_HEALTH,
            "attack": self.attack,
            "has_key": self.has_key,
        }


__all__ = ["Player", "PLAYER_MAX_HEALTH", "PLAYER_ATTACK", "POTION_HEAL"]
