"""Rejection-sampling dungeon generator.

Phases per attempt: player at the origin, exit in the lower-right quadrant,
key away from the spawn, optional void, then walls placed one by one with the
full validity predicate re-checked after each. An attempt is kept only if the
finished layout still validates; after ``MAX_ATTEMPTS`` failures a trivial
open layout is used instead. Monsters and potions are scattered last, each
placement reverted if it would cut off part of the map.
"""
from __future__ import annotations

import random
import time
from typing import Any, Dict, NamedTuple, Optional, Tuple

from delve.logging_utils import get_logger
from delve.models.entities import EXIT as EXIT_KIND
from delve.models.entities import HEALTH, KEY as KEY_KIND, VOID as VOID_KIND, WALL as WALL_KIND
from delve.models.entities import Entity, EntityRegistry, make_monster
from delve.models.player import Player

from .config import MAX_ATTEMPTS, MAX_WALL_ATTEMPTS, DungeonConfig
from .connectivity import all_reachable, is_valid_dungeon
from .grid import Coord2D, Grid
from .metrics import init_metrics
from .monsters import roll_monster_stats
from .tiles import EMPTY, EXIT, KEY, MONSTER, PLAYER, POTION, VOID, WALL

log = get_logger("delve.generator")

PLAYER_START: Coord2D = (0, 0)
VOID_MIN_DISTANCE = 3
WALL_MIN_DISTANCE = 2


def manhattan(a: Coord2D, b: Coord2D) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class Skeleton(NamedTuple):
    grid: Grid
    exit_pos: Coord2D
    key_pos: Coord2D
    void_pos: Optional[Coord2D]
    walls: Tuple[Coord2D, ...]


class GeneratedDungeon(NamedTuple):
    grid: Grid
    entities: EntityRegistry
    player: Player
    has_void: bool
    fallback: bool
    seed: int
    metrics: Dict[str, Any]


class DungeonGenerator:
    def __init__(self, config: DungeonConfig, rng: Optional[random.Random] = None):
        self.config = config
        if rng is None:
            if self.config.seed is None:
                self.config.seed = random.randint(0, 2**31 - 1)
            rng = random.Random(self.config.seed)
        # Local RNG so external random usage does not affect generation
        self.rng = rng
        self.seed = self.config.seed
        self.size = self.config.side_length
        self.metrics: Dict[str, Any] = init_metrics() if self.config.enable_metrics else {}

    def _bump(self, key: str, amount: int = 1):
        if self.config.enable_metrics:
            self.metrics[key] += amount

    def _flag(self, key: str, value):
        if self.config.enable_metrics:
            self.metrics[key] = value

    # ---------------- Sampling helpers ----------------------------------------
    def _sample_exit(self) -> Coord2D:
        n = self.size
        while True:
            x = min(int(self.rng.random() * (n / 2)) + n // 2, n - 1)
            y = min(int(self.rng.random() * (n / 2)) + n // 2, n - 1)
            if (x, y) != PLAYER_START:
                return x, y

    def _sample_key(self, exit_pos: Coord2D) -> Coord2D:
        n = self.size
        min_dist = n // 3
        while True:
            pos = (self.rng.randrange(n), self.rng.randrange(n))
            if pos in (PLAYER_START, exit_pos):
                continue
            if manhattan(pos, PLAYER_START) < min_dist:
                continue
            return pos

    def _sample_void(self, exit_pos: Coord2D, key_pos: Coord2D) -> Coord2D:
        n = self.size
        while True:
            pos = (self.rng.randrange(n), self.rng.randrange(n))
            if pos in (PLAYER_START, exit_pos, key_pos):
                continue
            if manhattan(pos, PLAYER_START) < VOID_MIN_DISTANCE:
                continue
            return pos

    def _random_empty(self, grid: Grid) -> Optional[Coord2D]:
        empties = grid.empty_cells()
        if not empties:
            return None
        return self.rng.choice(empties)

    # ---------------- Phases --------------------------------------------------
    def _place_walls(self, grid: Grid, exit_pos: Coord2D, key_pos: Coord2D) -> Tuple[Coord2D, ...]:
        walls = []
        budget = self.config.wall_budget
        self._flag("wall_budget", budget)
        for _ in range(budget):
            placed = False
            for _attempt in range(MAX_WALL_ATTEMPTS):
                pos = self._random_empty(grid)
                if pos is None:
                    break
                if manhattan(pos, PLAYER_START) < WALL_MIN_DISTANCE:
                    continue
                x, y = pos
                grid.set(x, y, WALL)
                if is_valid_dungeon(grid, PLAYER_START, key_pos, exit_pos):
                    walls.append(pos)
                    placed = True
                    break
                grid.set(x, y, EMPTY)
            if not placed:
                self._bump("walls_skipped")
        return tuple(walls)

    def _attempt(self, include_void: bool) -> Optional[Skeleton]:
        self._flag("walls_skipped", 0)
        grid = Grid(self.size)
        grid.set(*PLAYER_START, PLAYER)
        exit_pos = self._sample_exit()
        grid.set(*exit_pos, EXIT)
        key_pos = self._sample_key(exit_pos)
        grid.set(*key_pos, KEY)
        void_pos = None
        if include_void:
            void_pos = self._sample_void(exit_pos, key_pos)
            grid.set(*void_pos, VOID)
        walls = self._place_walls(grid, exit_pos, key_pos)
        if not is_valid_dungeon(grid, PLAYER_START, key_pos, exit_pos):
            return None
        return Skeleton(grid, exit_pos, key_pos, void_pos, walls)

    def _fallback(self) -> Skeleton:
        self._flag("walls_skipped", 0)
        n = self.size
        grid = Grid(n)
        grid.set(*PLAYER_START, PLAYER)
        exit_pos = (n - 1, n - 1)
        key_pos = (n // 2, n // 2)
        grid.set(*exit_pos, EXIT)
        grid.set(*key_pos, KEY)
        return Skeleton(grid, exit_pos, key_pos, None, ())

    def build_skeleton(self) -> Tuple[Skeleton, bool]:
        include_void = self.rng.random() < self.config.void_chance
        self._flag("void_rolled", include_void)
        for attempt in range(1, MAX_ATTEMPTS + 1):
            self._flag("attempts", attempt)
            skeleton = self._attempt(include_void)
            if skeleton is not None:
                return skeleton, False
            log.debug(event="dungeon_attempt_rejected", seed=self.seed, attempt=attempt)
        log.warn(event="dungeon_generation_fallback", seed=self.seed, side=self.size, attempts=MAX_ATTEMPTS)
        self._flag("fallback_used", True)
        return self._fallback(), True

    def _populate(self, grid: Grid, registry: EntityRegistry) -> None:
        for i in range(self.config.monster_count):
            pos = self._random_empty(grid)
            if pos is None:
                self._bump("monsters_skipped")
                continue
            x, y = pos
            grid.set(x, y, MONSTER)
            if not all_reachable(grid, PLAYER_START):
                grid.set(x, y, EMPTY)
                self._bump("monsters_skipped")
                continue
            stats = roll_monster_stats(self.rng)
            registry.add(make_monster(f"enemy-{i}", x, y, stats["archetype"], stats["attack"], stats["health"]))
            self._bump("monsters_placed")
        for i in range(self.config.potion_count):
            pos = self._random_empty(grid)
            if pos is None:
                self._bump("potions_skipped")
                continue
            x, y = pos
            grid.set(x, y, POTION)
            if not all_reachable(grid, PLAYER_START):
                grid.set(x, y, EMPTY)
                self._bump("potions_skipped")
                continue
            registry.add(Entity(id=f"health-{i}", kind=HEALTH, x=x, y=y))
            self._bump("potions_placed")

    def run(self) -> GeneratedDungeon:
        start = time.perf_counter()
        skeleton, fallback = self.build_skeleton()
        grid = skeleton.grid
        registry = EntityRegistry()
        registry.add(Entity(id="exit", kind=EXIT_KIND, x=skeleton.exit_pos[0], y=skeleton.exit_pos[1]))
        registry.add(Entity(id="key", kind=KEY_KIND, x=skeleton.key_pos[0], y=skeleton.key_pos[1]))
        if skeleton.void_pos is not None:
            registry.add(Entity(id="void", kind=VOID_KIND, x=skeleton.void_pos[0], y=skeleton.void_pos[1]))
        for i, (wx, wy) in enumerate(skeleton.walls):
            registry.add(Entity(id=f"wall-{i}", kind=WALL_KIND, x=wx, y=wy))
        self._flag("walls_placed", len(skeleton.walls))
        self._flag("void_placed", skeleton.void_pos is not None)
        self._populate(grid, registry)
        grid.mark_visited(*PLAYER_START)
        grid.mark_described(*PLAYER_START)
        player = Player(x=PLAYER_START[0], y=PLAYER_START[1])
        if self.config.enable_metrics:
            self.metrics["runtime_ms"] = int((time.perf_counter() - start) * 1000)
        log.info(
            event="dungeon_generated",
            seed=self.seed,
            side=self.size,
            attempts=self.metrics.get("attempts"),
            walls=len(skeleton.walls),
            monsters=len(registry.of_kind("enemy")),
            potions=len(registry.of_kind(HEALTH)),
            void=skeleton.void_pos is not None,
            fallback=fallback,
        )
        return GeneratedDungeon(
            grid=grid,
            entities=registry,
            player=player,
            has_void=skeleton.void_pos is not None,
            fallback=fallback,
            seed=self.seed,
            metrics=self.metrics,
        )


def generate_dungeon(config: DungeonConfig, rng: Optional[random.Random] = None) -> GeneratedDungeon:
    return DungeonGenerator(config, rng=rng).run()


__all__ = ["DungeonGenerator", "GeneratedDungeon", "Skeleton", "generate_dungeon", "manhattan", "PLAYER_START"]
