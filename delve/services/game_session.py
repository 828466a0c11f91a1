"""Explicit per-player game state container.

A ``GameSession`` owns everything one player's game needs: the run controller,
the current generated dungeon and the turn engine bound to it. Transports
(HTTP API, Socket.IO, terminal CLI) talk to it only through
:meth:`GameSession.dispatch`, which serializes actions with a non-blocking
lock and answers with plain dicts:

    {"events": [...], "state": {...}}      state-changing actions
    {"status" | "location" | "map": {...}} queries
    {"error": code}                       rejected actions

Error codes: ``busy``, ``unknown_action``, ``invalid_direction``,
``missing_difficulty``, ``unknown_difficulty``, ``not_started``, ``not_playing``,
``nothing_to_acknowledge``.
"""

from __future__ import annotations

import random
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from delve.dungeon.config import SURVIVAL, DifficultyTier, DungeonConfig, UnknownDifficulty, get_tier
from delve.dungeon.generator import GeneratedDungeon, generate_dungeon
from delve.logging_utils import get_logger
from delve.models.run_state import PLAYING, RunState

from . import events as ev
from .perception import location_report, map_overview, status_report
from .run_controller import DungeonRequest, RunController
from .turn_engine import OUTCOME_DEFEAT, OUTCOME_VICTORY, OUTCOME_VOID_FALL, TurnEngine, parse_direction

log = get_logger("delve.session")

ACTIONS = ("start", "move", "status", "location", "map", "acknowledge", "restart", "change_difficulty")
_PAYLOAD_KEYS = {"start": ("difficulty",), "move": ("direction",), "change_difficulty": ("difficulty",)}


class GameNotStarted(Exception):
    """An in-game action arrived before a difficulty was chosen."""


class GameSession:
    def __init__(
        self,
        session_id: Optional[str] = None,
        tiers: Optional[Dict[str, DifficultyTier]] = None,
        seed: Optional[int] = None,
    ):
        self.id = session_id or uuid.uuid4().hex[:12]
        self.controller = RunController(tiers)
        if seed is None:
            seed = DungeonConfig().apply_env_overrides().seed
        self.seed = seed
        # Per-dungeon seeds are drawn from here so a fixed session seed still
        # yields a different layout every round.
        self._rng = random.Random(seed)
        self.dungeon: Optional[GeneratedDungeon] = None
        self.engine: Optional[TurnEngine] = None
        self._action_lock = threading.Lock()
        self._generation_lock = threading.Lock()
        self._handlers: Dict[str, Callable[..., Dict[str, Any]]] = {
            "start": self.start,
            "move": self.move,
            "status": self.status,
            "location": self.location,
            "map": self.map,
            "acknowledge": self.acknowledge,
            "restart": self.restart,
            "change_difficulty": self.change_difficulty,
        }

    @property
    def run(self) -> RunState:
        return self.controller.state

    # ------------------------------------------------------------------
    def dispatch(self, action: str, **payload) -> Dict[str, Any]:
        handler = self._handlers.get(action)
        if handler is None:
            return {"error": "unknown_action"}
        if not self._action_lock.acquire(blocking=False):
            log.debug(event="action_dropped_busy", session=self.id, action=action)
            return {"error": "busy"}
        kwargs = {k: payload[k] for k in _PAYLOAD_KEYS.get(action, ()) if payload.get(k) is not None}
        try:
            return handler(**kwargs)
        except UnknownDifficulty as e:
            return {"error": "unknown_difficulty", "difficulty": str(e)}
        except GameNotStarted:
            return {"error": "not_started"}
        finally:
            self._action_lock.release()

    def _require_started(self) -> None:
        if not self.run.started or self.dungeon is None:
            raise GameNotStarted(self.id)

    # ------------------------------------------------------------------
    def _dungeon_config(self, request: DungeonRequest) -> DungeonConfig:
        cfg = DungeonConfig.from_tier(request.tier, extra_monsters=request.extra_monsters)
        cfg.apply_env_overrides()
        cfg.seed = self._rng.randrange(2**31)
        return cfg

    def _generate(self, reset: bool = False) -> List[ev.GameEvent]:
        if not self._generation_lock.acquire(blocking=False):
            log.debug(event="generation_coalesced", session=self.id)
            return []
        try:
            request = self.controller.dungeon_request()
            dungeon = generate_dungeon(self._dungeon_config(request))
            self.dungeon = dungeon
            self.engine = TurnEngine(dungeon.grid, dungeon.entities, dungeon.player)
            out = []
            if reset:
                out.append(ev.event(ev.DUNGEON_RESET, tier=request.tier.name))
            out.append(
                ev.event(
                    ev.DUNGEON_GENERATED,
                    tier=request.tier.name,
                    size=dungeon.grid.size,
                    monsters=len(dungeon.entities.of_kind("enemy")),
                    potions=len(dungeon.entities.of_kind("health")),
                    has_void=dungeon.has_void,
                    fallback=dungeon.fallback,
                    seed=dungeon.seed,
                )
            )
            return out
        finally:
            self._generation_lock.release()

    def _reveal(self) -> ev.GameEvent:
        grid = self.dungeon.grid
        grid.reveal_all()
        return ev.event(ev.MAP_REVEALED, revealed=grid.revealed_count())

    def _changed(self, events: List[ev.GameEvent]) -> Dict[str, Any]:
        return {"events": [e.to_dict() for e in events], "state": self.snapshot()}

    # -- actions -------------------------------------------------------
    def start(self, difficulty: Optional[str] = None) -> Dict[str, Any]:
        if not difficulty:
            return {"error": "missing_difficulty"}
        self.controller.start_game(difficulty)
        return self._changed(self._generate())

    def move(self, direction: Optional[str] = None) -> Dict[str, Any]:
        self._require_started()
        step = parse_direction(direction)
        if step is None:
            return {"error": "invalid_direction"}
        if self.run.status != PLAYING:
            return {"error": "not_playing"}
        result = self.engine.apply_move(*step)
        if result is None:
            return {"error": "busy"}
        out = list(result.events)
        if result.outcome == OUTCOME_VICTORY:
            out.extend(self.controller.record_victory())
            out.append(self._reveal())
        elif result.outcome == OUTCOME_DEFEAT:
            self.controller.record_defeat()
            out.append(self._reveal())
        elif result.outcome == OUTCOME_VOID_FALL:
            if self.controller.record_void_fall():
                out.extend(self._generate(reset=True))
            else:
                out.append(self._reveal())
        return self._changed(out)

    def status(self) -> Dict[str, Any]:
        self._require_started()
        return {"status": status_report(self.dungeon.player, self.run)}

    def location(self) -> Dict[str, Any]:
        self._require_started()
        d = self.dungeon
        return {"location": location_report(d.grid, d.entities, d.player)}

    def map(self) -> Dict[str, Any]:
        self._require_started()
        d = self.dungeon
        return {"map": map_overview(d.grid, d.entities, d.player, self.run)}

    def acknowledge(self) -> Dict[str, Any]:
        self._require_started()
        if self.controller.acknowledge_next_round() is None:
            return {"error": "nothing_to_acknowledge"}
        return self._changed(self._generate())

    def restart(self) -> Dict[str, Any]:
        self._require_started()
        self.controller.restart()
        return self._changed(self._generate())

    def change_difficulty(self, difficulty: Optional[str] = None) -> Dict[str, Any]:
        # an unknown name leaves the running game untouched
        if difficulty and difficulty != SURVIVAL:
            get_tier(difficulty, self.controller.tiers)
        self.controller.change_difficulty()
        self.dungeon = None
        self.engine = None
        if difficulty is not None:
            return self.start(difficulty)
        return self._changed([])

    # -- read views ----------------------------------------------------
    def snapshot(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"session_id": self.id, "run": self.run.to_dict()}
        if self.dungeon is not None:
            data["player"] = self.dungeon.player.to_dict()
            data["size"] = self.dungeon.grid.size
        return data

    def revealed_grid(self) -> Optional[List[List[Optional[str]]]]:
        if self.dungeon is None:
            return None
        return self.dungeon.grid.to_rows(fog=True)

    def last_metrics(self) -> Optional[Dict[str, Any]]:
        if self.dungeon is None:
            return None
        return dict(self.dungeon.metrics)


__all__ = ["GameSession", "GameNotStarted", "ACTIONS"]
