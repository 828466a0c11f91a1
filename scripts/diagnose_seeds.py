#!/usr/bin/env python3
"""Dungeon solvability diagnostics for specific seeds.

Usage:
  python scripts/diagnose_seeds.py 292372 730727
  python scripts/diagnose_seeds.py --tiers easy,hard 1 2 3

If no seeds are provided as CLI args, a default list is used; every seed is
generated for every selected tier. Exits with non-zero status if any layout
breaks the solvability or single-occupancy checks.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List

# Ensure project root on path if executed directly
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from delve.dungeon import DIFFICULTY_SETTINGS, DungeonConfig, generate_dungeon  # noqa: E402
from delve.dungeon.connectivity import all_reachable, path_exists  # noqa: E402
from delve.dungeon.tiles import EMPTY, PLAYER, WALL  # noqa: E402

DEFAULT_SEEDS = [292372, 730727, 1, 42, 1337]

_KIND_TILE = {"enemy": "M", "health": "H", "key": "K", "exit": "E", "void": "V", "wall": WALL}


def analyze(d) -> dict:
    grid, reg, player = d.grid, d.entities, d.player
    key = reg.get("key")
    exit_ = reg.get("exit")
    occupancy_errors = 0
    claimed = set()
    for e in reg:
        if grid.get(e.x, e.y) != _KIND_TILE[e.kind] or (e.x, e.y) in claimed:
            occupancy_errors += 1
        claimed.add((e.x, e.y))
    for x, y in grid.cells():
        tile = grid.get(x, y)
        if tile not in (EMPTY, PLAYER) and (x, y) not in claimed:
            occupancy_errors += 1
    return {
        "all_reachable": all_reachable(grid, player.position),
        "key_reachable": key is not None and path_exists(grid, player.position, key.position),
        "exit_reachable": key is not None and exit_ is not None and path_exists(grid, key.position, exit_.position),
        "occupancy_errors": occupancy_errors,
        "player_count": grid.count(PLAYER),
    }


def run_for_seed(seed: int, tier_name: str) -> dict:
    cfg = DungeonConfig.from_tier(DIFFICULTY_SETTINGS[tier_name], seed=seed)
    d = generate_dungeon(cfg)
    res = analyze(d)
    ok = (
        res["all_reachable"]
        and res["key_reachable"]
        and res["exit_reachable"]
        and res["occupancy_errors"] == 0
        and res["player_count"] == 1
    )
    return {
        "seed": seed,
        "tier": tier_name,
        "fallback": d.fallback,
        "attempts": d.metrics.get("attempts"),
        "checks": res,
        "ok": ok,
    }


def main(argv: List[str]) -> int:
    parser = argparse.ArgumentParser(description="Check generated dungeons for solvability")
    parser.add_argument("seeds", nargs="*", type=int)
    parser.add_argument("--tiers", default=",".join(DIFFICULTY_SETTINGS))
    args = parser.parse_args(argv)
    seeds = args.seeds or DEFAULT_SEEDS
    tiers = [t.strip() for t in args.tiers.split(",") if t.strip()]
    unknown = [t for t in tiers if t not in DIFFICULTY_SETTINGS]
    if unknown:
        print(json.dumps({"error": "unknown_difficulty", "tiers": unknown}))
        return 2
    results = [run_for_seed(s, t) for s in seeds for t in tiers]
    print(json.dumps({"results": results}, indent=2))
    # Non-zero exit if any failure
    if not all(r["ok"] for r in results):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
