"""Reachability and solvability checks for generated dungeons.

Flood fill, local isolation check, exit accessibility, BFS path existence and
the combined validity predicate used by the generator's rejection sampling.

Exit handling is asymmetric on purpose: the general flood fill never steps
onto the exit, while ``path_exists`` lets the exit through only when it is the
destination of that query. Cells beyond a non-corner exit can therefore count
as unreachable; the generator's sampling is tuned against that rule.
"""

from __future__ import annotations

from collections import deque
from typing import Set

from .grid import Coord2D, Grid
from .tiles import BLOCKING, EXIT, MUST_REACH, OPEN_CELLS

_FLOOD_BLOCKING = BLOCKING | {EXIT}


def flood_reachable(grid: Grid, start: Coord2D) -> Set[Coord2D]:
    sx, sy = start
    if not grid.in_bounds(sx, sy) or grid.get(sx, sy) in _FLOOD_BLOCKING:
        return set()
    visited = {start}
    stack = [start]
    while stack:
        cx, cy = stack.pop()
        for nx, ny in grid.neighbors(cx, cy):
            if (nx, ny) in visited:
                continue
            if grid.tiles[nx][ny] in _FLOOD_BLOCKING:
                continue
            visited.add((nx, ny))
            stack.append((nx, ny))
    return visited


def all_reachable(grid: Grid, start: Coord2D) -> bool:
    reach = flood_reachable(grid, start)
    for x, y in grid.cells():
        if grid.tiles[x][y] in MUST_REACH and (x, y) not in reach:
            return False
    return True


def no_isolated_cell(grid: Grid) -> bool:
    for x, y in grid.cells():
        if grid.tiles[x][y] not in OPEN_CELLS:
            continue
        if not any(grid.tiles[nx][ny] not in _FLOOD_BLOCKING for nx, ny in grid.neighbors(x, y)):
            return False
    return True


def exit_reachable_from_neighbors(grid: Grid, exit_pos: Coord2D) -> bool:
    ex, ey = exit_pos
    return any(grid.tiles[nx][ny] not in BLOCKING for nx, ny in grid.neighbors(ex, ey))


def path_exists(grid: Grid, src: Coord2D, dst: Coord2D) -> bool:
    """BFS from ``src`` to ``dst``; the exit only opens when it is ``dst``."""
    if src == dst:
        return True

    def passable(x: int, y: int) -> bool:
        tile = grid.tiles[x][y]
        if tile in BLOCKING:
            return False
        if tile == EXIT and (x, y) != dst:
            return False
        return True

    q = deque([src])
    seen = {src}
    while q:
        cx, cy = q.popleft()
        for nx, ny in grid.neighbors(cx, cy):
            if (nx, ny) in seen or not passable(nx, ny):
                continue
            if (nx, ny) == dst:
                return True
            seen.add((nx, ny))
            q.append((nx, ny))
    return False


def min_valid_moves(grid: Grid, pos: Coord2D) -> int:
    x, y = pos
    return sum(1 for nx, ny in grid.neighbors(x, y) if grid.tiles[nx][ny] not in _FLOOD_BLOCKING)


def is_valid_dungeon(grid: Grid, player: Coord2D, key: Coord2D, exit_pos: Coord2D) -> bool:
    """Full solvability predicate; cheap local checks run before the BFS ones."""
    return (
        no_isolated_cell(grid)
        and exit_reachable_from_neighbors(grid, exit_pos)
        and min_valid_moves(grid, player) >= 2
        and all_reachable(grid, player)
        and path_exists(grid, player, key)
        and path_exists(grid, key, exit_pos)
    )


__all__ = [
    "flood_reachable",
    "all_reachable",
    "no_isolated_cell",
    "exit_reachable_from_neighbors",
    "path_exists",
    "min_valid_moves",
    "is_valid_dungeon",
]
