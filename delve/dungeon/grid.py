"""Square tile grid with per-tile visited / described flags.

Column-major storage (``tiles[x][y]``) like the rest of the dungeon package;
``x`` is the column, ``y`` the row, and north is ``y - 1``.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .tiles import ALL_TILES, EMPTY

Coord2D = Tuple[int, int]

# north, east, south, west
DIRECTIONS: List[Tuple[int, int, str]] = [(0, -1, "north"), (1, 0, "east"), (0, 1, "south"), (-1, 0, "west")]


class Grid:
    """N×N tile matrix plus the visited and described bookkeeping matrices."""

    __slots__ = ("size", "tiles", "visited", "described")

    def __init__(self, size: int, fill: str = EMPTY):
        if size < 1:
            raise ValueError("grid size must be positive")
        self.size = size
        self.tiles: List[List[str]] = [[fill for _ in range(size)] for _ in range(size)]
        self.visited: List[List[bool]] = [[False for _ in range(size)] for _ in range(size)]
        self.described: List[List[bool]] = [[False for _ in range(size)] for _ in range(size)]

    @classmethod
    def from_rows(cls, rows: List[str]) -> "Grid":
        """Build a grid from row strings (``rows[y][x]``), handy for fixtures."""
        size = len(rows)
        grid = cls(size)
        for y, row in enumerate(rows):
            if len(row) != size:
                raise ValueError(f"row {y} has length {len(row)}, expected {size}")
            for x, ch in enumerate(row):
                if ch not in ALL_TILES:
                    raise ValueError(f"unknown tile {ch!r} at ({x},{y})")
                grid.tiles[x][y] = ch
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def get(self, x: int, y: int) -> str:
        return self.tiles[x][y]

    def set(self, x: int, y: int, tile: str) -> None:
        self.tiles[x][y] = tile

    def neighbors(self, x: int, y: int) -> Iterator[Coord2D]:
        """In-bounds orthogonal neighbours."""
        for dx, dy, _ in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.size and 0 <= ny < self.size:
                yield nx, ny

    def cells(self) -> Iterator[Coord2D]:
        for x in range(self.size):
            for y in range(self.size):
                yield x, y

    def count(self, tile: str) -> int:
        return sum(1 for x, y in self.cells() if self.tiles[x][y] == tile)

    def empty_cells(self) -> List[Coord2D]:
        return [(x, y) for x, y in self.cells() if self.tiles[x][y] == EMPTY]

    def mark_visited(self, x: int, y: int) -> None:
        self.visited[x][y] = True

    def is_visited(self, x: int, y: int) -> bool:
        return self.visited[x][y]

    def mark_described(self, x: int, y: int) -> bool:
        """Flag a tile as described; returns True the first time only."""
        first = not self.described[x][y]
        self.described[x][y] = True
        return first

    def reveal_all(self) -> None:
        for x, y in self.cells():
            self.visited[x][y] = True

    def revealed_count(self) -> int:
        return sum(1 for x, y in self.cells() if self.visited[x][y])

    def to_rows(self, fog: bool = False) -> List[List[Optional[str]]]:
        """Row-major snapshot; with ``fog`` unvisited tiles come back as None."""
        return [
            [self.tiles[x][y] if (not fog or self.visited[x][y]) else None for x in range(self.size)]
            for y in range(self.size)
        ]

    def __str__(self) -> str:
        return "\n".join("".join(self.tiles[x][y] for x in range(self.size)) for y in range(self.size))


__all__ = ["Grid", "Coord2D", "DIRECTIONS"]
