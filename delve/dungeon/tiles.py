# Tile constants centralized for modular imports
EMPTY = "."
WALL = "#"
PLAYER = "P"
MONSTER = "M"
POTION = "H"
KEY = "K"
EXIT = "E"
VOID = "V"

ALL_TILES = frozenset({EMPTY, WALL, PLAYER, MONSTER, POTION, KEY, EXIT, VOID})

# Never stepped through by flood fill or BFS
BLOCKING = frozenset({WALL, VOID})
# Cells that must stay reachable from the player start
MUST_REACH = frozenset({EMPTY, KEY, POTION, MONSTER})
# Cells that must not be boxed in by their four neighbours
OPEN_CELLS = MUST_REACH | {PLAYER}


__all__ = [
    "EMPTY",
    "WALL",
    "PLAYER",
    "MONSTER",
    "POTION",
    "KEY",
    "EXIT",
    "VOID",
    "ALL_TILES",
    "BLOCKING",
    "MUST_REACH",
    "OPEN_CELLS",
]
