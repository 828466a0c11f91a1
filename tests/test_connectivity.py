from delve.dungeon.connectivity import (
    all_reachable,
    exit_reachable_from_neighbors,
    flood_reachable,
    is_valid_dungeon,
    min_valid_moves,
    no_isolated_cell,
    path_exists,
)
from delve.dungeon.grid import Grid

OPEN = [
    "P...",
    "....",
    "..K.",
    "...E",
]


def test_open_layout_is_valid():
    g = Grid.from_rows(OPEN)
    assert all_reachable(g, (0, 0))
    assert no_isolated_cell(g)
    assert exit_reachable_from_neighbors(g, (3, 3))
    assert min_valid_moves(g, (0, 0)) == 2
    assert is_valid_dungeon(g, (0, 0), (2, 2), (3, 3))


def test_walled_off_key_fails_validation():
    g = Grid.from_rows(
        [
            "P.#.",
            "..#.",
            "###K",
            "...E",
        ]
    )
    assert not all_reachable(g, (0, 0))
    assert not path_exists(g, (0, 0), (3, 2))
    assert not is_valid_dungeon(g, (0, 0), (3, 2), (3, 3))


def test_boxed_in_cell_and_sealed_exit():
    g = Grid.from_rows(
        [
            "P...",
            "..#.",
            ".#.#",
            "..#E",
        ]
    )
    assert not no_isolated_cell(g)
    assert not exit_reachable_from_neighbors(g, (3, 3))


def test_flood_fill_never_enters_exit():
    g = Grid.from_rows(
        [
            "PE..",
            "#...",
            "....",
            "....",
        ]
    )
    assert flood_reachable(g, (0, 0)) == {(0, 0)}
    assert not all_reachable(g, (0, 0))
    assert min_valid_moves(g, (0, 0)) == 0
    # the exit itself is a legal BFS destination
    assert path_exists(g, (0, 0), (1, 0))


def test_cells_behind_exit_count_as_unreachable():
    g = Grid.from_rows(
        [
            "P.#.",
            "..#.",
            "..E.",
            "..#.",
        ]
    )
    assert path_exists(g, (0, 0), (2, 2))
    assert not path_exists(g, (0, 0), (3, 0))
    assert not all_reachable(g, (0, 0))
    assert (3, 1) not in flood_reachable(g, (0, 0))


def test_void_blocks_paths():
    g = Grid.from_rows(
        [
            "PV..",
            "V...",
            "...K",
            "...E",
        ]
    )
    assert flood_reachable(g, (0, 0)) == {(0, 0)}
    assert not path_exists(g, (0, 0), (3, 2))


def test_path_to_self_exists():
    g = Grid.from_rows(OPEN)
    assert path_exists(g, (2, 2), (2, 2))


def test_flood_fill_handles_large_open_grid():
    size = 60
    g = Grid(size)
    g.set(0, 0, "P")
    assert len(flood_reachable(g, (0, 0))) == size * size
