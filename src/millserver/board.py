"""Static topology of the 24-point mill board.

Points are numbered ring by ring (outer 0-7, middle 8-15, inner 16-23),
clockwise from the top-left corner of each ring, so even indices are corners
and odd indices are side midpoints. Every point is joined to the point with
the same offset on the neighbouring ring, corners included, but mills across
rings only run through the midpoints.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

BOARD_SIZE = 24
RING_SIZE = 8

Line = Tuple[int, int, int]

MILL_LINES: Tuple[Line, ...] = (
    (0, 1, 2), (2, 3, 4), (4, 5, 6), (6, 7, 0),
    (8, 9, 10), (10, 11, 12), (12, 13, 14), (14, 15, 8),
    (16, 17, 18), (18, 19, 20), (20, 21, 22), (22, 23, 16),
    (1, 9, 17), (3, 11, 19), (5, 13, 21), (7, 15, 23),
)


def _build_adjacency() -> Dict[int, FrozenSet[int]]:
    edges: Dict[int, set] = {index: set() for index in range(BOARD_SIZE)}
    for ring in range(BOARD_SIZE // RING_SIZE):
        base = ring * RING_SIZE
        for offset in range(RING_SIZE):
            a = base + offset
            b = base + (offset + 1) % RING_SIZE
            edges[a].add(b)
            edges[b].add(a)
    for offset in range(RING_SIZE):
        for ring in range(BOARD_SIZE // RING_SIZE - 1):
            a = ring * RING_SIZE + offset
            b = a + RING_SIZE
            edges[a].add(b)
            edges[b].add(a)
    return {index: frozenset(neighbours) for index, neighbours in edges.items()}


ADJACENCY: Dict[int, FrozenSet[int]] = _build_adjacency()

LINES_THROUGH: Dict[int, Tuple[Line, ...]] = {
    index: tuple(line for line in MILL_LINES if index in line) for index in range(BOARD_SIZE)
}


def index_in_bounds(index: int) -> bool:
    return 0 <= index < BOARD_SIZE


def adjacent_to(index: int) -> FrozenSet[int]:
    """Points reachable from index in one step; empty for unknown indices."""
    return ADJACENCY.get(index, frozenset())


def lines_through(index: int) -> Tuple[Line, ...]:
    return LINES_THROUGH.get(index, ())
