"""Rule engine for the mill board.

Every function here is a pure predicate over a board snapshot: no session
state, no I/O, and no exceptions. The board is a list of 24 cells, each
``EMPTY`` (0) or the owning seat number.
"""
from __future__ import annotations

from enum import IntEnum
from typing import List, Sequence

from .board import BOARD_SIZE, adjacent_to, index_in_bounds, lines_through

EMPTY = 0
MAX_PIECES = 9

Board = List[int]


class Seat(IntEnum):
    ONE = 1
    TWO = 2

    def opponent(self) -> "Seat":
        return Seat.TWO if self is Seat.ONE else Seat.ONE


def new_board() -> Board:
    return [EMPTY] * BOARD_SIZE


def is_legal_placement(board: Sequence[int], seat: Seat, index: int) -> bool:
    return index_in_bounds(index) and board[index] == EMPTY


def is_legal_move(board: Sequence[int], seat: Seat, origin: int, target: int) -> bool:
    if not (index_in_bounds(origin) and index_in_bounds(target)):
        return False
    return board[origin] == seat and board[target] == EMPTY and target in adjacent_to(origin)


def _owns_line_through(board: Sequence[int], seat: Seat, index: int) -> bool:
    return any(all(board[point] == seat for point in line) for line in lines_through(index))


def forms_mill(board: Sequence[int], seat: Seat, changed: int) -> bool:
    """True when a line through the just-changed point is fully owned by seat.

    Call it on the board after the placement or move has been written.
    """
    if not index_in_bounds(changed):
        return False
    return _owns_line_through(board, seat, changed)


def is_protected_by_mill(board: Sequence[int], seat: Seat, index: int) -> bool:
    if not index_in_bounds(index) or board[index] != seat:
        return False
    return _owns_line_through(board, seat, index)


def capturable_targets(board: Sequence[int], opponent: Seat) -> List[int]:
    """Opponent points outside any completed mill, in ascending order.

    An empty result means a freshly formed mill grants no capture at all.
    """
    return [
        index
        for index in range(BOARD_SIZE)
        if board[index] == opponent and not is_protected_by_mill(board, opponent, index)
    ]


def is_capturable(board: Sequence[int], opponent: Seat, index: int) -> bool:
    if not index_in_bounds(index) or board[index] != opponent:
        return False
    return not is_protected_by_mill(board, opponent, index)

