"""millserver package."""

from .board import ADJACENCY, BOARD_SIZE, MILL_LINES, adjacent_to, lines_through  # noqa: F401
from .engine import (  # noqa: F401
    EMPTY,
    MAX_PIECES,
    Seat,
    capturable_targets,
    forms_mill,
    is_legal_move,
    is_legal_placement,
    is_protected_by_mill,
    new_board,
)
from .registry import RoomRegistry, SessionMembership  # noqa: F401
from .session import GameSession, Phase, Status, SubPhase  # noqa: F401

__all__ = [
    "__version__",
    "ADJACENCY",
    "BOARD_SIZE",
    "MILL_LINES",
    "adjacent_to",
    "lines_through",
    "EMPTY",
    "MAX_PIECES",
    "Seat",
    "capturable_targets",
    "forms_mill",
    "is_legal_move",
    "is_legal_placement",
    "is_protected_by_mill",
    "new_board",
    "RoomRegistry",
    "SessionMembership",
    "GameSession",
    "Phase",
    "Status",
    "SubPhase",
    "create_app",
]

__version__ = "0.1.0"


def create_app(*args, **kwargs):
    """Lazy import to avoid requiring FastAPI unless requested."""
    from millserver.api import create_app as factory

    return factory(*args, **kwargs)
