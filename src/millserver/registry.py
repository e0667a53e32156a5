"""Process-wide table of live rooms and the seats connections hold in them."""
from __future__ import annotations

import logging
import random
import string
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .engine import Seat
from .errors import AlreadyInRoom, NotInRoom, RoomNotFound, SessionError
from .messages import Action, CreateRoom, JoinRoom, OutboundEvent
from .session import GameSession, Outbound

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_CODE_LENGTH = 5

Delivery = Tuple[Any, OutboundEvent]


@dataclass(frozen=True)
class SessionMembership:
    room_code: str
    seat: Seat


def generate_room_code(rng: random.Random, length: int = DEFAULT_CODE_LENGTH) -> str:
    return "".join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def normalize_room_code(code: str) -> str:
    return code.strip().upper()


class RoomRegistry:
    """Maps room codes to sessions and connections to their seat.

    Connections are opaque hashable handles; the registry never sends anything
    itself, it returns ``(connection, event)`` pairs for the caller to deliver.
    """

    def __init__(self, code_length: int = DEFAULT_CODE_LENGTH, rng: Optional[random.Random] = None) -> None:
        self.code_length = code_length
        self._rng = rng or random.Random()
        self.rooms: Dict[str, GameSession] = {}
        self.memberships: Dict[Any, SessionMembership] = {}

    def __len__(self) -> int:
        return len(self.rooms)

    def get(self, code: str) -> Optional[GameSession]:
        return self.rooms.get(normalize_room_code(code))

    def membership(self, connection: Any) -> Optional[SessionMembership]:
        return self.memberships.get(connection)

    def _session_for(self, connection: Any) -> Optional[GameSession]:
        membership = self.memberships.get(connection)
        if membership is None:
            return None
        session = self.rooms.get(membership.room_code)
        # A code freed by a closed room may already belong to a new one.
        if session is None or session.seats.get(membership.seat) is not connection:
            return None
        return session

    def _ensure_not_seated(self, connection: Any) -> None:
        if self._session_for(connection) is not None:
            raise AlreadyInRoom(self.memberships[connection].room_code)

    def create_room(self, connection: Any) -> str:
        self._ensure_not_seated(connection)
        code = generate_room_code(self._rng, self.code_length)
        while code in self.rooms:
            code = generate_room_code(self._rng, self.code_length)
        self.rooms[code] = GameSession.open(code, connection)
        self.memberships[connection] = SessionMembership(code, Seat.ONE)
        logger.info("Room %s created", code)
        return code

    def join_room(self, code: Optional[str], connection: Any) -> Seat:
        if not code or not code.strip():
            raise SessionError("Room ID is required to join.")
        self._ensure_not_seated(connection)
        code = normalize_room_code(code)
        session = self.rooms.get(code)
        if session is None:
            raise RoomNotFound(code)
        seat = session.join(connection)
        self.memberships[connection] = SessionMembership(code, seat)
        return seat

    def dispatch(self, connection: Any, action: Action) -> List[Delivery]:
        if isinstance(action, CreateRoom):
            code = self.create_room(connection)
            session = self.rooms[code]
            return self._address(session, session.created_events())
        if isinstance(action, JoinRoom):
            self.join_room(action.room_code, connection)
            session = self.rooms[self.memberships[connection].room_code]
            return self._address(session, session.start_events())

        membership = self.memberships.get(connection)
        if membership is None:
            raise NotInRoom()
        session = self._session_for(connection)
        if session is None:
            raise RoomNotFound(membership.room_code)
        return self._address(session, session.apply(membership.seat, action))

    def remove_connection(self, connection: Any) -> List[Delivery]:
        """Tear down the connection's room, if it still has one."""
        session = self._session_for(connection)
        membership = self.memberships.pop(connection, None)
        if session is None or membership is None:
            return []
        outbound = session.leave(membership.seat)
        del self.rooms[membership.room_code]
        logger.info("Room %s closed", membership.room_code)
        return self._address(session, outbound)

    @staticmethod
    def _address(session: GameSession, outbound: List[Outbound]) -> List[Delivery]:
        return [
            (session.seats[item.seat], item.event)
            for item in outbound
            if item.seat in session.seats
        ]
