"""Exception hierarchy for rejected client input.

Each error is local to one inbound message: the connection layer turns it into
an ``error`` event for the sender and keeps the connection open.
"""
from __future__ import annotations

__all__ = [
    "MillError",
    "ProtocolError",
    "SessionError",
    "RoomNotFound",
    "RoomFull",
    "NotInRoom",
    "AlreadyInRoom",
    "RuleViolation",
]


class MillError(ValueError):
    """Base class; ``code`` names the error category on the wire."""

    code: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProtocolError(MillError):
    code = "protocol"


class SessionError(MillError):
    code = "session"


class RoomNotFound(SessionError):
    def __init__(self, room_code: str) -> None:
        super().__init__(f"Room {room_code} not found.")
        self.room_code = room_code


class RoomFull(SessionError):
    def __init__(self, room_code: str) -> None:
        super().__init__(f"Room {room_code} is full.")
        self.room_code = room_code


class NotInRoom(SessionError):
    def __init__(self) -> None:
        super().__init__("Not in a room.")


class AlreadyInRoom(SessionError):
    def __init__(self, room_code: str) -> None:
        super().__init__(f"Already seated in room {room_code}.")
        self.room_code = room_code


class RuleViolation(MillError):
    code = "rule"
