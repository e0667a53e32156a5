"""Wire messages exchanged over a room connection.

Inbound frames are parsed into a closed, ``type``-tagged set of pydantic
models; anything else is a ``ProtocolError``. Outbound events serialize with
camelCase keys to match the browser client.
"""
from __future__ import annotations

from typing import Annotated, Any, List, Literal, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ProtocolError


class CreateRoom(BaseModel):
    type: Literal["create_room"]


class JoinRoom(BaseModel):
    type: Literal["join_room"]
    room_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("roomId", "roomCode", "room_code")
    )


class PlacePiece(BaseModel):
    type: Literal["place_piece"]
    index: int = Field(strict=True, validation_alias=AliasChoices("index", "cellIndex"))


class MovePiece(BaseModel):
    type: Literal["move_piece"]
    from_index: int = Field(strict=True, validation_alias=AliasChoices("fromIndex", "from_index"))
    to_index: int = Field(strict=True, validation_alias=AliasChoices("toIndex", "to_index"))


class CapturePiece(BaseModel):
    type: Literal["capture_piece"]
    index: int = Field(strict=True, validation_alias=AliasChoices("index", "cellIndex"))


Action = Annotated[
    Union[CreateRoom, JoinRoom, PlacePiece, MovePiece, CapturePiece],
    Field(discriminator="type"),
]
GameAction = Union[PlacePiece, MovePiece, CapturePiece]

_ACTION_ADAPTER: TypeAdapter = TypeAdapter(Action)


def parse_action(raw: Union[str, bytes, Mapping[str, Any]]) -> Action:
    try:
        if isinstance(raw, (str, bytes)):
            return _ACTION_ADAPTER.validate_json(raw)
        return _ACTION_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        if any(error["type"] == "union_tag_invalid" for error in exc.errors()):
            raise ProtocolError("Unknown message type.") from exc
        raise ProtocolError("Invalid message format.") from exc


class OutboundEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StateSnapshot(OutboundEvent):
    room_id: str
    board: List[int]
    current_player: int
    phase: str
    placement_phase: bool
    pieces_placed: List[int]
    game_state: str


class LastMove(OutboundEvent):
    player: int
    action: Literal["place_piece", "move_piece", "capture"]
    index: Optional[int] = None
    from_index: Optional[int] = None
    to_index: Optional[int] = None
    captured_index: Optional[int] = None


class RoomCreated(StateSnapshot):
    type: Literal["room_created"] = "room_created"
    player_id: int


class JoinedRoom(StateSnapshot):
    type: Literal["joined_room"] = "joined_room"
    player_id: int


class GameStart(StateSnapshot):
    type: Literal["game_start"] = "game_start"
    message: str = "Both players connected. Game starts!"


class Update(StateSnapshot):
    type: Literal["update"] = "update"
    last_move: LastMove


class CapturePending(StateSnapshot):
    type: Literal["line_formed_capture_pending"] = "line_formed_capture_pending"
    capturable_pieces: List[int]
    message: str = "You formed a line! Select an opponent piece to capture."


class OpponentAwaitingCapture(StateSnapshot):
    type: Literal["opponent_awaiting_capture"] = "opponent_awaiting_capture"
    message: str


class OpponentDisconnected(OutboundEvent):
    type: Literal["opponent_disconnected"] = "opponent_disconnected"
    message: str = "Opponent disconnected. The game in this room has ended."
    game_state: str = "ended"


class ErrorEvent(OutboundEvent):
    type: Literal["error"] = "error"
    message: str
    code: str


def encode_event(event: OutboundEvent) -> dict:
    return event.model_dump(mode="json", by_alias=True, exclude_none=True)
