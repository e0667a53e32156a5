"""Two-seat game room: owns one board and advances the turn/phase state machine.

A session never talks to the network. Every accepted transition returns the
events it produced together with the seats that should receive them, and every
rejected action raises ``RuleViolation`` before anything is written.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple

from .board import index_in_bounds
from .engine import (
    EMPTY,
    MAX_PIECES,
    Board,
    Seat,
    capturable_targets,
    forms_mill,
    is_capturable,
    is_legal_move,
    is_legal_placement,
    is_protected_by_mill,
    new_board,
)
from .errors import RoomFull, RuleViolation
from .messages import (
    CapturePending,
    CapturePiece,
    GameAction,
    GameStart,
    JoinedRoom,
    LastMove,
    MovePiece,
    OpponentAwaitingCapture,
    OpponentDisconnected,
    OutboundEvent,
    PlacePiece,
    RoomCreated,
    StateSnapshot,
    Update,
)

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    PLACEMENT = "placement"
    MOVEMENT = "movement"


class SubPhase(str, Enum):
    NORMAL = "normal"
    AWAITING_CAPTURE = "awaiting_capture"


class Status(str, Enum):
    WAITING = "waiting_for_opponent"
    PLAYING = "playing"
    ENDED = "ended"


class Outbound(NamedTuple):
    seat: Seat
    event: OutboundEvent


@dataclass
class GameSession:
    code: str
    seats: Dict[Seat, Any] = field(default_factory=dict)
    board: Board = field(default_factory=new_board)
    turn: Seat = Seat.ONE
    phase: Phase = Phase.PLACEMENT
    subphase: SubPhase = SubPhase.NORMAL
    placed: Dict[Seat, int] = field(default_factory=lambda: {Seat.ONE: 0, Seat.TWO: 0})
    status: Status = Status.WAITING

    @classmethod
    def open(cls, code: str, creator: Any) -> "GameSession":
        return cls(code=code, seats={Seat.ONE: creator})

    @property
    def game_state(self) -> str:
        if self.status is Status.PLAYING and self.subphase is SubPhase.AWAITING_CAPTURE:
            return SubPhase.AWAITING_CAPTURE.value
        return self.status.value

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            room_id=self.code,
            board=list(self.board),
            current_player=int(self.turn),
            phase=self.phase.value,
            placement_phase=self.phase is Phase.PLACEMENT,
            pieces_placed=[self.placed[Seat.ONE], self.placed[Seat.TWO]],
            game_state=self.game_state,
        )

    def _state(self) -> Dict[str, Any]:
        return self.snapshot().model_dump()

    # -- lifecycle ---------------------------------------------------------

    def created_events(self) -> List[Outbound]:
        return [Outbound(Seat.ONE, RoomCreated(player_id=int(Seat.ONE), **self._state()))]

    def join(self, connection: Any) -> Seat:
        if self.status is not Status.WAITING or Seat.TWO in self.seats:
            raise RoomFull(self.code)
        self.seats[Seat.TWO] = connection
        self.status = Status.PLAYING
        self.turn = Seat.ONE
        logger.info("Seat 2 joined room %s; game starts", self.code)
        return Seat.TWO

    def start_events(self) -> List[Outbound]:
        state = self._state()
        return [
            Outbound(Seat.TWO, JoinedRoom(player_id=int(Seat.TWO), **state)),
            Outbound(Seat.ONE, GameStart(**state)),
            Outbound(Seat.TWO, GameStart(**state)),
        ]

    def leave(self, seat: Seat) -> List[Outbound]:
        """Drop a seat. Any departure before the game ends closes the room."""
        self.seats.pop(seat, None)
        if self.status is Status.ENDED:
            return []
        was_playing = self.status is Status.PLAYING
        self.status = Status.ENDED
        logger.info("Seat %d left room %s; room closed", seat, self.code)
        if not was_playing:
            return []
        return [Outbound(remaining, OpponentDisconnected()) for remaining in self.seats]

    # -- gameplay ----------------------------------------------------------

    def apply(self, seat: Seat, action: GameAction) -> List[Outbound]:
        if self.status is Status.WAITING:
            raise RuleViolation("Waiting for an opponent to join.")
        if self.status is Status.ENDED:
            raise RuleViolation("Game has ended.")
        if isinstance(action, PlacePiece):
            return self.place(seat, action.index)
        if isinstance(action, MovePiece):
            return self.move(seat, action.from_index, action.to_index)
        if isinstance(action, CapturePiece):
            return self.capture(seat, action.index)
        raise RuleViolation(f"Unsupported action: {type(action).__name__}")

    def _require_normal_turn(self, seat: Seat) -> None:
        if self.subphase is SubPhase.AWAITING_CAPTURE:
            raise RuleViolation("Invalid action: currently awaiting opponent piece capture.")
        if seat != self.turn:
            raise RuleViolation("Not your turn.")

    def place(self, seat: Seat, index: int) -> List[Outbound]:
        self._require_normal_turn(seat)
        if self.phase is not Phase.PLACEMENT:
            raise RuleViolation("Not in placement phase.")
        if self.placed[seat] >= MAX_PIECES:
            raise RuleViolation("All pieces already placed.")
        if not index_in_bounds(index):
            raise RuleViolation("Invalid piece index.")
        if not is_legal_placement(self.board, seat, index):
            raise RuleViolation("Spot already taken.")

        self.board[index] = int(seat)
        self.placed[seat] += 1
        return self._resolve(seat, index, LastMove(player=int(seat), action="place_piece", index=index))

    def move(self, seat: Seat, origin: int, target: int) -> List[Outbound]:
        self._require_normal_turn(seat)
        if self.phase is not Phase.MOVEMENT:
            raise RuleViolation("Still in placement phase.")
        if not (index_in_bounds(origin) and index_in_bounds(target)):
            raise RuleViolation("Invalid move indices.")
        if not is_legal_move(self.board, seat, origin, target):
            raise RuleViolation("Invalid move. Check piece ownership, target empty, and adjacency.")

        self.board[origin] = EMPTY
        self.board[target] = int(seat)
        return self._resolve(
            seat,
            target,
            LastMove(player=int(seat), action="move_piece", from_index=origin, to_index=target),
        )

    def capture(self, seat: Seat, index: int) -> List[Outbound]:
        if self.subphase is not SubPhase.AWAITING_CAPTURE or seat != self.turn:
            raise RuleViolation("Not your turn to capture or game not in capture state.")
        opponent = seat.opponent()
        if not is_capturable(self.board, opponent, index):
            if is_protected_by_mill(self.board, opponent, index):
                raise RuleViolation("Cannot capture a piece that is part of an opponent's line.")
            raise RuleViolation("Invalid piece selected for capture.")

        self.board[index] = EMPTY
        self.subphase = SubPhase.NORMAL
        logger.info("Room %s: seat %d captured point %d", self.code, seat, index)
        self._advance_turn()
        return self._broadcast_update(LastMove(player=int(seat), action="capture", captured_index=index))

    def _resolve(self, seat: Seat, changed: int, last_move: LastMove) -> List[Outbound]:
        if forms_mill(self.board, seat, changed):
            targets = capturable_targets(self.board, seat.opponent())
            if targets:
                self.subphase = SubPhase.AWAITING_CAPTURE
                logger.info("Room %s: seat %d formed a line at %d", self.code, seat, changed)
                return self._capture_pending(seat, targets)
            logger.info(
                "Room %s: seat %d formed a line at %d but nothing is capturable",
                self.code,
                seat,
                changed,
            )
        self._advance_turn()
        return self._broadcast_update(last_move)

    def _advance_turn(self) -> None:
        self.turn = self.turn.opponent()
        if (
            self.phase is Phase.PLACEMENT
            and self.placed[Seat.ONE] >= MAX_PIECES
            and self.placed[Seat.TWO] >= MAX_PIECES
        ):
            self.phase = Phase.MOVEMENT
            logger.info("Room %s: placement finished, movement phase begins", self.code)

    def _capture_pending(self, seat: Seat, targets: List[int]) -> List[Outbound]:
        state = self._state()
        return [
            Outbound(seat, CapturePending(capturable_pieces=targets, **state)),
            Outbound(
                seat.opponent(),
                OpponentAwaitingCapture(
                    message=(
                        f"Opponent (Player {int(seat)}) formed a line "
                        "and is selecting a piece to capture."
                    ),
                    **state,
                ),
            ),
        ]

    def _broadcast_update(self, last_move: LastMove) -> List[Outbound]:
        state = self._state()
        return [Outbound(seat, Update(last_move=last_move, **state)) for seat in Seat]

