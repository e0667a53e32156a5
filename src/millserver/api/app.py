from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Dict, Iterable, Optional, Set, Union

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from millserver.config import Settings
from millserver.errors import MillError
from millserver.messages import ErrorEvent, OutboundEvent, encode_event, parse_action
from millserver.registry import Delivery, RoomRegistry

logger = logging.getLogger(__name__)


class PlayerConnection:
    """Handle for one WebSocket; the registry keys seats by this object."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        self.id = uuid.uuid4().hex[:8]

    async def send(self, event: OutboundEvent) -> None:
        await self.websocket.send_json(encode_event(event))

    def __repr__(self) -> str:
        return f"PlayerConnection({self.id})"


class Hub:
    def __init__(self, registry: RoomRegistry) -> None:
        self.registry = registry
        self.connections: Set[PlayerConnection] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> PlayerConnection:
        await websocket.accept()
        connection = PlayerConnection(websocket)
        async with self._lock:
            self.connections.add(connection)
        logger.info("Client %s connected", connection.id)
        return connection

    async def receive(self, connection: PlayerConnection, raw: Union[str, bytes]) -> None:
        # Decode, transition and delivery of one message run under the lock so
        # both seats see the events of a transition before the next one starts.
        # A slow reader therefore delays every room; one event loop serves all
        # rooms anyway, so that cost is accepted.
        async with self._lock:
            try:
                action = parse_action(raw)
                deliveries = self.registry.dispatch(connection, action)
            except MillError as exc:
                logger.debug("Rejected message from %s: %s", connection.id, exc.message)
                deliveries = [(connection, ErrorEvent(message=exc.message, code=exc.code))]
            await self._deliver(deliveries)

    async def disconnect(self, connection: PlayerConnection) -> None:
        async with self._lock:
            self.connections.discard(connection)
            deliveries = self.registry.remove_connection(connection)
            await self._deliver(deliveries)
        logger.info("Client %s disconnected", connection.id)

    async def _deliver(self, deliveries: Iterable[Delivery]) -> None:
        for recipient, event in deliveries:
            if recipient not in self.connections:
                continue
            try:
                await recipient.send(event)
            except Exception:
                # The recipient's own receive loop notices the close and tears down.
                logger.warning("Failed to deliver %s to %s", event.type, recipient.id, exc_info=True)


def create_app(settings: Optional[Settings] = None, registry: Optional[RoomRegistry] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    registry = registry or RoomRegistry(code_length=settings.room_code_length)
    hub = Hub(registry)

    app = FastAPI(title="Mill Rooms")
    app.state.registry = registry
    app.state.hub = hub

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> Dict[str, object]:
        return {"status": "ok", "rooms": len(registry)}

    @app.get("/rooms/{code}")
    async def get_room(code: str) -> Dict:
        session = registry.get(code)
        if session is None:
            raise HTTPException(status_code=404, detail="Room not found")
        return encode_event(session.snapshot())

    @app.websocket("/ws")
    async def ws_play(websocket: WebSocket) -> None:
        connection = await hub.connect(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                await hub.receive(connection, raw)
        except WebSocketDisconnect:
            pass
        finally:
            await hub.disconnect(connection)

    return app
