"""
In-memory connection manager for the community WebSocket: subscribe/unsubscribe/broadcast by room.
"""
import asyncio
import json
import logging
from typing import Any, Dict, Iterable, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


def encode_frame(event: str, payload: Any) -> str:
    return json.dumps({"event": event, "payload": payload}, default=str, ensure_ascii=False)


class ConnectionManager:
    """Tracks WebSocket connections per room and broadcasts events."""

    def __init__(self) -> None:
        # room -> set of WebSocket
        self._rooms: Dict[str, Set[WebSocket]] = {}
        self._connections: Set[WebSocket] = set()
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.add(websocket)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections.discard(websocket)
            for room in [r for r, sockets in self._rooms.items() if websocket in sockets]:
                self._discard(room, websocket)

    async def subscribe(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            self._rooms.setdefault(room, set()).add(websocket)
        logger.debug("Subscribed ws to room %s", room)

    async def unsubscribe(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            self._discard(room, websocket)
        logger.debug("Unsubscribed ws from room %s", room)

    async def send(self, websocket: WebSocket, event: str, payload: Any) -> None:
        """Send to one connection; a failed send is logged, not raised."""
        try:
            await websocket.send_text(encode_frame(event, payload))
        except Exception as e:
            logger.warning("Send failed: %s", e)

    async def broadcast_to_room(
        self,
        room: str,
        event: str,
        payload: Any,
        exclude_websocket: WebSocket | None = None,
    ) -> None:
        """Send JSON frame to all connections subscribed to this room (except exclude_websocket)."""
        async with self._lock:
            sockets = set(self._rooms.get(room) or [])
        await self._fan_out(sockets, event, payload, exclude_websocket, room=room)

    async def broadcast_all(self, event: str, payload: Any) -> None:
        async with self._lock:
            sockets = set(self._connections)
        await self._fan_out(sockets, event, payload, None)

    def clear(self) -> None:
        """Drop all tracking. Not for use while broadcasts are in flight."""
        self._rooms.clear()
        self._connections.clear()
        self._lock = asyncio.Lock()

    async def _fan_out(
        self,
        sockets: Iterable[WebSocket],
        event: str,
        payload: Any,
        exclude_websocket: WebSocket | None,
        room: str | None = None,
    ) -> None:
        msg = encode_frame(event, payload)
        dead = []
        for ws in sockets:
            if ws is exclude_websocket:
                continue
            try:
                await ws.send_text(msg)
            except Exception as e:
                logger.warning("Broadcast send failed: %s", e)
                dead.append(ws)
        if dead:
            async with self._lock:
                for ws in dead:
                    if room is not None:
                        self._discard(room, ws)

    def _discard(self, room: str, websocket: WebSocket) -> None:
        if room in self._rooms:
            self._rooms[room].discard(websocket)
            if not self._rooms[room]:
                del self._rooms[room]


connection_manager = ConnectionManager()
