"""
Community chat broker: per-connection protocol state, validation, persistence and fan-out.

Connection states: CONNECTED (no room) -> IN_ROOM(room) -> DISCONNECTED.
Every event carrying a token is re-authorized against the live user row.
Within one room, persist + broadcast runs under that room's lock so all members
see messages in the order they were stored.
"""
import asyncio
import json
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Set

import redis
from fastapi import WebSocket
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.chat import events
from app.chat.connection_manager import ConnectionManager, connection_manager
from app.chat.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    BadFrame,
    ChatError,
    InvalidMessage,
    InvalidRoom,
    NotInRoom,
    PersistenceFailure,
)
from app.chat.events import Emit, Target
from app.chat.moderation import ChatAction, Denied, authorize
from app.chat.presence import PresenceTracker, presence_tracker
from app.chat.profanity import filter_profanity
from app.chat.rooms import get_room, normalize_room_id
from app.core.config import settings
from app.core.database import SessionLocal
from app.crud import chat_message_crud
from app.model.chat_message import REACTION_EMOJIS, ChatMessage
from app.model.user import User
from app.session import get_session

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    IN_ROOM = "in_room"


@dataclass(eq=False)
class ChatConnection:
    websocket: WebSocket
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: ConnectionState = ConnectionState.CONNECTED
    room: Optional[str] = None


@dataclass(frozen=True)
class _Author:
    """Plain copy of the fields a handler needs once the DB session is closed."""
    id: str
    name: str
    avatar: Optional[str]
    is_admin: bool

    @classmethod
    def from_user(cls, user: User) -> "_Author":
        return cls(id=str(user.id), name=user.name, avatar=user.avatar, is_admin=user.is_admin)


def message_to_payload(msg: ChatMessage) -> Dict[str, Any]:
    """Serialize message for WebSocket broadcast."""
    return {
        "id": str(msg.id),
        "room": msg.room,
        "userId": str(msg.user_id),
        "userName": msg.user_name,
        "userAvatar": msg.user_avatar,
        "text": msg.text,
        "reactions": dict(msg.reactions or {}),
        "isDeleted": bool(msg.is_deleted),
        "deletedBy": msg.deleted_by,
        "createdAt": msg.created_at.isoformat() if msg.created_at else None,
    }


def _parse_uuid(value: Any) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError):
        return None


class ChatBroker:
    """Validates, persists and broadcasts community chat events."""

    def __init__(
        self,
        manager: ConnectionManager,
        presence: PresenceTracker,
        settle_delay: float = 0.1,
        max_length: int = 500,
        retention_days: int = 7,
    ) -> None:
        self.manager = manager
        self.presence = presence
        self.settle_delay = settle_delay
        self.max_length = max_length
        self.retention_days = retention_days
        self._room_locks: Dict[str, asyncio.Lock] = {}
        self._pending: Set[asyncio.Task] = set()
        self._handlers = {
            events.JOIN_ROOM: self._on_join_room,
            events.SEND_MESSAGE: self._on_send_message,
            events.TOGGLE_REACTION: self._on_toggle_reaction,
            events.DELETE_MESSAGE: self._on_delete_message,
            events.TYPING: self._on_typing,
            events.STOP_TYPING: self._on_stop_typing,
        }

    # --- connection lifecycle ---

    async def connect(self, websocket: WebSocket) -> ChatConnection:
        conn = ChatConnection(websocket=websocket)
        await self.manager.connect(websocket)
        logger.info("Socket connected: %s", conn.id)
        return conn

    async def disconnect(self, conn: ChatConnection) -> None:
        entry, emits = self.presence.leave(conn.id)
        await self.manager.disconnect(conn.websocket)
        conn.state = ConnectionState.DISCONNECTED
        conn.room = None
        await self._dispatch(conn, emits)
        if entry is not None and entry.room:
            self._schedule_recount(entry.room)
        logger.info("Socket disconnected: %s", conn.id)

    async def handle_frame(self, conn: ChatConnection, raw: str) -> None:
        """Decode one client frame and run its handler; errors go back to this connection only."""
        try:
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                raise BadFrame("Request body must be valid JSON.")
            if not isinstance(frame, dict):
                raise BadFrame("Frame must be an object with event and payload.")
            await self.handle(conn, frame.get("event"), frame.get("payload") or {})
        except ChatError as e:
            await self.manager.send(conn.websocket, events.ERROR_MSG, e.to_payload())

    async def handle(self, conn: ChatConnection, event: Optional[str], payload: Any) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            raise BadFrame(f"Unknown event: {event}")
        if not isinstance(payload, dict):
            raise BadFrame("Payload must be an object.")
        await handler(conn, payload)

    async def _on_join_room(self, conn: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.join_room(conn, payload.get("room"), payload.get("token"))

    async def _on_send_message(self, conn: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.send_message(conn, payload.get("room"), payload.get("text"), payload.get("token"))

    async def _on_toggle_reaction(self, conn: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.toggle_reaction(conn, payload.get("messageId"), payload.get("emoji"), payload.get("token"))

    async def _on_delete_message(self, conn: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.delete_message(conn, payload.get("messageId"), payload.get("token"))

    async def _on_typing(self, conn: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.set_typing(conn, payload.get("room"), True)

    async def _on_stop_typing(self, conn: ChatConnection, payload: Dict[str, Any]) -> None:
        await self.set_typing(conn, payload.get("room"), False)

    # --- operations ---

    async def join_room(self, conn: ChatConnection, room: Optional[str], token: Optional[str]) -> None:
        user_id = self._identify(token)
        with self._session("Failed to join room") as db:
            author = self._authorize(db, user_id, ChatAction.JOIN)

        target = get_room(room)
        if target is None:
            raise InvalidRoom()

        emits = self.presence.join(
            conn.id,
            user_id=author.id,
            user_name=author.name,
            user_avatar=author.avatar,
            room=target.id,
        )
        if conn.room and conn.room != target.id:
            await self.manager.unsubscribe(conn.websocket, conn.room)
        await self.manager.subscribe(conn.websocket, target.id)
        conn.state = ConnectionState.IN_ROOM
        conn.room = target.id

        await self._dispatch(conn, emits)
        await self.manager.send(conn.websocket, events.JOINED, {"room": target.id, "roomName": target.name})
        logger.info("User %s joined room %s (%s)", author.id, target.id, conn.id)

    async def send_message(
        self,
        conn: ChatConnection,
        room: Optional[str],
        text: Any,
        token: Optional[str],
    ) -> None:
        user_id = self._identify(token)
        with self._session("Failed to send message") as db:
            author = self._authorize(db, user_id, ChatAction.SEND)

        target = get_room(room)
        if target is None:
            raise InvalidRoom()
        if conn.state is not ConnectionState.IN_ROOM or conn.room != target.id:
            raise NotInRoom()

        body = text.strip() if isinstance(text, str) else ""
        length_hint = f"Message must be 1-{self.max_length} characters"
        if not body:
            raise InvalidMessage("empty", length_hint)
        if len(body) > self.max_length:
            raise InvalidMessage("too_long", length_hint)
        body = filter_profanity(body)

        async with self._room_lock(target.id):
            with self._session("Failed to send message") as db:
                msg = chat_message_crud.create_from_dict(
                    db,
                    obj_in={
                        "room": target.id,
                        "user_id": uuid.UUID(author.id),
                        "user_name": author.name,
                        "user_avatar": author.avatar,
                        "text": body,
                        "reactions": {},
                    },
                )
                payload = message_to_payload(msg)
            await self.manager.broadcast_to_room(target.id, events.NEW_MESSAGE, payload)

    async def toggle_reaction(
        self,
        conn: ChatConnection,
        message_id: Any,
        emoji: Any,
        token: Optional[str],
    ) -> None:
        user_id = self._identify(token)
        with self._session("Failed to update reaction") as db:
            author = self._authorize(db, user_id, ChatAction.REACT)
            if emoji not in REACTION_EMOJIS:
                logger.debug("Ignoring unsupported reaction %r", emoji)
                return
            msg = self._live_message(db, message_id)
            room = msg.room if msg else None
        if room is None:
            return

        async with self._room_lock(room):
            with self._session("Failed to update reaction") as db:
                msg = self._live_message(db, message_id)
                if msg is None:
                    return
                msg = chat_message_crud.toggle_reaction(db, message=msg, emoji=emoji, user_id=author.id)
                payload = {"messageId": str(msg.id), "reactions": dict(msg.reactions or {})}
            await self.manager.broadcast_to_room(room, events.REACTION_UPDATED, payload)

    async def delete_message(self, conn: ChatConnection, message_id: Any, token: Optional[str]) -> None:
        user_id = self._identify(token)
        with self._session("Failed to delete message") as db:
            author = self._authorize(db, user_id, ChatAction.DELETE)
            msg = self._live_message(db, message_id)
            room = msg.room if msg else None
        if room is None:
            return

        async with self._room_lock(room):
            with self._session("Failed to delete message") as db:
                msg = self._live_message(db, message_id)
                if msg is None:
                    return
                is_owner = str(msg.user_id) == author.id
                if not is_owner and not author.is_admin:
                    logger.debug("User %s may not delete message %s", author.id, msg.id)
                    return
                chat_message_crud.soft_delete(db, message=msg, actor="user" if is_owner else "admin")
                deleted_id = str(msg.id)
            await self.manager.broadcast_to_room(room, events.MESSAGE_DELETED, {"messageId": deleted_id})

    async def soft_delete(self, db: Session, *, message: ChatMessage, actor: str) -> None:
        """Soft-delete on behalf of a REST caller that already checked permissions, then broadcast."""
        async with self._room_lock(message.room):
            chat_message_crud.soft_delete(db, message=message, actor=actor)
            await self.manager.broadcast_to_room(
                message.room, events.MESSAGE_DELETED, {"messageId": str(message.id)}
            )

    async def set_typing(self, conn: ChatConnection, room: Optional[str], typing: bool) -> None:
        entry = self.presence.get(conn.id)
        if entry is None or entry.room != normalize_room_id(room):
            return
        self.presence.set_typing(conn.id, typing)
        if typing:
            emit = Emit(events.USER_TYPING, {"userId": entry.user_id, "userName": entry.user_name},
                        Target.ROOM_EXCEPT_SELF, entry.room)
        else:
            emit = Emit(events.USER_STOP_TYPING, {"userId": entry.user_id}, Target.ROOM_EXCEPT_SELF, entry.room)
        await self._dispatch(conn, [emit])

    # --- moderation hooks used by REST ---

    async def notify_chat_banned(self, user_id: str, reason: Optional[str]) -> None:
        await self.manager.broadcast_all(events.CHAT_BANNED, {"userId": user_id, "reason": reason})

    async def clear_room(self, db: Session, *, room: str) -> int:
        """Soft-delete a room's live messages under its lock, then tell the members."""
        async with self._room_lock(room):
            cleared = chat_message_crud.clear_room(db, room=room)
            await self.manager.broadcast_to_room(room, events.ROOM_CLEARED, {"room": room})
        return cleared

    def online_count(self, room: str) -> int:
        return self.presence.online_count(normalize_room_id(room))

    def reset(self) -> None:
        """Forget every connection and room. For tests and process restarts."""
        self.presence.reset()
        self.manager.clear()
        self._room_locks.clear()
        for task in list(self._pending):
            if not task.get_loop().is_closed():
                task.cancel()
        self._pending.clear()

    async def shutdown(self) -> None:
        """Cancel pending recounts. Called when the app stops."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._pending.clear()

    # --- internals ---

    def _identify(self, token: Optional[str]) -> str:
        if not token or not isinstance(token, str):
            raise AuthenticationRequired()
        try:
            session = get_session(token)
        except redis.RedisError as e:
            logger.error("Session lookup failed: %s", e)
            raise AuthenticationRequired()
        if not session or not session.get("user_id"):
            raise AuthenticationRequired()
        return session["user_id"]

    def _authorize(self, db: Session, user_id: str, action: ChatAction) -> _Author:
        decision = authorize(db, user_id, action)
        if isinstance(decision, Denied):
            raise AuthorizationDenied(decision.reason.value, decision.message)
        return _Author.from_user(decision.user)

    def _live_message(self, db: Session, message_id: Any) -> Optional[ChatMessage]:
        mid = _parse_uuid(message_id)
        msg = chat_message_crud.get_live(db, message_id=mid, retention_days=self.retention_days) if mid else None
        if msg is None:
            logger.debug("Message %s missing, deleted or expired; ignoring", message_id)
        return msg

    @contextmanager
    def _session(self, failure_message: str) -> Iterator[Session]:
        db = SessionLocal()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Chat persistence failed: %s", e)
            raise PersistenceFailure(failure_message)
        finally:
            db.close()

    def _room_lock(self, room: str) -> asyncio.Lock:
        lock = self._room_locks.get(room)
        if lock is None:
            lock = self._room_locks[room] = asyncio.Lock()
        return lock

    def _schedule_recount(self, room: str) -> None:
        task = asyncio.get_running_loop().create_task(self._recount_later(room))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _recount_later(self, room: str) -> None:
        await asyncio.sleep(self.settle_delay)
        await self._dispatch(None, [self.presence.count_event(room)])

    async def _dispatch(self, conn: Optional[ChatConnection], emits: Iterable[Emit]) -> None:
        for emit in emits:
            if emit.target is Target.EVERYONE:
                await self.manager.broadcast_all(emit.event, emit.payload)
            elif emit.target is Target.SELF:
                if conn is not None:
                    await self.manager.send(conn.websocket, emit.event, emit.payload)
            elif emit.target is Target.ROOM_EXCEPT_SELF:
                await self.manager.broadcast_to_room(
                    emit.room, emit.event, emit.payload,
                    exclude_websocket=conn.websocket if conn else None,
                )
            else:
                await self.manager.broadcast_to_room(emit.room, emit.event, emit.payload)


chat_broker = ChatBroker(
    connection_manager,
    presence_tracker,
    settle_delay=settings.PRESENCE_SETTLE_DELAY,
    max_length=settings.MESSAGE_MAX_LENGTH,
    retention_days=settings.MESSAGE_RETENTION_DAYS,
)
