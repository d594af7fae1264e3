"""
Shared fixtures: in-memory SQLite tables, fakeredis sessions, users and socket helpers.
"""
import unittest
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import fakeredis
from fastapi.testclient import TestClient

from app.chat.broker import chat_broker
from app.core.database import Base, SessionLocal, engine
from app.model import ChatMessage, User
from app.session import create_session, set_redis_client
from main import app


class DatabaseTestCase(unittest.TestCase):
    """
    Fresh tables, a fake Redis and an empty broker for every test.

    Leaving `with TestClient(app)` disposes the engine, which drops the in-memory
    database: check stored rows before the client context closes. Fixture helpers
    use short-lived sessions and return detached rows for the same reason.
    """

    def setUp(self):
        Base.metadata.create_all(bind=engine)
        self.db = SessionLocal()
        self.redis = fakeredis.FakeRedis(decode_responses=True)
        set_redis_client(self.redis, session_ttl=3600)
        chat_broker.reset()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=engine)
        set_redis_client(None)
        chat_broker.reset()

    def _store(self, obj):
        db = SessionLocal()
        try:
            db.add(obj)
            db.commit()
            db.refresh(obj)
            db.expunge(obj)
        finally:
            db.close()
        return obj

    def make_user(
        self,
        name: str,
        *,
        role: str = "user",
        avatar: Optional[str] = None,
        is_banned: bool = False,
        ban_reason: Optional[str] = None,
        is_chat_banned: bool = False,
        chat_ban_reason: Optional[str] = None,
    ) -> User:
        return self._store(User(
            id=uuid.uuid4(),
            email=f"{name.lower()}@example.com",
            name=name,
            avatar=avatar,
            role=role,
            is_banned=is_banned,
            ban_reason=ban_reason,
            is_chat_banned=is_chat_banned,
            chat_ban_reason=chat_ban_reason,
        ))

    def update_user(self, user: User, **values) -> None:
        db = SessionLocal()
        try:
            db.query(User).filter(User.id == user.id).update(values)
            db.commit()
        finally:
            db.close()

    def remove_user(self, user: User) -> None:
        db = SessionLocal()
        try:
            db.query(User).filter(User.id == user.id).delete()
            db.commit()
        finally:
            db.close()

    def login_as(self, user: User) -> str:
        token = uuid.uuid4().hex
        create_session(token, {"user_id": str(user.id), "email": user.email})
        return token

    def auth_header(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def add_message(
        self,
        user: User,
        text: str = "hello",
        *,
        room: str = "patna",
        created_at: Optional[datetime] = None,
        is_deleted: bool = False,
    ) -> ChatMessage:
        return self._store(ChatMessage(
            room=room,
            user_id=user.id,
            user_name=user.name,
            user_avatar=user.avatar,
            text=text,
            reactions={},
            is_deleted=is_deleted,
            created_at=created_at or datetime.now(timezone.utc),
        ))

    def reload(self, model, id: Any):
        """Read a row through a new session so writes made by the app are visible."""
        db = SessionLocal()
        try:
            obj = db.get(model, id)
            if obj is not None:
                db.expunge(obj)
            return obj
        finally:
            db.close()

    def count_messages(self) -> int:
        db = SessionLocal()
        try:
            return db.query(ChatMessage).count()
        finally:
            db.close()


def send_event(ws, event: str, **payload) -> None:
    ws.send_json({"event": event, "payload": payload})


def receive_until(ws, event: str, skipped: Optional[List[dict]] = None) -> Dict[str, Any]:
    """Read frames until `event` arrives; earlier frames are appended to `skipped`."""
    while True:
        frame = ws.receive_json()
        if frame["event"] == event:
            return frame["payload"]
        if skipped is not None:
            skipped.append(frame)


def join(ws, room: str, token: str, skipped: Optional[List[dict]] = None) -> Dict[str, Any]:
    send_event(ws, "join-room", room=room, token=token)
    return receive_until(ws, "joined", skipped)


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase with the app's lifespan running for the whole test."""

    def setUp(self):
        super().setUp()
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        super().tearDown()
