"""
Community chat message model. One message in a city room.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index, JSON, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base

REACTION_EMOJIS = ("👍", "❤️", "😂", "😮", "😢", "🔥")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(Base):
    __tablename__ = "chat_messages"
    __table_args__ = (Index("ix_chat_messages_room_created_at", "room", "created_at"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    room = Column(String(32), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Snapshot of the author at send time; later profile edits don't rewrite history
    user_name = Column(String(100), nullable=False)
    user_avatar = Column(String, nullable=True)
    text = Column(Text, nullable=False)
    # emoji -> [user_id, ...]; emptied emoji keys are dropped
    reactions = Column(JSON, nullable=False, default=dict)
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_by = Column(String(8), nullable=True)  # user | admin
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", backref="chat_messages")
