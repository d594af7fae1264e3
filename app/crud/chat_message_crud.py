"""
Chat message CRUD.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import desc, func

from app.model.chat_message import ChatMessage
from app.crud.base import CRUDBase

DELETED_PLACEHOLDER = "[Message deleted]"
CLEARED_PLACEHOLDER = "[Cleared by admin]"


def retention_cutoff(retention_days: int, now: Optional[datetime] = None) -> datetime:
    """Oldest created_at still inside the retention window."""
    return (now or datetime.now(timezone.utc)) - timedelta(days=retention_days)


class CRUDChatMessage(CRUDBase[ChatMessage, Dict[str, Any], Dict[str, Any]]):
    def get_by_id(self, db: Session, *, message_id: uuid.UUID) -> Optional[ChatMessage]:
        return db.query(self.model).filter(self.model.id == message_id).first()

    def get_live(self, db: Session, *, message_id: uuid.UUID, retention_days: int) -> Optional[ChatMessage]:
        """The message if it is neither deleted nor past the retention window."""
        return (
            db.query(self.model)
            .filter(
                self.model.id == message_id,
                self.model.is_deleted.is_(False),
                self.model.created_at >= retention_cutoff(retention_days),
            )
            .first()
        )

    def list_room_history(
        self,
        db: Session,
        *,
        room: str,
        retention_days: int,
        page: int = 1,
        limit: int = 30,
        include_deleted: bool = False,
    ) -> Tuple[List[ChatMessage], int]:
        """One page of a room's messages, newest page first, items returned oldest-first."""
        base = db.query(self.model).filter(
            self.model.room == room,
            self.model.created_at >= retention_cutoff(retention_days),
        )
        if not include_deleted:
            base = base.filter(self.model.is_deleted.is_(False))
        total = base.with_entities(func.count(self.model.id)).scalar() or 0
        skip = (page - 1) * limit
        items = (
            base.order_by(desc(self.model.created_at))
            .offset(skip)
            .limit(limit)
            .all()
        )
        items.reverse()
        return items, total

    def toggle_reaction(
        self, db: Session, *, message: ChatMessage, emoji: str, user_id: str
    ) -> ChatMessage:
        """Add user_id to the emoji's set, or remove it if already there."""
        reactions = {k: list(v) for k, v in (message.reactions or {}).items()}
        users = reactions.get(emoji, [])
        if user_id in users:
            users.remove(user_id)
        else:
            users.append(user_id)
        if users:
            reactions[emoji] = users
        else:
            reactions.pop(emoji, None)
        # Reassign so the JSON column is flagged dirty
        message.reactions = reactions
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

    def soft_delete(self, db: Session, *, message: ChatMessage, actor: str) -> ChatMessage:
        message.is_deleted = True
        message.deleted_by = actor
        message.text = DELETED_PLACEHOLDER
        db.add(message)
        db.commit()
        db.refresh(message)
        return message

    def clear_room(self, db: Session, *, room: str) -> int:
        """Soft-delete every live message in a room. Returns how many were cleared."""
        count = (
            db.query(self.model)
            .filter(self.model.room == room, self.model.is_deleted.is_(False))
            .update(
                {
                    self.model.is_deleted: True,
                    self.model.deleted_by: "admin",
                    self.model.text: CLEARED_PLACEHOLDER,
                },
                synchronize_session=False,
            )
        )
        db.commit()
        return count

    def purge_expired(self, db: Session, *, retention_days: int) -> int:
        """Hard-delete messages older than the retention window."""
        count = (
            db.query(self.model)
            .filter(self.model.created_at < retention_cutoff(retention_days))
            .delete(synchronize_session=False)
        )
        db.commit()
        return count


chat_message_crud = CRUDChatMessage(ChatMessage)
