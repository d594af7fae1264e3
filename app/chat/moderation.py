"""
Moderation gateway. Checks ban state on every chat operation against the live user row.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
import uuid
import logging
from sqlalchemy.orm import Session

from app.crud import user_crud
from app.model.user import User

logger = logging.getLogger(__name__)


class ChatAction(str, Enum):
    JOIN = "join"
    SEND = "send"
    REACT = "react"
    DELETE = "delete"


class DenyReason(str, Enum):
    ACCOUNT_BANNED = "account_banned"
    CHAT_BANNED = "chat_banned"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Allowed:
    user: User


@dataclass(frozen=True)
class Denied:
    reason: DenyReason
    ban_reason: Optional[str] = None

    @property
    def message(self) -> str:
        if self.reason is DenyReason.NOT_FOUND:
            return "User not found"
        if self.reason is DenyReason.ACCOUNT_BANNED:
            return f"Account banned. Reason: {self.ban_reason or 'Violation of terms'}"
        return f"You are banned from community chat. Reason: {self.ban_reason or 'Violation of chat rules'}"


Decision = Union[Allowed, Denied]


def check_user(user: Optional[User]) -> Decision:
    """Account ban outranks chat ban. Every chat action is gated the same way."""
    if user is None:
        return Denied(DenyReason.NOT_FOUND)
    if user.is_banned:
        return Denied(DenyReason.ACCOUNT_BANNED, user.ban_reason)
    if user.is_chat_banned:
        return Denied(DenyReason.CHAT_BANNED, user.chat_ban_reason)
    return Allowed(user)


def authorize(db: Session, user_id: Union[str, uuid.UUID], action: ChatAction) -> Decision:
    """Reload the user and decide. Never cached: a ban can land mid-session."""
    try:
        uid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        return Denied(DenyReason.NOT_FOUND)
    decision = check_user(user_crud.get(db, uid))
    if isinstance(decision, Denied):
        logger.info("Denied %s for user %s: %s", action.value, uid, decision.reason.value)
    return decision
