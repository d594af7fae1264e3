"""
Admin moderation: chat bans, account bans, room clearing.
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.chat.broker import chat_broker
from app.chat.rooms import get_room
from app.core.database import get_db
from app.core.dependencies import require_admin
from app.core.exceptions import BadRequest, InvalidRoom, NotFound
from app.crud import user_crud
from app.model.user import User
from app.schema.chat import (
    BanBody,
    BannedUser,
    BannedUserListResponse,
    DetailResponse,
    RoomClearedResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _target_user(db: Session, user_id: uuid.UUID, admin: User) -> User:
    user = user_crud.get(db, user_id)
    if not user:
        raise NotFound("User")
    if user.id == admin.id:
        raise BadRequest("SELF_BAN", "You cannot ban yourself.")
    return user


# --- Chat bans ---

@router.patch("/chat/ban/{user_id}", response_model=DetailResponse)
async def chat_ban(
    user_id: uuid.UUID,
    body: Optional[BanBody] = Body(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Ban a user from community chat. Open sockets are told immediately."""
    user = _target_user(db, user_id, admin)
    user = user_crud.set_chat_ban(db, user=user, reason=body.reason if body else None)
    logger.info("Admin %s chat-banned user %s", admin.email, user.email)
    await chat_broker.notify_chat_banned(str(user.id), user.chat_ban_reason)
    return DetailResponse(message=f"{user.name} has been banned from community chat")


@router.patch("/chat/unban/{user_id}", response_model=DetailResponse)
async def chat_unban(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = user_crud.get(db, user_id)
    if not user:
        raise NotFound("User")
    user_crud.clear_chat_ban(db, user=user)
    logger.info("Admin %s lifted chat ban on %s", admin.email, user.email)
    return DetailResponse(message=f"{user.name} has been unbanned from community chat")


@router.get("/chat/banned-users", response_model=BannedUserListResponse)
async def banned_users(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return BannedUserListResponse(
        users=[
            BannedUser(
                id=u.id,
                name=u.name,
                email=u.email,
                reason=u.chat_ban_reason,
                created_at=u.created_at,
            )
            for u in user_crud.list_chat_banned(db)
        ]
    )


# --- Rooms ---

@router.delete("/chat/room/{room}/clear", response_model=RoomClearedResponse)
async def clear_room(
    room: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Soft-delete every live message in a room and tell its members."""
    target = get_room(room)
    if target is None:
        raise InvalidRoom()
    try:
        cleared = await chat_broker.clear_room(db, room=target.id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to clear room %s: %s", target.id, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "SERVICE_ERROR", "message": "Failed to clear room. Please try again."},
        )
    logger.info("Admin %s cleared %d messages from room %s", admin.email, cleared, target.id)
    return RoomClearedResponse(message=f"Room {target.name} cleared", cleared=cleared)


# --- Account bans ---

@router.patch("/users/{user_id}/ban", response_model=DetailResponse)
async def ban_user(
    user_id: uuid.UUID,
    body: Optional[BanBody] = Body(None),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = _target_user(db, user_id, admin)
    user_crud.set_ban(db, user=user, reason=body.reason if body else None)
    logger.info("Admin %s banned account %s", admin.email, user.email)
    return DetailResponse(message=f"{user.name} has been banned")


@router.patch("/users/{user_id}/unban", response_model=DetailResponse)
async def unban_user(
    user_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = user_crud.get(db, user_id)
    if not user:
        raise NotFound("User")
    user_crud.clear_ban(db, user=user)
    logger.info("Admin %s unbanned account %s", admin.email, user.email)
    return DetailResponse(message=f"{user.name} has been unbanned")
