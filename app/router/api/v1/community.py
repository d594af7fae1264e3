"""
Community chat API: room list, history and deletion (REST), plus the real-time WebSocket.
"""
import logging
import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status, WebSocket, WebSocketDisconnect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.chat.broker import chat_broker
from app.chat.rooms import get_room, list_rooms as registry_rooms
from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.core.exceptions import Forbidden, InvalidRoom, NotFound
from app.crud import chat_message_crud
from app.model.user import User
from app.schema.chat import (
    CommunityMessage,
    DetailResponse,
    MessageHistoryResponse,
    OnlineCountResponse,
    Pagination,
    RoomItem,
    RoomListResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

MIN_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


# --- REST: Rooms ---

@router.get("/rooms", response_model=RoomListResponse)
async def list_rooms():
    """Available rooms. No auth."""
    return RoomListResponse(
        rooms=[RoomItem(id=r.id, name=r.name, state=r.region) for r in registry_rooms()]
    )


@router.get("/rooms/{room}/online", response_model=OnlineCountResponse)
async def online_count(room: str):
    """Connections currently in the room on this server."""
    return OnlineCountResponse(online=chat_broker.online_count(room))


# --- REST: Messages ---

@router.get("/messages/{room}", response_model=MessageHistoryResponse)
async def get_history(
    room: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    page: int = 1,
    limit: int = 30,
    include_deleted: bool = Query(False, alias="includeDeleted"),
):
    """Paginated history, oldest first within the page. Messages past retention are never returned."""
    target = get_room(room)
    if target is None:
        raise InvalidRoom()
    page = max(1, page)
    limit = min(MAX_PAGE_SIZE, max(MIN_PAGE_SIZE, limit))
    items, total = chat_message_crud.list_room_history(
        db,
        room=target.id,
        retention_days=settings.MESSAGE_RETENTION_DAYS,
        page=page,
        limit=limit,
        include_deleted=include_deleted,
    )
    skip = (page - 1) * limit
    return MessageHistoryResponse(
        messages=[CommunityMessage.model_validate(m) for m in items],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit),
            has_more=skip + limit < total,
        ),
    )


@router.delete("/messages/{message_id}", response_model=DetailResponse)
async def delete_message(
    message_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Soft-delete a message. Author or admin only; room members are notified."""
    msg = chat_message_crud.get_by_id(db, message_id=message_id)
    if not msg:
        raise NotFound("Message")
    is_owner = msg.user_id == user.id
    if not is_owner and not user.is_admin:
        raise Forbidden()
    if msg.is_deleted:
        return DetailResponse(message="Message deleted")
    try:
        await chat_broker.soft_delete(db, message=msg, actor="user" if is_owner else "admin")
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to delete chat message: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "SERVICE_ERROR", "message": "Failed to delete message. Please try again."},
        )
    return DetailResponse(message="Message deleted")


# --- WebSocket ---

@router.websocket("/ws")
async def community_socket(websocket: WebSocket):
    """
    Real-time community chat. Frames are {"event": ..., "payload": {...}} both ways.
    Tokens travel inside each event payload, so bans apply from the next event on.
    """
    origin = websocket.headers.get("origin")
    if origin and origin not in settings.CORS_ORIGINS:
        logger.warning("Rejected socket from origin %s", origin)
        await websocket.close(code=4003)
        return

    await websocket.accept()
    conn = await chat_broker.connect(websocket)
    try:
        while True:
            data = await websocket.receive_text()
            await chat_broker.handle_frame(conn, data)
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.warning("WebSocket closed: %s", e)
    finally:
        await chat_broker.disconnect(conn)
