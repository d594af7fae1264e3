"""
Community chat schemas: rooms, message history, moderation.
Field names on the wire are camelCase to match the socket payloads.
"""
from datetime import datetime
from typing import Dict, List, Optional
import uuid
from pydantic import BaseModel, Field


# --- Room ---

class RoomItem(BaseModel):
    id: str
    name: str
    state: str = Field(..., description="Region label shown under the room name.")


class RoomListResponse(BaseModel):
    rooms: List[RoomItem]


class OnlineCountResponse(BaseModel):
    online: int


# --- Message ---

class CommunityMessage(BaseModel):
    """One stored message, as returned by history."""
    id: uuid.UUID
    room: str
    user_id: uuid.UUID = Field(..., alias="userId")
    user_name: str = Field(..., alias="userName")
    user_avatar: Optional[str] = Field(None, alias="userAvatar")
    text: str
    reactions: Dict[str, List[str]] = Field(default_factory=dict)
    is_deleted: bool = Field(False, alias="isDeleted")
    deleted_by: Optional[str] = Field(None, alias="deletedBy")
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class Pagination(BaseModel):
    page: int = Field(..., description="Current page (1-based).")
    limit: int = Field(..., description="Items per page.")
    total: int = Field(..., description="Total messages in room.")
    pages: int = Field(..., description="Total pages.")
    has_more: bool = Field(..., alias="hasMore")

    class Config:
        populate_by_name = True


class MessageHistoryResponse(BaseModel):
    """Oldest-first page of a room's history."""
    messages: List[CommunityMessage]
    pagination: Pagination


class DetailResponse(BaseModel):
    message: str


# --- Moderation ---

class BanBody(BaseModel):
    reason: Optional[str] = Field(None, max_length=300)


class BannedUser(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    reason: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True


class BannedUserListResponse(BaseModel):
    users: List[BannedUser]


class RoomClearedResponse(BaseModel):
    message: str
    cleared: int
