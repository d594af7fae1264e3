"""
Authentication schemas.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class VerifyEmail(BaseModel):
    email: EmailStr
    code: str


class UserInfo(BaseModel):
    id: str
    email: str
    name: str
    avatar: Optional[str] = None
    role: str = "user"
    is_active: bool = True


class UserProfile(UserInfo):
    """Extended user info with moderation flags and timestamps."""
    is_banned: bool = False
    is_chat_banned: bool = False
    chat_ban_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class MessageResponse(BaseModel):
    message: str
