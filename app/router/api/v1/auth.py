"""
Authentication router - signup/verify/login/logout and current profile.
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.dependencies import validate_session, get_current_token, get_current_user
from app.model.user import User
from app.service.auth_service import AuthService, user_profile
from app.schema.auth import UserRegister, UserLogin, LoginResponse, MessageResponse, VerifyEmail, UserProfile
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/signup", response_model=MessageResponse)
async def signup(
    user_data: UserRegister,
    db: Session = Depends(get_db)
):
    """Register a new user. A verification code is emailed by Cognito."""
    AuthService(db).register_user(user_data)
    return MessageResponse(message="User registered successfully")


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    data: VerifyEmail,
    db: Session = Depends(get_db)
):
    """Verify email with confirmation code sent after signup."""
    AuthService(db).verify_email(data.email, data.code)
    return MessageResponse(message="Email verified successfully")


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: UserLogin,
    db: Session = Depends(get_db)
):
    """Login and get a bearer token for REST and socket events."""
    return AuthService(db).login(login_data)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    current_user: Dict[str, Any] = Depends(validate_session),
    db: Session = Depends(get_db)
):
    """Logout - invalidates token server-side and signs out from Cognito."""
    token = get_current_token(request)
    AuthService(db).logout(token, current_user)
    logger.info(f"User logged out: {current_user['email']}")
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=UserProfile)
async def get_me(user: User = Depends(get_current_user)):
    """Current profile, including role and chat ban state."""
    return user_profile(user)
