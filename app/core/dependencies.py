"""
FastAPI dependencies for route protection.
"""
import uuid
from fastapi import Request, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import Forbidden, NotAuthenticated, SessionExpired
from app.crud import user_crud
from app.model.user import User
from typing import Dict, Any, Optional

# Security scheme for OpenAPI docs (shows lock icon and Authorization header)
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="Session token from login endpoint",
    auto_error=False,
)


async def validate_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Dict[str, Any]:
    """
    Validates session loaded by middleware.

    Returns:
        Session data dict with user_id, email, role

    Raises:
        NotAuthenticated: No token provided
        SessionExpired: Token not found in Redis
    """
    if not request.state.token and not credentials:
        raise NotAuthenticated()

    if not request.state.session:
        raise SessionExpired()

    return request.state.session


def optional_session(request: Request) -> Optional[Dict[str, Any]]:
    """Session data when a valid bearer token was sent, else None. Never raises."""
    return request.state.session or None


def get_current_token(request: Request) -> str:
    """Get current token from request state."""
    if not request.state.token:
        raise NotAuthenticated()
    return request.state.token


def get_current_user(
    current_user: Dict[str, Any] = Depends(validate_session),
    db: Session = Depends(get_db),
) -> User:
    """Load the live user row behind the session (role and ban flags are never cached)."""
    user = user_crud.get(db, uuid.UUID(current_user["user_id"]))
    if not user:
        raise SessionExpired("User for this session no longer exists.")
    if user.is_banned:
        raise Forbidden(f"Account banned. Reason: {user.ban_reason or 'Violation of terms'}")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Only users with the admin role pass."""
    if user.role != "admin":
        raise Forbidden("Admin access required.")
    return user
