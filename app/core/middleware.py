"""
Session Middleware - loads session from Redis for each HTTP request.
"""
import logging
import redis
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable
from app.session import extract_token, get_session

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """Loads session from Redis based on Authorization header."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Initialize empty session
        request.state.session = {}
        request.state.token = None

        # Try to load session from Redis if token present
        token = extract_token(request.headers.get("authorization"))

        if token:
            request.state.token = token
            try:
                user_data = get_session(token)
            except redis.RedisError as e:
                logger.error("Session lookup failed: %s", e)
                user_data = None
            if user_data:
                request.state.session = user_data

        return await call_next(request)
