from .session_layer import (
    init_redis,
    set_redis_client,
    get_redis_client,
    redis_initialized,
    create_session,
    get_session,
    remove_session,
    extract_token,
)
from .guest_throttle import GuestThrottle

__all__ = [
    "init_redis",
    "set_redis_client",
    "get_redis_client",
    "redis_initialized",
    "create_session",
    "get_session",
    "remove_session",
    "extract_token",
    "GuestThrottle",
]
