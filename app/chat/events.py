"""
Socket event names and the outbound-event value the presence/broker layers produce.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# client -> server
JOIN_ROOM = "join-room"
SEND_MESSAGE = "send-message"
TOGGLE_REACTION = "toggle-reaction"
DELETE_MESSAGE = "delete-message"
TYPING = "typing"
STOP_TYPING = "stop-typing"

# server -> client
JOINED = "joined"
NEW_MESSAGE = "new-message"
REACTION_UPDATED = "reaction-updated"
MESSAGE_DELETED = "message-deleted"
ONLINE_COUNT = "online-count"
USER_JOINED = "user-joined"
USER_LEFT = "user-left"
USER_TYPING = "user-typing"
USER_STOP_TYPING = "user-stop-typing"
ERROR_MSG = "error-msg"
CHAT_BANNED = "chat-banned"
ROOM_CLEARED = "room-cleared"


class Target(str, Enum):
    ROOM = "room"                  # everyone in the room
    ROOM_EXCEPT_SELF = "others"    # everyone in the room but the originating connection
    SELF = "self"                  # only the originating connection
    EVERYONE = "everyone"          # every open connection


@dataclass(frozen=True)
class Emit:
    """One outbound event, resolved to sockets by the broker."""
    event: str
    payload: Dict[str, Any]
    target: Target = Target.ROOM
    room: Optional[str] = None
