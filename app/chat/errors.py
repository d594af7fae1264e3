"""
Chat socket errors. Each one is reported to the originating connection only, as error-msg.
"""
from typing import Optional


class ChatError(Exception):
    code = "error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_payload(self) -> dict:
        return {"message": self.message, "code": self.code}


class AuthenticationRequired(ChatError):
    code = "authentication_required"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationDenied(ChatError):
    """reason is account_banned, chat_banned or not_found."""

    def __init__(self, reason: str, message: str):
        super().__init__(message, code=reason)
        self.reason = reason


class InvalidRoom(ChatError):
    code = "invalid_room"

    def __init__(self, message: str = "Invalid room"):
        super().__init__(message)


class InvalidMessage(ChatError):
    """reason is empty or too_long."""

    def __init__(self, reason: str, message: str = "Message must be 1-500 characters"):
        super().__init__(message, code=reason)
        self.reason = reason


class NotInRoom(ChatError):
    code = "not_in_room"

    def __init__(self, message: str = "Join the room before sending messages"):
        super().__init__(message)


class BadFrame(ChatError):
    code = "bad_request"


class PersistenceFailure(ChatError):
    code = "persistence_failure"
