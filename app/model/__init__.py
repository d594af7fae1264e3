from app.model.user import User
from app.model.chat_message import ChatMessage

__all__ = ["User", "ChatMessage"]
