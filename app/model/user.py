"""
User model. Identity record consumed by the chat layer (name, avatar, role, ban flags).
"""
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.sql import func
import uuid
from app.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    cognito_username = Column(String, unique=True, nullable=True)  # Cognito Username (uuid)
    name = Column(String(100), nullable=False)
    avatar = Column(String, nullable=True)
    role = Column(String(16), nullable=False, default="user")  # user | admin
    is_active = Column(Boolean, default=True)

    # Account-level ban blocks everything; chat ban only blocks community chat
    is_banned = Column(Boolean, nullable=False, default=False)
    ban_reason = Column(String, nullable=True)
    is_chat_banned = Column(Boolean, nullable=False, default=False)
    chat_ban_reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
