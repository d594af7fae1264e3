"""
User CRUD operations.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from app.model.user import User
from app.crud.base import CRUDBase


class CRUDUser(CRUDBase[User, dict, dict]):
    """User-specific CRUD operations."""

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        """Get user by email."""
        return self.get_by_field(db, "email", email.lower())

    def list_chat_banned(self, db: Session) -> List[User]:
        return (
            db.query(self.model)
            .filter(self.model.is_chat_banned.is_(True))
            .order_by(self.model.name)
            .all()
        )

    def set_chat_ban(self, db: Session, *, user: User, reason: Optional[str]) -> User:
        return self.update(
            db,
            db_obj=user,
            obj_in={"is_chat_banned": True, "chat_ban_reason": reason or "Banned from chat by admin"},
        )

    def clear_chat_ban(self, db: Session, *, user: User) -> User:
        return self.update(db, db_obj=user, obj_in={"is_chat_banned": False, "chat_ban_reason": None})

    def set_ban(self, db: Session, *, user: User, reason: Optional[str]) -> User:
        return self.update(
            db,
            db_obj=user,
            obj_in={"is_banned": True, "ban_reason": reason or "Banned by admin"},
        )

    def clear_ban(self, db: Session, *, user: User) -> User:
        return self.update(db, db_obj=user, obj_in={"is_banned": False, "ban_reason": None})


user_crud = CRUDUser(User)
