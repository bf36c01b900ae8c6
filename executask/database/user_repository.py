"""Repository for User database operations."""

import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from executask.models.user import User
from executask.database.errors import translate_db_error
from executask.database.models import UserDB

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""
    
    def __init__(self, db: Session):
        self.db = db
    
    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        return user_db.to_pydantic() if user_db else None
    
    def upsert(self, user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> User:
        """Create the user row on first sight, refresh profile fields when claims change.

        Args:
            user_id: Identity-provider subject
            email: Email claim, if the token carried one
            name: Name claim, if the token carried one

        Returns:
            Created or updated User object
        """
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        now = datetime.utcnow()

        if user_db:
            changed = False
            if email and user_db.email != email:
                user_db.email = email
                changed = True
            if name and user_db.name != name:
                user_db.name = name
                changed = True
            if not changed:
                return user_db.to_pydantic()
            user_db.updated_at = now
        else:
            user_db = UserDB(id=user_id, email=email, name=name, created_at=now, updated_at=now)
            self.db.add(user_db)

        try:
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"Upserted user {user_id}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to upsert user {user_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "User") from e
