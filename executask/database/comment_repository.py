"""Repository for Comment database operations."""

import logging
import uuid
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from executask.database.errors import translate_db_error
from executask.database.models import CommentDB
from executask.errors import NotFoundError
from executask.models.comment import Comment

logger = logging.getLogger(__name__)


class CommentRepository:
    """Repository for Comment database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, user_id: str, comment_id: str) -> CommentDB:
        comment_db = self.db.query(CommentDB).filter(
            CommentDB.id == comment_id,
            CommentDB.user_id == user_id,
        ).first()
        if not comment_db:
            raise NotFoundError("Comment not found", code="COMMENT_NOT_FOUND")
        return comment_db

    def create(self, user_id: str, todo_id: str, content: str) -> Comment:
        now = datetime.utcnow()
        comment_db = CommentDB(
            id=str(uuid.uuid4()),
            todo_id=todo_id,
            user_id=user_id,
            content=content,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(comment_db)
            self.db.commit()
            self.db.refresh(comment_db)
            logger.debug(f"Created comment {comment_db.id} on todo {todo_id}")
            return comment_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create comment on todo {todo_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Comment") from e

    def list_for_todo(self, todo_id: str) -> List[Comment]:
        """Comments on a todo, oldest first. Callers check todo ownership first."""
        rows = self.db.query(CommentDB).filter(
            CommentDB.todo_id == todo_id,
        ).order_by(CommentDB.created_at, CommentDB.id).all()
        return [row.to_pydantic() for row in rows]

    def update(self, user_id: str, comment_id: str, content: str) -> Comment:
        comment_db = self._get_db(user_id, comment_id)
        comment_db.content = content
        comment_db.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(comment_db)
            return comment_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update comment {comment_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Comment") from e

    def delete(self, user_id: str, comment_id: str) -> None:
        comment_db = self._get_db(user_id, comment_id)
        try:
            self.db.delete(comment_db)
            self.db.commit()
            logger.debug(f"Deleted comment {comment_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete comment {comment_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Comment") from e
