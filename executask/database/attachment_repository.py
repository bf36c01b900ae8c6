"""Repository for Attachment database operations."""

import logging
import uuid
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session

from executask.database.errors import translate_db_error
from executask.database.models import AttachmentDB
from executask.errors import NotFoundError
from executask.models.attachment import Attachment

logger = logging.getLogger(__name__)


class AttachmentRepository:
    """Repository for Attachment database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: str,
        todo_id: str,
        name: str,
        object_key: str,
        file_size: int,
        mime_type: str,
    ) -> Attachment:
        now = datetime.utcnow()
        attachment_db = AttachmentDB(
            id=str(uuid.uuid4()),
            todo_id=todo_id,
            user_id=user_id,
            name=name,
            object_key=object_key,
            file_size=file_size,
            mime_type=mime_type,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(attachment_db)
            self.db.commit()
            self.db.refresh(attachment_db)
            logger.debug(f"Created attachment {attachment_db.id} on todo {todo_id}")
            return attachment_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create attachment on todo {todo_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Attachment") from e

    def get(self, user_id: str, todo_id: str, attachment_id: str) -> Attachment:
        attachment_db = self.db.query(AttachmentDB).filter(
            AttachmentDB.id == attachment_id,
            AttachmentDB.todo_id == todo_id,
            AttachmentDB.user_id == user_id,
        ).first()
        if not attachment_db:
            raise NotFoundError("Attachment not found", code="ATTACHMENT_NOT_FOUND")
        return attachment_db.to_pydantic()

    def list_for_todo(self, user_id: str, todo_id: str) -> List[Attachment]:
        rows = self.db.query(AttachmentDB).filter(
            AttachmentDB.todo_id == todo_id,
            AttachmentDB.user_id == user_id,
        ).order_by(AttachmentDB.created_at, AttachmentDB.id).all()
        return [row.to_pydantic() for row in rows]

    def delete(self, user_id: str, todo_id: str, attachment_id: str) -> Attachment:
        """Hard-delete an attachment row; returns it so the caller can remove the stored object."""
        attachment = self.get(user_id, todo_id, attachment_id)
        try:
            self.db.query(AttachmentDB).filter(
                AttachmentDB.id == attachment_id,
            ).delete(synchronize_session=False)
            self.db.commit()
            logger.debug(f"Deleted attachment {attachment_id}")
            return attachment
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete attachment {attachment_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Attachment") from e
