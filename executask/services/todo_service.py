"""Business rules for todos and their attachments.

Handlers call the service; the service checks ownership and structural rules, then delegates
persistence to the repositories. Domain events are emitted as structured log records.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from executask.database.attachment_repository import AttachmentRepository
from executask.database.category_repository import CategoryRepository
from executask.database.todo_repository import TodoRepository
from executask.errors import AppError, BadRequestError, FieldError, InternalServerError
from executask.integrations.object_store import (
    PRESIGNED_URL_EXPIRY_SEC,
    ObjectStore,
    ObjectStoreError,
    build_object_key,
)
from executask.models.attachment import Attachment, AttachmentDownload
from executask.models.base import Page
from executask.models.constants import (
    ALLOWED_ATTACHMENT_TYPES,
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    MAX_ATTACHMENT_SIZE,
)
from executask.models.enums import TodoStatus
from executask.models.todo import (
    CreateTodoPayload,
    PopulatedTodo,
    Todo,
    TodoListQuery,
    TodoStats,
    UpdateTodoPayload,
)

logger = logging.getLogger(__name__)


class TodoService:
    """Todo operations for one request (one database session)."""

    def __init__(self, db: Session, object_store: ObjectStore):
        self.todos = TodoRepository(db)
        self.categories = CategoryRepository(db)
        self.attachments = AttachmentRepository(db)
        self.object_store = object_store

    def _check_parent(self, user_id: str, parent_todo_id: str, todo_id: Optional[str] = None) -> None:
        """Parent must be owned by the user and must not itself be a subtask."""
        if todo_id is not None and parent_todo_id == todo_id:
            raise BadRequestError("A todo cannot be its own parent", code="INVALID_PARENT")

        parent = self.todos.get(user_id, parent_todo_id)
        if not parent.can_have_children():
            raise BadRequestError(
                "Subtasks cannot have their own subtasks",
                code="PARENT_CANNOT_HAVE_CHILDREN",
            )

    def _check_category(self, user_id: str, category_id: str) -> None:
        self.categories.get(user_id, category_id)

    def _remove_object(self, object_key: str) -> None:
        """Delete a stored object; failures are logged and not retried."""
        try:
            self.object_store.delete(object_key)
        except ObjectStoreError as e:
            logger.error(f"Failed to delete stored object {object_key}: {str(e)}")

    def create_todo(self, user_id: str, payload: CreateTodoPayload) -> Todo:
        """Create a todo after checking its parent and category references."""
        if payload.parent_todo_id:
            self._check_parent(user_id, payload.parent_todo_id)
        if payload.category_id:
            self._check_category(user_id, payload.category_id)

        payload = payload.model_copy(update={
            "priority": payload.priority or DEFAULT_PRIORITY.value,
            "status": payload.status or DEFAULT_STATUS.value,
        })
        todo = self.todos.create(user_id, payload)

        logger.info(
            f"Todo created: {todo.id}",
            extra={
                "event": "todo_created",
                "todo_id": todo.id,
                "title": todo.title,
                "category_id": todo.category_id,
                "priority": todo.priority,
            },
        )
        return todo

    def get_todo(self, user_id: str, todo_id: str) -> PopulatedTodo:
        return self.todos.get_populated(user_id, todo_id)

    def list_todos(self, user_id: str, query: TodoListQuery) -> Page[Todo]:
        return self.todos.list(user_id, query)

    def get_stats(self, user_id: str) -> TodoStats:
        return self.todos.stats(user_id)

    def update_todo(self, user_id: str, todo_id: str, payload: UpdateTodoPayload) -> Todo:
        """Apply a partial update.

        Only fields present in the request change. Moving into `completed` stamps
        `completed_at`; moving out of it clears the stamp.
        """
        current = self.todos.get(user_id, todo_id)
        changes = payload.changes()

        parent_todo_id = changes.get("parent_todo_id")
        if parent_todo_id and parent_todo_id != current.parent_todo_id:
            self._check_parent(user_id, parent_todo_id, todo_id=todo_id)
            if self.todos.has_children(user_id, todo_id):
                raise BadRequestError(
                    "A todo with subtasks cannot become a subtask",
                    code="TODO_HAS_CHILDREN",
                )

        category_id = changes.get("category_id")
        if category_id and category_id != current.category_id:
            self._check_category(user_id, category_id)

        if "status" in changes:
            if changes["status"] == TodoStatus.COMPLETED.value:
                if current.status != TodoStatus.COMPLETED.value:
                    changes["completed_at"] = datetime.utcnow()
            else:
                changes["completed_at"] = None

        todo = self.todos.update(user_id, todo_id, changes)
        logger.info(
            f"Todo updated: {todo.id}",
            extra={"event": "todo_updated", "todo_id": todo.id, "fields": sorted(payload.changes())},
        )
        return todo

    def delete_todo(self, user_id: str, todo_id: str) -> None:
        """Delete a todo with its subtasks, comments and attachments."""
        removed = self.todos.delete_cascade(user_id, todo_id)
        for attachment in removed:
            self._remove_object(attachment.object_key)

        logger.info(
            f"Todo deleted: {todo_id}",
            extra={"event": "todo_deleted", "todo_id": todo_id, "attachments_removed": len(removed)},
        )

    def upload_attachment(
        self,
        user_id: str,
        todo_id: str,
        filename: str,
        content_type: str,
        data: bytes,
    ) -> Attachment:
        """Store a file for a todo and record its metadata."""
        self.todos.get(user_id, todo_id)

        errors: List[FieldError] = []
        if not data:
            errors.append(FieldError(field="file", error="file is empty"))
        elif len(data) > MAX_ATTACHMENT_SIZE:
            errors.append(FieldError(
                field="file",
                error=f"file exceeds the {MAX_ATTACHMENT_SIZE // (1024 * 1024)} MiB limit",
            ))
        if content_type not in ALLOWED_ATTACHMENT_TYPES:
            errors.append(FieldError(field="file", error=f"file type {content_type} is not allowed"))
        if errors:
            raise BadRequestError("Invalid attachment", code="INVALID_ATTACHMENT", errors=errors)

        object_key = build_object_key(user_id, todo_id, filename)
        try:
            self.object_store.put(object_key, data, content_type)
        except ObjectStoreError as e:
            logger.error(f"Failed to store attachment for todo {todo_id}: {str(e)}")
            raise InternalServerError("Failed to store attachment") from e

        try:
            attachment = self.attachments.create(
                user_id=user_id,
                todo_id=todo_id,
                name=filename,
                object_key=object_key,
                file_size=len(data),
                mime_type=content_type,
            )
        except AppError:
            self._remove_object(object_key)
            raise

        logger.info(
            f"Attachment uploaded: {attachment.id}",
            extra={
                "event": "attachment_uploaded",
                "todo_id": todo_id,
                "attachment_id": attachment.id,
                "file_size": attachment.file_size,
            },
        )
        return attachment

    def list_attachments(self, user_id: str, todo_id: str) -> List[Attachment]:
        self.todos.get(user_id, todo_id)
        return self.attachments.list_for_todo(user_id, todo_id)

    def get_attachment_download_url(self, user_id: str, todo_id: str, attachment_id: str) -> AttachmentDownload:
        attachment = self.attachments.get(user_id, todo_id, attachment_id)
        try:
            url = self.object_store.presigned_url(attachment.object_key, PRESIGNED_URL_EXPIRY_SEC)
        except ObjectStoreError as e:
            logger.error(f"Failed to presign attachment {attachment_id}: {str(e)}")
            raise InternalServerError("Failed to generate download URL") from e
        return AttachmentDownload(url=url, expires_in=PRESIGNED_URL_EXPIRY_SEC)

    def delete_attachment(self, user_id: str, todo_id: str, attachment_id: str) -> None:
        attachment = self.attachments.delete(user_id, todo_id, attachment_id)
        self._remove_object(attachment.object_key)
        logger.info(
            f"Attachment deleted: {attachment_id}",
            extra={"event": "attachment_deleted", "todo_id": todo_id, "attachment_id": attachment_id},
        )
