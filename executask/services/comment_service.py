"""Comment operations. Only a todo's owner can comment on it."""

import logging
from typing import List

from sqlalchemy.orm import Session

from executask.database.comment_repository import CommentRepository
from executask.database.todo_repository import TodoRepository
from executask.models.comment import Comment, CommentPayload

logger = logging.getLogger(__name__)


class CommentService:

    def __init__(self, db: Session):
        self.comments = CommentRepository(db)
        self.todos = TodoRepository(db)

    def add_comment(self, user_id: str, todo_id: str, payload: CommentPayload) -> Comment:
        self.todos.get(user_id, todo_id)
        comment = self.comments.create(user_id, todo_id, payload.content)
        logger.info(
            f"Comment added: {comment.id}",
            extra={"event": "comment_added", "todo_id": todo_id, "comment_id": comment.id},
        )
        return comment

    def list_comments(self, user_id: str, todo_id: str) -> List[Comment]:
        self.todos.get(user_id, todo_id)
        return self.comments.list_for_todo(todo_id)

    def update_comment(self, user_id: str, comment_id: str, payload: CommentPayload) -> Comment:
        return self.comments.update(user_id, comment_id, payload.content)

    def delete_comment(self, user_id: str, comment_id: str) -> None:
        self.comments.delete(user_id, comment_id)
