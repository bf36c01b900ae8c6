"""Repository layer for todo database operations.

This is the only code that queries the `todos` table. Every read is scoped by owner so
that another principal's todo is indistinguishable from a missing one.
"""

import logging
import math
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session, joinedload

from executask.database.errors import translate_db_error
from executask.database.models import AttachmentDB, CommentDB, TodoDB, enum_to_value
from executask.errors import NotFoundError
from executask.models.attachment import Attachment
from executask.models.base import Page
from executask.models.enums import SortOrder, TodoPriority, TodoSortField, TodoStatus
from executask.models.todo import CreateTodoPayload, PopulatedTodo, Todo, TodoListQuery, TodoStats

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (TodoStatus.COMPLETED.value, TodoStatus.ARCHIVED.value)

_PRIORITY_RANK = case(
    (TodoDB.priority == TodoPriority.LOW.value, 1),
    (TodoDB.priority == TodoPriority.MEDIUM.value, 2),
    (TodoDB.priority == TodoPriority.HIGH.value, 3),
    else_=0,
)

_SORT_COLUMNS = {
    TodoSortField.CREATED_AT.value: TodoDB.created_at,
    TodoSortField.UPDATED_AT.value: TodoDB.updated_at,
    TodoSortField.DUE_DATE.value: TodoDB.due_date,
    TodoSortField.PRIORITY.value: _PRIORITY_RANK,
    TodoSortField.TITLE.value: TodoDB.title,
    TodoSortField.SORT_ORDER.value: TodoDB.sort_order,
}


def _overdue_clause(now: datetime):
    return and_(
        TodoDB.due_date.isnot(None),
        TodoDB.due_date < now,
        TodoDB.status.notin_(CLOSED_STATUSES),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _metadata_value(metadata) -> Optional[dict]:
    if metadata is None:
        return None
    if hasattr(metadata, "model_dump"):
        return metadata.model_dump()
    return dict(metadata)


class TodoRepository:
    """Repository for Todo database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, user_id: str, todo_id: str):
        return self.db.query(TodoDB).filter(
            TodoDB.id == todo_id,
            TodoDB.user_id == user_id,
        )

    def _get_db(self, user_id: str, todo_id: str) -> TodoDB:
        todo_db = self._owned(user_id, todo_id).first()
        if not todo_db:
            raise NotFoundError("Todo not found", code="TODO_NOT_FOUND")
        return todo_db

    def create(self, user_id: str, payload: CreateTodoPayload) -> Todo:
        """Insert a todo; id and timestamps are assigned here and nowhere else."""
        now = datetime.utcnow()
        todo_db = TodoDB(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=payload.title,
            description=payload.description,
            priority=enum_to_value(payload.priority or TodoPriority.MEDIUM),
            status=enum_to_value(payload.status or TodoStatus.ACTIVE),
            due_date=payload.due_date,
            parent_todo_id=payload.parent_todo_id,
            category_id=payload.category_id,
            todo_metadata=_metadata_value(payload.metadata),
            sort_order=payload.sort_order or 0,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(todo_db)
            self.db.commit()
            self.db.refresh(todo_db)
            logger.debug(f"Created todo {todo_db.id}: {todo_db.title[:50]}")
            return todo_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create todo for user {user_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Todo") from e

    def get(self, user_id: str, todo_id: str) -> Todo:
        """Get todo by ID for a specific user (NotFoundError if missing or not owned)."""
        return self._get_db(user_id, todo_id).to_pydantic()

    def get_populated(self, user_id: str, todo_id: str) -> PopulatedTodo:
        """Get a todo with its category, children, comments and attachments in one query."""
        todo_db = (
            self._owned(user_id, todo_id)
            .options(
                joinedload(TodoDB.category),
                joinedload(TodoDB.children),
                joinedload(TodoDB.comments),
                joinedload(TodoDB.attachments),
            )
            .first()
        )
        if not todo_db:
            raise NotFoundError("Todo not found", code="TODO_NOT_FOUND")
        return todo_db.to_populated()

    def has_children(self, user_id: str, todo_id: str) -> bool:
        row = self.db.query(TodoDB.id).filter(
            TodoDB.user_id == user_id,
            TodoDB.parent_todo_id == todo_id,
        ).first()
        return row is not None

    def list(self, user_id: str, query: TodoListQuery, now: Optional[datetime] = None) -> Page[Todo]:
        """List todos for a user with filters, ordering and pagination."""
        now = now or datetime.utcnow()
        q = self.db.query(TodoDB).filter(TodoDB.user_id == user_id)

        if query.status:
            q = q.filter(TodoDB.status == enum_to_value(query.status))
        if query.priority:
            q = q.filter(TodoDB.priority == enum_to_value(query.priority))
        if query.category_id:
            q = q.filter(TodoDB.category_id == query.category_id)
        if query.parent_todo_id:
            q = q.filter(TodoDB.parent_todo_id == query.parent_todo_id)
        if query.search:
            pattern = f"%{_escape_like(query.search)}%"
            q = q.filter(or_(
                TodoDB.title.ilike(pattern, escape="\\"),
                TodoDB.description.ilike(pattern, escape="\\"),
            ))
        if query.due_from:
            q = q.filter(TodoDB.due_date >= query.due_from)
        if query.due_to:
            q = q.filter(TodoDB.due_date <= query.due_to)
        if query.overdue is True:
            q = q.filter(_overdue_clause(now))
        elif query.overdue is False:
            q = q.filter(~_overdue_clause(now))

        total = q.count()

        column = _SORT_COLUMNS[enum_to_value(query.sort)]
        ordering = column.asc() if enum_to_value(query.order) == SortOrder.ASC.value else column.desc()
        if enum_to_value(query.sort) == TodoSortField.DUE_DATE.value:
            ordering = ordering.nulls_last()

        rows = (
            q.order_by(ordering, TodoDB.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
            .all()
        )
        return Page[Todo](
            data=[row.to_pydantic() for row in rows],
            page=query.page,
            limit=query.limit,
            total=total,
            total_pages=math.ceil(total / query.limit) if total else 0,
        )

    def stats(self, user_id: str, now: Optional[datetime] = None) -> TodoStats:
        """Aggregate todo counts for a user in a single query."""
        now = now or datetime.utcnow()

        def count_where(condition):
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        row = self.db.query(
            func.count(TodoDB.id),
            count_where(TodoDB.status == TodoStatus.DRAFT.value),
            count_where(TodoDB.status == TodoStatus.ACTIVE.value),
            count_where(TodoDB.status == TodoStatus.COMPLETED.value),
            count_where(TodoDB.status == TodoStatus.ARCHIVED.value),
            count_where(_overdue_clause(now)),
        ).filter(TodoDB.user_id == user_id).one()

        total, draft, active, completed, archived, overdue = (int(v or 0) for v in row)
        return TodoStats(
            total=total,
            draft=draft,
            active=active,
            completed=completed,
            archived=archived,
            overdue=overdue,
        )

    def update(self, user_id: str, todo_id: str, changes: Dict[str, Any]) -> Todo:
        """Apply field changes to an owned todo.

        `updated_at` always moves strictly forward, even for identical payloads.
        """
        todo_db = self._get_db(user_id, todo_id)

        for field, value in changes.items():
            if field == "metadata":
                todo_db.todo_metadata = _metadata_value(value)
            elif field in ("priority", "status"):
                setattr(todo_db, field, enum_to_value(value))
            else:
                setattr(todo_db, field, value)

        now = datetime.utcnow()
        if todo_db.updated_at and now <= todo_db.updated_at:
            now = todo_db.updated_at + timedelta(microseconds=1)
        todo_db.updated_at = now

        try:
            self.db.commit()
            self.db.refresh(todo_db)
            logger.debug(f"Updated todo {todo_id}: {todo_db.title[:50]}")
            return todo_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update todo {todo_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Todo") from e

    def delete_cascade(self, user_id: str, todo_id: str) -> List[Attachment]:
        """Delete a todo with its subtasks, comments and attachments in one transaction.

        Returns:
            The attachment rows that were removed, so the caller can clean up the object store.
        """
        self._get_db(user_id, todo_id)

        child_ids = [
            row[0]
            for row in self.db.query(TodoDB.id).filter(
                TodoDB.user_id == user_id,
                TodoDB.parent_todo_id == todo_id,
            ).all()
        ]
        todo_ids = [todo_id] + child_ids

        attachments = [
            a.to_pydantic()
            for a in self.db.query(AttachmentDB).filter(AttachmentDB.todo_id.in_(todo_ids)).all()
        ]

        try:
            self.db.query(AttachmentDB).filter(
                AttachmentDB.todo_id.in_(todo_ids)
            ).delete(synchronize_session=False)
            self.db.query(CommentDB).filter(
                CommentDB.todo_id.in_(todo_ids)
            ).delete(synchronize_session=False)
            if child_ids:
                self.db.query(TodoDB).filter(
                    TodoDB.id.in_(child_ids)
                ).delete(synchronize_session=False)
            self.db.query(TodoDB).filter(
                TodoDB.id == todo_id,
                TodoDB.user_id == user_id,
            ).delete(synchronize_session=False)
            self.db.commit()
            logger.debug(f"Deleted todo {todo_id} with {len(child_ids)} subtasks and {len(attachments)} attachments")
            return attachments
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete todo {todo_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Todo") from e

    def list_due_between(self, start: datetime, end: datetime, limit: int) -> List[Todo]:
        """Open todos (any user) due in [start, end), soonest first, at most `limit`."""
        rows = self.db.query(TodoDB).filter(
            TodoDB.due_date.isnot(None),
            TodoDB.due_date >= start,
            TodoDB.due_date < end,
            TodoDB.status.notin_(CLOSED_STATUSES),
        ).order_by(TodoDB.due_date, TodoDB.id).limit(limit).all()
        return [row.to_pydantic() for row in rows]

    def list_overdue(self, now: datetime, limit: int) -> List[Todo]:
        """Open todos (any user) whose due date has passed, oldest first, at most `limit`."""
        rows = self.db.query(TodoDB).filter(
            _overdue_clause(now),
        ).order_by(TodoDB.due_date, TodoDB.id).limit(limit).all()
        return [row.to_pydantic() for row in rows]

    def list_recently_active_user_ids(self, since: datetime, limit: int) -> List[str]:
        """Distinct owners with a todo modified at or after `since`."""
        rows = self.db.query(TodoDB.user_id).filter(
            TodoDB.updated_at >= since,
        ).distinct().order_by(TodoDB.user_id).limit(limit).all()
        return [row[0] for row in rows]
