"""Todo data models for ExecuTask."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from executask.models.attachment import Attachment
from executask.models.base import ApiModel, Record, to_naive_utc
from executask.models.category import Category
from executask.models.comment import Comment
from executask.models.constants import (
    DEFAULT_PAGE_SIZE,
    DESCRIPTION_MAX_LENGTH,
    MAX_PAGE_SIZE,
    TITLE_MAX_LENGTH,
)
from executask.models.enums import SortOrder, TodoPriority, TodoSortField, TodoStatus


class TodoMetadata(ApiModel):
    """Free-form presentation hints attached to a todo."""

    tags: List[str] = Field(default_factory=list)
    reminder: Optional[str] = None
    color: Optional[str] = None
    difficulty: Optional[str] = None


class Todo(Record):
    """Canonical todo (task) record."""

    user_id: str = Field(..., description="Owning principal")
    title: str
    description: Optional[str] = None
    priority: TodoPriority = TodoPriority.MEDIUM
    status: TodoStatus = TodoStatus.ACTIVE
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    parent_todo_id: Optional[str] = Field(None, description="Set for subtasks")
    category_id: Optional[str] = None
    metadata: Optional[TodoMetadata] = None
    sort_order: int = 0

    def can_have_children(self) -> bool:
        """Subtasks may not own subtasks."""
        return self.parent_todo_id is None


class PopulatedTodo(Todo):
    """A todo together with its related data, read as one snapshot."""

    category: Optional[Category] = None
    children: List[Todo] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)


def _normalize_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("title must not be blank")
    return v


class CreateTodoPayload(ApiModel):
    """Body of POST /todos."""

    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Optional[TodoPriority] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[datetime] = None
    parent_todo_id: Optional[str] = None
    category_id: Optional[str] = None
    metadata: Optional[TodoMetadata] = None
    sort_order: Optional[int] = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _normalize_title(v)

    @field_validator("status")
    @classmethod
    def _initial_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in (TodoStatus.DRAFT.value, TodoStatus.ACTIVE.value):
            raise ValueError("new todos must be draft or active")
        return v

    @field_validator("due_date")
    @classmethod
    def _due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class UpdateTodoPayload(ApiModel):
    """Body of PATCH /todos/{id}. Only fields present in the request are applied."""

    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Optional[TodoPriority] = None
    status: Optional[TodoStatus] = None
    due_date: Optional[datetime] = None
    parent_todo_id: Optional[str] = None
    category_id: Optional[str] = None
    metadata: Optional[TodoMetadata] = None
    sort_order: Optional[int] = None

    @field_validator("title")
    @classmethod
    def _title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("title must not be null")
        return _normalize_title(v)

    @field_validator("priority", "status", "sort_order")
    @classmethod
    def _not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v

    @field_validator("due_date")
    @classmethod
    def _due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    def changes(self) -> dict:
        """Fields explicitly sent by the client, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class TodoListQuery(ApiModel):
    """Filters, pagination and ordering for GET /todos."""

    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    status: Optional[TodoStatus] = None
    priority: Optional[TodoPriority] = None
    category_id: Optional[str] = None
    parent_todo_id: Optional[str] = None
    search: Optional[str] = None
    due_from: Optional[datetime] = None
    due_to: Optional[datetime] = None
    overdue: Optional[bool] = None
    sort: TodoSortField = TodoSortField.UPDATED_AT
    order: SortOrder = SortOrder.DESC

    @field_validator("due_from", "due_to")
    @classmethod
    def _window(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @field_validator("search")
    @classmethod
    def _search(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None

    @model_validator(mode="after")
    def _ordered_window(self):
        if self.due_from and self.due_to and self.due_from > self.due_to:
            raise ValueError("dueFrom must not be after dueTo")
        return self


class TodoStats(ApiModel):
    """Per-principal todo counts."""

    total: int = 0
    draft: int = 0
    active: int = 0
    completed: int = 0
    archived: int = 0
    overdue: int = 0
