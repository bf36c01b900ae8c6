"""Data models for ExecuTask."""

from executask.models.enums import TodoStatus, TodoPriority, TodoSortField, SortOrder
from executask.models.base import Page, Record
from executask.models.todo import (
    Todo,
    TodoMetadata,
    PopulatedTodo,
    CreateTodoPayload,
    UpdateTodoPayload,
    TodoListQuery,
    TodoStats,
)
from executask.models.category import Category, CreateCategoryPayload, UpdateCategoryPayload
from executask.models.comment import Comment, CommentPayload
from executask.models.attachment import Attachment, AttachmentDownload
from executask.models.user import User

__all__ = [
    "TodoStatus",
    "TodoPriority",
    "TodoSortField",
    "SortOrder",
    "Page",
    "Record",
    "Todo",
    "TodoMetadata",
    "PopulatedTodo",
    "CreateTodoPayload",
    "UpdateTodoPayload",
    "TodoListQuery",
    "TodoStats",
    "Category",
    "CreateCategoryPayload",
    "UpdateCategoryPayload",
    "Comment",
    "CommentPayload",
    "Attachment",
    "AttachmentDownload",
    "User",
]
