"""Enumerations shared by ExecuTask models."""

from enum import Enum


class TodoStatus(str, Enum):
    """Todo lifecycle status."""
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class TodoPriority(str, Enum):
    """Todo priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TodoSortField(str, Enum):
    """Columns a todo list can be ordered by."""
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"
    SORT_ORDER = "sort_order"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
