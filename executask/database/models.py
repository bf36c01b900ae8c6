"""SQLAlchemy database models for ExecuTask."""

from datetime import datetime
from typing import Type, TypeVar, Union
import uuid
from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from executask.database.database import Base
from executask.models.enums import TodoPriority, TodoStatus

T = TypeVar('T')


def _new_id() -> str:
    return str(uuid.uuid4())


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class UserDB(Base):
    """Database model for User (principal seen through the identity provider)."""

    __tablename__ = "users"

    # Primary key (identity-provider subject)
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=True, index=True)
    name = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from executask.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class CategoryDB(Base):
    """Database model for Category."""

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_category_user_name"),
    )

    id = Column(String, primary_key=True, default=_new_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    color = Column(String(7), nullable=False, default="#6366f1")
    description = Column(String(500), nullable=True)
    icon = Column(String(50), nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from executask.models.category import Category
        return Category(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            color=self.color,
            description=self.description,
            icon=self.icon,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class TodoDB(Base):
    """Database model for Todo."""

    __tablename__ = "todos"

    # Primary key
    id = Column(String, primary_key=True, default=_new_id)

    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic fields
    title = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    priority = Column(String, nullable=False, default=TodoPriority.MEDIUM.value, index=True)
    status = Column(String, nullable=False, default=TodoStatus.ACTIVE.value, index=True)

    # Dates
    due_date = Column(DateTime, nullable=True, index=True)
    completed_at = Column(DateTime, nullable=True)

    # Relations (subtask parent and category are references, never ownership)
    parent_todo_id = Column(String, ForeignKey("todos.id", ondelete="CASCADE"), nullable=True, index=True)
    category_id = Column(String, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    # `metadata` is reserved on declarative classes, so the attribute is renamed.
    todo_metadata = Column("metadata", JSON, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    category = relationship("CategoryDB", lazy="select")
    children = relationship("TodoDB", order_by="TodoDB.sort_order", lazy="select")
    comments = relationship("CommentDB", order_by="CommentDB.created_at", lazy="select")
    attachments = relationship("AttachmentDB", order_by="AttachmentDB.created_at", lazy="select")

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from executask.models.todo import Todo, TodoMetadata

        return Todo(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            description=self.description,
            priority=value_to_enum(self.priority, TodoPriority, TodoPriority.MEDIUM),
            status=value_to_enum(self.status, TodoStatus, TodoStatus.ACTIVE),
            due_date=self.due_date,
            completed_at=self.completed_at,
            parent_todo_id=self.parent_todo_id,
            category_id=self.category_id,
            metadata=TodoMetadata(**self.todo_metadata) if self.todo_metadata else None,
            sort_order=self.sort_order,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_populated(self):
        """Convert to a PopulatedTodo using the already-loaded relationships."""
        from executask.models.todo import PopulatedTodo

        return PopulatedTodo(
            **self.to_pydantic().model_dump(),
            category=self.category.to_pydantic() if self.category else None,
            children=[child.to_pydantic() for child in self.children],
            comments=[comment.to_pydantic() for comment in self.comments],
            attachments=[attachment.to_pydantic() for attachment in self.attachments],
        )


class CommentDB(Base):
    """Database model for Comment."""

    __tablename__ = "todo_comments"

    id = Column(String, primary_key=True, default=_new_id)
    todo_id = Column(String, ForeignKey("todos.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(String(1000), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from executask.models.comment import Comment
        return Comment(
            id=self.id,
            todo_id=self.todo_id,
            user_id=self.user_id,
            content=self.content,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class AttachmentDB(Base):
    """Database model for Attachment (file bytes live in the object store)."""

    __tablename__ = "todo_attachments"

    id = Column(String, primary_key=True, default=_new_id)
    todo_id = Column(String, ForeignKey("todos.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    object_key = Column(String, nullable=False, unique=True)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from executask.models.attachment import Attachment
        return Attachment(
            id=self.id,
            todo_id=self.todo_id,
            user_id=self.user_id,
            name=self.name,
            object_key=self.object_key,
            file_size=self.file_size,
            mime_type=self.mime_type,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
