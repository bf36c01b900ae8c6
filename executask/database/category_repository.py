"""Repository for Category database operations."""

import logging
import math
import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy.orm import Session

from executask.database.errors import translate_db_error
from executask.database.models import CategoryDB, TodoDB
from executask.errors import NotFoundError
from executask.models.base import Page
from executask.models.category import Category, CreateCategoryPayload

logger = logging.getLogger(__name__)


class CategoryRepository:
    """Repository for Category database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, user_id: str, category_id: str) -> CategoryDB:
        category_db = self.db.query(CategoryDB).filter(
            CategoryDB.id == category_id,
            CategoryDB.user_id == user_id,
        ).first()
        if not category_db:
            raise NotFoundError("Category not found", code="CATEGORY_NOT_FOUND")
        return category_db

    def create(self, user_id: str, payload: CreateCategoryPayload) -> Category:
        now = datetime.utcnow()
        category_db = CategoryDB(
            id=str(uuid.uuid4()),
            user_id=user_id,
            name=payload.name,
            color=payload.color,
            description=payload.description,
            icon=payload.icon,
            created_at=now,
            updated_at=now,
        )
        try:
            self.db.add(category_db)
            self.db.commit()
            self.db.refresh(category_db)
            logger.debug(f"Created category {category_db.id}: {category_db.name}")
            return category_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create category for user {user_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Category") from e

    def get(self, user_id: str, category_id: str) -> Category:
        """Get category by ID for a specific user (NotFoundError if missing or not owned)."""
        return self._get_db(user_id, category_id).to_pydantic()

    def list(self, user_id: str, page: int, limit: int) -> Page[Category]:
        """List a user's categories ordered by name."""
        q = self.db.query(CategoryDB).filter(CategoryDB.user_id == user_id)
        total = q.count()
        rows = (
            q.order_by(CategoryDB.name, CategoryDB.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return Page[Category](
            data=[row.to_pydantic() for row in rows],
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    def update(self, user_id: str, category_id: str, changes: Dict[str, Any]) -> Category:
        category_db = self._get_db(user_id, category_id)
        for field, value in changes.items():
            setattr(category_db, field, value)
        category_db.updated_at = datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(category_db)
            return category_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update category {category_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Category") from e

    def delete(self, user_id: str, category_id: str) -> None:
        """Delete a category and clear the reference on the owner's todos."""
        category_db = self._get_db(user_id, category_id)
        try:
            self.db.query(TodoDB).filter(
                TodoDB.user_id == user_id,
                TodoDB.category_id == category_id,
            ).update({TodoDB.category_id: None}, synchronize_session=False)
            self.db.delete(category_db)
            self.db.commit()
            logger.debug(f"Deleted category {category_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete category {category_id}: {type(e).__name__}: {str(e)}")
            raise translate_db_error(e, "Category") from e
