"""Category operations."""

import logging

from sqlalchemy.orm import Session

from executask.database.category_repository import CategoryRepository
from executask.models.base import Page
from executask.models.category import Category, CreateCategoryPayload, UpdateCategoryPayload

logger = logging.getLogger(__name__)


class CategoryService:

    def __init__(self, db: Session):
        self.categories = CategoryRepository(db)

    def create_category(self, user_id: str, payload: CreateCategoryPayload) -> Category:
        """Create a category. A duplicate name for the same user is rejected as ALREADY_EXISTS."""
        category = self.categories.create(user_id, payload)
        logger.info(
            f"Category created: {category.id}",
            extra={"event": "category_created", "category_id": category.id},
        )
        return category

    def list_categories(self, user_id: str, page: int, limit: int) -> Page[Category]:
        return self.categories.list(user_id, page, limit)

    def get_category(self, user_id: str, category_id: str) -> Category:
        return self.categories.get(user_id, category_id)

    def update_category(self, user_id: str, category_id: str, payload: UpdateCategoryPayload) -> Category:
        return self.categories.update(user_id, category_id, payload.model_dump(exclude_unset=True))

    def delete_category(self, user_id: str, category_id: str) -> None:
        self.categories.delete(user_id, category_id)
        logger.info(
            f"Category deleted: {category_id}",
            extra={"event": "category_deleted", "category_id": category_id},
        )
