# blogapi/services/categories.py
import logging
from typing import List

from blogapi.errors import DuplicateKeyError, NotFoundError, ValidationError
from blogapi.models.post import check_category_constraints, clean_text
from blogapi.models.schemas import Category, CategoryCreate, CategoryUpdate
from blogapi.repositories import CategoryRepository
from blogapi.repositories.base import ensure_valid_id

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = 'Category name already exists'


class CategoryService:
    """Category CRUD with the same trimming/partial-update rules as posts."""

    def __init__(self, categories: CategoryRepository):
        self.categories = categories

    async def list(self) -> List[Category]:
        return await self.categories.get_all()

    async def get(self, category_id: str) -> Category:
        ensure_valid_id(category_id, 'category')
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError('Category not found')
        return category

    async def create(self, payload: CategoryCreate) -> Category:
        name = clean_text(payload.name)
        if name is None:
            raise ValidationError('Category name is required')
        description = clean_text(payload.description) or ''
        self._check(name, description)

        try:
            return await self.categories.create({"name": name, "description": description})
        except DuplicateKeyError as e:
            logger.warning(f"Category '{name}' already exists")
            raise DuplicateKeyError(DUPLICATE_NAME_MESSAGE) from e

    async def update(self, category_id: str, payload: CategoryUpdate) -> Category:
        existing = await self.get(category_id)

        name = clean_text(payload.name) or existing.name
        description = clean_text(payload.description) or existing.description
        self._check(name, description)

        try:
            category = await self.categories.update(
                category_id, {"name": name, "description": description}
            )
        except DuplicateKeyError as e:
            logger.warning(f"Category rename to '{name}' collides with an existing name")
            raise DuplicateKeyError(DUPLICATE_NAME_MESSAGE) from e

        if category is None:
            raise NotFoundError('Category not found')
        return category

    async def delete(self, category_id: str) -> None:
        ensure_valid_id(category_id, 'category')
        if not await self.categories.delete(category_id):
            raise NotFoundError('Category not found')
        logger.info(f"Category '{category_id}' deleted")

    @staticmethod
    def _check(name: str, description: str) -> None:
        errors = check_category_constraints(name, description)
        if errors:
            raise ValidationError('Validation error', errors)
