# blogapi/repositories/category_repository.py
import logging
from typing import Optional, List, Dict, Any

from blogapi.database import Database
from blogapi.models.schemas import Category
from blogapi.repositories.base import BaseRepository, generate_id, format_timestamp

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = "id, name, description, created_at, updated_at"


def row_to_category(row: Dict[str, Any]) -> Category:
    data = dict(row)
    data['created_at'] = format_timestamp(data.get('created_at'))
    data['updated_at'] = format_timestamp(data.get('updated_at'))
    return Category.model_validate(data)


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category entity operations."""

    def __init__(self, db: Database):
        self.db = db

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        """Fetch single category by ID."""
        row = await self.db.fetchrow(
            f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE id = ?",
            category_id
        )
        return row_to_category(row) if row else None

    async def get_by_name(self, name: str) -> Optional[Category]:
        """Fetch single category by name."""
        row = await self.db.fetchrow(
            f"SELECT {CATEGORY_COLUMNS} FROM categories WHERE name = ?",
            name
        )
        return row_to_category(row) if row else None

    async def get_all(
        self, offset: int = 0, limit: Optional[int] = None, **filters: Any
    ) -> List[Category]:
        """Fetch categories ordered by name."""
        query = f"SELECT {CATEGORY_COLUMNS} FROM categories ORDER BY name ASC"
        params: List[Any] = []
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        rows = await self.db.fetch(query, *params)
        return [row_to_category(row) for row in rows]

    async def create(self, data: Dict[str, Any]) -> Category:
        """Create a new category. Raises DuplicateKeyError on a name collision."""
        category_id = generate_id()
        await self.db.execute(
            "INSERT INTO categories (id, name, description) VALUES (?, ?, ?)",
            category_id, data["name"], data.get("description") or ''
        )
        logger.info(f"Category '{data['name']}' created with ID {category_id}")
        return await self.get_by_id(category_id)

    async def update(
        self, category_id: str, data: Dict[str, Any]
    ) -> Optional[Category]:
        """Update a category; returns None when it does not exist."""
        fields = []
        params = []
        for column in ('name', 'description'):
            if data.get(column) is not None:
                fields.append(f"{column} = ?")
                params.append(data[column])

        if not fields:
            return await self.get_by_id(category_id)

        fields.append(f"updated_at = {self.db.now_sql}")
        params.append(category_id)

        updated = await self.db.execute(
            f"UPDATE categories SET {', '.join(fields)} WHERE id = ?",
            *params
        )
        if updated == 0:
            return None
        return await self.get_by_id(category_id)

    async def delete(self, category_id: str) -> bool:
        """Delete a category."""
        deleted = await self.db.execute("DELETE FROM categories WHERE id = ?", category_id)
        return deleted > 0

    async def count(self, **filters: Any) -> int:
        """Get total number of categories."""
        count = await self.db.fetchval("SELECT COUNT(*) FROM categories")
        return count or 0
