# blogapi/repositories/post_repository.py
import json
import logging
from typing import Optional, List, Dict, Any

from blogapi.database import Database
from blogapi.models.post import PUBLISHED
from blogapi.models.schemas import Post
from blogapi.query_builder import PostQuery, render_where, render_order_by
from blogapi.repositories.base import BaseRepository, generate_id, format_timestamp

logger = logging.getLogger(__name__)

POST_COLUMNS = (
    "id, title, content, excerpt, author, category, tags, status, "
    "view_count, created_at, updated_at"
)

# Columns a caller may write; id, view_count and timestamps belong to the store.
WRITABLE_COLUMNS = ('title', 'content', 'excerpt', 'author', 'category', 'tags', 'status')


def row_to_post(row: Dict[str, Any]) -> Post:
    data = dict(row)
    data['tags'] = json.loads(data.get('tags') or '[]')
    data['created_at'] = format_timestamp(data.get('created_at'))
    data['updated_at'] = format_timestamp(data.get('updated_at'))
    return Post.model_validate(data)


def _encode(column: str, value: Any) -> Any:
    if column == 'tags':
        return json.dumps(list(value), ensure_ascii=False)
    return value


class PostRepository(BaseRepository[Post]):
    """Repository for Post entity operations."""

    def __init__(self, db: Database):
        self.db = db

    async def get_by_id(self, post_id: str) -> Optional[Post]:
        """Fetch single post by ID."""
        row = await self.db.fetchrow(
            f"SELECT {POST_COLUMNS} FROM posts WHERE id = ?",
            post_id
        )
        return row_to_post(row) if row else None

    async def get_all(
        self, offset: int = 0, limit: Optional[int] = None, **filters: Any
    ) -> List[Post]:
        """Fetch a page of posts matching ``query`` (a PostQuery), sorted by its sort spec."""
        query: PostQuery = filters.get("query") or PostQuery()
        where, params = render_where(query, self.db.dialect)
        sql = f"SELECT {POST_COLUMNS} FROM posts {where} {render_order_by(query.sort)}"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        rows = await self.db.fetch(sql, *params)
        return [row_to_post(row) for row in rows]

    async def count(self, **filters: Any) -> int:
        """Count posts matching ``query`` (no paging)."""
        query: PostQuery = filters.get("query") or PostQuery()
        where, params = render_where(query, self.db.dialect)
        count = await self.db.fetchval(f"SELECT COUNT(*) FROM posts {where}", *params)
        return count or 0

    async def create(self, data: Dict[str, Any]) -> Post:
        """Insert a new post and return it as stored."""
        post_id = generate_id()
        columns = [c for c in WRITABLE_COLUMNS if c in data]
        placeholders = ', '.join('?' for _ in range(len(columns) + 1))
        params = [post_id] + [_encode(c, data[c]) for c in columns]

        await self.db.execute(
            f"INSERT INTO posts (id, {', '.join(columns)}) VALUES ({placeholders})",
            *params
        )
        logger.info(f"Post '{post_id}' created")
        return await self.get_by_id(post_id)

    async def update(
        self, post_id: str, data: Dict[str, Any]
    ) -> Optional[Post]:
        """Update the given columns; returns None when the post does not exist."""
        fields = []
        params = []
        for column in WRITABLE_COLUMNS:
            if column in data:
                fields.append(f"{column} = ?")
                params.append(_encode(column, data[column]))

        if not fields:
            return await self.get_by_id(post_id)

        fields.append(f"updated_at = {self.db.now_sql}")
        params.append(post_id)

        updated = await self.db.execute(
            f"UPDATE posts SET {', '.join(fields)} WHERE id = ?",
            *params
        )
        if updated == 0:
            return None
        return await self.get_by_id(post_id)

    async def increment_view_count(self, post_id: str) -> Optional[Post]:
        """Atomically add one view; returns None when the post does not exist."""
        updated = await self.db.execute(
            "UPDATE posts SET view_count = view_count + 1 WHERE id = ?",
            post_id
        )
        if updated == 0:
            return None
        return await self.get_by_id(post_id)

    async def delete(self, post_id: str) -> bool:
        """Delete a post."""
        deleted = await self.db.execute("DELETE FROM posts WHERE id = ?", post_id)
        return deleted > 0

    async def distinct_categories(self, status: Optional[str] = PUBLISHED) -> List[str]:
        """Distinct category values, optionally restricted to one status."""
        if status:
            rows = await self.db.fetch(
                "SELECT DISTINCT category FROM posts WHERE status = ?", status
            )
        else:
            rows = await self.db.fetch("SELECT DISTINCT category FROM posts")
        return sorted(row["category"] for row in rows)
