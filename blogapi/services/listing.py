# blogapi/services/listing.py
import math
import logging
from dataclasses import dataclass, asdict
from typing import List, Dict, Any

from blogapi.config import MAX_LIMIT, MAX_PAGE
from blogapi.errors import NotFoundError, ValidationError
from blogapi.models.post import PUBLISHED
from blogapi.models.schemas import Post
from blogapi.query_builder import ListFilter, build_query
from blogapi.repositories import PostRepository
from blogapi.repositories.base import ensure_valid_id

logger = logging.getLogger(__name__)


@dataclass
class Pagination:
    current: int
    pages: int
    total: int
    limit: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class ListingPage:
    items: List[Post]
    pagination: Pagination

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [post.model_dump(by_alias=True) for post in self.items],
            "pagination": self.pagination.to_dict(),
        }


class ListingService:
    """Read side of the blog: filtered pages, single posts, category list."""

    def __init__(self, posts: PostRepository):
        self.posts = posts

    async def list_posts(self, list_filter: ListFilter) -> ListingPage:
        errors = []
        if not 1 <= list_filter.page <= MAX_PAGE:
            errors.append(f'page must be between 1 and {MAX_PAGE}')
        if not 1 <= list_filter.limit <= MAX_LIMIT:
            errors.append(f'limit must be between 1 and {MAX_LIMIT}')
        if errors:
            raise ValidationError('Validation error', errors)

        query = build_query(list_filter)

        total = await self.posts.count(query=query)
        items = await self.posts.get_all(
            offset=list_filter.skip,
            limit=list_filter.limit,
            query=query,
        )

        pagination = Pagination(
            current=list_filter.page,
            pages=math.ceil(total / list_filter.limit),
            total=total,
            limit=list_filter.limit,
        )
        return ListingPage(items=items, pagination=pagination)

    async def get_post(self, post_id: str) -> Post:
        """Fetch one post and count the view (every call adds exactly one)."""
        ensure_valid_id(post_id)
        post = await self.posts.increment_view_count(post_id)
        if post is None:
            raise NotFoundError('Post not found')
        return post

    async def count_posts(self) -> int:
        """Total number of posts, any status."""
        return await self.posts.count()

    async def list_categories(self) -> List[str]:
        """Sorted distinct categories of published posts; drafts are left out."""
        return await self.posts.distinct_categories(status=PUBLISHED)
