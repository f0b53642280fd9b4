# blogapi/services/mutation.py
import logging

from blogapi.errors import NotFoundError, ValidationError
from blogapi.models.post import (
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    DEFAULT_STATUS,
    check_post_constraints,
    clean_text,
    derive_excerpt,
    parse_tags,
)
from blogapi.models.schemas import Post, PostCreate, PostUpdate
from blogapi.repositories import PostRepository
from blogapi.repositories.base import ensure_valid_id

logger = logging.getLogger(__name__)


class PostMutationService:
    """Write side of the blog: validates and normalizes payloads before storing them."""

    def __init__(self, posts: PostRepository):
        self.posts = posts

    async def create(self, payload: PostCreate) -> Post:
        title = clean_text(payload.title)
        if title is None:
            raise ValidationError('Post title is required')

        content = clean_text(payload.content)
        if content is None:
            raise ValidationError('Post content is required')

        record = {
            "title": title,
            "content": content,
            "excerpt": clean_text(payload.excerpt) or derive_excerpt(content),
            "author": clean_text(payload.author) or DEFAULT_AUTHOR,
            "category": clean_text(payload.category) or DEFAULT_CATEGORY,
            "tags": parse_tags(payload.tags),
            "status": clean_text(payload.status) or DEFAULT_STATUS,
        }
        self._check(record)

        post = await self.posts.create(record)
        logger.info(f"Post '{post.id}' created: title='{post.title}', status={post.status}")
        return post

    async def update(self, post_id: str, payload: PostUpdate) -> Post:
        """Partial update: blank or omitted fields keep their stored value."""
        ensure_valid_id(post_id)
        existing = await self.posts.get_by_id(post_id)
        if existing is None:
            raise NotFoundError('Post not found')

        content = clean_text(payload.content) or existing.content
        excerpt = clean_text(payload.excerpt)
        if excerpt is None:
            excerpt = existing.excerpt
            # keep hand-written excerpts, re-derive generated ones
            if content != existing.content and existing.excerpt in ('', derive_excerpt(existing.content)):
                excerpt = derive_excerpt(content)

        record = {
            "title": clean_text(payload.title) or existing.title,
            "content": content,
            "excerpt": excerpt,
            "author": clean_text(payload.author) or existing.author,
            "category": clean_text(payload.category) or existing.category,
            "tags": parse_tags(payload.tags, default=existing.tags),
            "status": clean_text(payload.status) or existing.status,
        }
        self._check(record)

        post = await self.posts.update(post_id, record)
        if post is None:
            # deleted between the read and the write
            raise NotFoundError('Post not found')
        logger.info(f"Post '{post_id}' updated")
        return post

    async def delete(self, post_id: str) -> None:
        ensure_valid_id(post_id)
        deleted = await self.posts.delete(post_id)
        if not deleted:
            raise NotFoundError('Post not found')
        logger.info(f"Post '{post_id}' deleted")

    @staticmethod
    def _check(record: dict) -> None:
        errors = check_post_constraints(record["title"], record["excerpt"], record["status"])
        if errors:
            raise ValidationError('Validation error', errors)
