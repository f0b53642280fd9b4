# blogapi/repositories/__init__.py
from blogapi.repositories.post_repository import PostRepository
from blogapi.repositories.category_repository import CategoryRepository

__all__ = ["PostRepository", "CategoryRepository"]
