# blogapi/services/__init__.py
from blogapi.services.listing import ListingService, ListingPage, Pagination
from blogapi.services.mutation import PostMutationService
from blogapi.services.categories import CategoryService

__all__ = ["ListingService", "ListingPage", "Pagination", "PostMutationService", "CategoryService"]
