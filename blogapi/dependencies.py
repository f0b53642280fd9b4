# blogapi/dependencies.py
from fastapi import Request

from blogapi.database import Database
from blogapi.services import ListingService, PostMutationService, CategoryService


# Services are built once in the app lifespan and kept on app.state.
def get_database(request: Request) -> Database:
    return request.app.state.database


def get_listing_service(request: Request) -> ListingService:
    return request.app.state.listing_service


def get_mutation_service(request: Request) -> PostMutationService:
    return request.app.state.mutation_service


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service
