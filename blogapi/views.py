# blogapi/views.py
"""Server-rendered listing and single-post pages."""
import os
import logging
from typing import Optional, Dict, Any
from urllib.parse import urlencode

from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from blogapi.config import DEFAULT_PAGE, DEFAULT_LIMIT, MAX_LIMIT, MAX_PAGE
from blogapi.dependencies import get_listing_service
from blogapi.errors import BlogError
from blogapi.query_builder import ListFilter, ALL_CATEGORIES
from blogapi.services import ListingService

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
TEMPLATES_DIR = os.path.join(BASE_DIR, 'templates')
STATIC_DIR = os.path.join(BASE_DIR, 'static')

templates = Jinja2Templates(directory=TEMPLATES_DIR)

router = APIRouter(include_in_schema=False)


def _positive_int(value: Optional[str], default: int, maximum: Optional[int] = None) -> int:
    # The page must render whatever the address bar says.
    try:
        number = int(value) if value is not None else default
    except ValueError:
        return default
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


def _page_url(filters: Dict[str, Any], page: int) -> str:
    params = {k: v for k, v in filters.items() if v}
    params['page'] = page
    return '/?' + urlencode(params)


@router.get("/", response_class=HTMLResponse)
async def render_listing(
    request: Request,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: str = '',
    category: str = '',
    listing: ListingService = Depends(get_listing_service),
):
    """블로그 게시물 목록 페이지를 렌더링합니다."""
    list_filter = ListFilter(
        page=_positive_int(page, DEFAULT_PAGE, MAX_PAGE),
        limit=_positive_int(limit, DEFAULT_LIMIT, MAX_LIMIT),
        search=search.strip() or None,
        category=category or None,
    )
    filters = {
        'search': search.strip(),
        'category': category if category != ALL_CATEGORIES else '',
        'limit': list_filter.limit if list_filter.limit != DEFAULT_LIMIT else None,
    }

    context: Dict[str, Any] = {
        'posts': [],
        'pagination': None,
        'categories': [],
        'filters': filters,
        'page_urls': {},
        'notice': None,
    }
    status_code = 200
    try:
        result = await listing.list_posts(list_filter)
        context['posts'] = result.items
        context['pagination'] = result.pagination
        context['categories'] = await listing.list_categories()
        context['page_urls'] = {
            n: _page_url(filters, n) for n in range(1, result.pagination.pages + 1)
        }
    except BlogError as e:
        logger.warning(f"Listing page failed: {e.message}")
        context['notice'] = e.message
        status_code = e.status_code

    return templates.TemplateResponse(request, "index.html", context, status_code=status_code)


@router.get("/posts/{post_id}", response_class=HTMLResponse)
async def render_post(
    request: Request,
    post_id: str,
    listing: ListingService = Depends(get_listing_service),
):
    """게시물 상세 페이지를 렌더링합니다 (조회수 증가)."""
    context: Dict[str, Any] = {'post': None, 'notice': None}
    status_code = 200
    try:
        context['post'] = await listing.get_post(post_id)
    except BlogError as e:
        context['notice'] = e.message
        status_code = e.status_code

    return templates.TemplateResponse(request, "post.html", context, status_code=status_code)
