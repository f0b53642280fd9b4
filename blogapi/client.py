# blogapi/client.py
import asyncio
import logging
from typing import Optional, Dict, Any, List

import aiohttp

from blogapi.config import load_config

logger = logging.getLogger(__name__)


class BlogApiError(Exception):
    """Failure envelope (or transport error) returned by the Blog API.

    ``status`` is the HTTP status, 0 when the server could not be reached.
    ``message`` is the server's message, meant to be shown to the user as is.
    """

    def __init__(self, status: int, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.errors = errors or []


class BlogApiClient:
    """Async client for the Blog REST API."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        settings = load_config().client
        self.base_url = (base_url or settings.base_url).rstrip('/')
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.timeout)
        self._session: Optional[aiohttp.ClientSession] = None

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the shared aiohttp ClientSession."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            logger.info(f"Created new aiohttp ClientSession for {self.base_url}")
        return self._session

    async def close(self):
        """Close the shared aiohttp ClientSession."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.info("Closed aiohttp ClientSession")

    async def __aenter__(self) -> "BlogApiClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        if params:
            params = {k: str(v) for k, v in params.items() if v is not None}
        try:
            session = await self.get_session()
            async with session.request(method, url, params=params or None, json=json) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = None
                if not isinstance(data, dict):
                    data = {}
                if resp.status >= 400 or not data.get('success', False):
                    message = data.get('message') or f"Request failed with status {resp.status}"
                    raise BlogApiError(resp.status, message, data.get('errors'))
                return data
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error connecting to blog API: {e}")
            raise BlogApiError(0, f"Blog API not reachable: {e}") from e

    # --- posts ---
    async def get_posts(
        self,
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        search: Optional[str] = None,
        status: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Returns ``{"data": [...], "pagination": {...}}``."""
        data = await self._request('GET', '/posts', params={
            'page': page,
            'limit': limit,
            'category': category,
            'search': search,
            'status': status,
            'sortBy': sort_by,
            'sortOrder': sort_order,
        })
        return {'data': data.get('data', []), 'pagination': data.get('pagination', {})}

    async def get_post(self, post_id: str) -> Dict[str, Any]:
        data = await self._request('GET', f'/posts/{post_id}')
        return data['data']

    async def create_post(self, post_data: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request('POST', '/posts', json=post_data)
        return data['data']

    async def update_post(self, post_id: str, post_data: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request('PUT', f'/posts/{post_id}', json=post_data)
        return data['data']

    async def delete_post(self, post_id: str) -> str:
        data = await self._request('DELETE', f'/posts/{post_id}')
        return data.get('message', '')

    async def get_post_categories(self) -> List[str]:
        data = await self._request('GET', '/posts/categories/list')
        return data['data']

    # --- categories ---
    async def get_categories(self) -> List[Dict[str, Any]]:
        data = await self._request('GET', '/categories')
        return data['data']

    async def get_category(self, category_id: str) -> Dict[str, Any]:
        data = await self._request('GET', f'/categories/{category_id}')
        return data['data']

    async def create_category(self, category_data: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request('POST', '/categories', json=category_data)
        return data['data']

    async def update_category(self, category_id: str, category_data: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request('PUT', f'/categories/{category_id}', json=category_data)
        return data['data']

    async def delete_category(self, category_id: str) -> str:
        data = await self._request('DELETE', f'/categories/{category_id}')
        return data.get('message', '')
