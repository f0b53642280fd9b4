"""
blogapi.client.BlogApiClient 테스트 (aioresponses로 HTTP mock)
"""
import re

import aiohttp
import pytest
from aioresponses import aioresponses

from blogapi.client import BlogApiClient, BlogApiError

BASE_URL = 'http://test-blog-api:8005/api'
POSTS_URL = re.compile(r'^http://test-blog-api:8005/api/posts(\?.*)?$')

SAMPLE_POST = {
    'id': 'a' * 32,
    'title': 'Hello',
    'content': 'World',
    'excerpt': 'World',
    'author': 'Anonymous',
    'category': 'General',
    'tags': [],
    'status': 'published',
    'viewCount': 1,
    'createdAt': '2024-01-01T00:00:00.000Z',
    'updatedAt': '2024-01-01T00:00:00.000Z',
}


class TestBlogApiClient:
    """BlogApiClient 테스트"""

    def test_base_url_from_environment(self):
        """BLOG_API_URL 환경 변수 사용"""
        assert BlogApiClient().base_url == BASE_URL
        assert BlogApiClient(base_url='http://other/api/').base_url == 'http://other/api'

    @pytest.mark.asyncio
    async def test_get_posts(self):
        pagination = {'current': 2, 'pages': 3, 'total': 25, 'limit': 10}
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(POSTS_URL, payload={'success': True, 'data': [SAMPLE_POST], 'pagination': pagination})

                result = await client.get_posts(page=2, search='hello', sort_by='title')

                assert result['data'] == [SAMPLE_POST]
                assert result['pagination'] == pagination

                (method, url), _calls = next(iter(mocked.requests.items()))
                assert method == 'GET'
                assert url.query['page'] == '2'
                assert url.query['search'] == 'hello'
                assert url.query['sortBy'] == 'title'
                assert 'category' not in url.query

    @pytest.mark.asyncio
    async def test_get_post(self):
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(f"{BASE_URL}/posts/{SAMPLE_POST['id']}", payload={'success': True, 'data': SAMPLE_POST})

                post = await client.get_post(SAMPLE_POST['id'])

                assert post['title'] == 'Hello'

    @pytest.mark.asyncio
    async def test_error_envelope_raised(self):
        """실패 응답의 message를 그대로 전달"""
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(f'{BASE_URL}/posts/bad', status=400, payload={'success': False, 'message': 'Invalid post ID'})

                with pytest.raises(BlogApiError) as exc_info:
                    await client.get_post('bad')

                assert exc_info.value.status == 400
                assert exc_info.value.message == 'Invalid post ID'

    @pytest.mark.asyncio
    async def test_validation_errors_forwarded(self):
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.post(f'{BASE_URL}/posts', status=400, payload={
                    'success': False,
                    'message': 'Validation error',
                    'errors': ['Title cannot exceed 200 characters'],
                })

                with pytest.raises(BlogApiError) as exc_info:
                    await client.create_post({'title': 'T' * 201, 'content': 'x'})

                assert exc_info.value.errors == ['Title cannot exceed 200 characters']

    @pytest.mark.asyncio
    async def test_non_json_error(self):
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(f'{BASE_URL}/categories', status=502, body='Bad Gateway')

                with pytest.raises(BlogApiError) as exc_info:
                    await client.get_categories()

                assert exc_info.value.status == 502
                assert '502' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """서버 연결 실패 시 status=0"""
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(POSTS_URL, exception=aiohttp.ClientError('Connection refused'))

                with pytest.raises(BlogApiError) as exc_info:
                    await client.get_posts()

                assert exc_info.value.status == 0

    @pytest.mark.asyncio
    async def test_create_and_delete(self):
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.post(f'{BASE_URL}/posts', status=201, payload={
                    'success': True, 'message': 'Post created successfully', 'data': SAMPLE_POST,
                })
                mocked.delete(f"{BASE_URL}/posts/{SAMPLE_POST['id']}", payload={
                    'success': True, 'message': 'Post deleted successfully',
                })

                created = await client.create_post({'title': 'Hello', 'content': 'World'})
                message = await client.delete_post(created['id'])

                assert created['id'] == SAMPLE_POST['id']
                assert message == 'Post deleted successfully'

    @pytest.mark.asyncio
    async def test_category_crud(self):
        """카테고리 조회/수정/삭제 요청"""
        category = {
            'id': 'b' * 32,
            'name': 'News',
            'description': 'Weekly',
            'createdAt': '2024-01-01T00:00:00.000Z',
            'updatedAt': '2024-01-02T00:00:00.000Z',
        }
        category_url = f"{BASE_URL}/categories/{category['id']}"
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(category_url, payload={'success': True, 'data': category})
                mocked.put(category_url, payload={
                    'success': True, 'message': 'Category updated successfully', 'data': category,
                })
                mocked.delete(category_url, payload={
                    'success': True, 'message': 'Category deleted successfully',
                })

                fetched = await client.get_category(category['id'])
                updated = await client.update_category(category['id'], {'description': 'Weekly'})
                message = await client.delete_category(category['id'])

                assert fetched['name'] == 'News'
                assert updated['description'] == 'Weekly'
                assert message == 'Category deleted successfully'

    @pytest.mark.asyncio
    async def test_category_not_found(self):
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(f"{BASE_URL}/categories/{'c' * 32}", status=404, payload={
                    'success': False, 'message': 'Category not found',
                })

                with pytest.raises(BlogApiError) as exc_info:
                    await client.get_category('c' * 32)

                assert exc_info.value.status == 404
                assert exc_info.value.message == 'Category not found'

    @pytest.mark.asyncio
    async def test_post_categories(self):
        async with BlogApiClient() as client:
            with aioresponses() as mocked:
                mocked.get(f'{BASE_URL}/posts/categories/list', payload={'success': True, 'data': ['Art', 'Tech']})

                assert await client.get_post_categories() == ['Art', 'Tech']
