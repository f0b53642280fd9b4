"""
blog-service 단위 테스트를 위한 pytest fixtures
"""
import os
import sys
import tempfile

import pytest
import pytest_asyncio

# 프로젝트 루트를 path에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from blogapi.config import DatabaseConfig
from blogapi.database import Database
from blogapi.repositories import PostRepository, CategoryRepository
from blogapi.services import ListingService, PostMutationService, CategoryService


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """테스트 환경 설정 (SQLite 사용)"""
    os.environ['USE_POSTGRES'] = 'false'
    os.environ['ALLOWED_ORIGINS'] = 'http://localhost:3000'
    os.environ['BLOG_API_URL'] = 'http://test-blog-api:8005/api'
    yield


@pytest.fixture
def temp_db_path(monkeypatch):
    """테스트용 임시 SQLite 데이터베이스 경로"""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = os.path.join(tmpdir, 'test_blog.db')
        monkeypatch.setenv('DATABASE_PATH', db_path)
        yield db_path


@pytest_asyncio.fixture
async def database(temp_db_path):
    """스키마가 초기화된 테스트용 Database"""
    db = Database(DatabaseConfig(database_path=temp_db_path))
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def post_repository(database):
    return PostRepository(database)


@pytest.fixture
def listing_service(post_repository):
    return ListingService(post_repository)


@pytest.fixture
def mutation_service(post_repository):
    return PostMutationService(post_repository)


@pytest.fixture
def category_service(database):
    return CategoryService(CategoryRepository(database))


@pytest.fixture
def sample_post():
    """테스트용 게시물 데이터"""
    return {
        'title': 'Test Post Title',
        'content': 'This is the content of the test post.',
        'author': 'testuser',
        'category': 'Tech',
        'tags': 'python, fastapi',
        'status': 'published',
    }


@pytest.fixture
def sample_posts():
    """테스트용 다중 게시물 데이터"""
    return [
        {'title': 'Post 1', 'content': 'Content 1', 'category': 'Tech', 'status': 'published', 'tags': ['python']},
        {'title': 'Post 2', 'content': 'Content 2', 'category': 'Life', 'status': 'published', 'tags': ['travel']},
        {'title': 'Post 3', 'content': 'Content 3', 'category': 'Tech', 'status': 'draft', 'tags': []},
        {'title': 'Post 4', 'content': 'Content 4', 'category': 'Drafts Only', 'status': 'draft'},
    ]
