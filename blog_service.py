import logging
from datetime import datetime, timezone
from typing import Optional
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Depends, Query
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from prometheus_fastapi_instrumentator import Instrumentator, metrics
from prometheus_fastapi_instrumentator.metrics import Info
from prometheus_client import Counter

from blogapi import __version__, views
from blogapi.config import load_config, REQUEST_LATENCY_BUCKETS, DEFAULT_PAGE, DEFAULT_LIMIT, MAX_LIMIT, MAX_PAGE
from blogapi.database import Database
from blogapi.dependencies import (
    get_database,
    get_listing_service,
    get_mutation_service,
    get_category_service,
)
from blogapi.errors import BlogError
from blogapi.models.schemas import PostCreate, PostUpdate, CategoryCreate, CategoryUpdate
from blogapi.query_builder import ListFilter, DEFAULT_SORT_BY, DEFAULT_SORT_ORDER
from blogapi.repositories import PostRepository, CategoryRepository
from blogapi.services import ListingService, PostMutationService, CategoryService

config = load_config()

# --- 기본 로깅 ---
logging.basicConfig(level=config.server.log_level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger('BlogServiceApp')


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    # Startup
    settings = load_config()
    db = Database(settings.database)
    await db.initialize()

    posts = PostRepository(db)
    app.state.database = db
    app.state.listing_service = ListingService(posts)
    app.state.mutation_service = PostMutationService(posts)
    app.state.category_service = CategoryService(CategoryRepository(db))
    logger.info("Blog service initialized: database ready")
    yield
    # Shutdown
    await db.close()
    logger.info("Blog service shutdown: database closed")

app = FastAPI(title="Blog API", version=__version__, lifespan=lifespan)

# CORS 설정
# Environment-based CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

# Prometheus 메트릭 설정
# 커스텀 메트릭: http_requests_total (status 레이블은 2xx, 4xx, 5xx 형식)
http_requests_total_custom = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ("method", "status"),
)

def http_requests_total_custom_metric(info: Info) -> None:
    status_code = info.response.status_code if info.response else 500
    status_group = "unknown"
    if 200 <= status_code < 300:
        status_group = "2xx"
    elif 300 <= status_code < 400:
        status_group = "3xx"
    elif 400 <= status_code < 500:
        status_group = "4xx"
    elif 500 <= status_code < 600:
        status_group = "5xx"

    http_requests_total_custom.labels(info.method, status_group).inc()

def configure_metrics(application: FastAPI) -> None:
    """Configure Prometheus request latency metrics with fine-grained buckets."""
    instrumentator = Instrumentator()
    instrumentator.add(metrics.latency(buckets=REQUEST_LATENCY_BUCKETS))

    # 커스텀 메트릭 추가
    instrumentator.add(http_requests_total_custom_metric)
    instrumentator.instrument(application).expose(application, include_in_schema=False)


configure_metrics(app)

# --- 정적 파일 및 페이지 ---
app.mount("/static", StaticFiles(directory=views.STATIC_DIR), name="static")
app.include_router(views.router)


# --- 에러 핸들러: 모든 응답은 {success, message, errors?} 형식 ---
@app.exception_handler(BlogError)
async def handle_blog_error(request: Request, exc: BlogError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    content = {"success": False, "message": exc.message}
    if exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        errors.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation error", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "error": str(exc)},
    )


# --- Post API ---
@app.get("/api/posts")
async def handle_get_posts(
    page: int = Query(DEFAULT_PAGE, ge=1, le=MAX_PAGE),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query("published"),
    sort_by: str = Query(DEFAULT_SORT_BY, alias="sortBy"),
    sort_order: str = Query(DEFAULT_SORT_ORDER, alias="sortOrder"),
    listing: ListingService = Depends(get_listing_service),
):
    """게시물 목록을 반환합니다 (필터, 검색, 정렬, 페이지네이션)."""
    list_filter = ListFilter(
        page=page,
        limit=limit,
        category=category,
        search=search,
        # status= (empty) matches any status
        status=status or None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    result = await listing.list_posts(list_filter)
    return JSONResponse(content={"success": True, **result.to_dict()})


@app.get("/api/posts/categories/list")
async def handle_get_post_categories(listing: ListingService = Depends(get_listing_service)):
    """공개(published) 게시물의 카테고리 목록을 반환합니다."""
    categories = await listing.list_categories()
    return JSONResponse(content={"success": True, "data": categories})


@app.get("/api/posts/{post_id}")
async def handle_get_post_by_id(post_id: str, listing: ListingService = Depends(get_listing_service)):
    """ID로 특정 게시물을 찾아 반환합니다 (조회수 1 증가)."""
    post = await listing.get_post(post_id)
    return JSONResponse(content={"success": True, "data": post.model_dump(by_alias=True)})


@app.post("/api/posts", status_code=201)
async def create_post(payload: PostCreate, mutations: PostMutationService = Depends(get_mutation_service)):
    post = await mutations.create(payload)
    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "Post created successfully",
            "data": post.model_dump(by_alias=True),
        },
    )


@app.put("/api/posts/{post_id}")
async def update_post(
    post_id: str,
    payload: PostUpdate,
    mutations: PostMutationService = Depends(get_mutation_service),
):
    post = await mutations.update(post_id, payload)
    return JSONResponse(content={
        "success": True,
        "message": "Post updated successfully",
        "data": post.model_dump(by_alias=True),
    })


@app.delete("/api/posts/{post_id}")
async def delete_post(post_id: str, mutations: PostMutationService = Depends(get_mutation_service)):
    await mutations.delete(post_id)
    return JSONResponse(content={"success": True, "message": "Post deleted successfully"})


# --- Category API ---
@app.get("/api/categories")
async def handle_get_categories(categories: CategoryService = Depends(get_category_service)):
    """모든 카테고리 목록을 이름순으로 반환합니다."""
    items = await categories.list()
    return JSONResponse(content={
        "success": True,
        "data": [c.model_dump(by_alias=True) for c in items],
    })


@app.get("/api/categories/{category_id}")
async def handle_get_category(category_id: str, categories: CategoryService = Depends(get_category_service)):
    category = await categories.get(category_id)
    return JSONResponse(content={"success": True, "data": category.model_dump(by_alias=True)})


@app.post("/api/categories", status_code=201)
async def create_category(payload: CategoryCreate, categories: CategoryService = Depends(get_category_service)):
    category = await categories.create(payload)
    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "Category created successfully",
            "data": category.model_dump(by_alias=True),
        },
    )


@app.put("/api/categories/{category_id}")
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    categories: CategoryService = Depends(get_category_service),
):
    category = await categories.update(category_id, payload)
    return JSONResponse(content={
        "success": True,
        "message": "Category updated successfully",
        "data": category.model_dump(by_alias=True),
    })


@app.delete("/api/categories/{category_id}")
async def delete_category(category_id: str, categories: CategoryService = Depends(get_category_service)):
    await categories.delete(category_id)
    return JSONResponse(content={"success": True, "message": "Category deleted successfully"})


# --- 상태 확인 ---
@app.get("/api/health")
async def handle_api_health():
    return {
        "success": True,
        "message": "Server is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api")
async def handle_api_info():
    return {
        "success": True,
        "message": "Blog API",
        "version": __version__,
        "endpoints": {
            "posts": {
                "GET /api/posts": "Get all posts",
                "GET /api/posts/categories/list": "Get categories of published posts",
                "GET /api/posts/:id": "Get single post",
                "POST /api/posts": "Create new post",
                "PUT /api/posts/:id": "Update post",
                "DELETE /api/posts/:id": "Delete post",
            },
            "categories": {
                "GET /api/categories": "Get all categories",
                "GET /api/categories/:id": "Get single category",
                "POST /api/categories": "Create new category",
                "PUT /api/categories/:id": "Update category",
                "DELETE /api/categories/:id": "Delete category",
            },
        },
    }


@app.get("/health")
async def handle_health():
    """Kubernetes를 위한 헬스 체크 엔드포인트"""
    return {"status": "ok", "service": "blog-service"}


@app.get("/stats")
async def handle_stats(
    db: Database = Depends(get_database),
    listing: ListingService = Depends(get_listing_service),
):
    """대시보드를 위한 통계 엔드포인트"""
    is_db_healthy = await db.health_check()
    post_count = 0
    if is_db_healthy:
        try:
            post_count = await listing.count_posts()
        except BlogError as e:
            logger.error(f"Failed to get post count: {e.message}")

    return {
        "blog_service": {
            "service_status": "online" if is_db_healthy else "degraded",
            "post_count": post_count,
            "database": {"status": "healthy" if is_db_healthy else "unhealthy"},
        }
    }


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Blog Service starting on http://{config.server.host}:{config.server.port}")
    uvicorn.run(app, host=config.server.host, port=config.server.port)
