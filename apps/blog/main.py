"""
Blog API

Public CRUD endpoints for blog posts with pagination, author filter and
full-text-ish search.
"""
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.shared.cors import setup_cors
from apps.shared.database import get_db, init_db, close_db, check_db_connection
from apps.shared.errors import setup_error_handlers
from apps.shared.request_logging import setup_request_logging
from apps.blog.models import isoformat, utcnow
from apps.blog.services import PostService

logger = logging.getLogger("blog-service")
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

API_VERSION = "1.0.0"
STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database once for the lifetime of the process."""
    try:
        init_db()
    except SQLAlchemyError as exc:
        logger.critical(f"Database connection failed: {exc}")
        raise RuntimeError("Database unavailable, refusing to start") from exc

    logger.info(f"Blog API started (environment: {os.getenv('ENVIRONMENT', 'development')})")
    yield
    close_db()


app = FastAPI(
    title="Blog API",
    version=API_VERSION,
    description="Create, list, update and delete blog posts",
    lifespan=lifespan,
)

setup_cors(app)
setup_request_logging(app)
setup_error_handlers(app)


def get_post_service(db: Session = Depends(get_db)) -> PostService:
    return PostService(db)


@app.get("/health")
def health():
    """Health check endpoint - returns service status, uptime and database connectivity"""
    db_connected = check_db_connection()
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": isoformat(utcnow()),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "database": "connected" if db_connected else "disconnected",
    }


@app.get("/api")
def api_index():
    """Static listing of the available routes."""
    return {
        "success": True,
        "message": "Welcome to the Blog API",
        "version": API_VERSION,
        "endpoints": {
            "posts": {
                "GET /api/posts": "Get all posts",
                "POST /api/posts": "Create a new post",
                "GET /api/posts/:id": "Get a single post",
                "PUT /api/posts/:id": "Update a post",
                "DELETE /api/posts/:id": "Delete a post",
            },
            "health": {
                "GET /health": "Check server health",
            },
        },
    }


FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def read_payload(request: Request) -> dict[str, Any]:
    """
    Request body as a dict.

    JSON and form-encoded bodies are accepted; an empty body is an empty dict.
    Anything else that is not a JSON object is rejected as an invalid body.
    """
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return dict(form.items())

    if not await request.body():
        return {}
    try:
        payload = await request.json()
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": f"JSON decode error: {exc}", "input": {}}]
        ) from exc
    if not isinstance(payload, dict):
        raise RequestValidationError(
            [{"type": "dict_type", "loc": ("body",), "msg": "Input should be a valid dictionary", "input": payload}]
        )
    return payload


router = APIRouter(prefix="/api/posts", tags=["posts"])


# Trailing slashes are served directly instead of redirected
@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_post(
    payload: dict[str, Any] = Depends(read_payload),
    service: PostService = Depends(get_post_service),
):
    """Create a new post from title, content and author."""
    post = service.create(payload)
    return {
        "success": True,
        "message": "Post created successfully",
        "data": post.to_dict(),
    }


@router.get("")
@router.get("/", include_in_schema=False)
def list_posts(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    author: Optional[str] = None,
    search: Optional[str] = None,
    service: PostService = Depends(get_post_service),
):
    """
    List posts, newest first.

    Query parameters:
        page: Page number (default 1)
        limit: Posts per page (default 10)
        author: Filter by part of the author name
        search: Search in title and content
    """
    result = service.list(page=page, limit=limit, author=author, search=search)
    return {"success": True, **result.to_dict()}


@router.get("/{post_id}")
@router.get("/{post_id}/", include_in_schema=False)
def get_post(post_id: str, service: PostService = Depends(get_post_service)):
    """Get a single post by id."""
    post = service.get(post_id)
    return {"success": True, "data": post.to_dict()}


@router.put("/{post_id}")
@router.put("/{post_id}/", include_in_schema=False)
def update_post(
    post_id: str,
    payload: dict[str, Any] = Depends(read_payload),
    service: PostService = Depends(get_post_service),
):
    """Update any of title, content and author."""
    post = service.update(post_id, payload)
    return {
        "success": True,
        "message": "Post updated successfully",
        "data": post.to_dict(),
    }


@router.delete("/{post_id}")
@router.delete("/{post_id}/", include_in_schema=False)
def delete_post(post_id: str, service: PostService = Depends(get_post_service)):
    """Delete a post permanently."""
    service.delete(post_id)
    return {
        "success": True,
        "message": "Post deleted successfully",
        "data": {},
    }


app.include_router(router)
