"""
Post service

Maps API requests onto store operations: validates input, builds queries and
raises ``ApiError`` for every anticipated failure. Holds no state besides the
request-scoped session.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from apps.blog.models import Post, as_utc, is_valid_post_id, utcnow
from apps.blog.schemas import POST_FIELDS, PostCreate, PostUpdate
from apps.shared.errors import ApiError, ErrorKind

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
# Keeps (page - 1) * limit inside a signed 64-bit OFFSET
MAX_QUERY_INT = 2**31 - 1


def parse_positive_int(value: Optional[str], default: int, maximum: int = MAX_QUERY_INT) -> int:
    """
    Parse a query value, falling back to ``default`` for anything unusable.
    Values above ``maximum`` are clamped to it.
    """
    if value is None:
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    if parsed < 1:
        return default
    return min(parsed, maximum)


def contains_pattern(value: str) -> str:
    """LIKE pattern matching ``value`` literally anywhere in a column."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass
class PostPage:
    posts: list[Post] = field(default_factory=list)
    total: int = 0
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict:
        return {
            "count": len(self.posts),
            "total": self.total,
            "page": self.page,
            "pages": self.pages,
            "data": [post.to_dict() for post in self.posts],
        }


class PostService:
    """CRUD operations on blog posts."""

    def __init__(self, db: Session):
        self.db = db

    def _store_error(self, exc: SQLAlchemyError, action: str) -> ApiError:
        self.db.rollback()
        logger.error(f"Store error while {action}: {exc}", exc_info=True)
        return ApiError(ErrorKind.STORE, f"Server error while {action}", detail=str(exc))

    @staticmethod
    def _check_id(post_id: str) -> str:
        if not is_valid_post_id(post_id):
            raise ApiError(ErrorKind.INVALID_ID, "Invalid post ID format")
        return post_id.lower()

    @staticmethod
    def _not_found() -> ApiError:
        return ApiError(ErrorKind.NOT_FOUND, "Post not found")

    def create(self, payload: dict[str, Any]) -> Post:
        """Create a post. All of title, content and author are required."""
        if any(not payload.get(name) for name in POST_FIELDS):
            raise ApiError(
                ErrorKind.MISSING_FIELD,
                "Please provide all required fields: title, content, and author",
            )

        data = PostCreate.from_payload(payload)
        now = utcnow()
        post = Post(**data.model_dump(), created_at=now, updated_at=now)

        try:
            self.db.add(post)
            self.db.commit()
            self.db.refresh(post)
        except SQLAlchemyError as exc:
            raise self._store_error(exc, "creating post") from exc

        logger.info(f"Created post {post.id}")
        return post

    def list(
        self,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        author: Optional[str] = None,
        search: Optional[str] = None,
    ) -> PostPage:
        """
        List posts, newest first.

        ``author`` matches part of the author name; ``search`` matches part of
        the title or the content. Both are case-insensitive and combined with AND.
        """
        page_number = parse_positive_int(page, DEFAULT_PAGE)
        page_size = parse_positive_int(limit, DEFAULT_LIMIT)

        query = self.db.query(Post)
        if author:
            query = query.filter(Post.author.ilike(contains_pattern(author), escape="\\"))
        if search:
            pattern = contains_pattern(search)
            query = query.filter(
                or_(
                    Post.title.ilike(pattern, escape="\\"),
                    Post.content.ilike(pattern, escape="\\"),
                )
            )

        try:
            posts = (
                query.order_by(Post.created_at.desc())
                .offset((page_number - 1) * page_size)
                .limit(page_size)
                .all()
            )
            total = query.count()
        except SQLAlchemyError as exc:
            raise self._store_error(exc, "fetching posts") from exc

        return PostPage(posts=posts, total=total, page=page_number, limit=page_size)

    def get(self, post_id: str) -> Post:
        post_id = self._check_id(post_id)

        try:
            post = self.db.query(Post).filter(Post.id == post_id).first()
        except SQLAlchemyError as exc:
            raise self._store_error(exc, "fetching post") from exc

        if not post:
            raise self._not_found()
        return post

    def update(self, post_id: str, payload: dict[str, Any]) -> Post:
        """
        Update the fields present in ``payload``.

        Checks run in order: id syntax, at least one known field, field
        validation, existence.
        """
        post_id = self._check_id(post_id)

        if not any(name in payload for name in POST_FIELDS):
            raise ApiError(ErrorKind.NO_UPDATE_FIELDS, "No fields provided for update")

        update_data = PostUpdate.from_payload(payload).model_dump(exclude_unset=True)

        try:
            post = self.db.query(Post).filter(Post.id == post_id).first()
            if not post:
                raise self._not_found()

            for key, value in update_data.items():
                setattr(post, key, value)
            # updated_at must move forward even when the clock does not
            post.updated_at = max(utcnow(), as_utc(post.updated_at) + timedelta(microseconds=1))

            self.db.commit()
            self.db.refresh(post)
        except SQLAlchemyError as exc:
            raise self._store_error(exc, "updating post") from exc

        logger.info(f"Updated post {post.id}: {', '.join(sorted(update_data))}")
        return post

    def delete(self, post_id: str) -> None:
        post_id = self._check_id(post_id)

        try:
            post = self.db.query(Post).filter(Post.id == post_id).first()
            if not post:
                raise self._not_found()

            self.db.delete(post)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._store_error(exc, "deleting post") from exc

        logger.info(f"Deleted post {post_id}")
