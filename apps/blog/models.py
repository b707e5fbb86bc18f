"""
Blog database models.

Stores blog posts. Timestamps are kept in UTC and always serialized with a
``Z`` suffix.
"""
import re
from datetime import datetime, timezone
from uuid import uuid4
from sqlalchemy import Column, String, Text, DateTime

from apps.shared.database import Base

POST_ID_PATTERN = re.compile(r"[0-9a-fA-F]{32}")


def new_post_id() -> str:
    return uuid4().hex


def is_valid_post_id(value: str) -> bool:
    """Check the identifier syntax without touching the database."""
    return bool(POST_ID_PATTERN.fullmatch(value or ""))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def isoformat(value: datetime) -> str:
    return as_utc(value).isoformat(timespec="microseconds").replace("+00:00", "Z")


class Post(Base):
    """
    Blog post.

    - id: random hex identifier, generated on insert, never reused
    - title, content, author: trimmed text validated by the schemas
    - created_at: set once on insert
    - updated_at: set on insert, refreshed on every update
    """
    __tablename__ = "posts"

    id = Column(String(32), primary_key=True, default=new_post_id)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        """Convert post to dictionary for API responses."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "createdAt": isoformat(self.created_at) if self.created_at else None,
            "updatedAt": isoformat(self.updated_at) if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return f"Post(id={self.id}, title={self.title!r})"
