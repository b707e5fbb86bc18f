"""
Populate the database with sample blog posts.

Clears existing posts before inserting. Usage:
    python -m apps.blog.seed
"""
import logging
import sys

from apps.shared.database import SessionLocal, init_db, close_db
from apps.blog.models import Post, utcnow
from apps.blog.schemas import PostCreate

logger = logging.getLogger(__name__)

SAMPLE_POSTS = [
    {
        "title": "Getting Started with FastAPI",
        "content": (
            "FastAPI is a modern web framework for building APIs with Python based on standard "
            "type hints. In this guide we look at path operations, dependency injection, request "
            "validation with pydantic and the automatically generated OpenAPI documentation. "
            "Understanding these building blocks makes it easy to grow a small service into a "
            "well structured application."
        ),
        "author": "Sarah Johnson",
    },
    {
        "title": "Understanding RESTful API Design",
        "content": (
            "REST (Representational State Transfer) is an architectural style for designing "
            "networked applications. A well-designed RESTful API is stateless, has a uniform "
            "interface and uses standard HTTP methods appropriately. This post covers proper use "
            "of status codes, resource naming conventions, pagination strategies and error "
            "handling patterns that make APIs intuitive for their users."
        ),
        "author": "Michael Chen",
    },
    {
        "title": "PostgreSQL Best Practices",
        "content": (
            "PostgreSQL is a dependable relational database for modern applications. This article "
            "discusses schema design, indexing strategies for fast queries, when to reach for "
            "JSONB columns and how to size connection pools. We also cover transactions, "
            "isolation levels and backups for production deployments."
        ),
        "author": "Emily Davis",
    },
]


def seed_posts() -> list[Post]:
    """Delete all posts and insert the samples. Returns the created posts."""
    db = SessionLocal()

    try:
        deleted = db.query(Post).delete()
        logger.info(f"Cleared {deleted} existing posts")

        posts = []
        for sample in SAMPLE_POSTS:
            data = PostCreate.from_payload(sample)
            now = utcnow()
            post = Post(**data.model_dump(), created_at=now, updated_at=now)
            db.add(post)
            posts.append(post)

        db.commit()
        for post in posts:
            db.refresh(post)

        logger.info(f"{len(posts)} posts created")
        for index, post in enumerate(posts, start=1):
            logger.info(f"{index}. {post.title} by {post.author} (id: {post.id})")
            logger.info(f"   {post.content[:80]}...")
        return posts

    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main() -> int:
    logging.basicConfig(level=logging.INFO)
    try:
        init_db()
        seed_posts()
    except Exception as e:
        logger.error(f"Error seeding database: {e}", exc_info=True)
        return 1
    finally:
        close_db()

    logger.info("Database seeding completed")
    return 0


if __name__ == "__main__":
    sys.exit(main())
