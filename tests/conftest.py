"""Fixtures for the Blog API tests.

The service runs against an in-memory SQLite database; tables are recreated
for every test.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from apps.shared.database import Base, SessionLocal, engine  # noqa: E402
from apps.blog.main import app  # noqa: E402
from apps.blog.models import Post  # noqa: E402


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def create_post(client):
    """Create a post through the API and return its JSON representation."""

    def _create(title="A valid title", content="Some content that is long enough", author="Jane Doe"):
        response = client.post(
            "/api/posts",
            json={"title": title, "content": content, "author": author},
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create


@pytest.fixture
def insert_posts():
    """
    Insert posts directly with one minute between creation times, oldest
    first. Accepts dicts with title/content/author overrides.
    """

    def _insert(*overrides):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        db = SessionLocal()
        try:
            posts = []
            for index, fields in enumerate(overrides):
                created_at = start + timedelta(minutes=index)
                post = Post(
                    title=fields.get("title", f"Post number {index}"),
                    content=fields.get("content", "Plain content for listing tests"),
                    author=fields.get("author", "Jane Doe"),
                    created_at=created_at,
                    updated_at=created_at,
                )
                db.add(post)
                posts.append(post)
            db.commit()
            return [post.id for post in posts]
        finally:
            db.close()

    return _insert
