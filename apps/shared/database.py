"""
Database configuration and session management

This module provides the SQLAlchemy setup shared by the services: one engine
per process, a session factory, the declarative base and the FastAPI session
dependency. The engine is verified on application startup (``init_db``) and
released on shutdown (``close_db``).
"""

import logging
import os
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool, StaticPool

logger = logging.getLogger(__name__)

# Get database URL from environment variable
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://backend_user:changeme@db:5432/backend_db")


def build_engine(database_url: str):
    """
    Create an engine for the given URL.

    PostgreSQL uses NullPool for better compatibility with containerized
    environments. SQLite connections may be shared across the request
    threadpool; an in-memory SQLite database lives on a single connection,
    otherwise every session would see an empty database.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, poolclass=NullPool, echo=False)

    connect_args = {"check_same_thread": False}
    if url.database in (None, "", ":memory:"):
        return create_engine(database_url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(database_url, connect_args=connect_args)


engine = build_engine(DATABASE_URL)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for ORM models
Base = declarative_base()


def get_db():
    """
    Dependency injection for database sessions
    Usage in FastAPI endpoints:

    @app.get("/endpoint")
    def endpoint(db: Session = Depends(get_db)):
        # use db here
        pass
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    """
    Test database connectivity
    Returns True if connection successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


def init_db() -> None:
    """
    Verify connectivity and create tables for all imported models.

    Raises the underlying SQLAlchemy error when the database is unreachable,
    so a server never starts against a missing store.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    Base.metadata.create_all(bind=engine)
    logger.info("Database connected: %s", engine.url.render_as_string(hide_password=True))


def close_db() -> None:
    """Release all pooled connections."""
    engine.dispose()
    logger.info("Database connection closed")
