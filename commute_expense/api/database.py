"""
Database Connection Module

Provides the SQLAlchemy engine and the repositories built on it.
"""

import os
from functools import lru_cache

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from ..expenses.repository import ProfileRepository, SubmissionRepository, create_tables

# Database URL from environment
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{os.getenv('POSTGRES_USER', 'expenses')}:"
    f"{os.getenv('POSTGRES_PASSWORD', 'password')}@"
    f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/"
    f"{os.getenv('POSTGRES_DB', 'commute_expenses')}"
)


def build_engine(url: str = DATABASE_URL) -> Engine:
    """Create an engine for the given URL.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine with pooling suited to the backend
    """
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


@lru_cache
def get_engine() -> Engine:
    """Get the process-wide engine for FastAPI dependency injection."""
    return build_engine()


def init_db(engine: Engine | None = None) -> None:
    """Create missing tables."""
    create_tables(engine or get_engine())


def get_submission_repository(engine: Engine = Depends(get_engine)) -> SubmissionRepository:
    return SubmissionRepository(engine)


def get_profile_repository(engine: Engine = Depends(get_engine)) -> ProfileRepository:
    return ProfileRepository(engine)
