"""Database engine, session factory and declarative base."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool
from typing import Generator
from clipdash.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # One shared connection keeps an in-memory database alive between sessions
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}

    return {
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_pre_ping": True,
    }


engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session that is closed after the request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create missing tables for every model module."""
    from clipdash.models import (  # noqa: F401
        campaign_models,
        instagram_models,
        tiktok_models,
        user,
        wallet_models,
        youtube_models,
    )

    Base.metadata.create_all(bind=engine)
