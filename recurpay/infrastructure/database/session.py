"""Database engine and per-request sessions"""

from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from recurpay.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite (local dev, tests) skips the server pool settings"""
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    # Pool of up to 20 connections, recycled hourly so idle ones don't go stale
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create missing tables"""
    from recurpay.infrastructure.database.models import Base

    Base.metadata.create_all(bind=bind)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a session closed after the request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
