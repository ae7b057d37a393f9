"""Engine and session factory for the ledger database"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from pot_ledger.config import settings


def build_engine(database_url: str) -> Engine:
    """
    Engine for the configured database.

    Every ledger request is a short read-modify-commit of one pot, so a small
    pool is enough; sizing comes from settings. SQLite (local runs and tests)
    gets its own connect args and keeps SQLAlchemy's default pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle_seconds,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """One session per request; routes commit or roll back themselves"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
