"""Database engine and session factory.

The engine is created lazily so that the application (and its tests) can be
imported without a configured database; the first session request resolves
DATABASE_URL.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from crm.core.settings import get_database_url


def create_db_engine(url: str | None = None) -> Engine:
    return create_engine(
        url or get_database_url(),
        pool_pre_ping=True,
        future=True,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), class_=Session, autoflush=False, autocommit=False)


def SessionLocal() -> Session:
    return get_sessionmaker()()
