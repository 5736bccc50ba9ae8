"""
Local storage session management (SQLAlchemy + SQLite)
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from saldo.config import get_settings


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for local storage tables
    """
    pass


# Singleton engine and session factory
_engine = None
_SessionLocal = None


def create_storage_engine(url: str) -> Engine:
    """
    Create engine and make sure storage tables exist

    SQLite connections are shared with worker threads (asyncio.to_thread),
    so same-thread checking is disabled.
    """
    # models must be imported before create_all
    from saldo.infrastructure.storage import models  # noqa: F401

    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(url, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return engine


def get_engine() -> Engine:
    """Get or create SQLAlchemy engine (singleton)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_storage_engine(settings.STORAGE_URL)
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create session factory (singleton)"""
    global _SessionLocal
    if _SessionLocal is None:
        engine = get_engine()
        _SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    return _SessionLocal
