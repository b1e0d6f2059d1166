"""Database engine and session factory."""

from __future__ import annotations

import os
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./livescores.db")

Base = declarative_base()


def build_engine(url: str):
    kwargs: dict = {}
    if url.startswith("sqlite"):
        # Store calls run in worker threads via asyncio.to_thread.
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in {"sqlite://", "sqlite:///"}:
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def build_session_factory(url: str) -> sessionmaker:
    """Create an engine for *url*, make sure the tables exist, return a session factory."""
    from livescores import models  # noqa: F401  registers tables on Base

    bind = build_engine(url)
    Base.metadata.create_all(bind=bind)
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
