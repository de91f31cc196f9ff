# db.py
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

import config


def build_engine(database_url: str) -> Engine:
    """
    Create a sync engine for the given URL.

    SQLite connections are shared across the request thread pool; an
    in-memory database must also live on a single connection or every
    thread would see its own empty schema.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=False, **kwargs)

    return create_engine(database_url, echo=False, pool_pre_ping=True)


if not config.DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set in the environment (.env)")

engine = build_engine(config.DATABASE_URL)


def init_db(target: Engine = None) -> None:
    """
    Called on app startup to create tables if they don't exist.
    """
    # Import models here so SQLModel knows about them
    import models  # noqa: F401

    SQLModel.metadata.create_all(target or engine)
