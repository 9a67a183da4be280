"""
Database engine and session configuration for the marketplace stores.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

_IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


class Base(DeclarativeBase):
    """Base class for all marketplace ORM models."""


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Build a SQLAlchemy engine for the given URL.

    SQLite connections are shared across threads by FastAPI's worker pool,
    and an in-memory database must keep a single connection alive or every
    session would see an empty schema.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if database_url in _IN_MEMORY_URLS:
        return create_engine(
            database_url,
            connect_args=connect_args,
            poolclass=StaticPool,
            echo=echo,
        )
    return create_engine(database_url, connect_args=connect_args, echo=echo)


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory whose sessions never auto-flush or auto-commit."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create every marketplace table that does not exist yet."""
    # Registers the mapped classes on Base.metadata.
    from nexusmarket.infrastructure.marketplace import orm_models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Marketplace schema ready on %s", engine.url.render_as_string(hide_password=True))
