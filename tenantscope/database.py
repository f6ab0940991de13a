"""
Database Configuration and Session Management

This module handles SQLAlchemy setup with connection pooling.

NOTE: Sessions handed out here are raw. Tenant isolation is applied by
ScopedRepository (see core/repository.py), never by the session itself.
"""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import QueuePool
from typing import Iterator
from tenantscope.config import get_settings
import logging

logger = logging.getLogger(__name__)

settings = get_settings()

_connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite connections are shared between the threadpool workers FastAPI uses
    _connect_args["check_same_thread"] = False

# SQLAlchemy engine with connection pooling
engine = create_engine(
    settings.DATABASE_URL,
    poolclass=QueuePool,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
    pool_pre_ping=True,  # Verify connections before using (handles stale connections)
    echo=settings.DEBUG,  # Log SQL in debug mode
    connect_args=_connect_args,
)

# Session factory
# expire_on_commit=False so records can be serialized after the
# repository commits without another round trip.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)

# Base class for all models
Base = declarative_base()


@event.listens_for(engine, "connect")
def set_connection_timezone(dbapi_connection, connection_record):
    """Set connection-level configuration on new connections."""
    # SQLite doesn't support SET TIME ZONE, so we skip it
    if settings.DATABASE_URL.startswith("postgresql"):
        cursor = dbapi_connection.cursor()
        cursor.execute("SET TIME ZONE 'UTC'")
        cursor.close()
    logger.debug("New database connection established")


def get_db() -> Iterator[Session]:
    """
    Dependency function that provides a database session.

    The session is closed after the request completes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """
    Initialize database tables.

    Dev/testing convenience only. Use migrations in production.
    """
    # Import models so they register on Base.metadata
    import tenantscope.models  # noqa: F401

    logger.warning("init_db() called - use migrations in production!")
    Base.metadata.create_all(bind=engine)
