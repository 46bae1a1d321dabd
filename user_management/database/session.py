"""
Database session management for the User Management service.

This module provides centralized database session management using
SQLAlchemy 2.0+. It handles engine creation, session factory setup, and
provides a context manager for safe session usage with proper cleanup.

Usage:
    ```python
    from user_management.database.session import get_session

    with get_session() as session:
        service = UserService(session)
        service.get_user(1)

    # FastAPI dependency
    from user_management.database.session import get_db

    @router.get("/")
    def handler(session: Session = Depends(get_db)):
        ...
    ```
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from user_management.config import DatabaseConfig, settings
from user_management.database.models import Base

logger = logging.getLogger(__name__)

# Global engine instance (initialized on first use)
_engine: Engine | None = None

# Session factory (initialized after engine creation)
SessionLocal: sessionmaker[Session] | None = None


def _engine_options(db_config: DatabaseConfig) -> Dict[str, Any]:
    """
    Build create_engine keyword arguments for the configured backend.

    SQLite uses its own pool classes, which reject the queue pool sizing
    options, so those are only passed for server databases.
    """
    options: Dict[str, Any] = {"echo": db_config.echo, "pool_pre_ping": True}
    if db_config.is_sqlite:
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_recycle=db_config.pool_recycle,
            pool_timeout=db_config.pool_timeout,
        )
    return options


def init_engine(config: DatabaseConfig | None = None) -> Engine:
    """
    Initialize SQLAlchemy database engine with connection pooling.

    Args:
        config: Optional DatabaseConfig instance. If None, uses settings.database

    Returns:
        Initialized SQLAlchemy Engine instance

    Raises:
        SQLAlchemyError: If engine creation fails (e.g., invalid connection string)
        ValueError: If database URL is missing
    """
    global _engine

    if _engine is not None:
        return _engine

    db_config = config or settings.database

    if not db_config.url:
        raise ValueError("Database URL is required. Set DATABASE_URL environment variable.")

    try:
        _engine = create_engine(db_config.url, **_engine_options(db_config))
        logger.info(f"Database engine initialized successfully (sqlite={db_config.is_sqlite})")
        return _engine

    except SQLAlchemyError as e:
        logger.error(f"Failed to create database engine: {e}")
        raise
    except Exception as e:
        logger.error(f"Unexpected error creating database engine: {e}")
        raise SQLAlchemyError(f"Failed to initialize database engine: {e}") from e


def get_session_factory() -> sessionmaker[Session]:
    """
    Get or create the session factory.

    Returns:
        Session factory (sessionmaker) for creating database sessions
    """
    global SessionLocal

    if SessionLocal is not None:
        return SessionLocal

    engine = init_engine()

    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=True,
    )

    logger.debug("Session factory created")
    return SessionLocal


def create_all_tables(engine: Engine | None = None) -> None:
    """Create every table known to the models (non-destructive)."""
    engine = engine or init_engine()
    Base.metadata.create_all(engine)
    logger.info("Database tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Provides a database session that is automatically committed on success,
    rolled back on exception, and closed in all cases.

    Yields:
        SQLAlchemy Session instance
    """
    session_factory = get_session_factory()
    session: Session = session_factory()

    try:
        yield session
        session.commit()
        logger.debug("Session committed successfully")
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Database error occurred, rolling back transaction: {e}")
        raise
    except Exception:
        session.rollback()
        logger.debug("Error in session, transaction rolled back")
        raise
    finally:
        session.close()
        logger.debug("Session closed")


def get_db() -> Generator[Session, None, None]:
    """
    Dependency-style function that yields a database session.

    Used as a FastAPI dependency. The session is closed after the request;
    the service layer owns commit and rollback.

    Yields:
        SQLAlchemy Session instance
    """
    session_factory = get_session_factory()
    session: Session = session_factory()

    try:
        yield session
    except SQLAlchemyError as e:
        logger.error(f"Database error in get_db: {e}")
        session.rollback()
        raise
    finally:
        session.close()


def ping_database(engine: Engine | None = None) -> bool:
    """
    Check that the database answers a trivial query.

    Returns:
        True if the query succeeds, False otherwise
    """
    try:
        engine = engine or init_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection check failed: {e}")
        return False


def close_engine() -> None:
    """
    Close the database engine and cleanup resources.

    Called on application shutdown to close all pooled connections.
    """
    global _engine, SessionLocal

    if _engine is not None:
        _engine.dispose()
        _engine = None
        logger.info("Database engine closed")

    SessionLocal = None
