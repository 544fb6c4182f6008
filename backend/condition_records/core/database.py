"""Database configuration and session management."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from condition_records.core.config import settings

# Lazy initialized engine and session factory
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get or create the database engine.

    Lazily creates the engine on first use to avoid import errors
    when the database driver is not installed (e.g., in test environments).
    """
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.database_url,
            echo=settings.debug,
            future=True,
        )
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get or create the session factory bound to the engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=get_engine(),
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
    return _session_factory


def configure_engine(database_url: str, echo: bool = False) -> Engine:
    """Replace the engine with one bound to ``database_url``.

    Used by scripts that take the database URL on the command line.
    """
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = create_engine(database_url, echo=echo, future=True)
    _session_factory = None
    return _engine


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""


@contextmanager
def get_session() -> Iterator[Session]:
    """Provide a transactional session scope.

    Usage:
        with get_session() as session:
            service = DatabaseConditionService(session)
            service.save_condition(condition)
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db() -> None:
    """Initialize database tables.

    For development only - use Alembic migrations in production.
    """
    # Register models on the metadata
    import condition_records.models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def drop_db() -> None:
    """Drop all tables. For development and tests only."""
    import condition_records.models  # noqa: F401

    Base.metadata.drop_all(bind=get_engine())


def close_db() -> None:
    """Close database connections."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
