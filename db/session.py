from collections.abc import Generator

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.dependencies import get_settings
from core.settings import Settings
from db.models import Base

# Global engine singleton
_engine = None


def reset_engines():
    """Reset the global engine singleton. Used for testing."""
    global _engine
    if _engine:
        _engine.dispose()
        _engine = None


def get_engine(settings: Settings = Depends(get_settings)):
    """Get or create SQLAlchemy engine."""
    global _engine
    if _engine is None:
        if settings.DATABASE_URL.startswith("sqlite"):
            # Shared connection so in-memory databases survive across sessions
            _engine = create_engine(
                settings.DATABASE_URL,
                future=True,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            _engine = create_engine(
                settings.DATABASE_URL,
                future=True,
                pool_pre_ping=True,
            )
    return _engine


SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_db(settings: Settings = Depends(get_settings)) -> Generator[Session, None, None]:
    """FastAPI dependency that yields a database session."""
    SessionLocal.configure(bind=get_engine(settings))
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(settings: Settings) -> None:
    """Initialize database tables."""
    Base.metadata.create_all(get_engine(settings))
