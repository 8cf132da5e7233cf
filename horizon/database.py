"""
Database configuration and session management
"""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for models
Base = declarative_base()

MISSING_TABLE_MARKERS = ("no such table", "does not exist", "undefinedtable")


def build_engine(database_url: str):
    """Create engine for the configured database"""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live on a single shared connection
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency
def get_db(request: Request):
    """Get database session"""
    db = request.app.state.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def is_missing_table(exc: Exception) -> bool:
    """True when the error means a table has not been migrated yet"""
    if not isinstance(exc, (OperationalError, ProgrammingError)):
        return False
    message = str(getattr(exc, "orig", exc)).lower()
    return any(marker in message for marker in MISSING_TABLE_MARKERS)
