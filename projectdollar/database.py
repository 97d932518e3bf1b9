# projectdollar/database.py
"""
Database connection and session management.

This module configures SQLAlchemy with:
- StaticPool for in-memory SQLite (one shared connection, used by tests)
- A plain pooled engine for SQLite files and server databases
- Table creation at startup (init_db)
- Health check capabilities
"""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings
from .models import Base

logger = logging.getLogger(__name__)


def _create_engine(database_url: str | None = None) -> Engine:
    """
    Create SQLAlchemy engine with environment-appropriate configuration.

    Returns:
        Engine: Configured SQLAlchemy engine

    Configuration varies by database type:
    - In-memory SQLite: StaticPool so every session sees the same database
    - SQLite file: check_same_thread=False (FastAPI runs sync handlers in a
      thread pool)
    - Anything else: pre-ping pooled connections
    """
    url = database_url or settings.database_url

    if url.lower().startswith("sqlite"):
        if ":memory:" in url:
            logger.info("Configuring in-memory SQLite database")
            return create_engine(
                url,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
                echo=settings.debug,
            )

        logger.info("Configuring SQLite database file")
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    logger.info("Configuring database connection pool")
    return create_engine(url, pool_pre_ping=True, echo=settings.debug)


# Create engine and session factory
engine = _create_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine | None = None) -> None:
    """Create tables that do not exist yet."""
    Base.metadata.create_all(bind=bind or engine)


def check_database_health() -> dict:
    """
    Check database connectivity.

    Returns:
        dict: Health status with database type

    Used by the /health endpoint.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            conn.commit()

        return {
            "status": "healthy",
            "database": "sqlite" if settings.is_sqlite else engine.dialect.name,
        }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e),
        }
