"""Database engine and session factory.

The engine is created lazily on first use so importing the package never
opens a connection.
"""
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from config.settings import DATABASE_URL
from models.tables import Base

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    """Create an engine with driver-appropriate connection args."""
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        logger.warning("Using SQLite database (local development only)")

    return create_engine(
        url,
        connect_args=connect_args,
        echo=False,
        pool_pre_ping=True,
    )


def get_engine() -> Engine:
    """Get or create the process-wide engine."""
    global _engine
    if _engine is None:
        logger.info(f"Initializing database engine: {DATABASE_URL}")
        _engine = create_db_engine(DATABASE_URL)
    return _engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Optional[Engine] = None):
    """Create the plan tables if they do not exist."""
    engine = engine if engine is not None else get_engine()
    Base.metadata.create_all(engine)
    logger.info("Database tables ready")
