"""Engine and session management."""

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ..config import get_database_url
from .models import Base

logger = logging.getLogger("quizforge.database")

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Return the process engine, creating it on first use."""
    global _engine, _session_factory
    if _engine is None or database_url:
        url = database_url or get_database_url()
        if url.startswith("sqlite:///"):
            Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
        _engine = create_engine(url, future=True, pool_pre_ping=True)
        _session_factory = sessionmaker(bind=_engine, autocommit=False, autoflush=False, future=True)
    return _engine


def get_session_factory() -> sessionmaker:
    if _session_factory is None:
        get_engine()
    return _session_factory


def init_db(database_url: Optional[str] = None) -> Engine:
    """Create all tables."""
    engine = get_engine(database_url)
    Base.metadata.create_all(engine)
    logger.info("Database initialized at %s", engine.url)
    return engine
