#!/usr/bin/env python3
"""
Database models and configuration for Beaten Games.
Holds the SQLAlchemy engine, the session factory and the ``games`` table.
"""

import os
import logging
from sqlalchemy import create_engine, Column, Integer, String, Text, Date
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger('beaten.database')

# Database URL - any SQLAlchemy URL works; SQLite is the default for a
# single-operator install.
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///beaten_games.db')

Base = declarative_base()
SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)
engine = None


class GameRow(Base):
    """A beaten game.  ``note`` and ``beaten_on`` are NULL when absent."""
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    note = Column(Text, nullable=True)
    beaten_on = Column(Date, nullable=True)

    def __repr__(self):
        return f"<GameRow id={self.id} name={self.name!r}>"


def configure(database_url: str = None):
    """Create the engine for *database_url* and bind the session factory to it.

    SQLite connections are shared across Flask's worker threads, and an
    in-memory SQLite database is kept on a single connection so every
    session sees the same data.
    """
    global engine, DATABASE_URL
    url = database_url or DATABASE_URL
    kwargs = {}
    if url.startswith('sqlite'):
        kwargs['connect_args'] = {'check_same_thread': False}
        if url in ('sqlite://', 'sqlite:///:memory:'):
            kwargs['poolclass'] = StaticPool
    engine = create_engine(url, echo=False, **kwargs)
    SessionLocal.configure(bind=engine)
    DATABASE_URL = url
    logger.debug("Database engine configured for %s", engine.url.render_as_string(hide_password=True))
    return engine


def init_db():
    """Initialize database tables."""
    if engine is None:
        configure()
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables initialized successfully")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize database: {e}")
        return False
