"""
Database schema and connection management.

Uses SQLite with SQLAlchemy. Each user's state is one JSON document keyed
by user id; timestamps live in their own columns and are assigned by the
store, never by callers.
"""

from datetime import datetime
from pathlib import Path
from sqlalchemy import create_engine, Column, String, DateTime, JSON
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class UserDocument(Base):
    """Per-user decision matrix document."""

    __tablename__ = "user_documents"

    user_id = Column(String, primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)


def make_engine(db_path: Path) -> Engine:
    # The debounce timer writes from its own thread
    return create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )


def init_database(db_path: Path) -> Engine:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file

    Returns:
        Engine bound to the database
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = make_engine(db_path)
    Base.metadata.create_all(engine)
    return engine
