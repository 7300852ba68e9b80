"""Database schema initialization."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from payee_core.database.models import Base


def init_database(db_path: Path, echo: bool = False):
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
        echo: Whether to echo SQL queries (for debugging)

    Returns:
        SQLAlchemy engine
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Batch jobs write from worker threads
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=echo,
        connect_args={"check_same_thread": False},
    )

    Base.metadata.create_all(engine)

    return engine


def get_session_factory(engine):
    """
    Get session factory for database operations.

    Args:
        engine: SQLAlchemy engine

    Returns:
        Session factory
    """
    return sessionmaker(bind=engine)
