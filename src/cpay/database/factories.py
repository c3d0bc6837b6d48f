"""Database factory functions for creating database instances."""

from pathlib import Path
from typing import Optional

from cpay.config import get_settings
from cpay.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, uses the
            CPAY_DB_PATH setting, then defaults to ~/.cpay/cpay.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None and get_settings().db_path is not None:
        database_path = str(get_settings().db_path)

    if database_path is None:
        # Default to ~/.cpay/cpay.db
        home = Path.home()
        db_dir = home / ".cpay"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "cpay.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(database_url: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database from a SQLAlchemy URL.

    Falls back to the CPAY_DATABASE_URL setting and then to the SQLite file
    chosen by ``create_sqlite_database``.
    """
    database_url = database_url or get_settings().database_url
    if database_url is None:
        return create_sqlite_database()
    return SQLAlchemyDatabase(database_url)
