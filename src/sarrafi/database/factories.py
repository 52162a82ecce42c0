"""Database factory functions for creating database instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from sarrafi.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks SARRAFI_DB_PATH
            environment variable, then defaults to ~/.sarrafi/sarrafi.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("SARRAFI_DB_PATH")

    if database_path is None:
        # Default to ~/.sarrafi/sarrafi.db
        home = Path.home()
        db_dir = home / ".sarrafi"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "sarrafi.db")

    logger.debug("Using SQLite database at %s", database_path)
    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
