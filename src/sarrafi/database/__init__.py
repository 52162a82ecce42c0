"""Database layer for sarrafi application."""

from sarrafi.database.base import Database
from sarrafi.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
