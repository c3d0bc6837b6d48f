"""Database layer for cpay application."""

from cpay.database.base import Database
from cpay.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
