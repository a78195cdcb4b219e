"""Database layer for finrecon application."""

from finrecon.database.base import Database
from finrecon.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
