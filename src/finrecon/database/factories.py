"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from finrecon.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FINRECON_DB_PATH
            environment variable, then defaults to ~/.finrecon/finrecon.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("FINRECON_DB_PATH")

    if database_path is None:
        # Default to ~/.finrecon/finrecon.db
        home = Path.home()
        db_dir = home / ".finrecon"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "finrecon.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
