"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from fleetledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[str] = None, timeout: float = 5.0
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FLEET_DB_PATH
            environment variable, then defaults to ~/.fleetledger/fleet.db
        timeout: Seconds to wait on a locked database before the call is
            reported as StoreUnavailableError

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("FLEET_DB_PATH")

    if database_path is None:
        # Default to ~/.fleetledger/fleet.db
        home = Path.home()
        db_dir = home / ".fleetledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "fleet.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url, timeout=timeout)
