"""Database layer for fleetledger."""

from fleetledger.database.base import Database
from fleetledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
