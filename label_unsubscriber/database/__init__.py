"""
Audit-log database setup.

The engine points at Config.get_database_path() unless a URL is given;
tables are created on demand and never migrated.
"""

from typing import Optional
from sqlalchemy.orm import Session

from .models import create_database_engine, create_tables, get_session_maker


class DatabaseManager:
    """Owns the engine and session factory for the audit log."""

    def __init__(self, database_url: Optional[str] = None):
        if database_url is None:
            from label_unsubscriber.config import Config
            database_url = Config.get_database_path()

        self.database_url = database_url
        self.engine = create_database_engine(database_url)
        self.session_factory = get_session_maker(self.engine)

    def initialize_database(self):
        """Create the audit_log table and its indexes if missing."""
        create_tables(self.engine)

    def get_session(self) -> Session:
        return self.session_factory()


_db_manager: Optional[DatabaseManager] = None


def init_database(database_url: Optional[str] = None) -> DatabaseManager:
    """Create the tables for the process-wide database and return its manager."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(database_url)
    _db_manager.initialize_database()
    return _db_manager
