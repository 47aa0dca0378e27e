"""
Audit-log sessions for CLI commands.

Commands never build engines themselves; they ask get_cli_session_manager()
for a session, which tests replace with an in-memory database.
"""

from contextlib import contextmanager
from typing import Iterator, Optional
from sqlalchemy.orm import Session

from .database import DatabaseManager


class CLISessionManager:
    """Creates the audit-log tables once and hands out short-lived sessions."""

    def __init__(self, database_url: Optional[str] = None):
        self.db_manager = DatabaseManager(database_url)
        self.db_manager.initialize_database()

    @property
    def database_url(self) -> str:
        return self.db_manager.database_url

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        """Yield a session for one command; uncommitted work is rolled back if it raises."""
        session = self.db_manager.get_session()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


_cli_session_manager: Optional[CLISessionManager] = None


def get_cli_session_manager(database_url: Optional[str] = None) -> CLISessionManager:
    global _cli_session_manager
    if _cli_session_manager is None:
        _cli_session_manager = CLISessionManager(database_url)
    return _cli_session_manager
