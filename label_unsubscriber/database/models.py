"""
Database models for the unsubscribe audit log.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean, create_engine, Index
)
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class AuditLogEntry(Base):
    """One processed message and what happened to it.

    Columns follow the order of the audit row: status, subject, view link,
    sender, and the unsubscribe link or email that was used.
    """
    __tablename__ = 'audit_log'

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    status = Column(String(255), nullable=False)  # Outcome summary, e.g. "Success via header"
    subject = Column(Text)
    view_link = Column(Text)  # Permalink to the message
    from_address = Column(String(255))
    location = Column(Text)  # Unsubscribe link/email, or error detail
    succeeded = Column(Boolean, default=False, nullable=False)
    message_key = Column(String(255))  # IMAP UID in the pending folder

    __table_args__ = (
        Index('idx_audit_created_at', 'created_at'),
        Index('idx_audit_succeeded', 'succeeded'),
        Index('idx_audit_from_address', 'from_address'),
    )

    def __repr__(self):
        return f"<AuditLogEntry(status='{self.status}', from='{self.from_address}')>"


def create_database_engine(database_url: str = "sqlite:///unsubscribe_log.db"):
    """Create and return a database engine."""
    engine = create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )
    return engine


def create_tables(engine):
    """Create all tables in the database."""
    Base.metadata.create_all(engine)


def get_session_maker(engine):
    """Get a session maker for the database."""
    return sessionmaker(bind=engine)
