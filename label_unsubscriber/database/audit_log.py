"""
Audit log sinks for unsubscribe outcomes.
"""

from typing import List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from label_unsubscriber.email_processor.unsubscribe.processors import AuditLog
from label_unsubscriber.email_processor.unsubscribe.types import RawMessage, Outcome
from .models import AuditLogEntry


class DatabaseAuditLog(AuditLog):
    """Append one audit_log row per outcome."""

    def __init__(self, session: Session):
        self.session = session

    def record(self, message: RawMessage, outcome: Outcome) -> None:
        entry = AuditLogEntry(
            status=outcome.summary,
            subject=message.subject,
            view_link=message.permalink,
            from_address=message.from_address,
            location=outcome.location,
            succeeded=outcome.succeeded,
            message_key=message.key
        )
        self.session.add(entry)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def recent(self, limit: int = 20, failed_only: bool = False) -> List[AuditLogEntry]:
        """Newest entries first."""
        query = self.session.query(AuditLogEntry)
        if failed_only:
            query = query.filter(AuditLogEntry.succeeded == False)  # noqa: E712
        return query.order_by(AuditLogEntry.id.desc()).limit(limit).all()


class CompositeAuditLog(AuditLog):
    """Fan an outcome out to several sinks, in order."""

    def __init__(self, *sinks: AuditLog):
        self.sinks = list(sinks)

    def record(self, message: RawMessage, outcome: Outcome) -> None:
        for sink in self.sinks:
            sink.record(message, outcome)
