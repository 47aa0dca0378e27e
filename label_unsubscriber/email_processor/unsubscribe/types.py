"""
Type-safe dataclasses for the unsubscribe pipeline.

Messages, candidate actions and outcomes are all immutable values: a
message is read once, its candidate actions are built fresh, and exactly
one outcome is produced for it.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple


@dataclass(frozen=True)
class RawMessage:
    """One message awaiting processing, as supplied by the message source."""

    header_block: str
    html_body: str = ''
    from_address: str = ''
    subject: str = ''
    permalink: str = ''
    key: Optional[str] = None


@dataclass(frozen=True)
class LabelConfig:
    """Names of the pending and terminal markers applied to messages."""

    pending: str = 'Unsubscribe'
    success: str = 'Unsubscribe Success'
    failure: str = 'Unsubscribe Failed'

    def terminal(self, succeeded: bool) -> str:
        return self.success if succeeded else self.failure


@dataclass(frozen=True)
class UnsubscribeHeaders:
    """Raw values of the List-Unsubscribe and List-Unsubscribe-Post headers."""

    unsubscribe: Optional[str] = None
    post: Optional[str] = None


@dataclass(frozen=True)
class UnsubscribeAction:
    """Base class for a candidate unsubscribe mechanism."""

    @property
    def kind(self) -> str:
        raise NotImplementedError

    @property
    def target(self) -> str:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {'kind': self.kind, 'target': self.target}


@dataclass(frozen=True)
class HttpAction(UnsubscribeAction):
    """HTTP target from the List-Unsubscribe header."""

    url: str
    post_body: Optional[str] = None

    @property
    def kind(self) -> str:
        return 'http'

    @property
    def target(self) -> str:
        return self.url

    @property
    def has_post_body(self) -> bool:
        return bool(self.post_body and self.post_body.strip())

    @property
    def method(self) -> str:
        return 'POST' if self.has_post_body else 'GET'

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['method'] = self.method
        if self.has_post_body:
            result['post_body'] = self.post_body
        return result


@dataclass(frozen=True)
class MailtoAction(UnsubscribeAction):
    """mailto: target from the List-Unsubscribe header."""

    email_address: str
    subject: Optional[str] = None
    body: Optional[str] = None

    @property
    def kind(self) -> str:
        return 'mailto'

    @property
    def target(self) -> str:
        return self.email_address

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.subject is not None:
            result['subject'] = self.subject
        if self.body is not None:
            result['body'] = self.body
        return result


@dataclass(frozen=True)
class TryOpenLinkAction(UnsubscribeAction):
    """Link scraped from the HTML body. Opening it is never a confirmed success."""

    url: str

    @property
    def kind(self) -> str:
        return 'open_link'

    @property
    def target(self) -> str:
        return self.url


@dataclass(frozen=True)
class UnknownAction(UnsubscribeAction):
    """Header target whose scheme cannot be acted on."""

    raw_url: str

    @property
    def kind(self) -> str:
        return 'unknown'

    @property
    def target(self) -> str:
        return self.raw_url


RankedActions = Tuple[UnsubscribeAction, ...]


@dataclass(frozen=True)
class ExecutionResult:
    """What the executor did with an action."""

    action: UnsubscribeAction
    performed: bool
    confirmed: bool


@dataclass(frozen=True)
class Outcome:
    """Human-auditable result of processing one message."""

    succeeded: bool
    summary: str
    location: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'succeeded': self.succeeded,
            'summary': self.summary,
            'location': self.location
        }


@dataclass
class BatchResult:
    """Aggregate result of one batch run."""

    processed: int = 0
    succeeded: int = 0
    failed: int = 0
    outcomes: List[Outcome] = field(default_factory=list)
    errors: List[Tuple[RawMessage, Exception]] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'processed': self.processed,
            'succeeded': self.succeeded,
            'failed': self.failed,
            'errors': self.error_count
        }
