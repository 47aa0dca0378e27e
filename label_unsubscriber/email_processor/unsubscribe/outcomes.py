"""
Human-readable outcome wording for audit records.
"""

from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_MAIL_SUBJECT, DEFAULT_MAIL_BODY, ECHO_TEXT_LIMIT, ELLIPSIS,
    CHANNEL_HEADER, CHANNEL_EMAIL, CHANNEL_OPEN_LINK, CHANNEL_UNKNOWN,
    SUMMARY_NO_ACTION, SUMMARY_ERROR, LOCATION_NOT_FOUND
)
from .types import (
    UnsubscribeAction, HttpAction, MailtoAction, TryOpenLinkAction, Outcome
)


def truncate(text: Optional[str], limit: int = ECHO_TEXT_LIMIT) -> str:
    text = text or ''
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


@dataclass(frozen=True)
class ActionAttempt:
    """How an action is described before it is executed."""

    action: UnsubscribeAction
    channel: str
    location: str

    @property
    def confirmable(self) -> bool:
        return isinstance(self.action, (HttpAction, MailtoAction))

    @property
    def description(self) -> str:
        return f"unsubscribe {self.channel}"

    def outcome(self, confirmed: bool) -> Outcome:
        """Outcome after the action ran without raising."""
        if confirmed and self.confirmable:
            return Outcome(True, f"Success {self.channel}", self.location)
        if isinstance(self.action, TryOpenLinkAction):
            return Outcome(False, f"Maybe {self.channel}", self.location)
        return Outcome(False, f"Failed: {self.channel}", self.location)


def describe_action(action: UnsubscribeAction) -> ActionAttempt:
    if isinstance(action, HttpAction):
        if action.has_post_body:
            location = f'POST to {action.url} w/ body "{truncate(action.post_body)}"'
        else:
            location = f'GET {action.url}'
        return ActionAttempt(action, CHANNEL_HEADER, location)

    if isinstance(action, MailtoAction):
        subject = action.subject or DEFAULT_MAIL_SUBJECT
        body = action.body or DEFAULT_MAIL_BODY
        location = (
            f'{action.email_address} w/ subject "{truncate(subject)}" '
            f'and body "{truncate(body)}"'
        )
        return ActionAttempt(action, CHANNEL_EMAIL, location)

    if isinstance(action, TryOpenLinkAction):
        return ActionAttempt(action, CHANNEL_OPEN_LINK, action.url)

    return ActionAttempt(action, CHANNEL_UNKNOWN, action.target)


def no_action_outcome() -> Outcome:
    return Outcome(False, SUMMARY_NO_ACTION, LOCATION_NOT_FOUND)


def error_outcome(error: BaseException, attempt: Optional[ActionAttempt] = None) -> Outcome:
    detail = f"{type(error).__name__}: {error}"
    if attempt is None:
        return Outcome(False, SUMMARY_ERROR, detail)
    return Outcome(
        False,
        f"{SUMMARY_ERROR} while attempting {attempt.description}",
        f"in {attempt.location}: {detail}"
    )
