"""
Unsubscribe Action Executor

Performs the side effect for the chosen unsubscribe action:
- HttpAction: POST (with the List-Unsubscribe-Post body) or GET
- MailtoAction: send an email, defaulting subject and body
- TryOpenLinkAction: best-effort GET, never a confirmed success
- UnknownAction: nothing

The HTTP and email capabilities are injected; the executor owns no
transport, timeout or retry policy. Transport failures propagate.
"""

from typing import Any, Callable, Optional

from label_unsubscriber.email_processor.unsubscribe.constants import (
    DEFAULT_MAIL_SUBJECT, DEFAULT_MAIL_BODY
)
from label_unsubscriber.email_processor.unsubscribe.exceptions import ProcessingError
from label_unsubscriber.email_processor.unsubscribe.logging import UnsubscribeLogger
from label_unsubscriber.email_processor.unsubscribe.types import (
    UnsubscribeAction, HttpAction, MailtoAction, TryOpenLinkAction,
    UnknownAction, ExecutionResult
)

# (url, method, body) -> anything; raises on transport failure
HttpRequester = Callable[[str, str, Optional[str]], Any]
# (to_address, subject, body) -> anything; raises on transport failure
EmailSender = Callable[[str, str, str], Any]


class ActionExecutor:
    """Execute one UnsubscribeAction against injected transports."""

    def __init__(self, http_request: HttpRequester, send_email: EmailSender):
        """
        Initialize executor.

        Args:
            http_request: Callable performing an HTTP request
            send_email: Callable sending an email
        """
        self.http_request = http_request
        self.send_email = send_email
        self.logger = UnsubscribeLogger("action_executor")

    def execute(self, action: UnsubscribeAction) -> ExecutionResult:
        """
        Execute the action.

        Returns:
            ExecutionResult; `confirmed` is True only for HTTP and mailto targets

        Raises:
            Whatever the injected transport raises
        """
        if isinstance(action, HttpAction):
            self.logger.info("Requesting header unsubscribe URL", {
                'method': action.method, 'url': action.url
            })
            self.http_request(action.url, action.method, action.post_body if action.has_post_body else None)
            return ExecutionResult(action=action, performed=True, confirmed=True)

        if isinstance(action, MailtoAction):
            subject = action.subject or DEFAULT_MAIL_SUBJECT
            body = action.body or DEFAULT_MAIL_BODY
            self.logger.info("Sending unsubscribe email", {
                'to': action.email_address, 'subject': subject
            })
            self.send_email(action.email_address, subject, body)
            return ExecutionResult(action=action, performed=True, confirmed=True)

        if isinstance(action, TryOpenLinkAction):
            self.logger.info("Opening unsubscribe link from body", {'url': action.url})
            self.http_request(action.url, 'GET', None)
            return ExecutionResult(action=action, performed=True, confirmed=False)

        if isinstance(action, UnknownAction):
            self.logger.info("No way to act on unsubscribe target", {'target': action.raw_url})
            return ExecutionResult(action=action, performed=False, confirmed=False)

        raise ProcessingError(
            "Unsupported unsubscribe action",
            stage='execute',
            details={'action_type': type(action).__name__}
        )
