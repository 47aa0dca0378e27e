"""
Unsubscribe target classification.

Turns each raw List-Unsubscribe target into a typed candidate action:
- http/https targets become HttpAction (carrying the RFC 8058 post body, if any)
- mailto targets with an address become MailtoAction
- anything else becomes UnknownAction

Classification never raises; targets it cannot understand degrade to
UnknownAction.
"""

from typing import Dict, Iterable, List, Optional
from urllib.parse import unquote

from .constants import (
    SCHEME_PATTERN, MAILTO_PATH_PATTERN, SCHEME_HTTP_PREFIX, SCHEME_MAILTO
)
from .logging import UnsubscribeLogger
from .types import UnsubscribeAction, HttpAction, MailtoAction, UnknownAction


class ActionParser:
    """Classify raw unsubscribe targets into UnsubscribeAction values."""

    def __init__(self):
        self.logger = UnsubscribeLogger("action_parser")

    def parse(self, target: str, post_body: Optional[str] = None) -> UnsubscribeAction:
        """Classify a single target.

        Args:
            target: Raw target string, e.g. 'https://x/u' or 'mailto:y@z?subject=S'
            post_body: Shared List-Unsubscribe-Post value for the message

        Returns:
            HttpAction, MailtoAction or UnknownAction
        """
        scheme_match = SCHEME_PATTERN.match(target or '')
        if not scheme_match:
            self.logger.debug("Target has no scheme", {'target': target})
            return UnknownAction(raw_url=target or '')

        scheme = scheme_match.group(1).strip().lower()

        if scheme.startswith(SCHEME_HTTP_PREFIX):
            return HttpAction(url=target, post_body=post_body or None)

        if scheme == SCHEME_MAILTO:
            path_match = MAILTO_PATH_PATTERN.match(target)
            address = unquote(path_match.group(1)).strip() if path_match else ''
            if address:
                params = self._query_params(target)
                return MailtoAction(
                    email_address=address,
                    subject=params.get('subject'),
                    body=params.get('body')
                )

        self.logger.debug("Unsupported unsubscribe target", {'target': target, 'scheme': scheme})
        return UnknownAction(raw_url=target)

    def parse_all(self, targets: Iterable[str], post_body: Optional[str] = None) -> List[UnsubscribeAction]:
        """Classify targets, keeping their header order."""
        return [self.parse(target, post_body) for target in targets]

    def _query_params(self, target: str) -> Dict[str, str]:
        """Percent-decoded query parameters; the first non-empty occurrence of a name wins."""
        if '?' not in target:
            return {}

        query = target.split('?', 1)[1].split('#', 1)[0]
        params: Dict[str, str] = {}

        for pair in query.split('&'):
            if not pair:
                continue
            name, _, value = pair.partition('=')
            name = unquote(name).strip().lower()
            value = unquote(value)
            if name and value and name not in params:
                params[name] = value

        return params
