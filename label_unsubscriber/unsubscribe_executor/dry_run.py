"""
Dry-run transport: records what would be sent instead of sending it.
"""

from typing import Any, Dict, List, Optional

from label_unsubscriber.email_processor.unsubscribe.logging import UnsubscribeLogger


class DryRunTransport:
    """Stand-in for both the HTTP and the SMTP transport."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.logger = UnsubscribeLogger("dry_run")

    def request(self, url: str, method: str = 'GET', body: Optional[str] = None) -> None:
        self.calls.append({'type': 'http', 'method': method, 'url': url, 'body': body})
        self.logger.info(f"DRY RUN: Would {method} {url}", {'body': body})

    def send(self, to_address: str, subject: str, body: str) -> None:
        self.calls.append({'type': 'email', 'to': to_address, 'subject': subject, 'body': body})
        self.logger.info(f"DRY RUN: Would send email to {to_address}", {'subject': subject})
