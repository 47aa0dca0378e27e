"""
HTTP transport for unsubscribe requests.

Handles both plain GET requests and RFC 8058 one-click POST submissions,
where the List-Unsubscribe-Post value is sent as a form-encoded body.
"""

import requests
from typing import Optional

from label_unsubscriber.email_processor.unsubscribe.exceptions import TransportError
from label_unsubscriber.email_processor.unsubscribe.logging import UnsubscribeLogger

DEFAULT_USER_AGENT = 'LabelUnsubscriber/1.0'


class RequestsHttpTransport:
    """Perform unsubscribe HTTP requests with requests."""

    def __init__(
        self,
        timeout: int = 10,
        user_agent: str = DEFAULT_USER_AGENT,
        raise_for_status: bool = False,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize HTTP transport.

        Args:
            timeout: Request timeout in seconds
            user_agent: User-Agent header for requests
            raise_for_status: If True, non-2xx responses raise TransportError
            session: requests session to reuse (a new one by default)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.raise_for_status = raise_for_status
        self.session = session or requests.Session()
        self.logger = UnsubscribeLogger("http_transport")

    def request(self, url: str, method: str = 'GET', body: Optional[str] = None) -> int:
        """
        Send the request and return the response status code.

        Raises:
            TransportError: On timeout, connection failure or (optionally) non-2xx status
        """
        method = method.upper()
        headers = {'User-Agent': self.user_agent}
        if body is not None:
            headers['Content-Type'] = 'application/x-www-form-urlencoded'

        try:
            response = self.session.request(
                method,
                url,
                data=body,
                headers=headers,
                timeout=self.timeout,
                allow_redirects=True
            )

        except requests.exceptions.Timeout as e:
            raise TransportError(f'Request timed out after {self.timeout} seconds', url=url) from e

        except requests.exceptions.ConnectionError as e:
            raise TransportError(f'Connection error: {e}', url=url) from e

        except requests.exceptions.RequestException as e:
            raise TransportError(f'Request failed: {e}', url=url) from e

        self.logger.debug("Unsubscribe request completed", {
            'method': method, 'url': url, 'status_code': response.status_code
        })

        if self.raise_for_status and not 200 <= response.status_code < 300:
            raise TransportError(
                f'Unexpected HTTP status {response.status_code}',
                url=url,
                status_code=response.status_code
            )

        return response.status_code
