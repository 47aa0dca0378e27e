"""
SMTP transport for mailto: unsubscribe requests.
"""

import smtplib
import socket
from typing import Optional
from email.mime.text import MIMEText

from label_unsubscriber.email_processor.unsubscribe.exceptions import TransportError
from label_unsubscriber.email_processor.unsubscribe.logging import UnsubscribeLogger


class SmtpEmailTransport:
    """Send unsubscribe emails through an authenticated SMTP server."""

    def __init__(
        self,
        from_address: str,
        password: Optional[str],
        smtp_host: str = 'smtp.gmail.com',
        smtp_port: int = 587,
        timeout: int = 30,
        use_starttls: bool = True
    ):
        """
        Initialize SMTP transport.

        Args:
            from_address: Email address to send from (also the SMTP login)
            password: Password for SMTP authentication
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            timeout: SMTP timeout in seconds
            use_starttls: Upgrade the connection with STARTTLS before login
        """
        self.from_address = from_address
        self.password = password
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.timeout = timeout
        self.use_starttls = use_starttls
        self.logger = UnsubscribeLogger("smtp_transport")

    def compose_message(self, to_address: str, subject: str, body: str) -> MIMEText:
        msg = MIMEText(body)
        msg['From'] = self.from_address
        msg['To'] = to_address
        msg['Subject'] = subject
        return msg

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Send one email.

        Raises:
            TransportError: When credentials are missing or SMTP fails
        """
        if not self.from_address or not self.password:
            raise TransportError('Email credentials not provided', recipient=to_address)

        msg = self.compose_message(to_address, subject, body)

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                if self.use_starttls:
                    server.starttls()
                server.login(self.from_address, self.password)
                server.send_message(msg)

        except smtplib.SMTPAuthenticationError as e:
            raise TransportError(f'SMTP authentication error: {e}', recipient=to_address) from e

        except smtplib.SMTPException as e:
            raise TransportError(f'SMTP error: {e}', recipient=to_address) from e

        except (socket.timeout, OSError) as e:
            raise TransportError(f'SMTP connection error: {e}', recipient=to_address) from e

        self.logger.debug("Unsubscribe email sent", {'to': to_address, 'subject': subject})
