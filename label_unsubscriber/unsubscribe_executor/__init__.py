"""
Unsubscribe Executor Module

This module performs the side effect of the chosen unsubscribe action.
The executor is transport-agnostic; the transports here are the concrete
HTTP and SMTP capabilities injected into it by the CLI.
"""

from .action_executor import ActionExecutor
from .http_transport import RequestsHttpTransport
from .smtp_transport import SmtpEmailTransport
from .dry_run import DryRunTransport

__all__ = ['ActionExecutor', 'RequestsHttpTransport', 'SmtpEmailTransport', 'DryRunTransport']
