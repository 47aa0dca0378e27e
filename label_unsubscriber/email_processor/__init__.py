"""
Email processing modules.
"""

from .imap_client import IMAPConnection
from .mailbox import ImapMailbox
from .messages import parse_raw_message

__all__ = ['IMAPConnection', 'ImapMailbox', 'parse_raw_message']
