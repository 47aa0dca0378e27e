"""
IMAP-backed message source and label store.

Messages waiting in the pending label's folder are handed to the pipeline
one at a time. Transitioning a message copies it into the success or
failure folder and flags it deleted in the pending folder; the pending
folder is expunged once, when the mailbox is closed.
"""

import imaplib
from typing import Iterator, Optional

from label_unsubscriber.email_processor.unsubscribe.exceptions import ProcessingError
from label_unsubscriber.email_processor.unsubscribe.logging import UnsubscribeLogger
from label_unsubscriber.email_processor.unsubscribe.processors import LabelStore
from label_unsubscriber.email_processor.unsubscribe.types import RawMessage, LabelConfig
from .imap_client import IMAPConnection
from .messages import GMAIL_PERMALINK_TEMPLATE, parse_raw_message


class ImapMailbox(LabelStore):
    """Pending-label message source and terminal-label writer."""

    def __init__(
        self,
        connection: IMAPConnection,
        labels: LabelConfig,
        dry_run: bool = False,
        permalink_template: str = GMAIL_PERMALINK_TEMPLATE
    ):
        """
        Args:
            connection: Authenticated IMAP connection
            labels: Pending, success and failure label names
            dry_run: If True, transitions are logged but not applied
            permalink_template: Format string for message permalinks
        """
        self.connection = connection
        self.labels = labels
        self.dry_run = dry_run
        self.permalink_template = permalink_template
        self.logger = UnsubscribeLogger("imap_mailbox")
        self._needs_expunge = False

    def open(self):
        """Make sure all three label folders exist and select the pending one."""
        if not self.dry_run:
            for folder in (self.labels.pending, self.labels.success, self.labels.failure):
                self.connection.ensure_folder(folder)

        if not self.connection.select_folder(self.labels.pending, readonly=self.dry_run):
            raise ProcessingError(
                "Could not open pending label folder",
                stage='open_mailbox',
                details={'folder': self.labels.pending}
            )

    def pending_messages(self, limit: Optional[int] = None) -> Iterator[RawMessage]:
        """Yield the messages currently carrying the pending label, oldest first."""
        uids = self.connection.search_uids('ALL', limit=limit)
        self.logger.info("Found pending messages", {'folder': self.labels.pending, 'count': len(uids)})

        for uid in uids:
            try:
                raw = self.connection.fetch_raw(uid)
            except imaplib.IMAP4.abort:
                raise
            except imaplib.IMAP4.error as e:
                self.logger.warning("Could not fetch message, skipping", {'uid': uid, 'error': str(e)})
                continue
            if raw is None:
                self.logger.warning("Message disappeared before fetch", {'uid': uid})
                continue
            yield parse_raw_message(raw, key=str(uid), permalink_template=self.permalink_template)

    def transition(self, message: RawMessage, succeeded: bool) -> None:
        target = self.labels.terminal(succeeded)

        if self.dry_run:
            self.logger.info(f"DRY RUN: Would move message to {target}", {'uid': message.key})
            return

        if message.key is None:
            raise ProcessingError("Message has no IMAP UID", stage='transition')

        uid = int(message.key)
        self.connection.copy(uid, target)
        self.connection.mark_deleted(uid)
        self._needs_expunge = True

        self.logger.debug("Moved message", {
            'uid': uid, 'from_folder': self.labels.pending, 'to_folder': target
        })

    def close(self):
        """Expunge transitioned messages and log out."""
        try:
            if self._needs_expunge:
                self.connection.expunge()
                self._needs_expunge = False
        finally:
            self.connection.disconnect()

    def __enter__(self):
        try:
            self.open()
        except Exception:
            self.connection.disconnect()
            raise
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
