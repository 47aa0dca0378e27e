"""
IMAP connection and folder/message operations.

Gmail exposes labels as IMAP folders, so adding a label is a COPY into
that folder and removing one is flagging the message deleted in it and
expunging.
"""

import imaplib
from typing import List, Optional

from label_unsubscriber.email_processor.unsubscribe.logging import UnsubscribeLogger


def quote_folder(folder: str) -> str:
    """Quote a folder name for IMAP commands."""
    if folder.startswith('"') and folder.endswith('"'):
        return folder
    escaped = folder.replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


class IMAPConnection:
    """Manages an IMAP connection to one mailbox."""

    def __init__(self, server: str, port: int = 993, use_ssl: bool = True):
        self.server = server
        self.port = port
        self.use_ssl = use_ssl
        self.connection = None
        self.logger = UnsubscribeLogger("imap_client")

    def connect(self, username: str, password: str) -> bool:
        """Connect to the IMAP server and authenticate."""
        try:
            if self.use_ssl:
                self.connection = imaplib.IMAP4_SSL(self.server, self.port)
            else:
                self.connection = imaplib.IMAP4(self.server, self.port)

            self.connection.login(username, password)
            return True

        except (imaplib.IMAP4.error, OSError) as e:
            self.logger.error("Failed to connect to IMAP server", {
                'server': self.server, 'error': str(e)
            })
            self.connection = None
            return False

    def disconnect(self):
        """Close the IMAP connection."""
        if self.connection:
            try:
                self.connection.logout()
            except (imaplib.IMAP4.error, OSError) as e:
                self.logger.debug("Error during IMAP logout", {'error': str(e)})
            self.connection = None

    def _require_connection(self):
        if not self.connection:
            raise imaplib.IMAP4.error('Not connected to IMAP server')
        return self.connection

    def list_folders(self) -> List[str]:
        """List all available folder names."""
        status, folders = self._require_connection().list()
        if status != 'OK':
            return []

        folder_names = []
        for folder in folders:
            if not folder:
                continue
            folder_str = folder.decode('utf-8') if isinstance(folder, bytes) else str(folder)
            # Quoted names end the line with '"'; atoms are the last token
            if folder_str.endswith('"'):
                folder_names.append(folder_str.split('"')[-2])
            else:
                folder_names.append(folder_str.split(' ')[-1])

        return folder_names

    def ensure_folder(self, folder: str) -> bool:
        """Create the folder if it does not exist. Returns True if it was created."""
        if folder in self.list_folders():
            return False

        status, data = self._require_connection().create(quote_folder(folder))
        if status != 'OK':
            raise imaplib.IMAP4.error(f'Could not create folder {folder}: {data}')

        self.logger.info("Created IMAP folder", {'folder': folder})
        return True

    def select_folder(self, folder: str = 'INBOX', readonly: bool = False) -> bool:
        """Select a folder for operations."""
        status, data = self._require_connection().select(quote_folder(folder), readonly=readonly)
        if status != 'OK':
            self.logger.error("Error selecting folder", {'folder': folder, 'response': str(data)})
            return False
        return True

    def search_uids(self, criteria: str = 'ALL', limit: Optional[int] = None) -> List[int]:
        """Search the selected folder and return matching UIDs, oldest first."""
        status, data = self._require_connection().uid('SEARCH', None, criteria)
        if status != 'OK' or not data or not data[0]:
            return []

        uids = [int(uid) for uid in data[0].split()]
        if limit:
            uids = uids[:limit]
        return uids

    def fetch_raw(self, uid: int) -> Optional[bytes]:
        """Fetch the full RFC 822 bytes of a message by UID."""
        status, data = self._require_connection().uid('FETCH', str(uid), '(BODY.PEEK[])')
        if status != 'OK' or not data:
            return None

        for part in data:
            if isinstance(part, tuple) and len(part) >= 2:
                return part[1]
        return None

    def copy(self, uid: int, folder: str):
        status, data = self._require_connection().uid('COPY', str(uid), quote_folder(folder))
        if status != 'OK':
            raise imaplib.IMAP4.error(f'Could not copy message {uid} to {folder}: {data}')

    def mark_deleted(self, uid: int):
        status, data = self._require_connection().uid('STORE', str(uid), '+FLAGS', '(\\Deleted)')
        if status != 'OK':
            raise imaplib.IMAP4.error(f'Could not flag message {uid} deleted: {data}')

    def expunge(self):
        self._require_connection().expunge()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
