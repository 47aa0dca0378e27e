"""
Password storage for the mailbox account used by the unsubscriber.

The same password authenticates IMAP (reading the pending label) and SMTP
(sending mailto: unsubscribe requests).
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Dict, Any, List


class CredentialStore:
    """JSON file of account -> {password, updated_at}, readable only by the owner."""

    def __init__(self, store_path: Optional[Path] = None):
        """
        Args:
            store_path: Path to the JSON file. None keeps credentials in memory only.
        """
        self.store_path = Path(store_path) if store_path else None
        self._entries: Dict[str, Dict[str, Any]] = {}
        self._load()

    def _load(self):
        if not self.store_path or not self.store_path.exists():
            return

        try:
            with open(self.store_path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError):
            # Unreadable store: start empty, the next save rewrites it
            self._entries = {}
            return

        if not isinstance(data, dict):
            return

        for account, entry in data.items():
            if isinstance(entry, str):
                # Older stores kept the bare password
                self._entries[account.lower()] = {'password': entry, 'updated_at': None}
            elif isinstance(entry, dict) and 'password' in entry:
                self._entries[account.lower()] = entry

    def _save(self):
        if not self.store_path:
            return

        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, 'w') as f:
            json.dump(self._entries, f, indent=2)
        os.chmod(self.store_path, 0o600)

    def get_password(self, email_address: str) -> Optional[str]:
        entry = self._entries.get(email_address.lower())
        return entry['password'] if entry else None

    def set_password(self, email_address: str, password: str):
        self._entries[email_address.lower()] = {
            'password': password,
            'updated_at': datetime.now(timezone.utc).isoformat()
        }
        self._save()

    def remove_password(self, email_address: str) -> bool:
        """Remove a stored password. Returns False if there was none."""
        if self._entries.pop(email_address.lower(), None) is None:
            return False
        self._save()
        return True

    def updated_at(self, email_address: str) -> Optional[str]:
        entry = self._entries.get(email_address.lower())
        return entry.get('updated_at') if entry else None

    def list_stored_emails(self) -> List[str]:
        return sorted(self._entries.keys())

    def has_password(self, email_address: str) -> bool:
        return email_address.lower() in self._entries


_credential_store = None


def get_credential_store(store_path: Optional[Path] = None) -> CredentialStore:
    """Get the process-wide credential store, created on first use."""
    global _credential_store

    if _credential_store is None:
        if store_path is None:
            from .settings import Config
            store_path = Config.get_credential_store_path()

        _credential_store = CredentialStore(store_path)

    return _credential_store
