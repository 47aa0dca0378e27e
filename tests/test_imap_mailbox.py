"""
Tests for the IMAP connection wrapper and the label-folder mailbox.
"""

import imaplib

import pytest
from unittest.mock import Mock, MagicMock, patch

from label_unsubscriber.email_processor.imap_client import IMAPConnection, quote_folder
from label_unsubscriber.email_processor.mailbox import ImapMailbox
from label_unsubscriber.email_processor.unsubscribe.exceptions import ProcessingError
from label_unsubscriber.email_processor.unsubscribe.types import RawMessage, LabelConfig

RAW = (
    b"From: news@example.com\r\n"
    b"Subject: Weekly\r\n"
    b"Message-ID: <m1@example.com>\r\n"
    b"List-Unsubscribe: <https://ex.com/u>\r\n"
    b"\r\n"
    b"Body\r\n"
)


class TestQuoteFolder:

    def test_quotes_names_with_spaces(self):
        assert quote_folder("Unsubscribe Success") == '"Unsubscribe Success"'

    def test_already_quoted(self):
        assert quote_folder('"INBOX"') == '"INBOX"'

    def test_escapes_quotes(self):
        assert quote_folder('My "List"') == '"My \\"List\\""'


class TestIMAPConnection:

    @pytest.fixture
    def conn(self):
        connection = IMAPConnection("imap.test.com")
        connection.connection = MagicMock()
        return connection

    def test_connect_failure_returns_false(self):
        connection = IMAPConnection("imap.test.com")

        with patch('label_unsubscriber.email_processor.imap_client.imaplib.IMAP4_SSL') as mock_ssl:
            mock_ssl.side_effect = OSError("Network unreachable")

            assert connection.connect("me@gmail.com", "pw") is False

        assert connection.connection is None

    def test_connect_logs_in(self):
        connection = IMAPConnection("imap.test.com", 993)

        with patch('label_unsubscriber.email_processor.imap_client.imaplib.IMAP4_SSL') as mock_ssl:
            assert connection.connect("me@gmail.com", "pw") is True

        mock_ssl.assert_called_once_with("imap.test.com", 993)
        mock_ssl.return_value.login.assert_called_once_with("me@gmail.com", "pw")

    def test_operations_require_connection(self):
        with pytest.raises(imaplib.IMAP4.error):
            IMAPConnection("imap.test.com").search_uids()

    def test_list_folders_handles_quoted_and_atom_names(self, conn):
        conn.connection.list.return_value = ('OK', [
            b'(\\HasNoChildren) "/" "Unsubscribe Success"',
            b'(\\HasNoChildren) "/" INBOX',
            None,
        ])

        assert conn.list_folders() == ["Unsubscribe Success", "INBOX"]

    def test_ensure_folder_creates_missing(self, conn):
        conn.connection.list.return_value = ('OK', [b'(\\HasNoChildren) "/" INBOX'])
        conn.connection.create.return_value = ('OK', [b'Success'])

        assert conn.ensure_folder("Unsubscribe Failed") is True
        conn.connection.create.assert_called_once_with('"Unsubscribe Failed"')

    def test_ensure_folder_existing(self, conn):
        conn.connection.list.return_value = ('OK', [b'(\\HasNoChildren) "/" "Unsubscribe"'])

        assert conn.ensure_folder("Unsubscribe") is False
        conn.connection.create.assert_not_called()

    def test_select_folder_failure(self, conn):
        conn.connection.select.return_value = ('NO', [b'Mailbox does not exist'])

        assert conn.select_folder("Unsubscribe") is False

    def test_search_uids_oldest_first_with_limit(self, conn):
        conn.connection.uid.return_value = ('OK', [b'3 7 9'])

        assert conn.search_uids('ALL', limit=2) == [3, 7]
        conn.connection.uid.assert_called_once_with('SEARCH', None, 'ALL')

    def test_search_uids_empty(self, conn):
        conn.connection.uid.return_value = ('OK', [b''])

        assert conn.search_uids() == []

    def test_fetch_raw(self, conn):
        conn.connection.uid.return_value = ('OK', [(b'1 (UID 7 BODY[] {10}', RAW), b')'])

        assert conn.fetch_raw(7) == RAW
        conn.connection.uid.assert_called_once_with('FETCH', '7', '(BODY.PEEK[])')

    def test_copy_failure_raises(self, conn):
        conn.connection.uid.return_value = ('NO', [b'TRYCREATE'])

        with pytest.raises(imaplib.IMAP4.error):
            conn.copy(7, "Unsubscribe Success")

    def test_mark_deleted(self, conn):
        conn.connection.uid.return_value = ('OK', [b''])

        conn.mark_deleted(7)

        conn.connection.uid.assert_called_once_with('STORE', '7', '+FLAGS', '(\\Deleted)')


class TestImapMailbox:

    @pytest.fixture
    def connection(self):
        connection = Mock(spec=IMAPConnection)
        connection.select_folder.return_value = True
        return connection

    @pytest.fixture
    def labels(self):
        return LabelConfig()

    def test_open_ensures_folders_and_selects_pending(self, connection, labels):
        ImapMailbox(connection, labels).open()

        assert [c.args[0] for c in connection.ensure_folder.call_args_list] == [
            "Unsubscribe", "Unsubscribe Success", "Unsubscribe Failed"
        ]
        connection.select_folder.assert_called_once_with("Unsubscribe", readonly=False)

    def test_dry_run_opens_read_only(self, connection, labels):
        ImapMailbox(connection, labels, dry_run=True).open()

        connection.ensure_folder.assert_not_called()
        connection.select_folder.assert_called_once_with("Unsubscribe", readonly=True)

    def test_open_failure_disconnects(self, connection, labels):
        connection.select_folder.return_value = False

        with pytest.raises(ProcessingError):
            with ImapMailbox(connection, labels):
                pass

        connection.disconnect.assert_called_once()

    def test_pending_messages(self, connection, labels):
        connection.search_uids.return_value = [5, 7]
        connection.fetch_raw.side_effect = [RAW, None]

        messages = list(ImapMailbox(connection, labels).pending_messages(limit=10))

        connection.search_uids.assert_called_once_with('ALL', limit=10)
        assert len(messages) == 1
        assert messages[0].key == "5"
        assert messages[0].subject == "Weekly"
        assert "List-Unsubscribe: <https://ex.com/u>" in messages[0].header_block

    def test_fetch_error_skips_message(self, connection, labels):
        connection.search_uids.return_value = [5, 6, 7]
        connection.fetch_raw.side_effect = [RAW, imaplib.IMAP4.error("FETCH failed"), RAW]

        messages = list(ImapMailbox(connection, labels).pending_messages())

        assert [message.key for message in messages] == ["5", "7"]

    def test_dropped_connection_stops_iteration(self, connection, labels):
        connection.search_uids.return_value = [5, 6]
        connection.fetch_raw.side_effect = [RAW, imaplib.IMAP4.abort("socket error: EOF")]

        pending = ImapMailbox(connection, labels).pending_messages()

        assert next(pending).key == "5"
        with pytest.raises(imaplib.IMAP4.abort):
            next(pending)

    @pytest.mark.parametrize("succeeded, folder", [
        (True, "Unsubscribe Success"),
        (False, "Unsubscribe Failed"),
    ])
    def test_transition_moves_message(self, connection, labels, succeeded, folder):
        mailbox = ImapMailbox(connection, labels)

        mailbox.transition(RawMessage(header_block="", key="5"), succeeded)

        connection.copy.assert_called_once_with(5, folder)
        connection.mark_deleted.assert_called_once_with(5)

    def test_close_expunges_once_after_transitions(self, connection, labels):
        mailbox = ImapMailbox(connection, labels)
        mailbox.transition(RawMessage(header_block="", key="5"), True)
        mailbox.transition(RawMessage(header_block="", key="6"), False)

        mailbox.close()

        connection.expunge.assert_called_once()
        connection.disconnect.assert_called_once()

    def test_close_without_transitions_skips_expunge(self, connection, labels):
        ImapMailbox(connection, labels).close()

        connection.expunge.assert_not_called()
        connection.disconnect.assert_called_once()

    def test_dry_run_transition_changes_nothing(self, connection, labels):
        mailbox = ImapMailbox(connection, labels, dry_run=True)

        mailbox.transition(RawMessage(header_block="", key="5"), True)
        mailbox.close()

        connection.copy.assert_not_called()
        connection.mark_deleted.assert_not_called()
        connection.expunge.assert_not_called()

    def test_transition_requires_key(self, connection, labels):
        with pytest.raises(ProcessingError):
            ImapMailbox(connection, labels).transition(RawMessage(header_block=""), True)

    def test_custom_labels(self, connection):
        labels = LabelConfig(pending="Leave", success="Left", failure="Stuck")
        mailbox = ImapMailbox(connection, labels)

        mailbox.open()
        mailbox.transition(RawMessage(header_block="", key="1"), False)

        connection.select_folder.assert_called_once_with("Leave", readonly=False)
        connection.copy.assert_called_once_with(1, "Stuck")
