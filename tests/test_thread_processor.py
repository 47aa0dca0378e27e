"""
Tests for per-message processing: resolve, execute, transition, record.

Every message must end with exactly one terminal transition and exactly one
audit outcome, including when something raises along the way.
"""

import imaplib

import pytest
from unittest.mock import Mock

from label_unsubscriber.email_processor.unsubscribe.exceptions import TransportError
from label_unsubscriber.email_processor.unsubscribe.processors import (
    ActionResolver, ThreadProcessor, LabelStore, AuditLog
)
from label_unsubscriber.email_processor.unsubscribe.types import (
    RawMessage, HttpAction, MailtoAction, TryOpenLinkAction, Outcome
)
from label_unsubscriber.unsubscribe_executor import ActionExecutor


class RecordingAuditLog(AuditLog):
    def __init__(self):
        self.records = []

    def record(self, message, outcome):
        self.records.append((message, outcome))


def make_message(header_block="", html_body="", key="1"):
    return RawMessage(
        header_block=header_block,
        html_body=html_body,
        from_address="News <news@example.com>",
        subject="Weekly digest",
        permalink="https://mail.example.com/m/1",
        key=key
    )


@pytest.fixture
def http_request():
    return Mock()


@pytest.fixture
def send_email():
    return Mock()


@pytest.fixture
def label_store():
    return Mock(spec=LabelStore)


@pytest.fixture
def audit_log():
    return RecordingAuditLog()


@pytest.fixture
def processor(http_request, send_email, label_store, audit_log):
    executor = ActionExecutor(http_request=http_request, send_email=send_email)
    return ThreadProcessor(ActionResolver(), executor, label_store, audit_log)


class TestScenarios:
    """End-to-end behaviour for the main message shapes."""

    def test_one_click_post_succeeds(self, processor, http_request, label_store, audit_log):
        message = make_message(
            "List-Unsubscribe: <https://ex.com/u>\r\n"
            "List-Unsubscribe-Post: List-Unsubscribe=One-Click\r\n"
        )

        outcome = processor.process(message)

        assert outcome == Outcome(
            True, "Success via header", 'POST to https://ex.com/u w/ body "List-Unsubscribe=One-Click"'
        )
        http_request.assert_called_once_with("https://ex.com/u", "POST", "List-Unsubscribe=One-Click")
        label_store.transition.assert_called_once_with(message, True)
        assert audit_log.records == [(message, outcome)]

    def test_mailto_succeeds(self, processor, send_email, label_store):
        message = make_message("List-Unsubscribe: <mailto:x@y.com?subject=Stop>\r\n")

        outcome = processor.process(message)

        assert outcome.succeeded is True
        assert outcome.summary == "Success via email"
        assert outcome.location == 'x@y.com w/ subject "Stop" and body "unsubscribe"'
        send_email.assert_called_once_with("x@y.com", "Stop", "unsubscribe")
        label_store.transition.assert_called_once_with(message, True)

    def test_body_link_is_only_a_maybe(self, processor, http_request, label_store):
        message = make_message(
            "From: news@example.com\r\n",
            '<a href="http://y.com/out">Unsubscribe</a>'
        )

        outcome = processor.process(message)

        assert outcome == Outcome(False, "Maybe by opening link", "http://y.com/out")
        http_request.assert_called_once_with("http://y.com/out", "GET", None)
        label_store.transition.assert_called_once_with(message, False)

    def test_no_action_found(self, processor, http_request, send_email, label_store, audit_log):
        message = make_message("From: news@example.com\r\n", "<p>Hello</p>")

        outcome = processor.process(message)

        assert outcome == Outcome(False, "Failed: no action found", "not found")
        http_request.assert_not_called()
        send_email.assert_not_called()
        label_store.transition.assert_called_once_with(message, False)
        assert len(audit_log.records) == 1

    def test_transport_error_is_recorded_then_reraised(self, processor, http_request, label_store, audit_log):
        error = TransportError("Connection error: refused", url="https://ex.com/u")
        http_request.side_effect = error
        message = make_message("List-Unsubscribe: <https://ex.com/u>\r\n")

        with pytest.raises(TransportError) as exc_info:
            processor.process(message)

        assert exc_info.value is error
        label_store.transition.assert_called_once_with(message, False)
        assert len(audit_log.records) == 1
        recorded = audit_log.records[0][1]
        assert recorded.succeeded is False
        assert recorded.summary.startswith("Error")
        assert recorded.summary == "Error while attempting unsubscribe via header"
        assert "Connection error: refused" in recorded.location
        assert recorded.location.startswith("in GET https://ex.com/u: TransportError:")


class TestActionChoice:

    def test_unknown_scheme_fails_without_side_effect(self, processor, http_request, send_email):
        outcome = processor.process(make_message("List-Unsubscribe: <ftp://x/u>\r\n"))

        assert outcome == Outcome(False, "Failed: don't know how", "ftp://x/u")
        http_request.assert_not_called()
        send_email.assert_not_called()

    def test_mailto_preferred_over_plain_http(self, processor, http_request, send_email):
        processor.process(make_message("List-Unsubscribe: <https://a/u>, <mailto:b@c>\r\n"))

        send_email.assert_called_once_with("b@c", "unsubscribe", "unsubscribe")
        http_request.assert_not_called()

    def test_header_preferred_over_body_link(self, processor, http_request):
        message = make_message(
            "List-Unsubscribe: <https://ex.com/u>\r\n",
            '<a href="http://y.com/out">Unsubscribe</a>'
        )

        outcome = processor.process(message)

        assert outcome.summary == "Success via header"
        http_request.assert_called_once_with("https://ex.com/u", "GET", None)


class TestErrorPaths:

    def test_error_before_action_is_chosen(self, http_request, send_email, label_store, audit_log):
        resolver = Mock()
        resolver.resolve.side_effect = ValueError("bad header")
        processor = ThreadProcessor(resolver, ActionExecutor(http_request, send_email), label_store, audit_log)
        message = make_message()

        with pytest.raises(ValueError):
            processor.process(message)

        assert audit_log.records == [(message, Outcome(False, "Error", "ValueError: bad header"))]
        label_store.transition.assert_called_once_with(message, False)

    def test_audit_failure_does_not_repeat_transition(self, http_request, send_email, label_store):
        audit_log = Mock(spec=AuditLog)
        audit_log.record.side_effect = [RuntimeError("disk full"), None]
        processor = ThreadProcessor(ActionResolver(), ActionExecutor(http_request, send_email), label_store, audit_log)
        message = make_message("List-Unsubscribe: <https://ex.com/u>\r\n")

        with pytest.raises(RuntimeError):
            processor.process(message)

        label_store.transition.assert_called_once_with(message, True)
        assert audit_log.record.call_count == 2
        final_outcome = audit_log.record.call_args[0][1]
        assert final_outcome.succeeded is False
        assert "RuntimeError: disk full" in final_outcome.location

    def test_failed_success_transition_falls_back_to_failed(self, processor, label_store, audit_log):
        label_store.transition.side_effect = [imaplib.IMAP4.error("COPY failed"), None]
        message = make_message("List-Unsubscribe: <https://ex.com/u>\r\n")

        with pytest.raises(imaplib.IMAP4.error):
            processor.process(message)

        assert [c.args for c in label_store.transition.call_args_list] == [(message, True), (message, False)]
        assert len(audit_log.records) == 1
        assert audit_log.records[0][1].summary == "Error while attempting unsubscribe via header"

    def test_failed_fallback_transition_still_records(self, processor, http_request, label_store, audit_log):
        error = TransportError("Connection error: refused")
        http_request.side_effect = error
        label_store.transition.side_effect = OSError("IMAP connection dropped")
        message = make_message("List-Unsubscribe: <https://ex.com/u>\r\n")

        with pytest.raises(TransportError) as exc_info:
            processor.process(message)

        assert exc_info.value is error
        label_store.transition.assert_called_once_with(message, False)
        assert len(audit_log.records) == 1
        assert audit_log.records[0][1].succeeded is False

    def test_every_transition_failing_keeps_first_error(self, processor, label_store, audit_log):
        label_store.transition.side_effect = OSError("IMAP connection dropped")
        message = make_message("List-Unsubscribe: <https://ex.com/u>\r\n")

        with pytest.raises(OSError, match="IMAP connection dropped"):
            processor.process(message)

        assert label_store.transition.call_count == 2
        assert len(audit_log.records) == 1
        assert "OSError: IMAP connection dropped" in audit_log.records[0][1].location

    def test_failed_error_record_does_not_mask_original(self, processor, http_request, label_store):
        error = TransportError("Connection error: refused")
        http_request.side_effect = error
        processor.audit_log = Mock(spec=AuditLog)
        processor.audit_log.record.side_effect = RuntimeError("disk full")

        with pytest.raises(TransportError) as exc_info:
            processor.process(make_message("List-Unsubscribe: <https://ex.com/u>\r\n"))

        assert exc_info.value is error
        processor.audit_log.record.assert_called_once()


class TestActionResolver:

    def test_candidates_keep_header_order_then_body_link(self):
        message = make_message(
            "List-Unsubscribe: <mailto:b@c>, <https://a/u>\r\n",
            '<a href="https://y.com/unsubscribe">here</a>'
        )

        candidates = ActionResolver().candidates(message)

        assert candidates == [
            MailtoAction(email_address="b@c"),
            HttpAction(url="https://a/u"),
            TryOpenLinkAction(url="https://y.com/unsubscribe"),
        ]

    def test_resolve_is_repeatable(self):
        resolver = ActionResolver()
        message = make_message("List-Unsubscribe: <https://a/u>, <mailto:b@c>\r\n")

        assert resolver.resolve(message) == resolver.resolve(message)
