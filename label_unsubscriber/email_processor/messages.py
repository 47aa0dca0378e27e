"""
Conversion of raw RFC 822 bytes into RawMessage values.
"""

import email
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.message import Message
from typing import Optional
from urllib.parse import quote

from label_unsubscriber.email_processor.unsubscribe.constants import HEADER_BODY_SEPARATOR
from label_unsubscriber.email_processor.unsubscribe.types import RawMessage

GMAIL_PERMALINK_TEMPLATE = 'https://mail.google.com/mail/u/0/#search/rfc822msgid%3A{message_id}'


def decode_header_value(value: Optional[str]) -> str:
    """Decode RFC 2047 encoded words; fall back to the raw value."""
    if not value:
        return ''
    try:
        return str(make_header(decode_header(value)))
    except (UnicodeDecodeError, LookupError, HeaderParseError):
        return str(value)


def extract_html_body(email_msg: Message) -> str:
    """Return the first text/html part, decoded with its charset."""
    for part in email_msg.walk():
        if part.get_content_type() != 'text/html':
            continue
        if part.get_content_disposition() == 'attachment':
            continue

        payload = part.get_payload(decode=True)
        if payload is None:
            continue
        charset = part.get_content_charset() or 'utf-8'
        try:
            return payload.decode(charset, errors='replace')
        except LookupError:
            return payload.decode('utf-8', errors='replace')

    return ''


def build_permalink(message_id: str, template: str = GMAIL_PERMALINK_TEMPLATE) -> str:
    message_id = (message_id or '').strip().strip('<>')
    if not message_id:
        return ''
    return template.format(message_id=quote(message_id, safe=''))


def parse_raw_message(raw: bytes, key: Optional[str] = None,
                      permalink_template: str = GMAIL_PERMALINK_TEMPLATE) -> RawMessage:
    """
    Build a RawMessage from the full bytes of a message.

    Args:
        raw: RFC 822 message bytes
        key: Identifier the label store uses to find the message again
        permalink_template: Format string with a {message_id} placeholder

    Returns:
        RawMessage with the header block, HTML body, sender, subject and permalink
    """
    text = raw.decode('utf-8', errors='replace')
    header_block = HEADER_BODY_SEPARATOR.split(text, 1)[0]

    email_msg = email.message_from_bytes(raw)

    return RawMessage(
        header_block=header_block,
        html_body=extract_html_body(email_msg),
        from_address=decode_header_value(email_msg.get('From')),
        subject=decode_header_value(email_msg.get('Subject')),
        permalink=build_permalink(email_msg.get('Message-ID', ''), permalink_template),
        key=key
    )
