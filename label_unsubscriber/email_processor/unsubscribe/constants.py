"""
Constants and shared configuration for unsubscribe functionality.

This module contains the header and link patterns, the priority table and
the outcome wording used across the unsubscribe pipeline.
"""

import re
from typing import List, Pattern

# Keywords that mark an HTML anchor as an unsubscribe link
LINK_KEYWORDS: List[str] = ['unsubscribe', 'optout', 'opt-out', 'remove']

LINK_KEYWORD_PATTERN: Pattern = re.compile(
    '|'.join(re.escape(keyword) for keyword in LINK_KEYWORDS),
    re.IGNORECASE
)

HTTP_LINK_PATTERN: Pattern = re.compile(r'^https?://', re.IGNORECASE)

WHITESPACE_PATTERN: Pattern = re.compile(r'\s+')

# Header lines, matched at the start of a line. Continuation lines start
# with whitespace (RFC 5322 folding).
LIST_UNSUBSCRIBE_PATTERN: Pattern = re.compile(
    r'^list-unsubscribe:[ \t]*(.*(?:\r?\n[ \t].*)*)',
    re.IGNORECASE | re.MULTILINE
)

LIST_UNSUBSCRIBE_POST_PATTERN: Pattern = re.compile(
    r'^list-unsubscribe-post:[ \t]*(.*(?:\r?\n[ \t].*)*)',
    re.IGNORECASE | re.MULTILINE
)

FOLDED_LINE_PATTERN: Pattern = re.compile(r'\r?\n[ \t]+')

HEADER_BODY_SEPARATOR: Pattern = re.compile(r'\r?\n\r?\n')

# Only closed <...> entries count; an unclosed "<" is restarted by the next one
HEADER_URL_PATTERN: Pattern = re.compile(r'<([^<>]*)>')

SCHEME_PATTERN: Pattern = re.compile(r'^([^:]+):')

MAILTO_PATH_PATTERN: Pattern = re.compile(r'^[^:]+:([^?&#]+)')

# Method classification constants
SCHEME_HTTP_PREFIX = 'http'
SCHEME_MAILTO = 'mailto'

# Priority table (higher number = higher priority)
PRIORITY_HTTP_POST = 3.0
PRIORITY_MAILTO = 2.0
PRIORITY_HTTP = 1.5
PRIORITY_OPEN_LINK = 1.0
PRIORITY_UNKNOWN = 0.0

# Defaults applied when a mailto: target omits subject or body
DEFAULT_MAIL_SUBJECT = 'unsubscribe'
DEFAULT_MAIL_BODY = 'unsubscribe'

# Echoed subject/body text is cut to keep audit records compact
ECHO_TEXT_LIMIT = 40
ELLIPSIS = '...'

# Outcome wording
CHANNEL_HEADER = 'via header'
CHANNEL_EMAIL = 'via email'
CHANNEL_OPEN_LINK = 'by opening link'
CHANNEL_UNKNOWN = "don't know how"

SUMMARY_NO_ACTION = 'Failed: no action found'
SUMMARY_ERROR = 'Error'
LOCATION_NOT_FOUND = 'not found'
