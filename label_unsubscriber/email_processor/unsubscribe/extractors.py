"""
Unsubscribe target extraction from email headers and HTML body content.

This module handles the two places a message can advertise how to leave
a mailing list:
- Email headers (List-Unsubscribe per RFC 2369, List-Unsubscribe-Post per RFC 8058)
- Anchors in the HTML body whose link or label mentions unsubscribing
"""

from typing import List, Optional
from bs4 import BeautifulSoup

from .constants import (
    LIST_UNSUBSCRIBE_PATTERN, LIST_UNSUBSCRIBE_POST_PATTERN, FOLDED_LINE_PATTERN,
    HEADER_BODY_SEPARATOR, HEADER_URL_PATTERN, HTTP_LINK_PATTERN,
    LINK_KEYWORD_PATTERN, WHITESPACE_PATTERN
)
from .logging import UnsubscribeLogger
from .types import UnsubscribeHeaders, TryOpenLinkAction


class HeaderExtractor:
    """Extract List-Unsubscribe targets from a raw header block."""

    def __init__(self):
        self.logger = UnsubscribeLogger("header_extractor")

    def extract(self, header_block: str) -> UnsubscribeHeaders:
        """Return the first List-Unsubscribe and List-Unsubscribe-Post values.

        Folded continuation lines are joined into a single logical value.
        Anything after the first blank line is body text and is ignored.
        """
        if not header_block:
            return UnsubscribeHeaders()

        headers_only = HEADER_BODY_SEPARATOR.split(header_block, 1)[0]

        return UnsubscribeHeaders(
            unsubscribe=self._first_value(LIST_UNSUBSCRIBE_PATTERN, headers_only),
            post=self._first_value(LIST_UNSUBSCRIBE_POST_PATTERN, headers_only)
        )

    def _first_value(self, pattern, headers: str) -> Optional[str]:
        match = pattern.search(headers)
        if not match:
            return None
        return FOLDED_LINE_PATTERN.sub(' ', match.group(1)).strip()

    def split_targets(self, header_value: Optional[str]) -> List[str]:
        """Split a List-Unsubscribe value into its <...> targets, left to right.

        Unclosed entries are skipped. Whitespace inside the brackets is
        dropped, since folding may break a long URL across lines.
        """
        if not header_value:
            return []

        targets = []
        for payload in HEADER_URL_PATTERN.findall(header_value):
            target = WHITESPACE_PATTERN.sub('', payload)
            if target:
                targets.append(target)

        if not targets:
            self.logger.debug("List-Unsubscribe header has no usable targets", {
                'header_value': header_value
            })

        return targets

    def extract_targets(self, header_block: str) -> List[str]:
        return self.split_targets(self.extract(header_block).unsubscribe)


class LinkScanner:
    """Find the first human-facing unsubscribe link in an HTML body."""

    def __init__(self):
        self.logger = UnsubscribeLogger("link_scanner")

    def scan(self, html_body: Optional[str]) -> Optional[TryOpenLinkAction]:
        """Return a TryOpenLinkAction for the first matching http(s) anchor.

        An anchor matches when its href or its visible text contains one of
        the link keywords. Whitespace is removed from both before matching so
        line breaks inside a tag do not hide a match. Document order decides;
        there is no ranking among body links.
        """
        if not html_body:
            return None

        soup = BeautifulSoup(html_body, 'html.parser')

        for anchor in soup.find_all('a', href=True):
            href = WHITESPACE_PATTERN.sub('', anchor['href'])
            if not HTTP_LINK_PATTERN.match(href):
                continue

            label = WHITESPACE_PATTERN.sub('', anchor.get_text())
            if LINK_KEYWORD_PATTERN.search(href) or LINK_KEYWORD_PATTERN.search(label):
                self.logger.debug("Found unsubscribe link in body", {'url': href})
                return TryOpenLinkAction(url=href)

        return None
