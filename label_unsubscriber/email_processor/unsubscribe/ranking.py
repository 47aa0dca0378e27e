"""
Priority ranking of candidate unsubscribe actions.
"""

from typing import Dict, Iterable, Optional

from .constants import (
    PRIORITY_HTTP_POST, PRIORITY_MAILTO, PRIORITY_HTTP,
    PRIORITY_OPEN_LINK, PRIORITY_UNKNOWN
)
from .types import UnsubscribeAction, HttpAction, RankedActions

# HttpAction is split on post body presence, keyed as 'http_post' / 'http'
DEFAULT_PRIORITIES: Dict[str, float] = {
    'http_post': PRIORITY_HTTP_POST,
    'mailto': PRIORITY_MAILTO,
    'http': PRIORITY_HTTP,
    'open_link': PRIORITY_OPEN_LINK,
    'unknown': PRIORITY_UNKNOWN,
}


def priority_key(action: UnsubscribeAction) -> str:
    """Name of the priority table entry that applies to an action."""
    if isinstance(action, HttpAction) and action.has_post_body:
        return 'http_post'
    return action.kind


class ActionRanker:
    """Order candidate actions by priority, highest first.

    Ties keep their input order, so header targets stay in document order and
    stay ahead of a scanned body link of equal priority.
    """

    def __init__(self, priorities: Optional[Dict[str, float]] = None):
        self.priorities = dict(DEFAULT_PRIORITIES)
        if priorities:
            self.priorities.update(priorities)

    def priority(self, action: UnsubscribeAction) -> float:
        return self.priorities.get(priority_key(action), PRIORITY_UNKNOWN)

    def rank(self, actions: Iterable[UnsubscribeAction]) -> RankedActions:
        # sorted() is stable, including with reverse=True
        return tuple(sorted(actions, key=self.priority, reverse=True))

    def best(self, actions: Iterable[UnsubscribeAction]) -> Optional[UnsubscribeAction]:
        ranked = self.rank(actions)
        return ranked[0] if ranked else None
