"""
Unsubscribe action resolution and execution pipeline.

This module provides:
- Target extraction from List-Unsubscribe headers and HTML bodies
- Classification of targets into typed candidate actions
- Priority ranking of candidates
- Per-message processing with exactly one recorded outcome
- Batch processing that isolates per-message failures
"""

from .extractors import HeaderExtractor, LinkScanner
from .classifiers import ActionParser
from .ranking import ActionRanker
from .processors import (
    ActionResolver, ThreadProcessor, BatchRunner, LabelStore, AuditLog
)
from .types import (
    RawMessage, LabelConfig, UnsubscribeAction, HttpAction, MailtoAction,
    TryOpenLinkAction, UnknownAction, Outcome, BatchResult
)

__all__ = [
    'HeaderExtractor',
    'LinkScanner',
    'ActionParser',
    'ActionRanker',
    'ActionResolver',
    'ThreadProcessor',
    'BatchRunner',
    'LabelStore',
    'AuditLog',
    'RawMessage',
    'LabelConfig',
    'UnsubscribeAction',
    'HttpAction',
    'MailtoAction',
    'TryOpenLinkAction',
    'UnknownAction',
    'Outcome',
    'BatchResult'
]
