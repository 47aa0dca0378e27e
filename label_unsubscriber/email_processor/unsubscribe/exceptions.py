"""
Custom exceptions for unsubscribe processing with enhanced error context.

This module provides structured exception classes that carry context
information for better debugging and audit records.
"""

from typing import Dict, Any, Optional


class UnsubscribeError(Exception):
    """Base exception for the unsubscribe pipeline."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context

    def __str__(self) -> str:
        base_message = super().__str__()
        if self.context:
            context_info = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_message} (context: {context_info})"
        return base_message


class TransportError(UnsubscribeError):
    """Raised when an HTTP request or an email send cannot be completed."""

    def __init__(self, message: str, url: Optional[str] = None,
                 recipient: Optional[str] = None, status_code: Optional[int] = None):
        context = {}
        if url:
            context['url'] = url
        if recipient:
            context['recipient'] = recipient
        if status_code is not None:
            context['status_code'] = status_code
        super().__init__(message, context)
        self.url = url
        self.recipient = recipient
        self.status_code = status_code


class ProcessingError(UnsubscribeError):
    """Raised when a pipeline stage cannot continue."""

    def __init__(self, message: str, stage: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self) -> str:
        base_message = Exception.__str__(self)
        context_parts = []

        if self.stage:
            context_parts.append(f"stage={self.stage}")

        if self.details:
            context_parts.extend(f"{k}={v}" for k, v in self.details.items())

        if context_parts:
            return f"{base_message} ({', '.join(context_parts)})"
        return base_message
