"""
Structured logging for the unsubscribe pipeline.

Each record is one JSON document: the component, the context of the message
being processed, and per-call fields. Unsubscribe URLs usually carry
per-recipient tokens, so text and field values go through
SensitiveDataFilter before anything is written.
"""

import json
import logging
import re
import time
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

MASK = '***'

# Query parameters that identify or authenticate the recipient of a list mail
SENSITIVE_QUERY_PARAMS = ('token', 'signature', 'sig', 'key', 'auth', 'hash')

# name=value / name: value pairs in free text
SENSITIVE_ASSIGNMENTS = ('password', 'passwd', 'api_key', 'secret')

LOG_FORMATS = {
    'json': '%(message)s',
    'text': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
}


class SensitiveDataFilter:
    """Mask recipient tokens and credentials in log text and fields."""

    SENSITIVE_KEYS = frozenset(SENSITIVE_QUERY_PARAMS + SENSITIVE_ASSIGNMENTS)

    def __init__(self):
        params = '|'.join(SENSITIVE_QUERY_PARAMS)
        assignments = '|'.join(SENSITIVE_ASSIGNMENTS)
        self.query_pattern = re.compile(rf'([?&;](?:{params})=)[^&#;\s"]+', re.IGNORECASE)
        self.assignment_pattern = re.compile(
            rf'\b({assignments})(["\']?\s*[:=]\s*["\']?)[^"\'\s&]+',
            re.IGNORECASE
        )

    def filter_message(self, message: str) -> str:
        masked = self.query_pattern.sub(rf'\g<1>{MASK}', message)
        return self.assignment_pattern.sub(rf'\g<1>\g<2>{MASK}', masked)

    def filter_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask a field dict, recursing into nested dicts and lists."""
        return {key: self._filter_value(key, value) for key, value in data.items()}

    def _filter_value(self, key: Any, value: Any) -> Any:
        if str(key).lower() in self.SENSITIVE_KEYS:
            return MASK
        if isinstance(value, str):
            return self.filter_message(value)
        if isinstance(value, dict):
            return self.filter_dict(value)
        if isinstance(value, (list, tuple)):
            return [self._filter_value('', item) for item in value]
        return value


class UnsubscribeLogger:
    """JSON logger for one pipeline component, with message context and outcome counters."""

    def __init__(self, component: str):
        self.component = component
        self.logger = logging.getLogger(f"unsubscribe.{component}")
        self.context: Dict[str, Any] = {}
        self.filter = SensitiveDataFilter()
        self._counts: Counter = Counter()

    def add_context(self, key: str, value: Any) -> None:
        """Attach a field to every later record from this logger."""
        self.context[key] = value

    def _document(self, message: str, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        document = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'component': self.component,
            'message': self.filter.filter_message(message),
            'context': self.filter.filter_dict(self.context),
        }
        if extra:
            document['extra'] = self.filter.filter_dict(extra)
        return document

    def log(self, level: int, message: str, extra: Optional[Dict[str, Any]] = None):
        if self.logger.isEnabledFor(level):
            self.logger.log(level, json.dumps(self._document(message, extra), default=str))

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log(logging.WARNING, message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.log(logging.ERROR, message, extra)

    def log_exception(self, exception: BaseException, extra: Optional[Dict[str, Any]] = None):
        """Error record with the exception type, its context fields and the traceback."""
        document = self._document(f"Exception occurred: {exception}", extra)
        document['exception'] = {
            'type': type(exception).__name__,
            'message': self.filter.filter_message(str(exception)),
        }

        context = getattr(exception, 'context', None)
        if isinstance(context, dict) and context:
            document['exception']['context'] = self.filter.filter_dict(context)

        self.logger.error(json.dumps(document, default=str), exc_info=exception)

    @contextmanager
    def time_operation(self, operation_name: str) -> Iterator[None]:
        """Log the duration of the block, and whether it raised."""
        started = time.perf_counter()
        fields: Dict[str, Any] = {'operation': operation_name}
        self.debug(f"Starting {operation_name}", fields)

        try:
            yield
        except Exception as e:
            fields.update(status='failure', error=str(e),
                          duration_seconds=round(time.perf_counter() - started, 3))
            self.error(f"Operation {operation_name} failed", fields)
            raise

        fields.update(status='success', duration_seconds=round(time.perf_counter() - started, 3))
        self.info(f"Operation {operation_name} completed", fields)

    @contextmanager
    def scoped_context(self, context: Dict[str, Any]) -> Iterator[None]:
        """Add context fields for the duration of the block only."""
        saved = self.context
        self.context = {**saved, **context}
        try:
            yield
        finally:
            self.context = saved

    def log_operation_count(self, operation: str, success: bool):
        self._counts[(operation, 'success' if success else 'failure')] += 1

    def get_operation_stats(self) -> Dict[str, Dict[str, int]]:
        """Per-operation totals, e.g. {'http': {'total': 2, 'success': 1, 'failure': 1}}."""
        stats: Dict[str, Dict[str, int]] = {}
        for (operation, result), count in self._counts.items():
            entry = stats.setdefault(operation, {'total': 0, 'success': 0, 'failure': 0})
            entry[result] += count
            entry['total'] += count
        return stats


def configure_unsubscribe_logging(
    level: str = "INFO",
    format: str = "json",
    output: str = "console",
    filename: Optional[str] = None
) -> logging.Logger:
    """
    Replace the handlers of the 'unsubscribe' logger hierarchy.

    Args:
        level: Level name, e.g. 'INFO' or 'debug'
        format: 'json' (the record as-is) or 'text' (timestamped lines)
        output: 'console', 'file' or 'both'
        filename: Log file, required for file output
    """
    logger = logging.getLogger("unsubscribe")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = []
    if output in ('console', 'both'):
        handlers.append(logging.StreamHandler())
    if output in ('file', 'both') and filename:
        handlers.append(logging.FileHandler(filename))

    formatter = logging.Formatter(LOG_FORMATS.get(format, LOG_FORMATS['text']))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
