"""
Secure Logging - Logging with automatic sensitive data masking

This module provides:
- SensitiveDataFilter for masking credentials and requester contact details in logs
- SecureFormatter / JSONSecureFormatter for text and structured output
- configure_secure_logging() for the one-time global setup done by main.py

Usage:
    from helpdesk.utils.secure_logging import configure_secure_logging

    configure_secure_logging(level=logging.INFO, format_type="json")

    logger.info(f"Connecting to {settings.mongodb_uri}")  # Credentials will be masked
"""

import re
import logging
import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from logging import LogRecord, Filter, Formatter

Replacement = Union[str, Callable[[re.Match], str]]

# Each tuple: (compiled regex pattern, replacement)
# Ticket ids are long bare digit runs, so phone numbers are only masked with a "+" prefix.
SENSITIVE_PATTERNS: List[Tuple[re.Pattern, Replacement]] = [
    # Bearer/Auth tokens
    (re.compile(r'(Bearer\s+)[a-zA-Z0-9_.-]+', re.IGNORECASE), r'\1[TOKEN_REDACTED]'),
    (re.compile(r'(Authorization:\s*)[^\s]+', re.IGNORECASE), r'\1[REDACTED]'),

    # JWT tokens (3 base64 parts separated by dots)
    (re.compile(r'eyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+'), '[JWT_REDACTED]'),

    # Passwords
    (re.compile(r'(password|passwd|pwd|secret|token)["\s:=]+["\']?([^\s"\']{4,})["\']?', re.IGNORECASE), r'\1=[REDACTED]'),

    # MongoDB URIs with credentials
    (re.compile(r'mongodb(\+srv)?://([^:/]+):([^@]+)@'), r'mongodb\1://[USER]:[PASS]@'),

    # Email addresses (hide local part and most of the domain)
    (re.compile(r'([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+)\.([a-zA-Z]{2,})'), lambda m: f"{m.group(1)[:1]}***@***.{m.group(3)}"),

    # International phone numbers
    (re.compile(r'\+\d{1,3}[\s-]?\d[\d\s-]{6,13}\d'), '[PHONE_REDACTED]'),

    # Generic secret patterns
    (re.compile(r'(secret[_-]?key|private[_-]?key|access[_-]?token)["\s:=]+["\']?([^\s"\']{8,})["\']?', re.IGNORECASE), r'\1=[REDACTED]'),
]

_RESERVED_ATTRS = (
    'msg', 'args', 'name', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName', 'taskName',
    'processName', 'process', 'exc_info', 'exc_text', 'stack_info',
)


class SensitiveDataFilter(Filter):
    """
    Logging filter that masks sensitive data in log messages.

    Masks database credentials, tokens, passwords, e-mail addresses and
    phone numbers in the message, its arguments and string/dict extras.
    """

    def __init__(self, name: str = '', additional_patterns: Optional[List[Tuple[re.Pattern, Replacement]]] = None):
        super().__init__(name)
        self.patterns = SENSITIVE_PATTERNS.copy()
        if additional_patterns:
            self.patterns.extend(additional_patterns)

    def filter(self, record: LogRecord) -> bool:
        """Mask the record in place; always lets it through."""
        if record.msg:
            record.msg = self._mask_sensitive(str(record.msg))

        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._mask_value(v) for k, v in record.args.items()}
            elif isinstance(record.args, (list, tuple)):
                record.args = tuple(self._mask_value(arg) for arg in record.args)

        for key, value in list(record.__dict__.items()):
            if key in _RESERVED_ATTRS:
                continue
            if isinstance(value, str):
                setattr(record, key, self._mask_sensitive(value))
            elif isinstance(value, dict):
                setattr(record, key, self._mask_dict(value))

        return True

    def _mask_value(self, value: Any) -> Any:
        # Numbers keep their type so %d/%s placeholders still format
        if isinstance(value, str):
            return self._mask_sensitive(value)
        return value

    def _mask_sensitive(self, text: str) -> str:
        """Apply all masking patterns to text."""
        if not text:
            return text

        result = text
        for pattern, replacement in self.patterns:
            result = pattern.sub(replacement, result)
        return result

    def _mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively mask sensitive data in a dictionary."""
        result = {}
        for key, value in data.items():
            if isinstance(value, str):
                result[key] = self._mask_sensitive(value)
            elif isinstance(value, dict):
                result[key] = self._mask_dict(value)
            elif isinstance(value, (list, tuple)):
                result[key] = [self._mask_value(v) for v in value]
            else:
                result[key] = value
        return result


class SecureFormatter(Formatter):
    """
    Text formatter with trace ID and masking.

    Format: timestamp - logger - level - [trace_id] - message
    """

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        include_trace_id: bool = True,
    ):
        if fmt is None:
            if include_trace_id:
                fmt = '%(asctime)s - %(name)s - %(levelname)s - [%(trace_id)s] - %(message)s'
            else:
                fmt = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        super().__init__(fmt, datefmt)
        self.include_trace_id = include_trace_id
        self._sensitive_filter = SensitiveDataFilter()

    def format(self, record: LogRecord) -> str:
        if self.include_trace_id and not hasattr(record, 'trace_id'):
            record.trace_id = '-'

        self._sensitive_filter.filter(record)

        return super().format(record)


class JSONSecureFormatter(Formatter):
    """
    JSON log formatter with sensitive data masking.

    Outputs one JSON object per line for log aggregation systems.
    """

    def __init__(self):
        super().__init__()
        self._sensitive_filter = SensitiveDataFilter()

    def format(self, record: LogRecord) -> str:
        self._sensitive_filter.filter(record)

        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if hasattr(record, 'trace_id'):
            log_data['trace_id'] = record.trace_id

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in ('message', 'trace_id', 'asctime'):
                continue
            if not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


def configure_secure_logging(
    level: Union[int, str] = logging.INFO,
    format_type: str = 'text',  # 'text' or 'json'
    include_trace_id: bool = True,
    additional_patterns: Optional[List[Tuple[re.Pattern, Replacement]]] = None,
) -> None:
    """
    Configure secure logging globally.

    Replaces the root logger's handlers with one masked console handler.

    Args:
        level: Logging level (number or name such as "INFO")
        format_type: 'text' for human-readable, 'json' for structured logs
        include_trace_id: Include trace_id in text output
        additional_patterns: Additional regex patterns to mask

    Example:
        configure_secure_logging(level=logging.DEBUG, format_type='json')
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.addFilter(SensitiveDataFilter(additional_patterns=additional_patterns))

    if format_type == 'json':
        formatter = JSONSecureFormatter()
    else:
        formatter = SecureFormatter(include_trace_id=include_trace_id)

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)


__all__ = [
    'SensitiveDataFilter',
    'SecureFormatter',
    'JSONSecureFormatter',
    'SENSITIVE_PATTERNS',
    'configure_secure_logging',
]
