"""Log sanitization filter to prevent credential/PII leakage in logs.

User utterances and model replies are logged while debugging, and either
may contain pasted keys or contact details. This filter redacts:
- API keys (OpenAI, Anthropic)
- Bearer tokens and authorization headers
- Password, api_key and token fields
- Email addresses

Usage:
    from workout_coach.utils.log_sanitizer import install_log_sanitizer

    logging.basicConfig(level=logging.INFO)
    install_log_sanitizer()
"""

import logging
import re
from typing import Any, Optional


class LogSanitizationFilter(logging.Filter):
    """Logging filter that redacts sensitive information from log messages."""

    # Order matters - more specific patterns should come before general ones
    PATTERNS: list[tuple[re.Pattern, str]] = [
        # Anthropic API keys (sk-ant-...) - must come before OpenAI pattern
        (re.compile(r'\bsk-ant-[a-zA-Z0-9-]{20,}'), '[REDACTED_ANTHROPIC_KEY]'),

        # OpenAI API keys, including project keys (sk-proj-...)
        (re.compile(r'\bsk-(?:proj-)?[a-zA-Z0-9_-]{20,}'), '[REDACTED_OPENAI_KEY]'),

        # Bearer tokens in Authorization headers
        (re.compile(r'Bearer\s+[a-zA-Z0-9_\-\.]+', re.IGNORECASE), 'Bearer [REDACTED_TOKEN]'),

        # Authorization header values (generic)
        (re.compile(r'(Authorization["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Credential fields
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(api_key["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)[^"\'&\s]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Email addresses
        (re.compile(r'\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b'), '[REDACTED_EMAIL]'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place; never drops it."""
        if record.msg:
            record.msg = self._sanitize(str(record.msg))

        if record.args:
            record.args = self._sanitize_args(record.args)

        return True

    def _sanitize(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _sanitize_args(self, args: Any) -> Any:
        """Recursively sanitize log arguments."""
        if isinstance(args, str):
            return self._sanitize(args)
        elif isinstance(args, tuple):
            return tuple(self._sanitize_args(arg) for arg in args)
        elif isinstance(args, list):
            return [self._sanitize_args(arg) for arg in args]
        elif isinstance(args, dict):
            return {k: self._sanitize_args(v) for k, v in args.items()}
        else:
            str_val = str(args)
            sanitized = self._sanitize(str_val)
            # Keep the original object unless something was redacted
            return sanitized if sanitized != str_val else args


def install_log_sanitizer(logger_name: Optional[str] = None) -> LogSanitizationFilter:
    """Install the log sanitization filter on loggers.

    Args:
        logger_name: If provided, install only on the named logger.
                    If None, install on the root logger and its handlers.

    Returns:
        The installed filter.
    """
    sanitizer = LogSanitizationFilter()

    if logger_name:
        logging.getLogger(logger_name).addFilter(sanitizer)
        return sanitizer

    root_logger = logging.getLogger()
    root_logger.addFilter(sanitizer)

    # Records from child loggers only pass through handler filters
    for handler in root_logger.handlers:
        handler.addFilter(sanitizer)

    return sanitizer


def sanitize_string(text: str) -> str:
    """Sanitize a string without going through the logging system."""
    return LogSanitizationFilter()._sanitize(text)
