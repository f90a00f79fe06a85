"""Tests for log sanitization filter.

Tests verify that keys, tokens and contact details pasted into chat
messages are redacted before they reach the logs.
"""

import logging
from io import StringIO

import pytest

from workout_coach.utils.log_sanitizer import (
    LogSanitizationFilter,
    install_log_sanitizer,
    sanitize_string,
)


class TestLogSanitizationFilter:
    """Test cases for LogSanitizationFilter."""

    @pytest.fixture
    def sanitizer(self) -> LogSanitizationFilter:
        return LogSanitizationFilter()

    def test_redacts_openai_api_key(self, sanitizer: LogSanitizationFilter) -> None:
        text = "Using API key sk-1234567890abcdefghijklmnopqrstuvwxyz"
        result = sanitizer._sanitize(text)
        assert "sk-1234567890" not in result
        assert "[REDACTED_OPENAI_KEY]" in result

    def test_redacts_openai_project_key(self, sanitizer: LogSanitizationFilter) -> None:
        text = "key=sk-proj-" + "A" * 30
        result = sanitizer._sanitize(text)
        assert "sk-proj-" not in result

    def test_redacts_anthropic_api_key(self, sanitizer: LogSanitizationFilter) -> None:
        text = "Using API key sk-ant-REDACTED"
        result = sanitizer._sanitize(text)
        assert "sk-ant-api03" not in result
        assert "[REDACTED_ANTHROPIC_KEY]" in result

    def test_redacts_bearer_token(self, sanitizer: LogSanitizationFilter) -> None:
        result = sanitizer._sanitize("Authorization: Bearer abc.def.ghi")
        assert "abc.def.ghi" not in result

    @pytest.mark.parametrize("field", ["password", "api_key", "token"])
    def test_redacts_credential_fields(self, sanitizer: LogSanitizationFilter, field: str) -> None:
        result = sanitizer._sanitize(f'{{"{field}": "hunter2"}}')
        assert "hunter2" not in result
        assert "[REDACTED]" in result

    def test_redacts_email(self, sanitizer: LogSanitizationFilter) -> None:
        result = sanitizer._sanitize("User lifter@example.com logged a workout")
        assert "lifter@example.com" not in result
        assert "[REDACTED_EMAIL]" in result

    def test_leaves_workout_text_alone(self, sanitizer: LogSanitizationFilter) -> None:
        text = "I did 3 sets of bench press at 135 lbs for 10 reps"
        assert sanitizer._sanitize(text) == text

    def test_filter_sanitizes_args(self, sanitizer: LogSanitizationFilter) -> None:
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Message from %s with %d sets",
            args=("lifter@example.com", 3),
            exc_info=None,
        )

        assert sanitizer.filter(record) is True
        assert record.getMessage() == "Message from [REDACTED_EMAIL] with 3 sets"


class TestInstallLogSanitizer:
    """Tests for installing the filter."""

    def test_installs_on_named_logger(self) -> None:
        logger = logging.getLogger("workout_coach.test_sanitizer")
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        sanitizer = install_log_sanitizer("workout_coach.test_sanitizer")
        try:
            logger.info("key sk-1234567890abcdefghijklmnopqrstuvwxyz")
            assert "[REDACTED_OPENAI_KEY]" in stream.getvalue()
        finally:
            logger.removeHandler(handler)
            logger.removeFilter(sanitizer)

    def test_installs_on_root_handlers(self) -> None:
        root = logging.getLogger()
        handler = logging.StreamHandler(StringIO())
        root.addHandler(handler)
        sanitizer = install_log_sanitizer()
        try:
            assert sanitizer in handler.filters
            assert sanitizer in root.filters
        finally:
            root.removeHandler(handler)
            root.removeFilter(sanitizer)


def test_sanitize_string() -> None:
    assert sanitize_string("mail me at a@b.io") == "mail me at [REDACTED_EMAIL]"
