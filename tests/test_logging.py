"""
Tests for log formatting helpers.
"""

import json
import logging

from alphachat.core.logging_config import JSONFormatter, filter_sensitive_data, truncate_large_data


def _record(extra_fields=None):
    record = logging.LogRecord("alphachat.test", logging.INFO, __file__, 10, "LLM call completed", None, None)
    if extra_fields is not None:
        record.extra_fields = extra_fields
    return record


def test_json_formatter_includes_extra_fields():
    line = JSONFormatter().format(_record({"provider": "openai", "total_tokens": 15}))
    entry = json.loads(line)

    assert entry["message"] == "LLM call completed"
    assert entry["level"] == "INFO"
    assert entry["provider"] == "openai"
    assert entry["total_tokens"] == 15


def test_credentials_are_masked():
    data = filter_sensitive_data({
        "username": "alice",
        "password": "hunter22",
        "headers": {"Authorization": "Bearer abc"},
        "items": [{"api_key": "sk-1"}],
    })

    assert data["username"] == "alice"
    assert data["password"] == "***FILTERED***"
    assert data["headers"]["Authorization"] == "***FILTERED***"
    assert data["items"][0]["api_key"] == "***FILTERED***"


def test_truncate_large_data():
    assert truncate_large_data("short", max_length=10) == "short"
    truncated = truncate_large_data("x" * 20, max_length=10)
    assert truncated.startswith("x" * 10)
    assert "total length: 20" in truncated
