"""Unit tests for structured logging."""

from __future__ import annotations

import json
import logging
import sys

from github_forker.forker.logging import JsonFormatter, configure_logging


def test_json_formatter_includes_extra_fields() -> None:
    record = logging.LogRecord(
        name="github_forker.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Could not rename repository",
        args=(),
        exc_info=None,
    )
    record.repo = "octocat/widget"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "github_forker.test"
    assert payload["message"] == "Could not rename repository"
    assert payload["extra"] == {"repo": "octocat/widget"}


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            name="github_forker.test",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg="Command failed",
            args=(),
            exc_info=sys.exc_info(),
        )

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exception"]


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        configure_logging("debug")
        configure_logging("info")

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert root.level == logging.INFO
        assert logging.getLogger("github").level == logging.INFO
        assert logging.getLogger("urllib3").level == logging.INFO
        assert root.handlers[0].stream is sys.stderr
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in original_handlers:
            root.addHandler(handler)
        root.setLevel(original_level)
