"""Tests for structured logging — JSON fields, shortcode correlation, idempotent setup."""

import json
import logging

from buildshare.core.shortcode import shortcode_for_identifier
from buildshare.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "buildshare.services.build_store", logging.INFO, __file__, 1,
        "Build created", None, None,
    )
    record.__dict__.update(extra)
    return record


def test_extra_fields_are_surfaced():
    out = json.loads(JSONFormatter().format(
        _record(operation="create", error_code="CONFLICT", attempt=2),
    ))
    assert out["message"] == "Build created"
    assert out["operation"] == "create"
    assert out["error_code"] == "CONFLICT"
    assert out["attempt"] == 2
    assert "shortcode" not in out


def test_identifier_is_derived_from_shortcode():
    code = shortcode_for_identifier(123456789)
    out = json.loads(JSONFormatter().format(_record(shortcode=code)))
    assert out["shortcode"] == code
    assert out["identifier"] == 123456789


def test_explicit_identifier_wins_and_bad_shortcode_is_ignored():
    out = json.loads(JSONFormatter().format(_record(shortcode="x", identifier=7)))
    assert out["identifier"] == 7
    out = json.loads(JSONFormatter().format(_record(shortcode="not-valid")))
    assert "identifier" not in out


def test_setup_logging_replaces_its_own_handler():
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        first = setup_logging("INFO", "json")
        second = setup_logging("DEBUG", "text")
        assert first not in root.handlers
        assert sum(h.get_name() == "buildshare" for h in root.handlers) == 1
        assert second in root.handlers
        assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            if handler not in before:
                root.removeHandler(handler)
