"""Unit tests for structured logging and request ID correlation"""

import json
import logging

from observability.logging_config import JSONFormatter, RequestIDFilter
from observability.request_id import get_request_id, request_id_scope, set_request_id, request_id_var


def make_record(**extra):
    record = logging.LogRecord(
        name="storage_usage.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Storage recalculation completed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_context_fields():
    record = make_record(studio_slug="foto-lumen", total_bytes=2048, kind="POST_MEDIA")
    RequestIDFilter().filter(record)

    data = json.loads(JSONFormatter().format(record))

    assert data["message"] == "Storage recalculation completed"
    assert data["studio_slug"] == "foto-lumen"
    assert data["total_bytes"] == 2048
    assert data["kind"] == "POST_MEDIA"
    assert "request_id" in data


def test_request_id_scope_generates_and_restores():
    token = request_id_var.set(None)
    try:
        with request_id_scope() as run_id:
            assert get_request_id() == run_id
        assert get_request_id() == "no-request-id"
    finally:
        request_id_var.reset(token)


def test_request_id_scope_keeps_request_id():
    token = request_id_var.set(None)
    try:
        set_request_id("req-42")
        with request_id_scope() as run_id:
            assert run_id == "req-42"
        assert get_request_id() == "req-42"
    finally:
        request_id_var.reset(token)
