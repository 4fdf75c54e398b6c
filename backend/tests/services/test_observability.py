"""Structured Logging — JSONFormatter output shape."""

import json
import logging

from app.infrastructure.observability import JSONFormatter


def _record(**extra):
    record = logging.LogRecord(
        name="app.test", level=logging.INFO, pathname=__file__, lineno=1,
        msg="Tool saved", args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_base_fields():
    log = json.loads(JSONFormatter().format(_record()))
    assert log["level"] == "INFO"
    assert log["logger"] == "app.test"
    assert log["message"] == "Tool saved"
    assert "timestamp" in log


def test_extra_fields_surfaced_when_present():
    log = json.loads(JSONFormatter().format(
        _record(tool_name="get_weather", property_name="city", previous_name=None),
    ))
    assert log["tool_name"] == "get_weather"
    assert log["property_name"] == "city"
    assert "previous_name" not in log
