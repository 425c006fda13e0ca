"""
Formatter tests for flange_qc.middleware.logging_config.

Covers:
    - JSON output carries request and flange scope fields, skips unset ones
    - readable output tags request id, flange scope and duration
"""

import json
import logging

from flange_qc.middleware.logging_config import JSONFormatter, ReadableFormatter


def _record(level=logging.INFO, **extra):
    record = logging.LogRecord("flange_qc.test", level, __file__, 1, "hello %s", ("qc",), None)
    for key, val in extra.items():
        setattr(record, key, val)
    return record


class TestJSONFormatter:
    def test_scope_fields_included(self):
        out = json.loads(JSONFormatter().format(
            _record(request_id="abc123", flange_id=7, status=200, duration_ms=12.5)
        ))
        assert out["message"] == "hello qc"
        assert out["level"] == "INFO"
        assert out["request_id"] == "abc123"
        assert out["flange_id"] == 7
        assert out["status"] == 200
        assert "workpack_id" not in out
        assert "exception" not in out


class TestReadableFormatter:
    def test_tags(self):
        line = ReadableFormatter().format(
            _record(request_id="abc123", flange_id=7, workpack_id=3, duration_ms=12.4)
        )
        assert "flange_qc.test: hello qc" in line
        assert line.endswith("[req=abc123 flange=7 workpack=3 12ms]")

    def test_no_tags_without_extras(self):
        line = ReadableFormatter().format(_record())
        assert line.endswith("flange_qc.test: hello qc")
