"""
Unit tests for structured logging.
"""

import json
import logging

import pytest

from app.logging_config import JSONFormatter, log_stage, stage_var, trace_id_var


def make_record(msg="hello", **extra):
    record = logging.LogRecord("ingestion", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_whitelisted_extras_included(self):
        token = trace_id_var.set("trace-1")
        try:
            output = json.loads(JSONFormatter().format(make_record(provider="NewsAPI", inserted=3, secret="x")))
        finally:
            trace_id_var.reset(token)

        assert output["message"] == "hello"
        assert output["level"] == "INFO"
        assert output["trace_id"] == "trace-1"
        assert output["provider"] == "NewsAPI"
        assert output["inserted"] == 3
        assert "secret" not in output

    def test_non_json_values_stringified(self):
        from datetime import datetime

        output = json.loads(JSONFormatter().format(make_record(payload_sample=[{"at": datetime(2024, 1, 1)}])))

        assert output["payload_sample"] == [{"at": "2024-01-01 00:00:00"}]


class TestLogStage:
    def test_stage_events(self, caplog):
        with caplog.at_level(logging.INFO, logger="ingestion"):
            with log_stage("ingest:NewsAPI", trace_id="trace-2"):
                assert stage_var.get() == "ingest:NewsAPI"

        events = [getattr(r, "event", None) for r in caplog.records if r.name == "ingestion"]
        assert events == ["stage_start", "stage_complete"]
        assert stage_var.get() is None

    def test_failure_logged_and_reraised(self, caplog):
        with caplog.at_level(logging.INFO, logger="ingestion"):
            with pytest.raises(ValueError):
                with log_stage("ingest:NewsAPI"):
                    raise ValueError("bad payload")

        failed = [r for r in caplog.records if getattr(r, "event", None) == "stage_failed"]
        assert len(failed) == 1
        assert failed[0].levelno == logging.ERROR
