"""Tests for the Telemetry facade and JSON-lines file logging."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from typeahead.telemetry import (
    LOGGER_NAME,
    Telemetry,
    _JsonFormatter,
    configure_file_logging,
    get_telemetry,
    remove_file_logging,
    set_telemetry,
)


@pytest.fixture
def file_logging():
    yield
    remove_file_logging()


def test_span_exported_with_initial_attributes():
    telemetry, exporter = Telemetry.for_testing()

    with telemetry.span("search.fetch_page", **{"fetch.query": "shoe"}) as span:
        span.set_attribute("fetch.page", 2)

    (finished,) = exporter.get_finished_spans()
    assert finished.name == "search.fetch_page"
    assert dict(finished.attributes) == {"fetch.query": "shoe", "fetch.page": 2}


def test_span_records_exception_and_reraises():
    telemetry, exporter = Telemetry.for_testing()

    with pytest.raises(RuntimeError):
        with telemetry.span("search.fetch_page"):
            raise RuntimeError("x")

    (finished,) = exporter.get_finished_spans()
    assert any(event.name == "exception" for event in finished.events)


def test_get_telemetry_defaults_to_noop():
    set_telemetry(None)
    try:
        assert isinstance(get_telemetry(), Telemetry)
        assert get_telemetry() is get_telemetry()
    finally:
        set_telemetry(None)


def test_log_adapter_injects_trace_ids(caplog):
    telemetry, _ = Telemetry.for_testing()

    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        with telemetry.span("search.set_query"):
            telemetry.log.info("inside", extra={"query": "shoe"})
        telemetry.log.info("outside")

    inside, outside = caplog.records
    assert len(inside.trace_id) == 32
    assert inside.trace_id != "0" * 32
    assert inside.query == "shoe"
    assert not hasattr(outside, "trace_id")


def test_json_formatter_structured_fields():
    record = logging.LogRecord(LOGGER_NAME, logging.WARNING, __file__, 1, "slow %s", ("fetch",), None)
    record.query = "shoe"
    record.page = 3

    line = json.loads(_JsonFormatter().format(record))

    assert line["level"] == "WARNING"
    assert line["logger"] == LOGGER_NAME
    assert line["msg"] == "slow fetch"
    assert line["trace"] == "0" * 32
    assert (line["query"], line["page"]) == ("shoe", 3)
    assert "items" not in line


def test_configure_file_logging_writes_json_lines(tmp_path, file_logging):
    path = configure_file_logging(str(tmp_path / "logs"))
    assert Path(path).name.startswith("search-")
    # Second call keeps the first handler
    assert configure_file_logging(str(tmp_path / "other")) == path

    logging.getLogger(LOGGER_NAME).info("page loaded", extra={"page": 2})
    remove_file_logging()

    with open(path, encoding="utf-8") as f:
        entries = [json.loads(line) for line in f]
    assert entries[-1]["msg"] == "page loaded"
    assert entries[-1]["page"] == 2
    assert entries[-1]["span"] == "0" * 16


def test_remove_file_logging_detaches_handler(tmp_path):
    configure_file_logging(str(tmp_path))
    remove_file_logging()
    assert not any(
        isinstance(h, logging.FileHandler) for h in logging.getLogger(LOGGER_NAME).handlers
    )
