"""OpenTelemetry tracing + structured logging for the search controller.

``Telemetry`` wraps an OTel tracer and a trace-aware logger. Controller
code obtains the active instance with ``get_telemetry()``; the TUI installs
its own with ``set_telemetry()`` and the CLI can swap in a console exporter
with ``Telemetry.for_console()``. Span helpers never raise, so tracing
cannot break a fetch or a keystroke.

Log calls may pass ``extra={"query": ..., "page": ...}``; the JSON-lines
file formatter copies those fields into each line next to the trace ids.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, Mapping

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

LOGGER_NAME = "typeahead"

ZERO_TRACE_ID = "0" * 32
ZERO_SPAN_ID = "0" * 16

# Record attributes copied into JSON log lines when a caller sets them
STRUCTURED_FIELDS = ("query", "page", "generation", "items", "product_id")


class SpanHandle:
    """Attribute setter for one span. Errors from OTel are ignored."""

    def __init__(self, span: trace.Span) -> None:
        self._span = span

    def set_attribute(self, key: str, value: Any) -> None:
        try:
            self._span.set_attribute(key, value)
        except Exception:
            pass

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        for key, value in attributes.items():
            self.set_attribute(key, value)


class _TraceLogAdapter(logging.LoggerAdapter):
    """Adds ``trace_id``/``span_id`` of the current span to the record's extra."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:  # type: ignore[override]
        extra = dict(kwargs.get("extra") or {})
        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            extra["trace_id"] = format(ctx.trace_id, "032x")
            extra["span_id"] = format(ctx.span_id, "016x")
        kwargs["extra"] = extra
        return msg, kwargs


class Telemetry:
    """Tracer plus trace-aware logger shared by the controller and the TUI."""

    def __init__(self, tracer: trace.Tracer) -> None:
        self._tracer = tracer
        self.log: _TraceLogAdapter = _TraceLogAdapter(logging.getLogger(LOGGER_NAME), {})

    @contextmanager
    def span(self, name: str, **attributes: Any) -> Generator[SpanHandle, None, None]:
        """Open a span, optionally with initial attributes.

        Attribute names may contain dots; pass them with ``**{"fetch.page": 2}``.
        Exceptions raised inside the block are recorded by OTel and re-raised.
        """
        with self._tracer.start_as_current_span(name) as otel_span:
            handle = SpanHandle(otel_span)
            handle.set_attributes(attributes)
            yield handle

    @classmethod
    def _with_exporter(cls, exporter: Any) -> Telemetry:
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        return cls(provider.get_tracer(LOGGER_NAME))

    @classmethod
    def for_testing(cls) -> tuple[Telemetry, InMemorySpanExporter]:
        """Telemetry recording spans in memory.

        Returns:
            ``(Telemetry, InMemorySpanExporter)``; assert on
            ``exporter.get_finished_spans()``.
        """
        exporter = InMemorySpanExporter()
        return cls._with_exporter(exporter), exporter

    @classmethod
    def for_console(cls) -> Telemetry:
        """Telemetry printing each finished span as JSON to stderr."""
        return cls._with_exporter(ConsoleSpanExporter(out=sys.stderr))

    @classmethod
    def noop(cls) -> Telemetry:
        """Telemetry whose spans are discarded."""
        return cls(TracerProvider().get_tracer(LOGGER_NAME))


_active: Telemetry | None = None


def get_telemetry() -> Telemetry:
    """Return the active Telemetry instance (noop until one is set)."""
    global _active
    if _active is None:
        _active = Telemetry.noop()
    return _active


def set_telemetry(tel: Telemetry | None) -> None:
    """Install *tel* as the active instance; None resets to noop on next get."""
    global _active
    _active = tel


# ---------------------------------------------------------------------------
# JSON-lines file logging
# ---------------------------------------------------------------------------


class _JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Always carries ``ts``, ``level``, ``logger``, ``trace``, ``span`` and
    ``msg``; any of ``STRUCTURED_FIELDS`` present on the record are added.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "trace": getattr(record, "trace_id", ZERO_TRACE_ID),
            "span": getattr(record, "span_id", ZERO_SPAN_ID),
            "msg": record.getMessage(),
        }
        for name in STRUCTURED_FIELDS:
            if hasattr(record, name):
                entry[name] = getattr(record, name)
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _SearchLogHandler(logging.FileHandler):
    """Marker subclass so the handler can be found and removed again."""


def configure_file_logging(log_dir: str = "logs", level: int = logging.DEBUG) -> str:
    """Send the ``typeahead`` logger to ``{log_dir}/search-YYYYMMDD.log``.

    Only one such handler is ever attached; later calls return the path
    of the file already being written.

    Returns:
        The path of the active log file.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for existing in logger.handlers:
        if isinstance(existing, _SearchLogHandler):
            return existing.baseFilename

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f"search-{datetime.now().strftime('%Y%m%d')}.log")

    handler = _SearchLogHandler(log_path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(_JsonFormatter())

    logger.setLevel(min(logger.level or level, level))
    logger.addHandler(handler)
    return handler.baseFilename


def remove_file_logging() -> None:
    """Detach and close the handler added by ``configure_file_logging``."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, _SearchLogHandler):
            logger.removeHandler(handler)
            handler.close()
