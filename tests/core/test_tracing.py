from unittest.mock import patch

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from auction.core import tracing


def test_setup_tracing_disabled_is_noop():
    with patch("auction.core.tracing.settings.ENABLE_TRACING", False), patch(
        "auction.core.tracing.FastAPIInstrumentor"
    ) as instrumentor:
        tracing.setup_tracing(FastAPI())

    instrumentor.instrument_app.assert_not_called()


def test_create_span_sets_attributes():
    with tracing.create_span("auction.place_bid", {"item.id": 3}) as span:
        span.set_attribute("bid.outcome", "accepted")


def test_add_trace_context_without_span():
    record = {"extra": {}}

    tracing.add_trace_context(record)

    assert record["extra"] == {}


def test_add_trace_context_inside_span():
    tracer = TracerProvider().get_tracer("test")
    record = {"extra": {}}

    with tracer.start_as_current_span("outer") as span:
        tracing.add_trace_context(record)
        expected = format(span.get_span_context().trace_id, "032x")

    assert record["extra"]["trace_id"] == expected
    assert len(record["extra"]["span_id"]) == 16
    assert trace.get_current_span().get_span_context().is_valid is False
