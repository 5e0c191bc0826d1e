"""
OpenTelemetry tracing for the HTTP layer, the database and the auction engine.

Engine operations open their own spans through ``create_span`` so a bid can be
followed from the request down to the row lock it waited on.
"""

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from fastapi import FastAPI
from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio
from opentelemetry.trace import Span, SpanKind, Tracer

from auction.core.config import settings
from auction.db.session import engine

TRACER_NAME = "auction.engine"


def build_tracer_provider() -> TracerProvider:
    """
    Build the provider that every span of the service is exported through.

    Spans go to the console in development and to ``OTLP_ENDPOINT`` when set.
    """
    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.PROJECT_NAME,
                "service.version": settings.VERSION,
                "deployment.environment": settings.ENVIRONMENT,
            }
        ),
        sampler=ParentBasedTraceIdRatio(settings.TRACE_SAMPLE_RATIO),
    )

    exporters = []
    if settings.ENVIRONMENT == "development":
        exporters.append(ConsoleSpanExporter())
    if settings.OTLP_ENDPOINT:
        exporters.append(OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT))
    for exporter in exporters:
        provider.add_span_processor(BatchSpanProcessor(exporter))

    return provider


def add_trace_context(record: Dict[str, Any]) -> None:
    """Loguru patcher stamping the active trace and span ids onto a record."""
    context = trace.get_current_span().get_span_context()
    if context.is_valid:
        record["extra"]["trace_id"] = format(context.trace_id, "032x")
        record["extra"]["span_id"] = format(context.span_id, "016x")


def setup_tracing(app: FastAPI) -> None:
    """
    Install the tracer provider and instrument FastAPI and SQLAlchemy.

    A broken exporter configuration is logged and leaves the service running
    without traces.
    """
    if not settings.ENABLE_TRACING:
        return

    try:
        provider = build_tracer_provider()
        trace.set_tracer_provider(provider)

        FastAPIInstrumentor.instrument_app(app, tracer_provider=provider, excluded_urls="api/health,metrics")
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=provider)
        logger.configure(patcher=add_trace_context)

        logger.info(f"Tracing enabled (sample ratio {settings.TRACE_SAMPLE_RATIO})")
    except Exception as e:
        logger.error(f"Failed to setup OpenTelemetry tracing: {e}")


def get_tracer(name: str = TRACER_NAME) -> Tracer:
    return trace.get_tracer(name)


@contextmanager
def create_span(
    name: str, attributes: Optional[Dict[str, Any]] = None, kind: SpanKind = SpanKind.INTERNAL
) -> Generator[Span, None, None]:
    """
    Open a span around an engine operation.

    Example usage:
        with create_span("auction.place_bid", {"item.id": item_id}) as span:
            span.set_attribute("bid.outcome", "accepted")
    """
    with get_tracer().start_as_current_span(name, attributes=attributes, kind=kind) as span:
        yield span
