# src/tasklane/tracing.py

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    SimpleSpanProcessor,
    ConsoleSpanExporter,
)


def configure_tracing(service_name: str = "tasklane-backend") -> None:
    """
    Configure OpenTelemetry tracing with a console exporter.

    Spans are printed to stdout; swap ConsoleSpanExporter for an OTLP
    exporter without changing callers.
    """
    # If there's already a provider, don't reconfigure
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    # SimpleSpanProcessor exports synchronously. BatchSpanProcessor spawns a
    # background worker that can write to stdout after pytest has closed its
    # capture file.
    provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
