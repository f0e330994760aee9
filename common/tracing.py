"""OpenTelemetry wiring shared by the services.

Exporter selection follows ``OTEL_EXPORTER``: ``console`` prints spans to
stdout, ``otlp`` ships them over gRPC (``OTEL_EXPORTER_OTLP_ENDPOINT`` is
honoured when set), ``none`` leaves tracing disabled.
"""
import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)

EXPORTERS = ("none", "console", "otlp")


def make_processor(exporter: str):
    if exporter == "otlp":
        endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        span_exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else OTLPSpanExporter()
        return BatchSpanProcessor(span_exporter)
    if exporter == "console":
        return SimpleSpanProcessor(ConsoleSpanExporter())
    raise ValueError(f"unknown OTEL_EXPORTER {exporter!r}, expected one of {EXPORTERS}")


def configure_tracing(app: FastAPI, service_name: str, exporter: str) -> TracerProvider | None:
    """Install a tracer provider and instrument ``app`` and httpx clients.

    Returns ``None`` without touching global state when ``exporter`` is ``none``.
    """
    if exporter == "none":
        return None
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(make_processor(exporter))
    trace.set_tracer_provider(provider)
    FastAPIInstrumentor().instrument_app(app, tracer_provider=provider)
    httpx_instrumentor = HTTPXClientInstrumentor()
    # httpx is patched process-wide, only once
    if not httpx_instrumentor.is_instrumented_by_opentelemetry:
        httpx_instrumentor.instrument(tracer_provider=provider)
    return provider
