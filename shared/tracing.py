"""Tracing utilities built on OpenTelemetry.

Spans are exported over OTLP/HTTP to Axiom when a token is configured.
Without one, the global no-op tracer provider stays in place and every
helper here is inert.
"""

from typing import Dict, Optional
from contextlib import contextmanager

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode


def deployment_tag(deployment_id: Optional[str], replica_id: Optional[str]) -> str:
    """Compose the ``deployment_id`` resource attribute."""
    if not deployment_id:
        return "unknown_deployment"
    return f"{deployment_id}-{replica_id or 'unknown_replica'}"


def _build_otlp_exporter_kwargs(endpoint: str, token: str, dataset: str) -> Dict[str, object]:
    return {
        "endpoint": endpoint,
        "headers": {
            "Authorization": f"Bearer {token}",
            "X-Axiom-Dataset": dataset,
        },
    }


def configure_tracing(
    service_name: str,
    *,
    token: str,
    endpoint: str,
    dataset: str,
    deployment_id: Optional[str] = None,
    replica_id: Optional[str] = None,
    enable_console: bool = False,
    app=None,
) -> TracerProvider:
    """Configure OpenTelemetry tracing for a service."""

    resource = Resource.create({
        "service.name": service_name,
        "service.version": "1.0.0",
        "deployment_id": deployment_tag(deployment_id, replica_id),
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(**_build_otlp_exporter_kwargs(endpoint, token, dataset)))
    )
    if enable_console:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    if app is not None:
        FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
    HTTPXClientInstrumentor().instrument(tracer_provider=provider)
    return provider


def get_tracer(name: str):
    """Get a tracer instance."""
    return trace.get_tracer(name)


@contextmanager
def trace_operation(operation_name: str, **attributes):
    """Context manager to trace an operation."""
    tracer = get_tracer(__name__)
    with tracer.start_as_current_span(operation_name) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)

        try:
            yield span
        except Exception as exc:
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            span.set_attribute("error", True)
            span.set_attribute("error.message", str(exc))
            raise


def add_span_attributes(**attributes):
    """Add attributes to the current span."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        for key, value in attributes.items():
            current_span.set_attribute(key, value)
