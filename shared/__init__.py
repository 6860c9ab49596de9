"""
Shared utilities for the contributions service.

This package aggregates the common building blocks the service is wired
from:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- tracing: OpenTelemetry tracing export
- errors: Canonical error types and responses
- base_service: FastAPI application shell

Do not import from service_* packages into shared/.
"""
