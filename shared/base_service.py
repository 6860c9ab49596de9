"""
Base service class for the contributions service.
"""

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import Dict, Iterable, Optional
import os
import re
import time

from prometheus_client import CONTENT_TYPE_LATEST

from shared.config import BaseConfig
from shared.errors import ContributionsError, INTERNAL_ERROR_BODY
from shared.logging import clear_context, configure_logging, get_logger, set_request_id
from shared.metrics import MetricsCollector, get_metrics_collector


def origin_suffix_regex(allowed: Iterable[str]) -> Optional[str]:
    """Build a CORS origin regex accepting any origin that ends with an allowed entry."""
    suffixes = [re.escape(entry) for entry in allowed if entry]
    if not suffixes:
        return None
    return r".*(?:" + "|".join(suffixes) + r")"


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, config: BaseConfig, *, metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.service_name = config.service_name
        self.port = config.port
        self.logger = get_logger(self.service_name)
        self.metrics = metrics or get_metrics_collector(self.service_name)
        self._start_time = time.time()

        # Configure logging
        configure_logging(self.service_name, config.log_level, development=config.is_development)

        # Create FastAPI app
        self.app = self._create_app()

        # Configure tracing if enabled
        if config.enable_tracing:
            from shared.tracing import configure_tracing
            configure_tracing(
                self.service_name,
                token=config.axiom_token,
                endpoint=config.otel_exporter,
                dataset=config.axiom_dataset,
                deployment_id=config.deployment_id,
                replica_id=config.replica_id,
                enable_console=config.is_development,
                app=self.app,
            )
            self.logger.info("Initialized tracing with axiom", dataset=config.axiom_dataset)

        # Set up middleware
        self._setup_middleware()

        # Set up routes
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name} contributions service",
            version="1.0.0",
            docs_url="/docs" if self.config.is_development else None,
            redoc_url=None,
        )

    def _cors_origins(self) -> Iterable[str]:
        """Origin suffixes allowed by CORS. Override in subclasses."""
        return []

    def _setup_middleware(self):
        """Set up middleware."""

        # CORS middleware
        self.app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=origin_suffix_regex(self._cors_origins()),
            allow_methods=["GET"],
            allow_headers=["*"],
        )

        # Request timing and correlation middleware
        @self.app.middleware("http")
        async def add_request_timing(request: Request, call_next):
            start_time = time.time()
            request_id = set_request_id(request.headers.get("X-Request-ID"))

            try:
                response = await call_next(request)
            finally:
                duration = time.time() - start_time

            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)

            # Record metrics
            self.metrics.record_http_request(
                method=request.method,
                endpoint=endpoint,
                status_code=response.status_code,
                duration=duration
            )

            # Log request
            self.logger.info(
                "HTTP request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2)
            )

            response.headers["X-Request-ID"] = request_id
            clear_context()
            return response

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            try:
                dependencies = await self._check_dependencies()
                self.metrics.record_health_check("ok")

                return {
                    "service": self.service_name,
                    "status": "ok",
                    "uptime_seconds": self._get_uptime(),
                    "dependencies": dependencies,
                    "version": "1.0.0",
                    "commit": os.getenv("GIT_COMMIT", "unknown")
                }
            except Exception as e:
                self.logger.error("Health check failed", error=str(e))
                self.metrics.record_health_check("error")
                return JSONResponse(
                    status_code=503,
                    content={
                        "service": self.service_name,
                        "status": "error",
                        "error": str(e)
                    }
                )

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=self.metrics.render(),
                media_type=CONTENT_TYPE_LATEST
            )

        # Error handlers: callers only ever see the opaque body.
        @self.app.exception_handler(ContributionsError)
        async def contributions_exception_handler(request: Request, exc: ContributionsError):
            self.logger.error(
                "Request failed",
                path=request.url.path,
                **exc.to_response().model_dump()
            )
            return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            self.logger.error("Unhandled exception", path=request.url.path, error=str(exc), exc_info=True)
            return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check service dependencies. Override in subclasses."""
        return {}

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
