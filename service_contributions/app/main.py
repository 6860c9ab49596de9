"""
Contributions proxy service.
"""

from typing import Dict, Iterable, Optional

from fastapi.responses import JSONResponse
from pydantic import ValidationError as ConfigValidationError

from shared.base_service import BaseService
from shared.config import ContributionsConfig, get_config
from shared.logging import get_logger, set_requested_user
from shared.metrics import MetricsCollector

from service_contributions.app.adapters import GitHubContributionsClient
from service_contributions.app.caching import ContributionCache
from service_contributions.app.domain import ContributionsCoordinator, series_to_payload


class ContributionsService(BaseService):
    """Contributions proxy service implementation."""

    def __init__(
        self,
        config: Optional[ContributionsConfig] = None,
        *,
        cache: Optional[ContributionCache] = None,
        client: Optional[GitHubContributionsClient] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        config = config or get_config()
        super().__init__(config, metrics=metrics)

        self.cache = cache or ContributionCache()
        self.github_client = client or GitHubContributionsClient(
            config.github_token,
            config.github_graphql_url,
            timeout=config.upstream_timeout_seconds,
        )
        self.coordinator = ContributionsCoordinator(
            self.cache,
            self.github_client,
            user_override=config.user,
            metrics=self.metrics,
            collapse_concurrent_refreshes=config.collapse_concurrent_refreshes,
        )

        if config.user:
            self.logger.info("User override configured; request logins are ignored", user=config.user)

        self._setup_contributions_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.contributions_service = self

    def _cors_origins(self) -> Iterable[str]:
        return self.config.cors_allowed_origins

    async def _check_dependencies(self) -> Dict[str, str]:
        return {
            "cache": self.cache.state(self.cache.now_ms()),
            "upstream": self.github_client.graphql_url,
        }

    def _setup_contributions_routes(self):
        """Set up the contributions route."""

        @self.app.get("/contributions/{user}")
        async def contributions(user: str):
            """Flattened contribution calendar for ``user`` (or the configured override)."""
            set_requested_user(user)
            self.logger.info("Contributions requested", user=user)

            series = await self.coordinator.get_contributions(user)
            return JSONResponse(content=series_to_payload(series))


def create_app(config: Optional[ContributionsConfig] = None):
    """Create FastAPI application."""
    service = ContributionsService(config)
    return service.app


def main() -> None:
    logger = get_logger("gh")
    try:
        config = get_config()
    except ConfigValidationError as exc:
        logger.critical("Invalid configuration; GITHUB_TOKEN must be set", error=str(exc))
        raise SystemExit(1) from exc

    service = ContributionsService(config)
    service.logger.info("Running server", host=config.host, port=config.port)
    service.run()


if __name__ == "__main__":
    main()
