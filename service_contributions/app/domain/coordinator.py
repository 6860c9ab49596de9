"""
Request coordinator for contribution lookups.
"""

import asyncio
from typing import Optional, Tuple, TYPE_CHECKING

from shared.errors import (
    CacheInconsistencyError,
    UpstreamDecodeError,
    UpstreamTransportError,
    ValidationError,
)
from shared.logging import get_logger
from shared.tracing import add_span_attributes, trace_operation

from .models import ContributionSeries

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from service_contributions.app.adapters.github_client import GitHubContributionsClient
    from service_contributions.app.caching.contribution_cache import ContributionCache
    from shared.metrics import MetricsCollector


class ContributionsCoordinator:
    """Serve a contribution series from the cache or refresh it from upstream.

    Per request the coordinator checks the cache first. A fresh slot with a
    value is a hit. A stale slot triggers one upstream fetch, whose result
    is written back with the time observed at the check. Upstream failures
    propagate and leave the slot untouched, so the next request retries.

    A slot that reports fresh but holds nothing is treated as a fault: the
    slot is invalidated and the request fails with
    ``CacheInconsistencyError`` instead of refetching.

    Concurrent misses each refresh on their own unless
    ``collapse_concurrent_refreshes`` is set, in which case they queue on a
    refresh lock and re-check the cache once they hold it.
    """

    def __init__(
        self,
        cache: "ContributionCache",
        client: "GitHubContributionsClient",
        *,
        user_override: Optional[str] = None,
        metrics: Optional["MetricsCollector"] = None,
        collapse_concurrent_refreshes: bool = False,
    ):
        self.cache = cache
        self.client = client
        self.user_override = user_override or None
        self.metrics = metrics
        self.logger = get_logger("gh.coordinator")
        self._refresh_lock: Optional[asyncio.Lock] = (
            asyncio.Lock() if collapse_concurrent_refreshes else None
        )

    def resolve_identity(self, requested: Optional[str]) -> str:
        """The configured override always wins over the requested login."""
        identity = self.user_override or requested
        if not identity or not identity.strip():
            raise ValidationError("No user identity to fetch contributions for")
        return identity

    async def get_contributions(self, requested_user: Optional[str]) -> ContributionSeries:
        identity = self.resolve_identity(requested_user)

        with trace_operation("contributions.get", user=identity, requested_user=requested_user):
            now_ms, series = self._check_cache()
            if series is not None:
                return series

            if self._refresh_lock is None:
                return await self._refresh(identity, now_ms)

            async with self._refresh_lock:
                now_ms, series = self._check_cache()
                if series is not None:
                    return series
                return await self._refresh(identity, now_ms)

    def _check_cache(self) -> Tuple[int, Optional[ContributionSeries]]:
        """Return the check time and the cached series on a hit, else ``None``."""
        now_ms = self.cache.now_ms()
        fresh, value = self.cache.lookup(now_ms)
        if not fresh:
            add_span_attributes(cache="miss")
            return now_ms, None

        if value is None:
            fetched_at_ms = self.cache.fetched_at_ms
            self.logger.error(
                "Cache reported fresh but holds no value",
                fetched_at_ms=fetched_at_ms,
                now_ms=now_ms,
            )
            self.cache.invalidate()
            self._record("inconsistent")
            raise CacheInconsistencyError(
                details={"fetched_at_ms": fetched_at_ms, "now_ms": now_ms}
            )

        add_span_attributes(cache="hit")
        self._record("hit")
        self.logger.debug("Serving contributions from cache", days=len(value))
        return now_ms, value

    async def _refresh(self, identity: str, now_ms: int) -> ContributionSeries:
        self.logger.info("Refreshing contributions from upstream", user=identity)
        try:
            if self.metrics:
                with self.metrics.time_upstream_fetch():
                    series = await self.client.fetch(identity)
            else:
                series = await self.client.fetch(identity)
        except UpstreamTransportError:
            self._record("upstream_error", kind="transport")
            raise
        except UpstreamDecodeError:
            self._record("upstream_error", kind="decode")
            raise

        self.cache.write(series, now_ms)
        self._record("fetched")
        self.logger.info("Contributions refreshed", user=identity, days=len(series))
        return series

    def _record(self, outcome: str, kind: Optional[str] = None) -> None:
        if not self.metrics:
            return
        self.metrics.record_cache_event(outcome)
        if kind:
            self.metrics.record_upstream_error(kind)
