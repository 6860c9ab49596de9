"""
Contributions caching package.

Holds the single-slot, time-windowed cache that sits in front of the
upstream GraphQL call. There is exactly one logical entry; see
``ContributionCache`` for the freshness rule.
"""

from .contribution_cache import ContributionCache, DEFAULT_TTL_MS, epoch_ms

__all__ = [
    "ContributionCache",
    "DEFAULT_TTL_MS",
    "epoch_ms",
]
