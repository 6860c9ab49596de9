"""
Domain layer: contribution value types and the request coordinator that
decides between serving the cache and refreshing from upstream.
"""

from .models import ContributionDay, ContributionSeries, series_to_payload
from .coordinator import ContributionsCoordinator

__all__ = [
    "ContributionDay",
    "ContributionSeries",
    "ContributionsCoordinator",
    "series_to_payload",
]
