"""
Adapters package for the contributions service.

Contains the HTTP client wrapper for the upstream GraphQL API. The adapter
encapsulates:

- The endpoint, query document and request shape
- Response schema validation
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .github_client import GitHubContributionsClient, CONTRIBUTIONS_QUERY

__all__ = [
    "CONTRIBUTIONS_QUERY",
    "GitHubContributionsClient",
]
