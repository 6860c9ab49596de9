"""
GitHub GraphQL client for contribution calendars.
"""

import datetime
from typing import List, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, NonNegativeInt
from pydantic import ValidationError as SchemaValidationError
from pydantic.alias_generators import to_camel

from shared.errors import UpstreamDecodeError, UpstreamTransportError, ValidationError
from shared.logging import get_logger

from service_contributions.app.domain.models import ContributionDay, ContributionSeries


DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_TIMEOUT_SECONDS = 10.0
USER_AGENT = "contributions-proxy/1.0"

CONTRIBUTIONS_QUERY = """
query($userName: String!) {
  user(login: $userName) {
    contributionsCollection {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
          }
        }
      }
    }
  }
}
"""


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ContributionDayPayload(_CamelModel):
    contribution_count: NonNegativeInt
    date: datetime.date


class WeekPayload(_CamelModel):
    contribution_days: List[ContributionDayPayload]


class ContributionCalendarPayload(_CamelModel):
    total_contributions: NonNegativeInt
    weeks: List[WeekPayload]


class ContributionsCollectionPayload(_CamelModel):
    contribution_calendar: ContributionCalendarPayload


class UserPayload(_CamelModel):
    contributions_collection: ContributionsCollectionPayload


class DataPayload(_CamelModel):
    user: Optional[UserPayload] = None


class GraphQLErrorPayload(BaseModel):
    message: str
    type: Optional[str] = None


class GithubContributionsResponse(_CamelModel):
    """Top-level GraphQL envelope; ``data.user`` is null for unknown logins."""

    data: Optional[DataPayload] = None
    errors: Optional[List[GraphQLErrorPayload]] = None


def flatten_calendar(calendar: ContributionCalendarPayload) -> ContributionSeries:
    """Flatten weeks of days into one chronological series."""
    return tuple(
        ContributionDay(date=day.date.isoformat(), count=day.contribution_count)
        for week in calendar.weeks
        for day in week.contribution_days
    )


class GitHubContributionsClient:
    """Client for the contribution calendar query against GitHub's GraphQL API.

    Each call makes exactly one request. There is no retry: a failed attempt
    surfaces as ``UpstreamTransportError`` or ``UpstreamDecodeError`` and the
    caller decides what to do.
    """

    def __init__(
        self,
        token: str,
        graphql_url: str = DEFAULT_GRAPHQL_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
    ):
        self.graphql_url = graphql_url
        self.timeout = timeout
        self.user_agent = user_agent
        self._token = token
        self.logger = get_logger("gh.github_client")

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._token}",
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    async def fetch(self, identity: str) -> ContributionSeries:
        """Fetch and flatten the contribution calendar for ``identity``."""
        if not identity or not identity.strip():
            raise ValidationError("User identity must be non-empty")

        payload = {"query": CONTRIBUTIONS_QUERY, "variables": {"userName": identity}}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.graphql_url, json=payload, headers=self._headers())
        except httpx.TimeoutException as exc:
            self.logger.error("GitHub request timed out", user=identity, timeout=self.timeout)
            raise UpstreamTransportError(
                "Request timed out",
                details={"user": identity, "timeout_seconds": self.timeout},
            ) from exc
        except httpx.HTTPError as exc:
            self.logger.error("GitHub request failed", user=identity, error=str(exc))
            raise UpstreamTransportError(str(exc) or type(exc).__name__, details={"user": identity}) from exc

        if response.status_code != 200:
            self.logger.error(
                "GitHub request returned unexpected status",
                user=identity,
                status_code=response.status_code,
                response=response.text[:500],
            )
            raise UpstreamTransportError(
                f"Unexpected status {response.status_code}",
                details={"user": identity, "status_code": response.status_code},
            )

        series = self.parse_response(response.content, identity=identity)
        self.logger.debug("GitHub contributions retrieved", user=identity, days=len(series))
        return series

    def parse_response(self, body: Union[bytes, str], identity: Optional[str] = None) -> ContributionSeries:
        """Validate a GraphQL response body and flatten it into a series."""
        try:
            parsed = GithubContributionsResponse.model_validate_json(body)
        except SchemaValidationError as exc:
            self.logger.error("Failed to parse GitHub response", user=identity, error=str(exc))
            raise UpstreamDecodeError(
                "Response body does not match the contribution calendar schema",
                details={"user": identity, "error_count": exc.error_count()},
            ) from exc

        messages = [error.message for error in parsed.errors or []]
        if parsed.data is None or parsed.data.user is None:
            self.logger.error("GitHub response carried no user data", user=identity, errors=messages)
            raise UpstreamDecodeError(
                "Response carried no user data",
                details={"user": identity, "errors": messages},
            )

        if messages:
            self.logger.warning("GitHub response carried errors alongside data", user=identity, errors=messages)

        calendar = parsed.data.user.contributions_collection.contribution_calendar
        return flatten_calendar(calendar)
