"""
Shared fixtures for contributions service tests.
"""

import pytest

from shared.test_helpers import FakeClock
from service_contributions.app.domain.models import ContributionDay


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def series():
    return (
        ContributionDay(date="2024-01-01", count=0),
        ContributionDay(date="2024-01-02", count=3),
        ContributionDay(date="2024-01-03", count=7),
    )
