"""
Contribution value types.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class ContributionDay:
    """One calendar day and the number of contributions made on it."""

    date: str
    count: int

    def __post_init__(self) -> None:
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count < 0:
            raise ValueError(f"contribution count must be a non-negative integer, got {self.count!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the wire field names browsers expect."""
        return {"contributionCount": self.count, "date": self.date}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ContributionDay":
        return cls(date=payload["date"], count=payload["contributionCount"])


# Chronological, as returned upstream. Duplicates are kept.
ContributionSeries = Tuple[ContributionDay, ...]


def series_to_payload(series: Iterable[ContributionDay]) -> List[Dict[str, Any]]:
    """Render a series as the JSON array served by /contributions."""
    return [day.to_dict() for day in series]
