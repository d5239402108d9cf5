"""Per-scan value types: modes, states, candidates, cancellation."""

from dataclasses import dataclass
from enum import Enum


class ScanMode(str, Enum):
    DAILY = "daily"
    DEEP = "deep"


class ScanState(str, Enum):
    SEEDING = "seeding"
    SEARCHING = "searching"
    SCRAPING = "scraping"
    EXTRACTING = "extracting"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class ScanProfile:
    """How wide a scan searches and how many pages it may evaluate."""

    keyword_count: int
    max_evaluated: int
    expand_seeds: bool = False


SCAN_PROFILES = {
    ScanMode.DAILY: ScanProfile(keyword_count=3, max_evaluated=10),
    ScanMode.DEEP: ScanProfile(keyword_count=8, max_evaluated=30, expand_seeds=True),
}


@dataclass(frozen=True)
class Candidate:
    """A URL to scrape plus the query that surfaced it."""

    url: str
    query: str


class CancellationToken:
    """Cooperative cancellation flag checked between candidates."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
