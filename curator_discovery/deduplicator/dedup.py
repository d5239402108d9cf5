"""Per-scan de-duplication of candidate URLs."""

import logging
from typing import Iterable, List, Optional, Set
from urllib.parse import urlsplit, urlunsplit

from ..models import Candidate

logger = logging.getLogger(__name__)


def url_key(url: str) -> str:
    """Comparison key: scheme-less, lower-case host, no fragment or trailing slash."""
    url = url.strip()
    if "://" not in url:
        url = f"https://{url}"
    parts = urlsplit(url)
    host = parts.netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    path = parts.path.rstrip("/")
    return urlunsplit(("", host, path, parts.query, ""))


class CandidateDeduplicator:
    """Tracks which URLs a scan has already handled.

    Lives for one scan; nothing here is persisted.
    """

    def __init__(self, visited: Optional[Set[str]] = None):
        self.visited: Set[str] = {url_key(u) for u in (visited or set())}

    def deduplicate(self, candidates: Iterable[Candidate]) -> List[Candidate]:
        """Drop repeats (first occurrence wins) and already-visited URLs."""
        unique: List[Candidate] = []
        keys: Set[str] = set()
        duplicate_count = 0

        for candidate in candidates:
            key = url_key(candidate.url)
            if key in keys or key in self.visited:
                duplicate_count += 1
                continue
            keys.add(key)
            unique.append(candidate)

        logger.info("Candidate deduplication: %d unique, %d duplicates", len(unique), duplicate_count)
        return unique

    def seen(self, url: str) -> bool:
        return url_key(url) in self.visited

    def mark(self, url: str) -> None:
        self.visited.add(url_key(url))
