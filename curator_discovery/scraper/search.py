"""Keyword search against DuckDuckGo's lightweight HTML endpoint."""

import logging
import time
from typing import Callable, List
from urllib.parse import quote_plus

from .fetcher import PageFetcher
from .html import extract_links

logger = logging.getLogger(__name__)

SEARCH_URL = "https://html.duckduckgo.com/html/?q={query}"


class WebSearchAdapter:
    """Turns a keyword into outbound result links.

    Search failure is never fatal to a scan: any error yields ``[]``.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        max_results: int = 8,
        link_extractor: Callable[..., List[str]] = extract_links,
    ) -> None:
        self._fetcher = fetcher
        self.max_results = max_results
        self._link_extractor = link_extractor

    @property
    def source_name(self) -> str:
        return "duckduckgo"

    def search_url(self, keyword: str) -> str:
        return SEARCH_URL.format(query=quote_plus(keyword))

    async def search(self, keyword: str) -> List[str]:
        url = self.search_url(keyword)
        start = time.monotonic()
        try:
            html = await self._fetcher.fetch_raw(url)
            links = self._link_extractor(html, url, kind="search")
        except Exception as exc:
            duration_ms = (time.monotonic() - start) * 1000
            logger.warning(
                "search source=%s query=%r result=failure error=%s duration_ms=%.0f",
                self.source_name, keyword, exc, duration_ms,
            )
            return []

        duration_ms = (time.monotonic() - start) * 1000
        logger.info(
            "search source=%s query=%r result=success count=%d duration_ms=%.0f",
            self.source_name, keyword, len(links), duration_ms,
        )
        return links[: self.max_results]
