"""Page retrieval through an ordered chain of relay proxies."""

import logging
import time
from typing import Callable, List, Optional, Sequence
from urllib.parse import quote

import httpx

from ..config.config import DEFAULT_PROXY_TEMPLATES
from ..errors import FetchError
from .html import strip_html

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)

# Shorter bodies are proxy error pages answered with 200
MIN_BODY_LENGTH = 50


def normalize_url(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


class PageFetcher:
    """Fetches pages via relay proxies, first good answer wins.

    Proxies are best-effort; when every one fails the fetch raises
    ``FetchError`` and the caller moves on to its next URL.
    """

    def __init__(
        self,
        proxy_templates: Optional[Sequence[str]] = None,
        timeout: float = 15.0,
        min_length: int = MIN_BODY_LENGTH,
        text_extractor: Callable[[str], str] = strip_html,
    ) -> None:
        self.proxy_templates: List[str] = list(proxy_templates or DEFAULT_PROXY_TEMPLATES)
        self.timeout = timeout
        self.min_length = min_length
        self._text_extractor = text_extractor

    def proxy_urls(self, url: str) -> List[str]:
        encoded = quote(url, safe="")
        return [template.format(url=encoded) for template in self.proxy_templates]

    async def fetch_raw(self, url: str) -> str:
        """Markup of ``url`` as returned by the first healthy proxy.

        Raises:
            FetchError: every proxy failed, timed out or answered too little.
        """
        target = normalize_url(url)
        headers = {
            "User-Agent": BROWSER_USER_AGENT,
            "X-Requested-With": "XMLHttpRequest",
        }
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, headers=headers
        ) as client:
            for proxy_url in self.proxy_urls(target):
                start = time.monotonic()
                try:
                    response = await client.get(proxy_url)
                except httpx.HTTPError as exc:
                    logger.debug("proxy_fetch url=%s proxy=%s result=failure error=%s",
                                 target, proxy_url.split("?", 1)[0], exc)
                    continue
                duration_ms = (time.monotonic() - start) * 1000
                body = response.text
                if response.status_code != 200 or len(body) < self.min_length:
                    logger.debug(
                        "proxy_fetch url=%s proxy=%s status=%d length=%d duration_ms=%.0f result=failure",
                        target, proxy_url.split("?", 1)[0], response.status_code, len(body), duration_ms,
                    )
                    continue
                logger.info(
                    "proxy_fetch url=%s status=%d length=%d duration_ms=%.0f result=success",
                    target, response.status_code, len(body), duration_ms,
                )
                return body

        logger.warning("proxy_fetch url=%s result=exhausted proxies=%d", target, len(self.proxy_templates))
        raise FetchError(target)

    async def fetch_text(self, url: str) -> str:
        """Plain text of ``url`` (scripts, styles, comments and tags removed)."""
        return self._text_extractor(await self.fetch_raw(url))
