"""Markup handling: page text and outbound links.

Kept behind two plain functions so the agent never touches markup itself.
"""

import re
from typing import List
from urllib.parse import parse_qs, urljoin, urlparse

from bs4 import BeautifulSoup, Comment

SEARCH_ENGINE_DOMAINS = ("duckduckgo.com", "google.", "bing.com", "yahoo.com")

SOCIAL_DOMAINS = (
    "facebook.com",
    "twitter.com",
    "x.com",
    "linkedin.com",
    "instagram.com",
    "youtube.com",
    "pinterest.com",
)

AD_FRAGMENTS = ("/y.js", "ad_provider", "ad_domain", "/aclick", "/aclk", "doubleclick", "utm_medium=cpc")

_WHITESPACE_RE = re.compile(r"\s+")


def strip_html(html: str) -> str:
    """Visible text of a page with whitespace collapsed."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(["script", "style", "noscript"]):
        element.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    text = soup.get_text(separator=" ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def _host(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def _host_matches(host: str, domains) -> bool:
    for domain in domains:
        if domain.endswith("."):
            if domain in host:
                return True
        elif host == domain or host.endswith("." + domain):
            return True
    return False


def _unwrap_search_redirect(href: str) -> str:
    """DuckDuckGo wraps results as //duckduckgo.com/l/?uddg=<target>."""
    if href.startswith("//"):
        href = "https:" + href
    parsed = urlparse(href)
    if "uddg" in parsed.query:
        target = parse_qs(parsed.query).get("uddg")
        if target:
            return target[0]
    return href


def extract_links(html: str, base_url: str, kind: str = "page") -> List[str]:
    """Outbound http(s) links in document order, de-duplicated.

    Args:
        html: Raw markup.
        base_url: URL the markup came from (relative links resolve against it).
        kind: ``search`` for a results page (unwraps redirects, drops the
            engine's own and ad links) or ``page`` for any other page (drops
            social and search-engine links).
    """
    soup = BeautifulSoup(html, "html.parser")
    links: List[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith(("#", "mailto:", "javascript:", "tel:")):
            continue

        if kind == "search":
            link = _unwrap_search_redirect(href)
            if any(fragment in link for fragment in AD_FRAGMENTS):
                continue
            excluded = SEARCH_ENGINE_DOMAINS
        else:
            link = urljoin(base_url, href)
            excluded = SOCIAL_DOMAINS + SEARCH_ENGINE_DOMAINS

        if not link.startswith(("http://", "https://")):
            continue
        if _host_matches(_host(link), excluded):
            continue
        link = link.split("#", 1)[0]
        if link not in links:
            links.append(link)
    return links
