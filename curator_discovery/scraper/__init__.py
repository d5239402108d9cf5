"""Web search and page scraping."""

from .fetcher import PageFetcher, normalize_url
from .html import extract_links, strip_html
from .search import WebSearchAdapter

__all__ = ["PageFetcher", "normalize_url", "extract_links", "strip_html", "WebSearchAdapter"]
