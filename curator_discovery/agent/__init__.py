"""Discovery agent orchestration."""

from .factory import build_agent
from .service import SEED_URLS, ExtractionAgent, parse_deadline

__all__ = ["ExtractionAgent", "build_agent", "SEED_URLS", "parse_deadline"]
