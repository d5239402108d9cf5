"""Search keyword bank."""

from .brain import STATIC_KEYWORDS, URGENT_KEYWORDS, KeywordGenerator

__all__ = ["KeywordGenerator", "STATIC_KEYWORDS", "URGENT_KEYWORDS"]
