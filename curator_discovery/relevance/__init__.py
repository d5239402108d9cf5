"""Relevance screening and rejection memory."""

from .filter import MIN_TEXT_LENGTH, SIGNAL_WORDS, RelevanceFilter
from .negative_memory import NegativeMemory

__all__ = ["RelevanceFilter", "NegativeMemory", "MIN_TEXT_LENGTH", "SIGNAL_WORDS"]
