"""Candidate de-duplication."""

from .dedup import CandidateDeduplicator, url_key

__all__ = ["CandidateDeduplicator", "url_key"]
