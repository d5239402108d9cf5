"""Curator review workflow."""

from .service import ReviewService

__all__ = ["ReviewService"]
