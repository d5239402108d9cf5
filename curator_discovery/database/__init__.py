"""Opportunity storage."""

from .client import OPPORTUNITIES_TABLE, SupabaseOpportunityStore

__all__ = ["OPPORTUNITIES_TABLE", "SupabaseOpportunityStore"]
