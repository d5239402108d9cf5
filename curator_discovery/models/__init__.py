"""Shared Pydantic models for the discovery pipeline."""

from .opportunity import (
    AiMetadata,
    ExtractedOpportunity,
    Opportunity,
    OpportunityStatus,
    OpportunityType,
    Scope,
    VerificationStatus,
    compute_days_left,
    format_deadline,
)
from .scan import (
    SCAN_PROFILES,
    CancellationToken,
    Candidate,
    ScanMode,
    ScanProfile,
    ScanState,
)

__all__ = [
    "AiMetadata",
    "ExtractedOpportunity",
    "Opportunity",
    "OpportunityStatus",
    "OpportunityType",
    "Scope",
    "VerificationStatus",
    "compute_days_left",
    "format_deadline",
    "SCAN_PROFILES",
    "CancellationToken",
    "Candidate",
    "ScanMode",
    "ScanProfile",
    "ScanState",
]
