"""Opportunity - the record produced by discovery and reviewed by curators."""

import math
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class OpportunityType(str, Enum):
    FESTIVAL = "Festival"
    LAB = "Lab"
    GRANT = "Grant"
    RESIDENCY = "Residency"


class Scope(str, Enum):
    NATIONAL = "National"
    INTERNATIONAL = "International"


class OpportunityStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    REJECTED = "rejected"
    REMOVED_BY_ORGANIZER = "removed_by_organizer"


class VerificationStatus(str, Enum):
    """Trust tier shown to creators."""

    DRAFT = "draft"  # unverified AI draft
    ORGANIZER_VERIFIED = "organizer_verified"
    VERIFIED = "verified"  # platform verified


def compute_days_left(deadline_date: date, now: Optional[datetime] = None) -> int:
    """Whole days until the deadline, rounded up.

    Args:
        deadline_date: Calendar date of the deadline.
        now: Reference instant (naive local time). Defaults to now.

    Returns:
        ceil((deadline - now) / 1 day); negative once the deadline has passed.
    """
    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.astimezone().replace(tzinfo=None)
    deadline = datetime.combine(deadline_date, time.min)
    return math.ceil((deadline - now).total_seconds() / 86400)


def format_deadline(deadline_date: date) -> str:
    """Human-readable deadline, e.g. 'March 20, 2026'."""
    return f"{deadline_date:%B} {deadline_date.day}, {deadline_date.year}"


class AiMetadata(BaseModel):
    """Provenance of an AI-discovered record."""

    model: str = Field(..., description="Model that produced the record")
    discovery_query: str = Field("", description="Keyword or strategy that surfaced it")
    discovery_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Opportunity(BaseModel):
    """A grant / festival / residency / lab listing.

    ``days_left`` is derived from ``deadline_date`` every time it is read and
    is never stored.
    """

    id: Optional[str] = Field(None, description="Storage identifier, set on insert")
    title: str = Field(..., description="Opportunity title")
    organizer: str = Field("Unknown", description="Organizing body")
    deadline: str = Field("TBD", description="Display deadline, e.g. 'March 20, 2026'")
    deadline_date: Optional[date] = Field(None, description="ISO deadline date")
    grant_or_prize: str = Field("N/A", description="Award / grant description")
    type: OpportunityType = Field(OpportunityType.GRANT)
    scope: Scope = Field(Scope.NATIONAL)
    description: Optional[str] = None
    eligibility: List[str] = Field(default_factory=list)
    application_fee: Optional[str] = None
    website: str = Field("", description="Contact / application URL")
    source_url: Optional[str] = Field(None, description="Page the crawler found this on")
    category: Optional[str] = None

    status: OpportunityStatus = Field(OpportunityStatus.DRAFT)
    verification_status: VerificationStatus = Field(VerificationStatus.DRAFT)

    ai_metadata: Optional[AiMetadata] = None
    grounding_sources: List[str] = Field(default_factory=list)
    ai_confidence_score: Optional[int] = Field(None, ge=0, le=100)
    ai_reasoning: Optional[str] = None
    instagram_caption: Optional[str] = Field(None, max_length=280)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def days_left(self) -> Optional[int]:
        if self.deadline_date is None:
            return None
        return compute_days_left(self.deadline_date)

    @property
    def is_active(self) -> bool:
        days = self.days_left
        return days is not None and days >= 0

    # ------------------------------------------------------------------
    # Storage mapping
    # ------------------------------------------------------------------

    def to_record(self) -> Dict[str, Any]:
        """Snake_case row for the ``opportunities`` table (no id)."""
        return {
            "title": self.title,
            "deadline_text": self.deadline,
            "deadline_date": self.deadline_date.isoformat() if self.deadline_date else None,
            "organizer": self.organizer,
            "grant_or_prize": self.grant_or_prize,
            "eligibility": self.eligibility,
            "type": self.type.value,
            "scope": self.scope.value,
            "description": self.description,
            "category": self.category,
            "application_fee": self.application_fee,
            "contact_info": {"website": self.website, "email": "", "phone": ""},
            "verification_status": self.verification_status.value,
            "source_url": self.source_url,
            "grounding_sources": self.grounding_sources,
            "ai_confidence_score": self.ai_confidence_score,
            "ai_reasoning": self.ai_reasoning,
            "ai_metadata": self.ai_metadata.model_dump(mode="json") if self.ai_metadata else None,
            "instagram_caption": self.instagram_caption,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Opportunity":
        """Build from a storage row, tolerating missing or legacy columns."""
        contact = row.get("contact_info") or row.get("contact") or {}
        data: Dict[str, Any] = {
            "id": str(row["id"]) if row.get("id") is not None else None,
            "title": row.get("title") or "Untitled",
            "organizer": row.get("organizer") or "Unknown",
            "deadline": row.get("deadline_text") or row.get("deadline") or "TBD",
            "deadline_date": row.get("deadline_date"),
            "grant_or_prize": row.get("grant_or_prize") or "N/A",
            "type": row.get("type") or OpportunityType.GRANT,
            "scope": row.get("scope") or Scope.NATIONAL,
            "description": row.get("description"),
            "eligibility": row.get("eligibility") or [],
            "application_fee": row.get("application_fee"),
            "website": contact.get("website", "") if isinstance(contact, dict) else "",
            "source_url": row.get("source_url"),
            "category": row.get("category"),
            "status": row.get("status") or OpportunityStatus.DRAFT,
            "verification_status": row.get("verification_status") or VerificationStatus.DRAFT,
            "ai_metadata": row.get("ai_metadata"),
            "grounding_sources": row.get("grounding_sources") or [],
            "ai_confidence_score": row.get("ai_confidence_score"),
            "ai_reasoning": row.get("ai_reasoning"),
            "instagram_caption": row.get("instagram_caption"),
        }
        if row.get("created_at"):
            data["created_at"] = row["created_at"]
        return cls(**data)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Film Bazaar Co-Production Market 2026",
                "organizer": "National Film Development Corporation",
                "deadline": "August 31, 2026",
                "deadline_date": "2026-08-31",
                "grant_or_prize": "Market access + mentorship",
                "type": "Lab",
                "scope": "National",
                "eligibility": ["Indian producers", "Feature projects in development"],
                "website": "https://filmbazaarindia.com",
                "status": "draft",
                "verification_status": "draft",
            }
        }


class ExtractedOpportunity(BaseModel):
    """Shape the extraction prompt asks the quality model to return."""

    title: str = ""
    organizer: str = "Unknown"
    deadline: str = ""
    grantOrPrize: str = "N/A"
    type: str = "Grant"
    description: str = ""
    eligibility: List[str] = Field(default_factory=list)
    website: str = ""
    scope: str = "International"
    instagramCaption: Optional[str] = None
    aiConfidenceScore: Optional[int] = None
    aiReasoning: Optional[str] = None

    @field_validator("eligibility", mode="before")
    @classmethod
    def _wrap_eligibility(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        return [str(v) for v in value if v]

    @field_validator("instagramCaption", mode="before")
    @classmethod
    def _truncate_caption(cls, value: Any) -> Optional[str]:
        if not value:
            return None
        return str(value)[:280]

    @field_validator("aiConfidenceScore", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        try:
            return max(0, min(100, int(value)))
        except (TypeError, ValueError):
            return None

    @field_validator("title", "organizer", "deadline", "grantOrPrize", "type",
                     "description", "website", "scope", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()
