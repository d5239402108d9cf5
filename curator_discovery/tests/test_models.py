"""Tests for Opportunity models and days-left arithmetic."""

from datetime import date, datetime, timedelta

import pytest
from pydantic import ValidationError

from curator_discovery.models import (
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


# ---------------------------------------------------------------------------
# days_left
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("now, expected", [
    (datetime(2026, 3, 20, 0, 0), 0),
    (datetime(2026, 3, 19, 0, 0), 1),
    (datetime(2026, 3, 19, 12, 0), 1),   # half a day rounds up
    (datetime(2026, 3, 19, 23, 59), 1),
    (datetime(2026, 3, 20, 12, 0), 0),   # deadline day itself
    (datetime(2026, 3, 21, 12, 0), -1),
    (datetime(2026, 2, 18, 0, 0), 30),
])
def test_compute_days_left(now, expected):
    assert compute_days_left(date(2026, 3, 20), now) == expected


def test_days_left_is_derived_not_stored():
    opp = Opportunity(title="Lab", deadline_date=date.today() + timedelta(days=10))

    assert opp.days_left in (9, 10)
    assert opp.is_active
    assert "days_left" not in opp.model_dump()
    assert "days_left" not in opp.to_record()


def test_expired_opportunity_inactive():
    opp = Opportunity(title="Lab", deadline_date=date.today() - timedelta(days=2))

    assert opp.days_left < 0
    assert not opp.is_active


def test_no_deadline_means_unknown_days_left():
    opp = Opportunity(title="Lab")

    assert opp.days_left is None
    assert not opp.is_active


def test_format_deadline():
    assert format_deadline(date(2026, 3, 5)) == "March 5, 2026"


# ---------------------------------------------------------------------------
# Opportunity validation and storage mapping
# ---------------------------------------------------------------------------

def test_confidence_score_bounds():
    with pytest.raises(ValidationError):
        Opportunity(title="Lab", ai_confidence_score=101)


def test_caption_length_enforced():
    with pytest.raises(ValidationError):
        Opportunity(title="Lab", instagram_caption="x" * 281)


def test_to_record_uses_storage_column_names():
    opp = Opportunity(
        title="Film Bazaar Lab",
        organizer="NFDC",
        deadline="August 31, 2026",
        deadline_date=date(2026, 8, 31),
        type=OpportunityType.LAB,
        website="https://filmbazaarindia.com",
        source_url="https://filmbazaarindia.com/lab",
        ai_metadata=AiMetadata(model="llama-3.3-70b-versatile", discovery_query="film lab India"),
    )

    record = opp.to_record()

    assert record["deadline_text"] == "August 31, 2026"
    assert record["deadline_date"] == "2026-08-31"
    assert record["type"] == "Lab"
    assert record["status"] == "draft"
    assert record["verification_status"] == "draft"
    assert record["contact_info"]["website"] == "https://filmbazaarindia.com"
    assert record["ai_metadata"]["model"] == "llama-3.3-70b-versatile"
    assert "id" not in record


def test_from_record_round_trip_and_legacy_columns():
    row = {
        "id": 17,
        "title": "Writers Residency",
        "deadline_text": "May 1, 2026",
        "deadline_date": "2026-05-01",
        "type": "Residency",
        "scope": "International",
        "contact_info": {"website": "https://residency.example.org"},
        "status": "published",
        "verification_status": "verified",
        "ai_metadata": {"model": "gemini-2.5-flash", "discovery_query": "q",
                        "discovery_date": "2026-01-01T00:00:00+00:00"},
    }

    opp = Opportunity.from_record(row)

    assert opp.id == "17"
    assert opp.deadline == "May 1, 2026"
    assert opp.deadline_date == date(2026, 5, 1)
    assert opp.type == OpportunityType.RESIDENCY
    assert opp.scope == Scope.INTERNATIONAL
    assert opp.website == "https://residency.example.org"
    assert opp.status == OpportunityStatus.PUBLISHED
    assert opp.verification_status == VerificationStatus.VERIFIED
    assert opp.ai_metadata.model == "gemini-2.5-flash"


def test_from_record_minimal_row():
    opp = Opportunity.from_record({"id": "a1"})

    assert opp.title == "Untitled"
    assert opp.organizer == "Unknown"
    assert opp.status == OpportunityStatus.DRAFT


# ---------------------------------------------------------------------------
# ExtractedOpportunity
# ---------------------------------------------------------------------------

def test_extracted_coercions():
    extracted = ExtractedOpportunity.model_validate({
        "title": "  Photo Award ",
        "eligibility": "Open to all Indian photographers",
        "instagramCaption": "y" * 400,
        "aiConfidenceScore": "150",
        "website": None,
    })

    assert extracted.title == "Photo Award"
    assert extracted.eligibility == ["Open to all Indian photographers"]
    assert len(extracted.instagramCaption) == 280
    assert extracted.aiConfidenceScore == 100
    assert extracted.website == ""


def test_extracted_defaults_for_missing_keys():
    extracted = ExtractedOpportunity.model_validate({"title": "NOT_ELIGIBLE"})

    assert extracted.organizer == "Unknown"
    assert extracted.eligibility == []
    assert extracted.aiConfidenceScore is None
