"""Supabase storage for opportunity records."""

import logging
import os
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from ..models.opportunity import Opportunity, OpportunityStatus, VerificationStatus

logger = logging.getLogger(__name__)

OPPORTUNITIES_TABLE = "opportunities"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SupabaseOpportunityStore:
    """Key-value style access to the ``opportunities`` table.

    The discovery agent only needs ``exists`` and ``insert_draft``; the rest
    serves the review workflow.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        client: Optional[Client] = None,
    ) -> None:
        """Initialize from an existing client, explicit args or env vars.

        Args:
            url: Supabase project URL (falls back to SUPABASE_URL env var).
            key: Supabase anon/service key (falls back to SUPABASE_KEY env var).
            client: Pre-built supabase Client (skips create_client).
        """
        if client is not None:
            self._client = client
        else:
            self._url = url or os.environ["SUPABASE_URL"]
            self._key = key or os.environ["SUPABASE_KEY"]
            self._client = create_client(self._url, self._key)

    @property
    def client(self) -> Client:
        return self._client

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_all(self) -> List[Opportunity]:
        """Published listings ordered by deadline (drafts and removals hidden)."""
        response = (
            self._client.table(OPPORTUNITIES_TABLE)
            .select("*")
            .neq("status", OpportunityStatus.REMOVED_BY_ORGANIZER.value)
            .neq("status", OpportunityStatus.DRAFT.value)
            .neq("status", OpportunityStatus.REJECTED.value)
            .order("deadline_date")
            .execute()
        )
        return [Opportunity.from_record(row) for row in response.data]

    def get_by_id(self, opportunity_id: str) -> Optional[Opportunity]:
        response = (
            self._client.table(OPPORTUNITIES_TABLE)
            .select("*")
            .eq("id", opportunity_id)
            .limit(1)
            .execute()
        )
        return Opportunity.from_record(response.data[0]) if response.data else None

    def get_by_status(self, status: OpportunityStatus) -> List[Opportunity]:
        response = (
            self._client.table(OPPORTUNITIES_TABLE)
            .select("*")
            .eq("status", OpportunityStatus(status).value)
            .order("created_at", desc=True)
            .execute()
        )
        return [Opportunity.from_record(row) for row in response.data]

    def exists(self, title: Optional[str] = None, url: Optional[str] = None) -> bool:
        """True if any record (any status) has this title or source URL.

        Titles compare case-insensitively.
        """
        if url:
            response = (
                self._client.table(OPPORTUNITIES_TABLE)
                .select("id")
                .eq("source_url", url)
                .limit(1)
                .execute()
            )
            if response.data:
                return True
        if title:
            response = (
                self._client.table(OPPORTUNITIES_TABLE)
                .select("id")
                .ilike("title", _escape_like(title.strip()))
                .limit(1)
                .execute()
            )
            if response.data:
                return True
        return False

    def recent_rejected_titles(self, limit: int = 20) -> List[str]:
        """Titles of the most recently rejected records, newest first."""
        response = (
            self._client.table(OPPORTUNITIES_TABLE)
            .select("title")
            .eq("status", OpportunityStatus.REJECTED.value)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [row["title"] for row in response.data if row.get("title")]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _insert(self, opportunity: Opportunity) -> str:
        record = opportunity.to_record()
        response = self._client.table(OPPORTUNITIES_TABLE).insert(record).execute()
        row: Dict[str, Any] = response.data[0] if response.data else {}
        new_id = str(row.get("id", ""))
        logger.info("Inserted %s opportunity %r id=%s", opportunity.status.value, opportunity.title, new_id)
        return new_id

    def insert_draft(self, opportunity: Opportunity) -> str:
        return self._insert(opportunity.model_copy(update={
            "status": OpportunityStatus.DRAFT,
            "verification_status": VerificationStatus.DRAFT,
        }))

    def insert_published(self, opportunity: Opportunity) -> str:
        return self._insert(opportunity.model_copy(update={
            "status": OpportunityStatus.PUBLISHED,
            "verification_status": VerificationStatus.VERIFIED,
        }))

    def insert_rejected(self, opportunity: Opportunity) -> str:
        return self._insert(opportunity.model_copy(update={"status": OpportunityStatus.REJECTED}))

    def update_status(
        self,
        opportunity_id: str,
        status: OpportunityStatus,
        verification_status: Optional[VerificationStatus] = None,
    ) -> Optional[Opportunity]:
        """Set a record's workflow status. Returns the updated record, if found."""
        changes: Dict[str, Any] = {"status": OpportunityStatus(status).value}
        if verification_status is not None:
            changes["verification_status"] = VerificationStatus(verification_status).value
        response = (
            self._client.table(OPPORTUNITIES_TABLE)
            .update(changes)
            .eq("id", opportunity_id)
            .execute()
        )
        logger.info("Updated opportunity %s status to '%s'", opportunity_id, changes["status"])
        return Opportunity.from_record(response.data[0]) if response.data else None

    def delete_where(self, status: OpportunityStatus) -> int:
        response = (
            self._client.table(OPPORTUNITIES_TABLE)
            .delete()
            .eq("status", OpportunityStatus(status).value)
            .execute()
        )
        deleted = len(response.data or [])
        logger.info("Deleted %d '%s' opportunities", deleted, OpportunityStatus(status).value)
        return deleted
