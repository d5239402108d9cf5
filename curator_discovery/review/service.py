"""Curator review workflow over the drafts inbox."""

import logging
from typing import List, Optional, Protocol, Sequence

from ..agent import ExtractionAgent
from ..database import SupabaseOpportunityStore
from ..models import Opportunity, OpportunityStatus, VerificationStatus

logger = logging.getLogger(__name__)


class PublishNotifier(Protocol):
    def on_publish(self, opportunity: Opportunity) -> object: ...


class ReviewService:
    """Approve, reject and clear drafts produced by discovery.

    Rejections go through the agent so the rejected title reaches the
    negative memory used by later scans.
    """

    def __init__(
        self,
        store: SupabaseOpportunityStore,
        agent: ExtractionAgent,
        notifiers: Optional[Sequence[PublishNotifier]] = None,
    ) -> None:
        self._store = store
        self._agent = agent
        self._notifiers = list(notifiers or [])

    def inbox(self) -> List[Opportunity]:
        return self._store.get_by_status(OpportunityStatus.DRAFT)

    def approve(self, opportunity_id: str) -> Optional[Opportunity]:
        """Publish a draft as verified and notify subscribers and organizer."""
        opportunity = self._store.update_status(
            opportunity_id,
            OpportunityStatus.PUBLISHED,
            verification_status=VerificationStatus.VERIFIED,
        )
        if opportunity is None:
            logger.warning("approve id=%s result=not_found", opportunity_id)
            return None

        for notifier in self._notifiers:
            try:
                notifier.on_publish(opportunity)
            except Exception as exc:
                logger.error("notify id=%s notifier=%s result=failure error=%s",
                             opportunity_id, type(notifier).__name__, exc)
        logger.info("approve id=%s title=%r result=published", opportunity_id, opportunity.title)
        return opportunity

    def reject(self, opportunity_id: str) -> bool:
        opportunity = self._store.get_by_id(opportunity_id)
        if opportunity is None:
            logger.warning("reject id=%s result=not_found", opportunity_id)
            return False
        self._agent.learn_from_rejection(opportunity)
        logger.info("reject id=%s title=%r result=rejected", opportunity_id, opportunity.title)
        return True

    def clear_inbox(self) -> int:
        return self._store.delete_where(OpportunityStatus.DRAFT)

    # Organizer actions from the outreach link

    def organizer_verify(self, opportunity_id: str) -> Optional[Opportunity]:
        return self._store.update_status(
            opportunity_id,
            OpportunityStatus.PUBLISHED,
            verification_status=VerificationStatus.ORGANIZER_VERIFIED,
        )

    def organizer_remove(self, opportunity_id: str) -> Optional[Opportunity]:
        return self._store.update_status(opportunity_id, OpportunityStatus.REMOVED_BY_ORGANIZER)
