"""Publish notifications recorded in the ``system_emails`` outbox table."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..models import Opportunity

logger = logging.getLogger(__name__)

SYSTEM_EMAILS_TABLE = "system_emails"
SUBSCRIBER_ADDRESS = "subscribers@nxfcurator.org"

SUBSCRIBER_ALERT = "subscriber_alert"
ORGANIZER_OUTREACH = "organizer_outreach"


def organizer_action_link(base_url: str, opportunity_id: str) -> str:
    return f"{base_url.rstrip('/')}/#/organizer-feedback/{opportunity_id}"


def guess_organizer_address(organizer: str) -> str:
    """Best-effort inbox for organizers that list no contact address."""
    slug = re.sub(r"[^a-z0-9]", "", organizer.lower()) or "organizer"
    return f"info@{slug}.com"


class EmailNotifier:
    """Writes a subscriber alert and an organizer outreach for each publication.

    Delivery happens elsewhere; this only queues rows. Write failures are
    retried, then logged; a failed notification never blocks publishing.
    """

    def __init__(self, supabase_client: Any, public_base_url: str = "https://nxfcurator.org") -> None:
        self._db = supabase_client
        self.public_base_url = public_base_url

    def subscriber_alert(self, opportunity: Opportunity) -> Dict[str, Any]:
        return {
            "to_address": SUBSCRIBER_ADDRESS,
            "subject": f"🔥 New Opportunity Alert: {opportunity.title}",
            "body": (
                f"Hi Creator, a new opportunity \"{opportunity.title}\" offering "
                f"{opportunity.grant_or_prize} has just been added. "
                f"Deadline: {opportunity.deadline}. Apply now!"
            ),
            "type": SUBSCRIBER_ALERT,
            "action_link": None,
        }

    def organizer_outreach(self, opportunity: Opportunity) -> Dict[str, Any]:
        link = organizer_action_link(self.public_base_url, opportunity.id or "")
        return {
            "to_address": guess_organizer_address(opportunity.organizer),
            "subject": f"[Action Required] Listing for {opportunity.title} on NXF Curator",
            "body": (
                f"Dear {opportunity.organizer} Team,\n\n"
                f"We have listed your opportunity \"{opportunity.title}\" on our platform "
                "to help creators find you.\n\n"
                "Please review your listing.\n\n"
                "1. Is it accurate? Click Verify.\n"
                "2. Want to change details? Click Edit.\n"
                "3. Want it gone? Click Remove.\n\n"
                f"Access your dashboard here: {link}"
            ),
            "type": ORGANIZER_OUTREACH,
            "action_link": link,
        }

    def on_publish(self, opportunity: Opportunity) -> int:
        """Queue both messages. Returns how many rows were written."""
        written = 0
        for email in (self.subscriber_alert(opportunity), self.organizer_outreach(opportunity)):
            try:
                self._insert(email)
                written += 1
            except Exception as exc:
                logger.error("email_queue type=%s title=%r result=failure error=%s",
                             email["type"], opportunity.title, exc)
        logger.info("email_queue title=%r written=%d", opportunity.title, written)
        return written

    def recent(self, limit: int = 50) -> List[Dict[str, Any]]:
        response = (
            self._db.table(SYSTEM_EMAILS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    @retry(
        retry=retry_if_exception_type(httpx.HTTPError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def _insert(self, email: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        row = dict(email, created_at=datetime.now(timezone.utc).isoformat())
        response = self._db.table(SYSTEM_EMAILS_TABLE).insert(row).execute()
        return response.data[0] if response.data else None
