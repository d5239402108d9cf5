"""Tests for the curator review workflow and publish notifications."""

import logging
from unittest.mock import MagicMock

import httpx
import pytest

from curator_discovery.models import Opportunity, OpportunityStatus, VerificationStatus
from curator_discovery.notifications import (
    ORGANIZER_OUTREACH,
    SUBSCRIBER_ALERT,
    EmailNotifier,
    organizer_action_link,
)
from curator_discovery.review import ReviewService
from curator_discovery.tests.fakes import AgentHarness, MockStore


class RecordingNotifier:
    def __init__(self):
        self.published = []

    def on_publish(self, opportunity):
        self.published.append(opportunity)


class BrokenNotifier:
    def on_publish(self, opportunity):
        raise RuntimeError("smtp down")


@pytest.fixture
def review_setup():
    store = MockStore()
    harness = AgentHarness(store=store)
    notifier = RecordingNotifier()
    service = ReviewService(store, harness.agent, notifiers=[notifier])
    return service, store, harness, notifier


# ---------------------------------------------------------------------------
# ReviewService
# ---------------------------------------------------------------------------

def test_inbox_lists_drafts_newest_first(review_setup):
    service, store, _, _ = review_setup
    store.insert_draft(Opportunity(title="First"))
    store.insert_published(Opportunity(title="Live"))
    store.insert_draft(Opportunity(title="Second"))

    assert [o.title for o in service.inbox()] == ["Second", "First"]


def test_approve_publishes_verified_and_notifies(review_setup):
    service, store, _, notifier = review_setup
    new_id = store.insert_draft(Opportunity(title="Film Lab"))

    approved = service.approve(new_id)

    assert approved.status == OpportunityStatus.PUBLISHED
    assert approved.verification_status == VerificationStatus.VERIFIED
    assert [o.title for o in notifier.published] == ["Film Lab"]


def test_approve_survives_notifier_failure(caplog):
    store = MockStore()
    new_id = store.insert_draft(Opportunity(title="Film Lab"))
    recording = RecordingNotifier()
    service = ReviewService(store, AgentHarness(store=store).agent, notifiers=[BrokenNotifier(), recording])

    with caplog.at_level(logging.ERROR):
        approved = service.approve(new_id)

    assert approved is not None
    assert len(recording.published) == 1
    assert "smtp down" in caplog.text


def test_approve_unknown_id(review_setup):
    service, _, _, notifier = review_setup

    assert service.approve("missing") is None
    assert notifier.published == []


def test_reject_feeds_negative_memory(review_setup):
    service, store, harness, _ = review_setup
    new_id = store.insert_draft(Opportunity(title="Pay To Play Award"))

    assert service.reject(new_id) is True

    assert store.get_by_id(new_id).status == OpportunityStatus.REJECTED
    assert "Pay To Play Award" in harness.memory


def test_reject_unknown_id(review_setup):
    service, _, _, _ = review_setup

    assert service.reject("missing") is False


def test_clear_inbox_deletes_only_drafts(review_setup):
    service, store, _, _ = review_setup
    store.insert_draft(Opportunity(title="A"))
    store.insert_draft(Opportunity(title="B"))
    store.insert_published(Opportunity(title="Live"))

    assert service.clear_inbox() == 2
    assert [o.title for o in store.rows] == ["Live"]


def test_organizer_actions(review_setup):
    service, store, _, _ = review_setup
    verify_id = store.insert_draft(Opportunity(title="Verified By Organizer"))
    remove_id = store.insert_published(Opportunity(title="Withdrawn"))

    assert service.organizer_verify(verify_id).verification_status == VerificationStatus.ORGANIZER_VERIFIED
    assert service.organizer_remove(remove_id).status == OpportunityStatus.REMOVED_BY_ORGANIZER


# ---------------------------------------------------------------------------
# EmailNotifier
# ---------------------------------------------------------------------------

@pytest.fixture
def published():
    return Opportunity(
        id="abc-123",
        title="Kerala Writers Residency",
        organizer="Kerala Lit Trust",
        deadline="June 1, 2027",
        grant_or_prize="INR 1,00,000 stipend",
        status=OpportunityStatus.PUBLISHED,
    )


def test_email_rows_written(published):
    db = MagicMock()
    notifier = EmailNotifier(db, public_base_url="https://curator.example.org/")

    assert notifier.on_publish(published) == 2

    db.table.assert_called_with("system_emails")
    rows = [c[0][0] for c in db.table.return_value.insert.call_args_list]
    assert [r["type"] for r in rows] == [SUBSCRIBER_ALERT, ORGANIZER_OUTREACH]
    alert, outreach = rows
    assert "Kerala Writers Residency" in alert["subject"]
    assert "INR 1,00,000 stipend" in alert["body"]
    assert outreach["to_address"] == "info@keralalittrust.com"
    assert outreach["action_link"] == "https://curator.example.org/#/organizer-feedback/abc-123"
    assert outreach["action_link"] in outreach["body"]
    assert "created_at" in outreach


def test_action_link_format():
    assert organizer_action_link("https://nxfcurator.org", "42") == "https://nxfcurator.org/#/organizer-feedback/42"


def test_transient_write_error_retried(published, monkeypatch):
    monkeypatch.setattr(EmailNotifier._insert.retry, "sleep", lambda seconds: None)
    db = MagicMock()
    db.table.return_value.insert.return_value.execute.side_effect = [
        httpx.ConnectError("reset"),
        MagicMock(data=[{"id": 1}]),
        MagicMock(data=[{"id": 2}]),
    ]
    notifier = EmailNotifier(db)

    assert notifier.on_publish(published) == 2
    assert db.table.return_value.insert.return_value.execute.call_count == 3


def test_write_failure_logged_not_raised(published, caplog):
    db = MagicMock()
    db.table.return_value.insert.return_value.execute.side_effect = RuntimeError("permission denied")

    with caplog.at_level(logging.ERROR):
        assert EmailNotifier(db).on_publish(published) == 0

    assert "result=failure" in caplog.text
