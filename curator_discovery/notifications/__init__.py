"""Publish notifications."""

from .email import ORGANIZER_OUTREACH, SUBSCRIBER_ALERT, EmailNotifier, organizer_action_link

__all__ = ["EmailNotifier", "organizer_action_link", "SUBSCRIBER_ALERT", "ORGANIZER_OUTREACH"]
