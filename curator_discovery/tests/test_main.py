"""Tests for the scan entry point and scheduler wiring."""

import logging
from unittest.mock import MagicMock

import pytest

from curator_discovery.config import Config
from curator_discovery.main import create_scheduler, parse_args, run_scan
from curator_discovery.tests.fakes import AgentHarness, opportunity_page


def _config(**overrides) -> Config:
    values = {"supabase_url": "https://test.supabase.co", "supabase_key": "k", "_env_file": None}
    values.update(overrides)
    return Config(**values)


def test_parse_args_defaults():
    args = parse_args([])

    assert args.once is False
    assert args.mode == "daily"
    assert args.target is None


def test_parse_args_once_deep():
    args = parse_args(["--once", "--mode", "deep", "--target", "3"])

    assert args.once is True
    assert args.mode == "deep"
    assert args.target == 3


def test_parse_args_rejects_unknown_mode():
    with pytest.raises(SystemExit):
        parse_args(["--mode", "weekly"])


def test_scheduler_job_never_overlaps():
    scheduler = create_scheduler(MagicMock(), _config(scan_interval_hours=6))

    job = scheduler.get_job("discovery_scan")

    assert job.max_instances == 1
    assert job.trigger.interval.total_seconds() == 6 * 3600
    assert job.args[1:] == ("daily", 5)


@pytest.mark.asyncio
async def test_run_scan_logs_drafts(caplog):
    url = "https://indiefilm.example.org/grant"
    h = AgentHarness(links=[url], pages={url: opportunity_page()})

    with caplog.at_level(logging.INFO):
        accepted = await run_scan(h.agent, "daily", 5)

    assert len(accepted) == 1
    assert "Draft: Indie Film Grant" in caplog.text
    assert "1 new drafts" in caplog.text
