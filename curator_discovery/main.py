"""Discovery scans, once or on an APScheduler interval.

Usage:
    python -m curator_discovery.main --once [--mode daily|deep] [--target N]
    python -m curator_discovery.main            # daily scan every SCAN_INTERVAL_HOURS
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .agent import ExtractionAgent, build_agent
from .config import Config, load_config
from .errors import ScanInProgressError
from .models import Opportunity, ScanMode

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


async def run_scan(
    agent: ExtractionAgent,
    mode: str = ScanMode.DAILY.value,
    target_count: int = 5,
) -> List[Opportunity]:
    """One scan with start/finish banners; overlapping runs are skipped."""
    logger.info("=" * 60)
    logger.info("Starting %s scan (target %d)", mode, target_count)
    logger.info("=" * 60)
    start_time = datetime.now(timezone.utc)

    try:
        accepted = await agent.perform_auto_scan(mode=mode, target_count=target_count)
    except ScanInProgressError:
        logger.warning("⚠ Previous scan still running, skipping this cycle")
        return []

    for opportunity in accepted:
        logger.info("✓ Draft: %s (%s, %s)", opportunity.title, opportunity.organizer, opportunity.deadline)

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    logger.info("=" * 60)
    logger.info("Scan finished in %.2f seconds: %d new drafts", duration, len(accepted))
    logger.info("=" * 60)
    return accepted


async def run_once(mode: str, target_count: Optional[int] = None) -> List[Opportunity]:
    config = load_config()
    logging.getLogger().setLevel(config.log_level)
    agent = build_agent(config)
    return await run_scan(agent, mode, target_count or config.default_target_count)


def create_scheduler(agent: ExtractionAgent, config: Config) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_scan,
        trigger=IntervalTrigger(hours=config.scan_interval_hours),
        args=[agent, ScanMode.DAILY.value, config.default_target_count],
        id="discovery_scan",
        name="Daily opportunity discovery scan",
        replace_existing=True,
        max_instances=1,  # Prevent overlapping runs
        next_run_time=datetime.now(timezone.utc),  # first run immediately
    )
    return scheduler


async def serve() -> None:
    """Run the scheduler until interrupted."""
    config = load_config()
    logging.getLogger().setLevel(config.log_level)

    logger.info("Initializing discovery agent")
    logger.info("Scan interval: %d hours", config.scan_interval_hours)

    agent = build_agent(config)
    scheduler = create_scheduler(agent, config)
    scheduler.start()
    logger.info("✓ Scheduler started")

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown(wait=False)
        logger.info("✓ Scheduler stopped")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Creator opportunity discovery agent")
    parser.add_argument("--once", action="store_true", help="run a single scan and exit")
    parser.add_argument("--mode", choices=[m.value for m in ScanMode], default=ScanMode.DAILY.value)
    parser.add_argument("--target", type=int, default=None, help="stop after this many accepted drafts")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    try:
        if args.once:
            asyncio.run(run_once(args.mode, args.target))
        else:
            asyncio.run(serve())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
