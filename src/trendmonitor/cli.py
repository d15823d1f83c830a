"""Command line entry point: one-shot run or the long-running scheduler."""

from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import find_dotenv, load_dotenv

from trendmonitor.config import MonitorSettings, load_settings
from trendmonitor.exceptions import ConfigError
from trendmonitor.log import configure_logging
from trendmonitor.monitor import TrendMonitor
from trendmonitor.scheduler import ScheduledJob, Scheduler

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trendmonitor",
        description="Push trending GitHub repositories per category to a Feishu/Lark webhook.",
    )
    parser.add_argument("--once", action="store_true", help="Run one job and exit (same as SINGLE_RUN=1)")
    parser.add_argument(
        "--weekly", action="store_true", help="With --once, run the weekly digest (same as WEEKLY_REPORT=1)"
    )
    parser.add_argument("--config", metavar="PATH", help="YAML config file (default: $TRENDMONITOR_CONFIG)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging (same as TRENDMONITOR_DEBUG=true)")
    return parser


async def run_once(settings: MonitorSettings) -> None:
    async with TrendMonitor(settings) as monitor:
        if settings.weekly_report:
            await monitor.run_weekly()
        else:
            await monitor.run_report()


async def serve(settings: MonitorSettings) -> None:
    """Run the report immediately, then both jobs on their schedules, forever."""
    async with TrendMonitor(settings) as monitor:
        report_job = ScheduledJob("report", settings.report_schedule, monitor.run_report)
        weekly_job = ScheduledJob("weekly digest", settings.weekly_schedule, monitor.run_weekly)
        scheduler = Scheduler([report_job, weekly_job])
        await scheduler.fire(report_job)
        await scheduler.run_forever()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        configure_logging(args.debug)
        logger.error(f"Configuration error: {e}")
        return 2

    settings.single_run = settings.single_run or args.once
    settings.weekly_report = settings.weekly_report or args.weekly
    settings.debug = settings.debug or args.debug
    configure_logging(settings.debug)

    if not settings.github_token:
        logger.warning("GITHUB_TOKEN not found. Using unauthenticated requests (limited rate).")

    if settings.single_run:
        asyncio.run(run_once(settings))
        return 0

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted; scheduler stopped.")
    return 0
