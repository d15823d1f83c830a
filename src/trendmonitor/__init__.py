"""
trendmonitor - trending GitHub repositories per category, pushed to a team chat.

Run once from the command line:

    SINGLE_RUN=1 FEISHU_WEBHOOK=https://open.feishu.cn/... trendmonitor

Or drive it from code:

    from trendmonitor import TrendMonitor, load_settings

    async with TrendMonitor(load_settings()) as monitor:
        await monitor.run_report()

Set GITHUB_TOKEN for higher search rate limits and OPENAI_API_KEY for AI
summaries in the weekly digest.
"""

from trendmonitor._version import __version__  # noqa: E402
from trendmonitor.cards import (
    is_empty_report,
    render_no_update_card,
    render_report_card,
    render_weekly_card,
    truncate_description,
)
from trendmonitor.client import AsyncGitHub, AsyncJsonClient
from trendmonitor.config import MonitorSettings, load_settings

# Exceptions
from trendmonitor.exceptions import ConfigError, TrendMonitorError
from trendmonitor.monitor import TrendMonitor
from trendmonitor.notifier import WebhookNotifier
from trendmonitor.pacing import FixedIntervalPacer, NoPacer, Pacer
from trendmonitor.scheduler import RecurrenceRule, ScheduledJob, Scheduler
from trendmonitor.search import SearchTier, TieredSearch, default_tiers, uniq_sort_top
from trendmonitor.summarizer import AsyncSummarizer
from trendmonitor.types import ChatCompletionResponse, JsonDict, JsonValue, Repository, Stargazer

__all__ = [
    "__version__",
    # Jobs
    "TrendMonitor",
    "MonitorSettings",
    "load_settings",
    # Clients
    "AsyncJsonClient",
    "AsyncGitHub",
    "AsyncSummarizer",
    "WebhookNotifier",
    # Search
    "SearchTier",
    "TieredSearch",
    "default_tiers",
    "uniq_sort_top",
    # Pacing
    "Pacer",
    "NoPacer",
    "FixedIntervalPacer",
    # Scheduling
    "RecurrenceRule",
    "ScheduledJob",
    "Scheduler",
    # Cards
    "render_report_card",
    "render_weekly_card",
    "render_no_update_card",
    "is_empty_report",
    "truncate_description",
    # Types
    "Repository",
    "Stargazer",
    "ChatCompletionResponse",
    "JsonDict",
    "JsonValue",
    # Exceptions
    "TrendMonitorError",
    "ConfigError",
]
