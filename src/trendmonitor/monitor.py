"""The two jobs: the category report and the weekly star-velocity digest."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from types import TracebackType

from trendmonitor.cards import is_empty_report, render_no_update_card, render_report_card, render_weekly_card
from trendmonitor.client import AsyncGitHub
from trendmonitor.config import MonitorSettings
from trendmonitor.notifier import WebhookNotifier
from trendmonitor.pacing import FixedIntervalPacer, Pacer
from trendmonitor.search import SearchTier, TieredSearch, default_tiers
from trendmonitor.summarizer import AsyncSummarizer
from trendmonitor.types import Repository

logger = logging.getLogger(__name__)

Report = dict[str, list[Repository]]


class TrendMonitor:
    """
    Collects trending repositories per category and pushes a card.

    Usage:
        settings = load_settings()
        async with TrendMonitor(settings) as monitor:
            await monitor.run_report()

    Collaborators are built from `settings` unless passed in, so tests can swap
    in fakes and zero-delay pacers.
    """

    def __init__(
        self,
        settings: MonitorSettings,
        *,
        github: AsyncGitHub | None = None,
        summarizer: AsyncSummarizer | None = None,
        notifier: WebhookNotifier | None = None,
        keyword_pacer: Pacer | None = None,
        category_pacer: Pacer | None = None,
        weekly_pacer: Pacer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings
        self.github = github or AsyncGitHub(token=settings.github_token)
        self.summarizer = summarizer or AsyncSummarizer(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
        )
        self.notifier = notifier or WebhookNotifier(settings.webhook_url)
        self.keyword_pacer = keyword_pacer or FixedIntervalPacer(settings.keyword_interval)
        self.category_pacer = category_pacer or FixedIntervalPacer(settings.category_interval)
        self.weekly_pacer = weekly_pacer or FixedIntervalPacer(settings.weekly_interval)
        self._clock = clock

    async def close(self) -> None:
        await self.github.close()
        await self.summarizer.close()
        await self.notifier.close()

    async def __aenter__(self) -> TrendMonitor:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # =========================================================================
    # Report job
    # =========================================================================

    async def collect_report(self) -> Report:
        """Run the tiered search for every category; empty categories are left out."""
        search = TieredSearch(
            self.github,
            tiers=default_tiers(self.settings.days_ago),
            limit=self.settings.top_n,
            pacer=self.keyword_pacer,
        )
        results: Report = {}
        for category, expressions in self.settings.categories.items():
            await self.category_pacer.wait()
            repos = await search.search(category, expressions)
            if repos:
                results[category] = repos
        return results

    async def run_report(self) -> Report:
        logger.info(f"Report run started at {self._clock():%Y-%m-%d %H:%M:%S}")
        results = await self.collect_report()
        if is_empty_report(results):
            logger.info("No new projects found; sending no-update notice")
            await self._send_no_update(self.settings.days_ago)
            return results
        card = render_report_card(results, days=self.settings.days_ago, top_n=self.settings.top_n)
        await self.notifier.send_card(card)
        return results

    # =========================================================================
    # Weekly digest job
    # =========================================================================

    async def collect_weekly(self) -> Report:
        """Rank each category's most starred recent pushes by stars gained in the window."""
        search = TieredSearch(
            self.github,
            tiers=[SearchTier("weekly-push", "pushed", 10, self.settings.weekly_days)],
            limit=self.settings.weekly_pool_size,
            pacer=self.weekly_pacer,
        )
        results: Report = {}
        for category, expressions in self.settings.categories.items():
            candidates = await search.search(category, expressions)
            enriched: list[Repository] = []
            for repo in candidates:
                recent = await self.github.count_recent_stars(repo.full_name, days=self.settings.star_window_days)
                enriched.append(repo.model_copy(update={"recent_stars": recent}))
            enriched.sort(key=lambda r: r.recent_stars or 0, reverse=True)
            if enriched:
                results[category] = enriched[: self.settings.top_n]
        return results

    async def run_weekly(self) -> Report:
        logger.info(f"Weekly digest run started at {self._clock():%Y-%m-%d %H:%M:%S}")
        results = await self.collect_weekly()
        if is_empty_report(results):
            logger.info("No repositories for the weekly digest; sending no-update notice")
            await self._send_no_update(self.settings.weekly_days)
            return results
        summaries = {category: await self.summarizer.summarize(category, repos) for category, repos in results.items()}
        card = render_weekly_card(
            results,
            summaries,
            top_n=self.settings.top_n,
            star_window_days=self.settings.star_window_days,
            security_keyword=self.settings.security_keyword,
        )
        await self.notifier.send_card(card)
        return results

    async def _send_no_update(self, days: int) -> None:
        card = render_no_update_card(
            days=days,
            checked_at=self._clock(),
            security_keyword=self.settings.security_keyword,
        )
        await self.notifier.send_card(card)
