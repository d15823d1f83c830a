"""Tiered repository search: merge, deduplicate and rank across passes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Protocol

from trendmonitor.pacing import NoPacer, Pacer
from trendmonitor.types import Repository

logger = logging.getLogger(__name__)

DEFAULT_TOP_N = 3
DEFAULT_DAYS_AGO = 3


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class RepositorySearcher(Protocol):
    async def search_repositories(
        self,
        expression: str,
        qualifier: str | None = None,
        since: date | None = None,
        per_page: int = 10,
    ) -> list[Repository]: ...


@dataclass(frozen=True, slots=True)
class SearchTier:
    """One pass of the fallback search."""

    name: str
    qualifier: str | None  # "pushed", "updated" or None for no date filter
    per_page: int
    days: int | None = None


def default_tiers(days_ago: int = DEFAULT_DAYS_AGO) -> tuple[SearchTier, ...]:
    """Recently pushed, then recently updated, then any date."""
    return (
        SearchTier("recent-push", "pushed", 10, days_ago),
        SearchTier("recent-update", "updated", 10, days_ago),
        SearchTier("fallback", None, 15),
    )


def uniq_sort_top(items: Iterable[Repository | None], n: int = DEFAULT_TOP_N) -> list[Repository]:
    """Deduplicate by full name (first seen wins), rank by stars, keep the top `n`.

    The sort is stable, so repositories with equal star counts keep input order.
    """
    seen: dict[str, Repository] = {}
    for repo in items:
        if repo is None or not repo.full_name:
            continue
        if repo.full_name not in seen:
            seen[repo.full_name] = repo
    ranked = sorted(seen.values(), key=lambda r: r.stargazers_count or 0, reverse=True)
    return ranked[:n]


class TieredSearch:
    """Runs search tiers in order until `limit` distinct repositories are found."""

    def __init__(
        self,
        github: RepositorySearcher,
        tiers: Sequence[SearchTier] | None = None,
        limit: int = DEFAULT_TOP_N,
        pacer: Pacer | None = None,
        today: Callable[[], date] = utc_today,
    ):
        self.github = github
        self.tiers = tuple(tiers) if tiers is not None else default_tiers()
        if not self.tiers:
            raise ValueError("TieredSearch needs at least one tier.")
        self.limit = limit
        self.pacer = pacer or NoPacer()
        self._today = today

    async def run_tier(self, tier: SearchTier, expressions: Sequence[str]) -> list[Repository]:
        """Query every expression for one tier, in order, and return all items."""
        since = self._today() - timedelta(days=tier.days) if tier.days is not None else None
        collected: list[Repository] = []
        for expression in expressions:
            await self.pacer.wait()
            collected.extend(
                await self.github.search_repositories(
                    expression,
                    qualifier=tier.qualifier,
                    since=since,
                    per_page=tier.per_page,
                )
            )
        return collected

    async def search(self, category: str, expressions: Sequence[str]) -> list[Repository]:
        """Return up to `limit` repositories for a category, most starred first."""
        logger.info(f"[{category}] searching...")
        top: list[Repository] = []
        for tier in self.tiers:
            collected = await self.run_tier(tier, expressions)
            top = uniq_sort_top([*top, *collected], self.limit)
            logger.info(f"   - {tier.name}: {len(collected)} hits, keeping top {len(top)}")
            if len(top) >= self.limit:
                break
        return top
