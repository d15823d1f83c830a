"""Pytest configuration and shared fixtures for trendmonitor tests."""

from __future__ import annotations

from datetime import date

import pytest

from trendmonitor.types import JsonDict, Repository

ENV_VARS = (
    "GITHUB_TOKEN",
    "FEISHU_WEBHOOK",
    "SINGLE_RUN",
    "WEEKLY_REPORT",
    "OPENAI_API_KEY",
    "OPENAI_BASE",
    "OPENAI_MODEL",
    "TRENDMONITOR_CONFIG",
    "TRENDMONITOR_DEBUG",
)


# =============================================================================
# Fakes
# =============================================================================
# The monitor and the tiered search only need `search_repositories` and
# `count_recent_stars`, so tests script those instead of stubbing HTTP.


class FakeGitHub:
    """Scripted GitHub client keyed by (qualifier, expression)."""

    def __init__(
        self,
        results: dict[str | None, dict[str, list[Repository]]] | None = None,
        recent_stars: dict[str, int] | None = None,
    ):
        self.results = results or {}
        self.recent_stars = recent_stars or {}
        self.search_calls: list[tuple[str, str | None, date | None, int]] = []
        self.star_calls: list[tuple[str, int]] = []
        self.closed = False

    async def search_repositories(
        self,
        expression: str,
        qualifier: str | None = None,
        since: date | None = None,
        per_page: int = 10,
    ) -> list[Repository]:
        self.search_calls.append((expression, qualifier, since, per_page))
        return list(self.results.get(qualifier, {}).get(expression, []))

    async def count_recent_stars(self, full_name: str, days: int = 3, page_limit: int | None = None) -> int:
        self.star_calls.append((full_name, days))
        return self.recent_stars.get(full_name, 0)

    async def close(self) -> None:
        self.closed = True


class RecordingNotifier:
    """Collects cards instead of posting them."""

    def __init__(self) -> None:
        self.cards: list[JsonDict] = []

    async def send_card(self, card: JsonDict) -> None:
        self.cards.append(card)

    async def close(self) -> None:
        return None


class CountingPacer:
    def __init__(self) -> None:
        self.waits = 0

    async def wait(self) -> None:
        self.waits += 1


def make_repo(full_name: str, stars: int = 0, **fields: object) -> Repository:
    """Build a Repository the way the search API would return it."""
    return Repository(
        full_name=full_name,
        name=full_name.split("/")[-1],
        html_url=f"https://github.com/{full_name}",
        stargazers_count=stars,
        **fields,
    )


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of settings and CLI tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def repo():
    return make_repo


@pytest.fixture
def fake_github():
    return FakeGitHub


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def counting_pacer():
    return CountingPacer()


@pytest.fixture
def search_item():
    """Raw search API item factory."""

    def _item(full_name: str, stars: int, **fields: object) -> JsonDict:
        item: JsonDict = {
            "id": abs(hash(full_name)) % 100_000,
            "full_name": full_name,
            "name": full_name.split("/")[-1],
            "html_url": f"https://github.com/{full_name}",
            "stargazers_count": stars,
            "description": None,
            "language": None,
            "owner": {"login": full_name.split("/")[0]},
        }
        item.update(fields)
        return item

    return _item
