"""HTTP clients for the GitHub REST API and other JSON endpoints"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timedelta, timezone
from types import TracebackType

import httpx
from pydantic import ValidationError

from trendmonitor._version import __version__
from trendmonitor.types import JsonDict, JsonValue, Repository, Stargazer

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = f"trendmonitor/{__version__}"

# Search fields every expression is matched against
SEARCH_SCOPE = "in:name,description,readme"
# Stargazer list page size; a shorter page means there are no more pages
STARGAZER_PAGE_SIZE = 100
# Stargazer pages fetched per repository with and without a token
STARGAZER_PAGE_LIMIT_AUTHENTICATED = 3
STARGAZER_PAGE_LIMIT_ANONYMOUS = 1

GITHUB_JSON = "application/vnd.github.v3+json"
GITHUB_STAR_JSON = "application/vnd.github.v3.star+json"


def empty_search_result() -> JsonDict:
    """Fallback body for search-shaped requests."""
    return {"items": []}


class AsyncJsonClient:
    """Async JSON client that degrades to a fallback value instead of raising.

    Non-2xx statuses and network errors are logged and resolved to `fallback`;
    a 2xx body that is not valid JSON resolves to the raw text.
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"User-Agent": USER_AGENT, **(headers or {})}
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AsyncJsonClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        url: str,
        *,
        fallback: JsonValue | None = None,
        **kwargs: object,
    ) -> JsonValue | str:
        """Send a request and return the parsed body, or `fallback` on failure."""
        if fallback is None:
            fallback = empty_search_result()
        client = await self._get_client()

        try:
            response = await client.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Network error for {method} {url}: {e}")
            return fallback

        if not response.is_success:
            logger.warning(f"Request returned {response.status_code}: {response.text[:100]}...")
            return fallback

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text


class AsyncGitHub(AsyncJsonClient):
    """Async client for the GitHub search and stargazer endpoints"""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_GITHUB_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the GitHub client.

        Args:
            token: GitHub token sent as `Authorization: token ...` when set
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        headers = {"Accept": GITHUB_JSON}
        if token:
            headers["Authorization"] = f"token {token}"
        super().__init__(base_url=base_url, headers=headers, timeout=timeout)
        self.token = token

    async def __aenter__(self) -> AsyncGitHub:
        return self

    @property
    def authenticated(self) -> bool:
        return bool(self.token)

    # =========================================================================
    # Search API
    # =========================================================================

    async def search_repositories(
        self,
        expression: str,
        qualifier: str | None = None,
        since: date | None = None,
        per_page: int = 10,
    ) -> list[Repository]:
        """
        Search repositories matching one expression, most starred first.

        Args:
            expression: Keyword or qualifier expression, e.g. "topic:ai-agents"
            qualifier: Date qualifier such as "pushed" or "updated"; ignored without `since`
            since: Only match repositories whose qualifier date is after this day
            per_page: Maximum number of results
        """
        parts = [expression, SEARCH_SCOPE]
        if qualifier and since:
            parts.append(f"{qualifier}:>{since.isoformat()}")
        params = {
            "q": " ".join(parts),
            "sort": "stars",
            "order": "desc",
            "per_page": per_page,
        }
        data = await self.request("GET", "/search/repositories", params=params)
        if not isinstance(data, dict):
            return []
        items = data.get("items") or []
        if not isinstance(items, list):
            return []

        repos: list[Repository] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                repos.append(Repository.model_validate(item))
            except ValidationError:
                logger.debug(f"Skipping malformed search item: {str(item)[:100]}")
        return repos

    # =========================================================================
    # Stargazer API
    # =========================================================================

    async def count_recent_stars(
        self,
        full_name: str,
        days: int = 3,
        page_limit: int | None = None,
        now: datetime | None = None,
    ) -> int:
        """
        Count stargazers who starred `full_name` within the last `days` days.

        A star exactly `days` days old is counted. Pages are fetched in order
        until an empty or short page, or until `page_limit` pages were read.
        """
        if page_limit is None:
            page_limit = STARGAZER_PAGE_LIMIT_AUTHENTICATED if self.authenticated else STARGAZER_PAGE_LIMIT_ANONYMOUS
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        since = now - timedelta(days=days)

        count = 0
        for page in range(1, page_limit + 1):
            items = await self.request(
                "GET",
                f"/repos/{full_name}/stargazers",
                params={"per_page": STARGAZER_PAGE_SIZE, "page": page},
                headers={"Accept": GITHUB_STAR_JSON},
                fallback=[],
            )
            if not isinstance(items, list) or not items:
                break
            for item in items:
                if not isinstance(item, dict):
                    continue
                try:
                    stargazer = Stargazer.model_validate(item)
                except ValidationError:
                    continue
                starred_at = stargazer.starred_at
                if starred_at.tzinfo is None:
                    starred_at = starred_at.replace(tzinfo=timezone.utc)
                if starred_at >= since:
                    count += 1
            if len(items) < STARGAZER_PAGE_SIZE:
                break
        return count
