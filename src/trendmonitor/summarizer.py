"""Per-category trend summaries via an OpenAI-compatible chat-completion API."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from types import TracebackType

from pydantic import ValidationError

from trendmonitor.client import AsyncJsonClient
from trendmonitor.types import ChatCompletionResponse, Repository

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.3
COMPLETIONS_PATH = "/chat/completions"

SYSTEM_PROMPT = "You are a senior technology analyst. Answer with concise, concrete conclusions."


def offline_summary(category: str) -> str:
    """Summary used when no API key is configured."""
    return (
        f"This week in {category}: popular iteration driven by star growth and activity. "
        "Watch for deployable workflows, model API wrappers and toolchain integration."
    )


def fallback_summary(category: str) -> str:
    """Summary used when the completion response is empty or malformed."""
    return f"This week in {category}: popular iteration driven by star growth and activity."


def build_prompt(category: str, repos: Sequence[Repository]) -> str:
    names = "; ".join(f"{repo.full_name} ⭐+{repo.recent_stars or 0}" for repo in repos)
    return (
        f"For product and engineering managers, briefly summarize this week's trends in {category}. "
        f"The trending projects are: {names}. Conclude on: 1) whether this is a technical leap or "
        "incremental iteration; 2) strengths, weaknesses and fitting use cases; 3) which ecosystems "
        "or deployment directions may be affected. Be concise and concrete."
    )


class AsyncSummarizer:
    """Summarizes a category's repositories in one short paragraph."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_OPENAI_BASE,
        model: str = DEFAULT_OPENAI_MODEL,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        # Accept either the API root or the full endpoint URL
        base_url = base_url.rstrip("/").removesuffix(COMPLETIONS_PATH)
        self._http = AsyncJsonClient(base_url=base_url, timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._http.base_url

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> AsyncSummarizer:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def summarize(self, category: str, repos: Sequence[Repository]) -> str:
        if not self.api_key:
            return offline_summary(category)

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(category, repos)},
            ],
            "temperature": DEFAULT_TEMPERATURE,
        }
        data = await self._http.request(
            "POST",
            COMPLETIONS_PATH,
            json=body,
            headers={"Authorization": f"Bearer {self.api_key}"},
            fallback={},
        )
        if not isinstance(data, dict):
            return fallback_summary(category)
        try:
            text = ChatCompletionResponse.model_validate(data).text
        except ValidationError:
            logger.warning(f"Malformed completion response for {category}")
            return fallback_summary(category)
        return text.strip() if text and text.strip() else fallback_summary(category)
