"""trendmonitor types - the subset of GitHub and chat-completion payloads we read"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, JsonValue

# Dictionary of JSON values (common for request/response payloads and cards)
JsonDict = dict[str, JsonValue]


class Repository(BaseModel):
    """A repository item from the GitHub search API"""

    model_config = ConfigDict(extra="ignore")

    full_name: str  # owner/name, the identity used for deduplication
    name: str = ""
    html_url: str = ""
    stargazers_count: int = 0
    description: str | None = None
    language: str | None = None
    recent_stars: int | None = None  # Stars within the trailing window (weekly digest only)


class Stargazer(BaseModel):
    """One entry of the stargazer list when requested with the star+json media type"""

    model_config = ConfigDict(extra="ignore")

    starred_at: datetime


class ChatMessage(BaseModel):
    role: str = "assistant"
    content: str | None = None


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatCompletionResponse(BaseModel):
    """Response from a /chat/completions endpoint"""

    model_config = ConfigDict(extra="ignore")

    choices: list[ChatChoice] = Field(default_factory=list)

    @property
    def text(self) -> str | None:
        """Content of the first choice, if any."""
        if not self.choices:
            return None
        return self.choices[0].message.content
