"""Feishu/Lark interactive card rendering.

All functions here are pure: they take collected results and return the card
dict that goes under the webhook payload's "card" key.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime

from trendmonitor.types import JsonDict, Repository

DESCRIPTION_LIMIT = 80
DESCRIPTION_PLACEHOLDER = "No description"
RANK_MARKERS = ("🥇", "🥈", "🥉")
DEFAULT_RANK_MARKER = "🔹"
FOOTER_TEXT = "Automated intelligence • GitHub Monitor"

REPORT_TITLE = "🚀 GitHub Niche Intelligence"
WEEKLY_TITLE = "📈 GitHub Weekly Digest (with AI analysis)"
NO_UPDATE_TITLE = "GitHub Intelligence Monitor - No Trending Updates"


def truncate_description(description: str | None, limit: int = DESCRIPTION_LIMIT) -> str:
    """Cut to `limit` characters plus "..." and flatten newlines."""
    if not description:
        return DESCRIPTION_PLACEHOLDER
    text = description[:limit].replace("\n", " ")
    if len(description) > limit:
        text += "..."
    return text


def rank_marker(index: int) -> str:
    if 0 <= index < len(RANK_MARKERS):
        return RANK_MARKERS[index]
    return DEFAULT_RANK_MARKER


def is_empty_report(results: Mapping[str, Sequence[Repository]]) -> bool:
    """True when no category has any repositories."""
    return not any(results.values())


# =============================================================================
# Building blocks
# =============================================================================


def markdown_block(content: str) -> JsonDict:
    return {"tag": "div", "text": {"tag": "lark_md", "content": content}}


def divider() -> JsonDict:
    return {"tag": "hr"}


def footer() -> JsonDict:
    return {"tag": "note", "elements": [{"tag": "plain_text", "content": FOOTER_TEXT}]}


def card(title: str, template: str, elements: list[JsonDict]) -> JsonDict:
    return {
        "config": {"wide_screen_mode": True},
        "header": {"template": template, "title": {"content": title, "tag": "plain_text"}},
        "elements": elements,
    }


def category_title(category: str) -> JsonDict:
    return markdown_block(f"### 📂 {category}")


def repo_stats(repo: Repository) -> str:
    return f"⭐ {repo.stargazers_count} | 🗣 {repo.language or 'Unknown'}"


# =============================================================================
# Card variants
# =============================================================================


def render_report_card(
    results: Mapping[str, Sequence[Repository]],
    *,
    days: int,
    top_n: int,
) -> JsonDict:
    """Standard report: ranked repositories per category."""
    elements: list[JsonDict] = [
        markdown_block(f"📅 **Period**: last {days} days (Top {top_n}/Category)"),
        divider(),
    ]
    for category, repos in results.items():
        elements.append(category_title(category))
        for index, repo in enumerate(repos):
            elements.append(
                markdown_block(
                    f"{rank_marker(index)} **[{repo.name}]({repo.html_url})**\n"
                    f"{repo_stats(repo)}\n"
                    f"{truncate_description(repo.description)}"
                )
            )
        elements.append(divider())
    elements.append(footer())
    return card(REPORT_TITLE, "blue", elements)


def render_weekly_card(
    results: Mapping[str, Sequence[Repository]],
    summaries: Mapping[str, str],
    *,
    top_n: int,
    star_window_days: int,
    security_keyword: str,
) -> JsonDict:
    """Weekly digest: repositories ranked by recent stars, with an AI summary per category."""
    elements: list[JsonDict] = [
        markdown_block(
            f"📅 Weekly: ranked by new stars in the last {star_window_days} days (Top {top_n}/Category)\n"
            f"(Safe Keyword: {security_keyword})"
        ),
        divider(),
    ]
    for category, repos in results.items():
        elements.append(category_title(category))
        for repo in repos:
            elements.append(
                markdown_block(
                    f"⭐+{repo.recent_stars or 0} • [{repo.name}]({repo.html_url})\n"
                    f"{repo_stats(repo)}\n"
                    f"{truncate_description(repo.description)}"
                )
            )
        summary = summaries.get(category)
        if summary:
            elements.append(markdown_block(f"🧠 AI analysis: {summary}"))
        elements.append(divider())
    elements.append(footer())
    return card(WEEKLY_TITLE, "purple", elements)


def render_no_update_card(*, days: int, checked_at: datetime, security_keyword: str) -> JsonDict:
    """Notice sent when every category came back empty."""
    elements = [
        markdown_block(
            f"📅 **Checked at**: {checked_at:%Y-%m-%d %H:%M:%S}\n"
            f"⚠️ No new trending projects matched in the last {days} days.\n"
            f"(Safe Keyword: {security_keyword})"
        ),
        footer(),
    ]
    return card(NO_UPDATE_TITLE, "grey", elements)
