"""Tests for card rendering"""

from __future__ import annotations

from datetime import datetime

import pytest

from trendmonitor.cards import (
    DESCRIPTION_PLACEHOLDER,
    is_empty_report,
    render_no_update_card,
    render_report_card,
    render_weekly_card,
    truncate_description,
)


def _contents(card: dict) -> list[str]:
    return [el["text"]["content"] for el in card["elements"] if el["tag"] == "div"]


class TestTruncateDescription:
    def test_short_description_unchanged(self):
        assert truncate_description("A small tool") == "A small tool"

    def test_exactly_limit_unchanged(self):
        text = "x" * 80
        assert truncate_description(text) == text

    def test_long_description_cut_with_ellipsis(self):
        text = "y" * 81
        assert truncate_description(text) == "y" * 80 + "..."

    @pytest.mark.parametrize("missing", [None, ""])
    def test_missing_description_placeholder(self, missing):
        assert truncate_description(missing) == DESCRIPTION_PLACEHOLDER

    def test_newlines_flattened(self):
        assert truncate_description("line one\nline two") == "line one line two"


def test_is_empty_report(repo):
    assert is_empty_report({})
    assert is_empty_report({"AI Agents": [], "No-code": []})
    assert not is_empty_report({"AI Agents": [], "No-code": [repo("o/a", 1)]})


class TestReportCard:
    def test_structure(self, repo):
        results = {
            "AI Agents": [
                repo("o/b", 900, language="Python", description="Agents\nfor all"),
                repo("o/a", 500),
                repo("o/c", 200),
                repo("o/d", 100),
            ],
            "Automation": [repo("w/flow", 42)],
        }

        card = render_report_card(results, days=3, top_n=3)

        assert card["config"] == {"wide_screen_mode": True}
        assert card["header"]["template"] == "blue"
        assert card["header"]["title"]["tag"] == "plain_text"
        tags = [el["tag"] for el in card["elements"]]
        assert tags == ["div", "hr", "div", "div", "div", "div", "div", "hr", "div", "div", "hr", "note"]

        contents = _contents(card)
        assert "last 3 days (Top 3/Category)" in contents[0]
        assert contents[1] == "### 📂 AI Agents"
        assert contents[2] == "🥇 **[b](https://github.com/o/b)**\n⭐ 900 | 🗣 Python\nAgents for all"
        assert contents[3].startswith("🥈 **[a]")
        assert "🗣 Unknown" in contents[3]
        assert contents[3].endswith(DESCRIPTION_PLACEHOLDER)
        assert contents[4].startswith("🥉 ")
        assert contents[5].startswith("🔹 ")
        assert contents[6] == "### 📂 Automation"
        assert contents[7].startswith("🥇 ")

    def test_footer_note(self, repo):
        card = render_report_card({"X": [repo("o/a", 1)]}, days=3, top_n=3)
        note = card["elements"][-1]
        assert note["tag"] == "note"
        assert note["elements"][0]["tag"] == "plain_text"


class TestWeeklyCard:
    def test_recent_stars_and_summary(self, repo):
        results = {"AI Agents": [repo("o/hot", 10, recent_stars=77), repo("o/cold", 9000)]}

        card = render_weekly_card(
            results,
            {"AI Agents": "Incremental."},
            top_n=3,
            star_window_days=3,
            security_keyword="github",
        )

        assert card["header"]["template"] == "purple"
        contents = _contents(card)
        assert "(Safe Keyword: github)" in contents[0]
        assert contents[2].startswith("⭐+77 • [hot](https://github.com/o/hot)\n⭐ 10 | 🗣 Unknown")
        assert contents[3].startswith("⭐+0 • [cold]")
        assert contents[4] == "🧠 AI analysis: Incremental."
        assert [el["tag"] for el in card["elements"]][-2:] == ["hr", "note"]


class TestNoUpdateCard:
    def test_grey_notice(self):
        card = render_no_update_card(days=3, checked_at=datetime(2026, 10, 21, 9, 30), security_keyword="github")

        assert card["header"]["template"] == "grey"
        (content,) = _contents(card)
        assert "2026-10-21 09:30:00" in content
        assert "last 3 days" in content
        assert "(Safe Keyword: github)" in content
        assert card["elements"][-1]["tag"] == "note"
