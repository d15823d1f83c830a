"""Tests for the command line entry point"""

from __future__ import annotations

import pytest

import trendmonitor.cli as cli
from trendmonitor.config import MonitorSettings


@pytest.fixture
def quiet_cli(monkeypatch):
    """Skip .env loading and global logging setup."""
    monkeypatch.setattr(cli, "load_dotenv", lambda *args, **kwargs: False)
    monkeypatch.setattr(cli, "configure_logging", lambda debug=False: None)


@pytest.fixture
def captured_run(monkeypatch):
    captured: dict[str, MonitorSettings] = {}

    async def fake_run_once(settings: MonitorSettings) -> None:
        captured["once"] = settings

    async def fake_serve(settings: MonitorSettings) -> None:
        captured["serve"] = settings

    monkeypatch.setattr(cli, "run_once", fake_run_once)
    monkeypatch.setattr(cli, "serve", fake_serve)
    return captured


def test_single_run_from_environment(quiet_cli, captured_run, monkeypatch):
    monkeypatch.setenv("SINGLE_RUN", "1")

    assert cli.main([]) == 0

    assert "serve" not in captured_run
    assert captured_run["once"].weekly_report is False


def test_flags_select_weekly_single_run(quiet_cli, captured_run):
    assert cli.main(["--once", "--weekly"]) == 0

    settings = captured_run["once"]
    assert settings.single_run is True
    assert settings.weekly_report is True


def test_long_running_mode(quiet_cli, captured_run):
    assert cli.main([]) == 0
    assert "once" not in captured_run
    assert captured_run["serve"].single_run is False


def test_interrupt_exits_cleanly(quiet_cli, monkeypatch):
    async def interrupted(settings: MonitorSettings) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "serve", interrupted)

    assert cli.main([]) == 0


def test_config_error_exits_2(quiet_cli, captured_run, tmp_path):
    assert cli.main(["--once", "--config", str(tmp_path / "missing.yaml")]) == 2
    assert captured_run == {}


def test_parser_help_mentions_flags():
    help_text = cli.build_parser().format_help()
    for flag in ("--once", "--weekly", "--config", "--debug"):
        assert flag in help_text


@pytest.mark.asyncio
async def test_run_once_dispatches_to_weekly(monkeypatch):
    calls: list[str] = []

    class FakeMonitor:
        def __init__(self, settings: MonitorSettings):
            self.settings = settings

        async def __aenter__(self):
            return self

        async def __aexit__(self, *exc_info):
            return None

        async def run_report(self):
            calls.append("report")

        async def run_weekly(self):
            calls.append("weekly")

    monkeypatch.setattr(cli, "TrendMonitor", FakeMonitor)

    await cli.run_once(MonitorSettings(weekly_report=True))
    await cli.run_once(MonitorSettings())

    assert calls == ["weekly", "report"]
