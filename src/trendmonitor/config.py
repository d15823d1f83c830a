"""Settings from the environment and an optional trendmonitor.yaml file."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from trendmonitor.exceptions import ConfigError
from trendmonitor.scheduler import WEEKDAY_NAMES, RecurrenceRule
from trendmonitor.summarizer import DEFAULT_OPENAI_BASE, DEFAULT_OPENAI_MODEL

CONFIG_ENV_VAR = "TRENDMONITOR_CONFIG"

DEFAULT_CATEGORIES: dict[str, list[str]] = {
    "AI Agents": ["topic:ai-agents", "topic:autonomous-agents", '"AI Agents"', '"Autonomous Agents"'],
    "No-code": ["topic:no-code", "topic:low-code", '"No-code"', '"Low-code"'],
    "Visual AI": ["topic:computer-vision", "topic:generative-ai", '"Visual AI"', '"Computer Vision"'],
    "Automation": ["topic:automation", "topic:workflow-automation", '"Automation"'],
}


def default_report_rule() -> RecurrenceRule:
    """Wednesday and Saturday, 09:30."""
    return RecurrenceRule.weekly((2, 5), 9, 30)


def default_weekly_rule() -> RecurrenceRule:
    """Sunday, 10:00."""
    return RecurrenceRule.weekly((6,), 10, 0)


@dataclass(slots=True)
class MonitorSettings:
    """Everything a run needs; built once per process."""

    categories: dict[str, list[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_CATEGORIES.items()})
    webhook_url: str | None = None
    github_token: str | None = None
    openai_api_key: str | None = None
    openai_base_url: str = DEFAULT_OPENAI_BASE
    openai_model: str = DEFAULT_OPENAI_MODEL
    single_run: bool = False
    weekly_report: bool = False
    debug: bool = False
    top_n: int = 3
    days_ago: int = 3
    weekly_days: int = 7
    weekly_pool_size: int = 8
    star_window_days: int = 3
    keyword_interval: float = 0.4
    category_interval: float = 1.5
    weekly_interval: float = 0.3
    security_keyword: str = "github"
    report_schedule: RecurrenceRule = field(default_factory=default_report_rule)
    weekly_schedule: RecurrenceRule = field(default_factory=default_weekly_rule)


def env_flag(value: str | None) -> bool:
    """`1` and `true` (any case) enable a flag; anything else disables it."""
    return (value or "").strip().lower() in ("1", "true")


def _coerce_string_list(value: object) -> list[str]:
    """Normalize a config value into a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value]
    return []


def _coerce_int(raw: Mapping[str, object], key: str, default: int, minimum: int = 0) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigError(f"Invalid {key} value: {value!r}. Expected an integer >= {minimum}.", field=key)
    return value


def _coerce_float(raw: Mapping[str, object], key: str, default: float) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ConfigError(f"Invalid {key} value: {value!r}. Expected a non-negative number.", field=key)
    return float(value)


def _parse_weekday(value: object, key: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        name = value.strip().lower()[:3]
        if name in WEEKDAY_NAMES:
            return WEEKDAY_NAMES.index(name)
    raise ConfigError(f"Invalid weekday in {key}: {value!r}. Expected 0-6 (Monday = 0) or a day name.", field=key)


def _parse_rule(value: object, key: str, default: RecurrenceRule) -> RecurrenceRule:
    if value is None:
        return default
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid {key}: expected a mapping with days, hour and minute.", field=key)
    days = value.get("days", sorted(default.days_of_week))
    if not isinstance(days, list):
        days = [days]
    try:
        return RecurrenceRule.weekly(
            (_parse_weekday(day, key) for day in days),
            _coerce_int(value, "hour", default.hour),
            _coerce_int(value, "minute", default.minute),
        )
    except (ConfigError, ValueError) as e:
        raise ConfigError(f"Invalid {key}: {e}", field=key) from e


def _parse_categories(value: object) -> dict[str, list[str]]:
    if not isinstance(value, dict) or not value:
        raise ConfigError("Invalid categories: expected a non-empty mapping of label to expressions.", field="categories")
    categories: dict[str, list[str]] = {}
    for label, expressions in value.items():
        parsed = _coerce_string_list(expressions)
        if not parsed:
            raise ConfigError(f"Category {label!r} has no search expressions.", field="categories")
        categories[str(label)] = parsed
    return categories


def _load_config_dict(path: Path) -> dict[str, object]:
    """Load trendmonitor.yaml into a dictionary."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level.")
    return {str(key): value for key, value in parsed.items()}


def load_settings(path: str | None = None, environ: Mapping[str, str] | None = None) -> MonitorSettings:
    """Build settings from an optional YAML file, then the environment.

    Credentials, mode flags and the webhook URL come from the environment when
    set there; everything else comes from the file or the defaults.
    """
    env = os.environ if environ is None else environ
    config_path = path or env.get(CONFIG_ENV_VAR)
    raw = _load_config_dict(Path(config_path).expanduser()) if config_path else {}

    defaults = MonitorSettings()
    settings = MonitorSettings(
        categories=_parse_categories(raw["categories"]) if "categories" in raw else defaults.categories,
        top_n=_coerce_int(raw, "top_n", defaults.top_n, minimum=1),
        days_ago=_coerce_int(raw, "days_ago", defaults.days_ago),
        weekly_days=_coerce_int(raw, "weekly_days", defaults.weekly_days),
        weekly_pool_size=_coerce_int(raw, "weekly_pool_size", defaults.weekly_pool_size, minimum=1),
        star_window_days=_coerce_int(raw, "star_window_days", defaults.star_window_days),
        keyword_interval=_coerce_float(raw, "keyword_interval", defaults.keyword_interval),
        category_interval=_coerce_float(raw, "category_interval", defaults.category_interval),
        weekly_interval=_coerce_float(raw, "weekly_interval", defaults.weekly_interval),
        security_keyword=str(raw.get("security_keyword") or defaults.security_keyword),
        report_schedule=_parse_rule(raw.get("report_schedule"), "report_schedule", defaults.report_schedule),
        weekly_schedule=_parse_rule(raw.get("weekly_schedule"), "weekly_schedule", defaults.weekly_schedule),
    )

    file_webhook = raw.get("webhook_url")
    settings.webhook_url = env.get("FEISHU_WEBHOOK") or (str(file_webhook) if file_webhook else None)
    settings.github_token = env.get("GITHUB_TOKEN") or None
    settings.openai_api_key = env.get("OPENAI_API_KEY") or None
    settings.openai_base_url = env.get("OPENAI_BASE") or str(raw.get("openai_base_url") or defaults.openai_base_url)
    settings.openai_model = env.get("OPENAI_MODEL") or str(raw.get("openai_model") or defaults.openai_model)
    settings.single_run = env_flag(env.get("SINGLE_RUN"))
    settings.weekly_report = env_flag(env.get("WEEKLY_REPORT"))
    settings.debug = env_flag(env.get("TRENDMONITOR_DEBUG"))
    return settings
