"""Run configuration, read once from the environment and validated up front."""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Tuple

from gamepulse.errors import ConfigurationError
from gamepulse.ingestion.feed_types import FeedSource
from gamepulse.ingestion.feeds import default_feed_sources, invalid_feed_urls, parse_feed_override

logger = logging.getLogger(__name__)

PIPELINE_MODES = ("rss", "history")
RUN_MODES = ("once", "scheduled")

_NOTION_ID_RE = re.compile(r"^[0-9a-fA-F]{32}$")
_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def normalize_database_id(value: str) -> Optional[str]:
    """32 hex characters, hyphens optional; returned bare and lowercase, None if malformed."""
    bare = (value or "").strip().replace("-", "")
    if not _NOTION_ID_RE.match(bare):
        return None
    return bare.lower()


@dataclass
class Config:
    openai_api_key: str
    notion_api_key: str
    notion_database_id: str

    # Pipeline settings
    pipeline_mode: str = "rss"
    lookback_days: float = 7.0
    feeds: List[FeedSource] = field(default_factory=default_feed_sources)
    max_items_per_feed: int = 25
    max_feed_items: int = 40
    history_lookback: int = 60
    dry_run: bool = False

    # API settings
    openai_model: str = "gpt-4o-mini"
    request_timeout: int = 30
    model_max_retries: int = 3

    # Process settings
    run_mode: str = "once"
    schedule_at: str = "09:00"
    log_file: str = ""

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Load and validate configuration; raises ConfigurationError listing every problem."""
        env = os.environ if environ is None else environ
        errors: List[str] = []

        def get(name: str, default: str = "") -> str:
            return (env.get(name) or default).strip()

        def number(name: str, default: str, cast: Callable[[str], float]):
            raw = get(name, default)
            try:
                return cast(raw)
            except ValueError:
                errors.append(f"{name} must be a number (got {raw!r})")
                return cast(default)

        feeds_override = get("RSS_FEEDS")
        config = cls(
            openai_api_key=get("OPENAI_API_KEY"),
            notion_api_key=get("NOTION_API_KEY"),
            notion_database_id=get("NOTION_DATABASE_ID"),
            pipeline_mode=get("PIPELINE_MODE", "rss").lower(),
            lookback_days=number("LOOKBACK_DAYS", "7", float),
            feeds=parse_feed_override(feeds_override) if feeds_override else default_feed_sources(),
            max_items_per_feed=number("MAX_ITEMS_PER_FEED", "25", int),
            max_feed_items=number("MAX_FEED_ITEMS", "40", int),
            history_lookback=number("HISTORY_LOOKBACK", "60", int),
            dry_run=get("DRY_RUN", "false").lower() in ("1", "true", "yes", "on"),
            openai_model=get("OPENAI_MODEL", "gpt-4o-mini"),
            request_timeout=number("REQUEST_TIMEOUT", "30", int),
            model_max_retries=number("MODEL_MAX_RETRIES", "3", int),
            run_mode=get("RUN_MODE", "once").lower(),
            schedule_at=get("SCHEDULE_AT", "09:00"),
            log_file=get("LOG_FILE"),
        )
        if feeds_override and not config.feeds:
            errors.append("RSS_FEEDS is set but lists no feed URL")

        config._validate(errors)
        return config

    def _validate(self, errors: Optional[List[str]] = None) -> None:
        """Validate configuration values"""
        errors = list(errors or [])

        if not self.openai_api_key:
            errors.append("OPENAI_API_KEY is required")
        if not self.notion_api_key:
            errors.append("NOTION_API_KEY is required")

        if not self.notion_database_id:
            errors.append("NOTION_DATABASE_ID is required")
        else:
            database_id = normalize_database_id(self.notion_database_id)
            if database_id is None:
                errors.append("NOTION_DATABASE_ID must be 32 hexadecimal characters (hyphens optional)")
            else:
                self.notion_database_id = database_id

        if self.pipeline_mode not in PIPELINE_MODES:
            errors.append(f"PIPELINE_MODE must be one of {', '.join(PIPELINE_MODES)}")
        if self.run_mode not in RUN_MODES:
            errors.append(f"RUN_MODE must be one of {', '.join(RUN_MODES)}")
        if not _HHMM_RE.match(self.schedule_at):
            errors.append("SCHEDULE_AT must use HH:MM (24h)")

        if not (math.isfinite(self.lookback_days) and 0 < self.lookback_days <= 3650):
            errors.append("LOOKBACK_DAYS must be greater than 0 and at most 3650")
        for name, value, lo, hi in self._ranges():
            if value < lo or value > hi:
                errors.append(f"{name} should be between {lo} and {hi}")

        bad = invalid_feed_urls(self.feeds)
        if bad:
            errors.append("RSS_FEEDS contains invalid URLs: " + ", ".join(bad))
        if not self.openai_model:
            errors.append("OPENAI_MODEL must not be empty")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors)
            raise ConfigurationError(error_msg)

        logger.debug(f"Configuration validated (mode={self.pipeline_mode}, feeds={len(self.feeds)})")

    def _ranges(self) -> List[Tuple[str, float, float, float]]:
        return [
            ("MAX_ITEMS_PER_FEED", self.max_items_per_feed, 1, 200),
            ("MAX_FEED_ITEMS", self.max_feed_items, 1, 500),
            ("HISTORY_LOOKBACK", self.history_lookback, 1, 500),
            ("REQUEST_TIMEOUT", self.request_timeout, 5, 300),
            ("MODEL_MAX_RETRIES", self.model_max_retries, 1, 10),
        ]
