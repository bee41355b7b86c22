"""Shared ingestion data types."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from gamepulse.ingestion.url_utils import canonicalize_url
from gamepulse.text.normalize import normalize_key


@dataclass(frozen=True)
class FeedSource:
    name: str
    url: str


@dataclass(frozen=True)
class FeedEntry:
    """One on-topic, in-window feed item. Lives for a single run only."""

    title: str
    link: str
    source: str
    published_at: datetime
    snippet: str = ""

    @property
    def dedupe_key(self) -> str:
        if self.link:
            return "L:" + normalize_key(canonicalize_url(self.link))
        return "T:" + normalize_key(self.title) + "|" + normalize_key(self.source)
