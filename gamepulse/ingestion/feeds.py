"""RSS ingestion: fetch gaming feeds and extract on-topic, recent, unique items.

Fetching is sequential and per-source fault tolerant: a feed that cannot be
downloaded or parsed is logged and contributes nothing. Extraction is pure and
works on plain mappings, so it can be fed feedparser entries or test dicts.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

import feedparser
import requests

from gamepulse.errors import DateParseError, FeedFetchError
from gamepulse.ingestion.feed_types import FeedEntry, FeedSource
from gamepulse.ingestion.url_utils import is_http_url, source_domain
from gamepulse.scoring.topic_filter import is_on_topic, matched_keywords
from gamepulse.text.normalize import collapse_whitespace, strip_html, truncate

logger = logging.getLogger(__name__)

USER_AGENT = "GamePulse/1.0 (+content-ideas)"

SNIPPET_MAX_CHARS = 240

# First parseable field wins. feedparser exposes *_parsed as UTC struct_time.
DATE_FIELDS = (
    "published_parsed",
    "updated_parsed",
    "created_parsed",
    "published",
    "pubDate",
    "updated",
    "created",
    "isoDate",
    "dc_date",
)

TEXT_FIELDS = ("summary", "description", "content", "contentSnippet", "subtitle")

RawFeed = Tuple[str, Sequence[Any]]


def default_feed_sources() -> List[FeedSource]:
    """Built-in gaming news feeds (English + Spanish outlets)."""
    return [
        FeedSource("IGN", "https://feeds.feedburner.com/ign/games-all"),
        FeedSource("GameSpot", "https://www.gamespot.com/feeds/game-news"),
        FeedSource("PC Gamer", "https://www.pcgamer.com/rss/"),
        FeedSource("Rock Paper Shotgun", "https://www.rockpapershotgun.com/feed"),
        FeedSource("Eurogamer", "https://www.eurogamer.net/feed"),
        FeedSource("MMORPG.com", "https://www.mmorpg.com/rss"),
        FeedSource("Vandal", "https://vandal.elespanol.com/xml.cgi"),
        FeedSource("3DJuegos", "https://www.3djuegos.com/feedburner.xml"),
        FeedSource("MeriStation", "https://as.com/meristation/rss/"),
    ]


def parse_feed_override(value: Optional[str]) -> List[FeedSource]:
    """Comma-separated feed URLs from configuration; blanks are ignored."""
    out: List[FeedSource] = []
    for item in (value or "").split(","):
        url = item.strip()
        if not url:
            continue
        out.append(FeedSource(source_domain(url) or url, url))
    return out


def invalid_feed_urls(sources: Iterable[FeedSource]) -> List[str]:
    return [s.url for s in sources if not is_http_url(s.url)]


# -----------------------------
# Dates
# -----------------------------
def parse_timestamp(value: Any) -> datetime:
    """Parse a feed date into an aware UTC datetime or raise DateParseError."""
    if isinstance(value, datetime):
        return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value.astimezone(timezone.utc)
    if isinstance(value, (time.struct_time, tuple)) and len(value) >= 6:
        try:
            return datetime(*value[:6], tzinfo=timezone.utc)
        except (TypeError, ValueError) as e:
            raise DateParseError(f"bad time tuple: {value!r}") from e
    if not isinstance(value, str) or not value.strip():
        raise DateParseError(f"no date in {value!r}")
    s = value.strip()
    try:
        parsed = parsedate_to_datetime(s)
    except (TypeError, ValueError, IndexError):
        parsed = None
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError as e:
            raise DateParseError(f"unrecognized date: {s!r}") from e
    return parsed.replace(tzinfo=timezone.utc) if parsed.tzinfo is None else parsed.astimezone(timezone.utc)


def entry_timestamp(entry: Any) -> Optional[datetime]:
    for field in DATE_FIELDS:
        value = entry.get(field)
        if not value:
            continue
        try:
            return parse_timestamp(value)
        except DateParseError:
            continue
    return None


def entry_text(entry: Any) -> str:
    """First non-empty content/summary-like field, HTML stripped."""
    for field in TEXT_FIELDS:
        value = entry.get(field)
        if field == "content" and isinstance(value, list):
            value = " ".join(str(c.get("value") or "") for c in value if hasattr(c, "get"))
        text = collapse_whitespace(strip_html(value))
        if text:
            return text
    return ""


# -----------------------------
# Extraction
# -----------------------------
def _to_entry(raw: Any, *, source: str, cutoff: datetime, now: datetime) -> Optional[FeedEntry]:
    if not hasattr(raw, "get"):
        return None
    published = entry_timestamp(raw)
    if published is None or published < cutoff or published > now:
        return None
    title = collapse_whitespace(strip_html(raw.get("title")))
    if not title:
        return None
    text = entry_text(raw)
    blob = f"{title} {text}"
    if not is_on_topic(blob):
        return None
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Keeping {title!r} from {source} (keywords: {', '.join(matched_keywords(blob))})")
    return FeedEntry(
        title=title,
        link=str(raw.get("link") or "").strip(),
        source=source,
        published_at=published,
        snippet=truncate(text, SNIPPET_MAX_CHARS),
    )


def extract_entries(
    feeds: Iterable[RawFeed],
    *,
    window_days: float,
    max_per_feed: int,
    max_total: int,
    now: Optional[datetime] = None,
) -> List[FeedEntry]:
    """Recent, on-topic, unique items across feeds, newest first.

    Only the first `max_per_feed` raw items of each feed are looked at, in feed
    order. Items dated before `now - window_days` (or after `now`) are dropped;
    an item exactly at the cutoff is kept. The first occurrence of a dedupe
    key wins, in feed-then-item order, before the stable newest-first sort.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=window_days)

    seen = set()
    kept: List[FeedEntry] = []
    for source, raw_entries in feeds:
        for raw in list(raw_entries or [])[: max(0, max_per_feed)]:
            entry = _to_entry(raw, source=source, cutoff=cutoff, now=now)
            if entry is None:
                continue
            key = entry.dedupe_key
            if key in seen:
                continue
            seen.add(key)
            kept.append(entry)

    kept.sort(key=lambda e: e.published_at, reverse=True)
    return kept[: max(0, max_total)]


# -----------------------------
# Fetching
# -----------------------------
def fetch_feed(source: FeedSource, *, timeout: float = 30) -> List[Any]:
    try:
        resp = requests.get(source.url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise FeedFetchError(f"{source.name}: {e}", source=source.name) from e
    parsed = feedparser.parse(resp.content)
    entries = list(parsed.entries or [])
    if parsed.get("bozo") and not entries:
        raise FeedFetchError(f"{source.name}: malformed feed ({parsed.get('bozo_exception')})", source=source.name)
    return entries


def fetch_all_feeds(
    sources: Sequence[FeedSource],
    *,
    fetcher: Callable[..., List[Any]] = fetch_feed,
    timeout: float = 30,
) -> List[RawFeed]:
    """Fetch every source one after the other, keeping the declared order."""
    out: List[RawFeed] = []
    for source in sources:
        try:
            entries = fetcher(source, timeout=timeout)
        except FeedFetchError as e:
            logger.warning(f"Skipping feed {source.name}: {e}")
            continue
        logger.info(f"Fetched {len(entries)} entries from {source.name}")
        out.append((source.name, entries))
    return out
