"""Content-ideas pipeline: feeds (or history) -> model -> sanitized ideas -> Notion.

Linear run, no branching loops:

    FETCH/EXTRACT (rss mode) -> HISTORY -> PROMPT -> MODEL -> DECODE
    -> SANITIZE + DEDUPE -> PERSIST (one page at a time) -> DONE

An empty feed window ends the run early as a no-op (EmptyResultError with
fatal=False). No usable idea after a successful model call is a failure
(fatal=True). Writes are "at least written": pages created before a later
failure stay in Notion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from gamepulse.config import Config
from gamepulse.contracts.content_idea import CandidateIdea, extract_raw_ideas, sanitize_ideas
from gamepulse.errors import EmptyResultError, ModelDecodeError, PersistenceError
from gamepulse.ideas.dedup import BACKUP_IDEAS, MAX_IDEAS, PRIMARY_IDEAS, assign_priorities, filter_against_history
from gamepulse.ingestion.feed_types import FeedEntry
from gamepulse.ingestion.feeds import RawFeed, extract_entries, fetch_all_feeds
from gamepulse.llm.decode import lenient_json_decode
from gamepulse.llm.prompts import build_history_prompt, build_news_prompt
from gamepulse.storage.notion_properties import to_notion_properties

logger = logging.getLogger(__name__)


class IdeaGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


class IdeaStore(Protocol):
    def columns(self) -> Dict[str, str]: ...

    def recent_names(self, limit: int = 60, *, columns: Optional[Mapping[str, str]] = None) -> List[str]: ...

    def insert(self, properties: Dict[str, Any]) -> str: ...


@dataclass
class RunResult:
    status: str  # "done" | "dry_run"
    entries: List[FeedEntry] = field(default_factory=list)
    ideas: List[CandidateIdea] = field(default_factory=list)
    written: int = 0
    page_ids: List[str] = field(default_factory=list)


class ContentIdeaPipeline:
    def __init__(
        self,
        config: Config,
        *,
        model: IdeaGenerator,
        repo: IdeaStore,
        feed_loader: Optional[Callable[[], List[RawFeed]]] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.config = config
        self.model = model
        self.repo = repo
        self.feed_loader = feed_loader or self._load_feeds
        self.clock = clock

    def _load_feeds(self) -> List[RawFeed]:
        return fetch_all_feeds(self.config.feeds, timeout=self.config.request_timeout)

    # ------------------------- stages -------------------------

    def collect_entries(self, now: datetime) -> List[FeedEntry]:
        raw_feeds = self.feed_loader()
        entries = extract_entries(
            raw_feeds,
            window_days=self.config.lookback_days,
            max_per_feed=self.config.max_items_per_feed,
            max_total=self.config.max_feed_items,
            now=now,
        )
        logger.info(f"{len(entries)} on-topic feed items from {len(raw_feeds)} feed(s) in the last {self.config.lookback_days:g} day(s)")
        return entries

    def build_prompt(self, entries: Sequence[FeedEntry], history: Sequence[str]) -> str:
        if self.config.pipeline_mode == "history":
            return build_history_prompt(history, primary=PRIMARY_IDEAS, backups=BACKUP_IDEAS)
        return build_news_prompt(entries, history=history, primary=PRIMARY_IDEAS, backups=BACKUP_IDEAS)

    def ask_model(self, prompt: str) -> List[CandidateIdea]:
        raw_text = self.model.generate(prompt)
        try:
            payload = lenient_json_decode(raw_text)
        except ModelDecodeError as e:
            logger.error(f"Could not decode model response: {e}\n--- raw response ---\n{e.raw}")
            raise
        ideas = sanitize_ideas(extract_raw_ideas(payload))
        logger.info(f"Model proposed {len(ideas)} valid idea(s)")
        return ideas

    def persist(self, ideas: Sequence[CandidateIdea], columns: Mapping[str, str], run_date: date) -> List[str]:
        logger.info(f"About to write {len(ideas)} record(s) to Notion")
        page_ids: List[str] = []
        for idea in ideas:
            props = to_notion_properties(idea, columns, run_date=run_date)
            try:
                page_ids.append(self.repo.insert(props))
            except PersistenceError as e:
                logger.error(f"Writing {idea.name!r} failed after {len(page_ids)}/{len(ideas)} record(s) were written: {e}")
                raise
            logger.info(f"Wrote {idea.name!r} ({idea.priority.value if idea.priority else '-'}) [{len(page_ids)}/{len(ideas)}]")
        return page_ids

    # ------------------------- run -------------------------

    def run(self) -> RunResult:
        now = self.clock()
        mode = self.config.pipeline_mode
        logger.info(f"Starting content-ideas run (mode={mode}, dry_run={self.config.dry_run})")

        entries: List[FeedEntry] = []
        if mode == "rss":
            entries = self.collect_entries(now)
            if not entries:
                raise EmptyResultError("No on-topic feed items in the lookback window; nothing to do", fatal=False)

        columns = self.repo.columns()
        history = self.repo.recent_names(self.config.history_lookback, columns=columns)
        logger.info(f"Loaded {len(history)} game name(s) from history")

        ideas = self.ask_model(self.build_prompt(entries, history))
        ideas = assign_priorities(filter_against_history(ideas, history, limit=MAX_IDEAS))
        if not ideas:
            raise EmptyResultError("Model call succeeded but no usable, non-duplicate idea survived", fatal=True)

        if self.config.dry_run:
            for idea in ideas:
                logger.info(f"[dry-run] would write {idea.name!r}: {to_notion_properties(idea, columns, run_date=now.date())}")
            return RunResult(status="dry_run", entries=entries, ideas=ideas)

        page_ids = self.persist(ideas, columns, now.date())
        logger.info(f"Run complete: wrote {len(page_ids)} record(s)")
        return RunResult(status="done", entries=entries, ideas=ideas, written=len(page_ids), page_ids=page_ids)
