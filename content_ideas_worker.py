#!/usr/bin/env python3
"""Content-ideas worker.

Runs one curation cycle (or a daily schedule):
- rss mode: gaming RSS feeds -> on-topic recent items -> model ideas
- history mode: names already in Notion -> model ideas that avoid them

Sanitized, deduplicated ideas are written to the Notion database one page at
a time.

Exit codes: 0 success (or no feed items to work on), 1 run failure,
2 configuration error.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional

import schedule
from dotenv import load_dotenv

from gamepulse.config import Config
from gamepulse.errors import ConfigurationError, EmptyResultError, PipelineError
from gamepulse.llm.openai_client import IdeaModel
from gamepulse.pipeline.orchestrator import ContentIdeaPipeline
from gamepulse.storage.notion_repo import NotionRepo

logger = logging.getLogger("content_ideas_worker")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def configure_logging(log_file: str = "") -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def build_pipeline(config: Config) -> ContentIdeaPipeline:
    model = IdeaModel(
        config.openai_api_key,
        model=config.openai_model,
        timeout=config.request_timeout,
        max_retries=config.model_max_retries,
    )
    repo = NotionRepo(config.notion_api_key, config.notion_database_id, timeout=config.request_timeout)
    return ContentIdeaPipeline(config, model=model, repo=repo)


def run_once(config: Config, pipeline: Optional[ContentIdeaPipeline] = None) -> int:
    pipeline = pipeline or build_pipeline(config)
    try:
        result = pipeline.run()
    except EmptyResultError as e:
        if e.fatal:
            logger.error(f"❌ {e}")
            return EXIT_FAILED
        logger.info(f"📭 {e}")
        return EXIT_OK
    except PipelineError as e:
        logger.error(f"❌ Run aborted: {e}")
        return EXIT_FAILED
    except Exception as e:
        logger.error(f"💥 Fatal error: {e}", exc_info=True)
        return EXIT_FAILED

    logger.info(f"✅ {result.status}: {len(result.ideas)} idea(s), {result.written} written")
    return EXIT_OK


def run_scheduled(config: Config) -> None:
    pipeline = build_pipeline(config)
    schedule.every().day.at(config.schedule_at).do(run_once, config, pipeline)
    logger.info(f"📅 Scheduled daily run at {config.schedule_at}; next run {schedule.next_run()}")
    while True:
        schedule.run_pending()
        time.sleep(30)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Gaming news -> content ideas -> Notion")
    parser.add_argument("--mode", choices=("rss", "history"), help="Input source (overrides PIPELINE_MODE)")
    parser.add_argument("--dry-run", action="store_true", help="Log the records instead of writing them")
    parser.add_argument("--scheduled", action="store_true", help="Run daily at SCHEDULE_AT instead of once")
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        config = Config.from_env()
    except ConfigurationError as e:
        configure_logging()
        logger.error(f"Configuration error:\n{e}")
        return EXIT_CONFIG

    configure_logging(config.log_file)
    if args.mode:
        config.pipeline_mode = args.mode
    if args.dry_run:
        config.dry_run = True

    if args.scheduled or config.run_mode == "scheduled":
        try:
            run_scheduled(config)
        except KeyboardInterrupt:
            logger.info("👋 Shutdown requested by user")
        return EXIT_OK
    return run_once(config)


if __name__ == "__main__":
    raise SystemExit(main())
