"""Error taxonomy for the content-ideas pipeline.

Recovered errors (FeedFetchError, DateParseError) never leave the ingestion
layer. Everything else is fatal for the run and is mapped to an exit code by
`content_ideas_worker.py`.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for every error raised on purpose by gamepulse."""


class ConfigurationError(PipelineError):
    """Missing or malformed required setting; raised before any work starts."""


class FeedFetchError(PipelineError):
    def __init__(self, message: str, *, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class DateParseError(PipelineError, ValueError):
    pass


class ModelDecodeError(PipelineError):
    """Model output is not JSON and holds no recoverable `{...}` span."""

    def __init__(self, message: str, *, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class EmptyResultError(PipelineError):
    """Nothing to do: no feed items (fatal=False) or no usable ideas (fatal=True)."""

    def __init__(self, message: str, *, fatal: bool):
        super().__init__(message)
        self.fatal = fatal


class PersistenceError(PipelineError):
    def __init__(self, message: str, *, status: Optional[int] = None):
        super().__init__(message)
        self.status = status
