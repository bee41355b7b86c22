"""Text helpers shared by ingestion, sanitization and dedup.

Nothing here raises: `None` (or any non-string) is treated as text.
"""

from __future__ import annotations

import html
import re
import unicodedata
from typing import Any


ELLIPSIS = "…"

_WS_RE = re.compile(r"\s+")
_TAG_RE = re.compile(r"<[^>]+>")
# letters, digits, whitespace and the separators game titles actually use
_NAME_STRIP_RE = re.compile(r"[^\w\s:.\-]|_")


def _as_text(text: Any) -> str:
    if text is None:
        return ""
    return text if isinstance(text, str) else str(text)


def collapse_whitespace(text: Any) -> str:
    return _WS_RE.sub(" ", _as_text(text)).strip()


def normalize_key(text: Any) -> str:
    """Equality key: lowercase, single spaces, trimmed. Never for display."""
    return collapse_whitespace(_as_text(text).lower())


def fold_diacritics(text: Any) -> str:
    decomposed = unicodedata.normalize("NFKD", _as_text(text))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def name_key(text: Any) -> str:
    """Comparison key for game names (`Pokémon: Legends` == `pokemon legends`)."""
    key = fold_diacritics(normalize_key(text))
    key = _NAME_STRIP_RE.sub("", key)
    return collapse_whitespace(key)


def truncate(text: Any, max_length: int) -> str:
    """Cap `text` at `max_length` characters, marking the cut with one ellipsis."""
    s = _as_text(text)
    if max_length <= 0:
        return ""
    if len(s) <= max_length:
        return s
    return s[: max_length - 1] + ELLIPSIS


def strip_html(text: Any) -> str:
    return html.unescape(_TAG_RE.sub(" ", _as_text(text)))
