"""Map sanitized ideas onto Notion page properties.

Only columns that exist in the live database schema are written; optional
values that are missing are left out entirely (Notion rejects empty dates).
"""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from gamepulse.contracts.content_idea import CandidateIdea

logger = logging.getLogger(__name__)

TITLE_PROPERTY = "Juego"
RUN_DATE_PROPERTY = "Fecha"


def title_value(text: str) -> Dict[str, Any]:
    return {"title": [{"type": "text", "text": {"content": text}}]}


def rich_text_value(text: str) -> Dict[str, Any]:
    return {"rich_text": [{"type": "text", "text": {"content": text}}]}


def select_value(name: str) -> Dict[str, Any]:
    return {"select": {"name": name}}


def status_value(name: str) -> Dict[str, Any]:
    return {"status": {"name": name}}


def multi_select_value(name: str) -> Dict[str, Any]:
    return {"multi_select": [{"name": name}]}


def number_value(value: float) -> Dict[str, Any]:
    return {"number": value}


def date_value(start: str) -> Dict[str, Any]:
    return {"date": {"start": start}}


def url_value(url: str) -> Dict[str, Any]:
    return {"url": url}


WRAPPERS: Dict[str, Callable[[Any], Dict[str, Any]]] = {
    "title": title_value,
    "rich_text": rich_text_value,
    "select": select_value,
    "status": status_value,
    "multi_select": multi_select_value,
    "number": number_value,
    "date": date_value,
    "url": url_value,
}

# Column types a declared kind may be written into.
COMPATIBLE_TYPES = {
    "select": ("select", "status", "multi_select"),
    "rich_text": ("rich_text",),
    "title": ("title",),
    "number": ("number",),
    "date": ("date",),
    "url": ("url", "rich_text"),
}

# (CandidateIdea attribute, Notion property, declared kind)
NOTION_FIELDS: List[Tuple[str, str, str]] = [
    ("name", TITLE_PROPERTY, "title"),
    ("category", "Categoría", "select"),
    ("popularity", "Popularidad", "select"),
    ("emotion", "Emoción", "select"),
    ("release_status", "Estado", "select"),
    ("game_type", "Tipo de juego", "select"),
    ("priority", "Prioridad", "select"),
    ("viral_score", "Score viral", "number"),
    ("year", "Año", "number"),
    ("announced_on", "Fecha anuncio", "date"),
    ("summary", "Resumen", "rich_text"),
    ("hook", "Gancho", "rich_text"),
    ("rationale", "Por qué", "rich_text"),
    ("short_script", "Guion corto", "rich_text"),
    ("long_script", "Guion largo", "rich_text"),
    ("seo_title", "Título SEO", "rich_text"),
    ("source_name", "Fuente", "rich_text"),
    ("source_url", "Link fuente", "url"),
]


def title_property(columns: Mapping[str, str]) -> Optional[str]:
    """The database's title column.

    `Juego` when it is typed title, else whichever column is typed title.
    `Juego` is the fallback when no column is typed title.
    """
    if columns.get(TITLE_PROPERTY) == "title":
        return TITLE_PROPERTY
    for name, kind in columns.items():
        if kind == "title":
            return name
    if TITLE_PROPERTY in columns:
        return TITLE_PROPERTY
    return None


def _wrap(kind: str, column_type: str, value: Any) -> Optional[Dict[str, Any]]:
    if column_type and column_type not in COMPATIBLE_TYPES[kind]:
        return None
    target = column_type or kind
    if kind == "url" and target == "rich_text":
        return rich_text_value(value)
    return WRAPPERS[target](value)


def to_notion_properties(idea: CandidateIdea, columns: Mapping[str, str], *, run_date: date) -> Dict[str, Any]:
    """Build the Notion `properties` payload for one idea.

    `columns` maps existing property names to their Notion type ("" when
    unknown). Properties without a matching column are skipped silently.
    """
    props: Dict[str, Any] = {}
    for attr, name, kind in NOTION_FIELDS:
        if kind == "title":
            name = title_property(columns) or name
        if name not in columns:
            continue
        value = getattr(idea, attr)
        if isinstance(value, Enum):
            value = value.value
        if value is None or value == "":
            continue
        wrapped = _wrap(kind, columns.get(name) or "", value)
        if wrapped is None:
            logger.debug(f"Skipping {name}: column type {columns.get(name)!r} cannot hold {kind}")
            continue
        props[name] = wrapped

    if RUN_DATE_PROPERTY in columns and (columns.get(RUN_DATE_PROPERTY) or "date") == "date":
        props[RUN_DATE_PROPERTY] = date_value(run_date.isoformat())
    return props
