"""On-topic pre-filter for feed items.

Keeps the candidate set the model sees small: an item is on topic when any
keyword below occurs in its lowercased title + summary. No scoring, no ranking.
"""

from __future__ import annotations

from typing import List, Optional


# -----------------------------
# English
# -----------------------------
_EN_KEYWORDS = [
    "announce",
    "reveal",
    "trailer",
    "teaser",
    "demo",
    "playtest",
    "early access",
    "launch",
    "release date",
    "beta",
    "mmo",
    "live service",
    "live-service",
]

# -----------------------------
# Spanish
# -----------------------------
_ES_KEYWORDS = [
    "anuncio",
    "anunciado",
    "anuncia",
    "revelado",
    "presentado",
    "tráiler",
    "avance",
    "acceso anticipado",
    "lanzamiento",
    "lanza",
    "fecha de salida",
    "estreno",
    "beta abierta",
    "beta cerrada",
    "juego como servicio",
]

ON_TOPIC_KEYWORDS = _EN_KEYWORDS + _ES_KEYWORDS


def matched_keywords(text: Optional[str]) -> List[str]:
    blob = (text or "").lower()
    return [kw for kw in ON_TOPIC_KEYWORDS if kw in blob]


def is_on_topic(text: Optional[str]) -> bool:
    blob = (text or "").lower()
    return any(kw in blob for kw in ON_TOPIC_KEYWORDS)
