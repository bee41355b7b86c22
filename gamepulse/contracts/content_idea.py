"""Content-idea contract: vocabularies, JSON Schema and the sanitize-on-ingest boundary.

The model is asked for a payload shaped like::

    {"ideas": [{"juego": "...", "categoria": "Anuncio", "score_viral": 8, ...}]}

Format compliance is probabilistic, so nothing downstream reads the raw
payload. `sanitize_idea` is the single enforcement point: every enumerated
field ends up in its vocabulary (or its fallback), the score is an integer in
range, text is trimmed and capped, and an optional date is either a real date
or absent. It never raises.

JSON keys stay in Spanish (they are part of the prompt contract); the
sanitized `CandidateIdea` uses English attribute names.
"""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from datetime import date, datetime
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type

from jsonschema import Draft202012Validator

from gamepulse.ingestion.url_utils import is_http_url
from gamepulse.text.normalize import fold_diacritics, normalize_key, truncate

logger = logging.getLogger(__name__)


# -----------------------------
# Vocabularies
# -----------------------------
class Category(str, Enum):
    ANNOUNCEMENT = "Anuncio"
    TRAILER = "Tráiler"
    DEMO = "Demo"
    EARLY_ACCESS = "Acceso anticipado"
    LAUNCH = "Lanzamiento"
    BETA = "Beta"
    UPDATE = "Actualización"
    RUMOR = "Rumor"
    OTHER = "Otro"


class Popularity(str, Enum):
    INDIE = "Indie"
    AA = "AA"
    AAA = "AAA"
    UNKNOWN = "Desconocida"


class Emotion(str, Enum):
    HYPE = "Hype"
    CURIOSITY = "Curiosidad"
    NOSTALGIA = "Nostalgia"
    SURPRISE = "Sorpresa"
    CONTROVERSY = "Polémica"
    NEUTRAL = "Neutral"


class ReleaseStatus(str, Enum):
    ANNOUNCED = "Anunciado"
    IN_DEVELOPMENT = "En desarrollo"
    BETA = "Beta"
    EARLY_ACCESS = "Acceso anticipado"
    RELEASED = "Lanzado"
    UNCONFIRMED = "Sin confirmar"


class GameType(str, Enum):
    MMO = "MMO"
    LIVE_SERVICE = "Live service"
    MULTIPLAYER = "Multijugador"
    COOP = "Cooperativo"
    SINGLE_PLAYER = "Un jugador"
    OTHER = "Otro"


class Priority(str, Enum):
    PRIMARY = "Principal"
    BACKUP = "Backup"


# -----------------------------
# Schema description
# -----------------------------
@dataclass(frozen=True)
class EnumRule:
    attr: str
    vocabulary: Type[Enum]
    fallback: Enum


@dataclass(frozen=True)
class TextRule:
    attr: str
    max_length: int


@dataclass(frozen=True)
class IdeaSchema:
    """Field rules for `sanitize_idea`, keyed by the model's JSON keys."""

    identifying_field: str
    name_max_length: int
    enum_fields: Mapping[str, EnumRule]
    text_fields: Mapping[str, TextRule]
    score_field: str
    score_range: Tuple[int, int]
    score_fallback: int
    year_field: str
    year_range: Tuple[int, int]
    date_field: str
    url_field: str
    url_max_length: int


NARRATIVE_MAX_CHARS = 1900  # Notion caps a rich-text run at 2000
SEO_TITLE_MAX_CHARS = 100
SOURCE_NAME_MAX_CHARS = 120

IDEA_SCHEMA = IdeaSchema(
    identifying_field="juego",
    name_max_length=150,
    enum_fields={
        "categoria": EnumRule("category", Category, Category.OTHER),
        "popularidad": EnumRule("popularity", Popularity, Popularity.UNKNOWN),
        "emocion": EnumRule("emotion", Emotion, Emotion.NEUTRAL),
        "estado": EnumRule("release_status", ReleaseStatus, ReleaseStatus.UNCONFIRMED),
        "tipo_juego": EnumRule("game_type", GameType, GameType.OTHER),
    },
    text_fields={
        "resumen": TextRule("summary", NARRATIVE_MAX_CHARS),
        "gancho": TextRule("hook", NARRATIVE_MAX_CHARS),
        "por_que": TextRule("rationale", NARRATIVE_MAX_CHARS),
        "guion_corto": TextRule("short_script", NARRATIVE_MAX_CHARS),
        "guion_largo": TextRule("long_script", NARRATIVE_MAX_CHARS),
        "titulo_seo": TextRule("seo_title", SEO_TITLE_MAX_CHARS),
        "fuente": TextRule("source_name", SOURCE_NAME_MAX_CHARS),
    },
    score_field="score_viral",
    score_range=(1, 10),
    score_fallback=7,
    year_field="anio",
    year_range=(1970, 2100),
    date_field="fecha_anuncio",
    url_field="link_fuente",
    url_max_length=500,
)


@dataclass(frozen=True)
class CandidateIdea:
    """A sanitized content idea. Every field already satisfies the contract."""

    name: str
    category: Category = Category.OTHER
    popularity: Popularity = Popularity.UNKNOWN
    emotion: Emotion = Emotion.NEUTRAL
    release_status: ReleaseStatus = ReleaseStatus.UNCONFIRMED
    game_type: GameType = GameType.OTHER
    viral_score: int = 7
    year: Optional[int] = None
    announced_on: Optional[str] = None
    summary: str = ""
    hook: str = ""
    rationale: str = ""
    short_script: str = ""
    long_script: str = ""
    seo_title: str = ""
    source_name: str = ""
    source_url: Optional[str] = None
    priority: Optional[Priority] = None


# -----------------------------
# JSON Schema (diagnostics only; sanitize repairs what it can)
# -----------------------------
IDEAS_ENVELOPE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["ideas"],
    "properties": {"ideas": {"type": "array"}},
    "additionalProperties": True,
}

IDEA_ITEM_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["juego"],
    "properties": {
        "juego": {"type": "string", "minLength": 1, "pattern": r"\S"},
        **{key: {"enum": [m.value for m in rule.vocabulary]} for key, rule in IDEA_SCHEMA.enum_fields.items()},
        "score_viral": {"type": "integer", "minimum": 1, "maximum": 10},
        "anio": {"type": ["integer", "null"], "minimum": 1970, "maximum": 2100},
        "fecha_anuncio": {"type": ["string", "null"]},
        **{key: {"type": "string"} for key in IDEA_SCHEMA.text_fields},
        "link_fuente": {"type": ["string", "null"]},
    },
    "additionalProperties": True,
}

_ENVELOPE_VALIDATOR = Draft202012Validator(IDEAS_ENVELOPE_SCHEMA)
_ITEM_VALIDATOR = Draft202012Validator(IDEA_ITEM_SCHEMA)


def _errors(validator: Draft202012Validator, payload: Any) -> List[str]:
    errors = []
    for e in sorted(validator.iter_errors(payload), key=lambda x: list(map(str, x.path))):
        path = ".".join(str(p) for p in e.path) if e.path else "<root>"
        errors.append(f"{path}: {e.message}")
    return errors


def validate_envelope(payload: Any) -> List[str]:
    """Return human-readable envelope errors (empty means valid)."""
    return _errors(_ENVELOPE_VALIDATOR, payload)


def idea_problems(raw: Any) -> List[str]:
    """What `sanitize_idea` will have to repair or reject in `raw`."""
    return _errors(_ITEM_VALIDATOR, raw)


def extract_raw_ideas(payload: Any) -> List[Any]:
    """The untrusted idea list from a decoded model payload."""
    if isinstance(payload, list):
        return payload
    try:
        errors = validate_envelope(payload)
    except ValueError as e:
        errors = [f"<root>: not reportable ({e})"]
    if errors:
        logger.warning("Model payload does not match the ideas envelope: " + "; ".join(errors))
        return []
    return list(payload["ideas"])


# -----------------------------
# Coercion helpers
# -----------------------------
def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    try:
        return str(value).strip()
    except ValueError:
        # ints past the interpreter's digit limit refuse str()
        return ""


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            x = float(value)
        except OverflowError:
            # exact JSON integers can exceed float range; they still clamp
            x = sys.float_info.max if value > 0 else -sys.float_info.max
    elif isinstance(value, float):
        x = value
    elif isinstance(value, str) and value.strip():
        try:
            x = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return x if math.isfinite(x) else None


def _clamp_int(x: float, lo: int, hi: int) -> int:
    return int(math.floor(max(lo, min(hi, x)) + 0.5))


def _coerce_enum(value: Any, rule: EnumRule) -> Enum:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        return rule.fallback
    for member in rule.vocabulary:
        if member.value == text:
            return member
    folded = fold_diacritics(normalize_key(text))
    for member in rule.vocabulary:
        if fold_diacritics(normalize_key(member.value)) == folded:
            return member
    return rule.fallback


def _coerce_date(value: Any) -> Optional[str]:
    """ISO date (or datetime) string when `value` parses, else None."""
    text = _to_text(value)
    if not text:
        return None
    if len(text) == 10:
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).isoformat()
    except ValueError:
        pass
    try:
        return parsedate_to_datetime(text).isoformat()
    except (TypeError, ValueError, IndexError, OverflowError, AttributeError):
        return None


# -----------------------------
# Sanitizer
# -----------------------------
def sanitize_idea(raw: Any, schema: IdeaSchema = IDEA_SCHEMA) -> Optional[CandidateIdea]:
    """Coerce one untrusted idea into a `CandidateIdea`, or None when it has no name."""
    if not isinstance(raw, Mapping):
        return None

    name = truncate(_to_text(raw.get(schema.identifying_field)), schema.name_max_length)
    if not name:
        return None

    values: Dict[str, Any] = {"name": name}

    for key, rule in schema.enum_fields.items():
        values[rule.attr] = _coerce_enum(raw.get(key), rule)

    lo, hi = schema.score_range
    score = _to_number(raw.get(schema.score_field))
    values["viral_score"] = schema.score_fallback if score is None else _clamp_int(score, lo, hi)

    raw_year = raw.get(schema.year_field)
    if raw_year is None or (isinstance(raw_year, str) and not raw_year.strip()):
        values["year"] = None
    else:
        year = _to_number(raw_year)
        values["year"] = None if year is None else _clamp_int(year, *schema.year_range)

    for key, rule in schema.text_fields.items():
        values[rule.attr] = truncate(_to_text(raw.get(key)), rule.max_length)

    announced = _coerce_date(raw.get(schema.date_field))
    if announced:
        values["announced_on"] = announced

    url = _to_text(raw.get(schema.url_field))
    if url and len(url) <= schema.url_max_length and is_http_url(url):
        values["source_url"] = url

    return CandidateIdea(**values)


def sanitize_ideas(raw_items: Iterable[Any], schema: IdeaSchema = IDEA_SCHEMA) -> List[CandidateIdea]:
    out: List[CandidateIdea] = []
    rejected = 0
    for raw in raw_items:
        try:
            problems = idea_problems(raw)
        except ValueError as e:
            problems = [f"<root>: not reportable ({e})"]
        if problems:
            logger.debug("Repairing model idea: " + "; ".join(problems))
        idea = sanitize_idea(raw, schema)
        if idea is None:
            rejected += 1
            continue
        out.append(idea)
    if rejected:
        logger.warning(f"Rejected {rejected} idea(s) without a game name")
    return out
