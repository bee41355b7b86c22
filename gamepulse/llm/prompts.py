"""Prompt text for the content-ideas model call (Spanish, like the channel)."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from gamepulse.contracts.content_idea import IDEA_SCHEMA, Category, Emotion, GameType, Popularity, ReleaseStatus
from gamepulse.ingestion.feed_types import FeedEntry

SYSTEM_PROMPT = (
    "Eres el editor jefe de un canal de YouTube y TikTok en español sobre videojuegos. "
    "Detectas qué anuncios, tráilers, demos, betas y lanzamientos pueden hacerse virales "
    "y los conviertes en ideas de vídeo concretas. Respondes SIEMPRE con un único objeto JSON válido, "
    "sin texto adicional ni bloques de código."
)


def _options(enum_cls) -> str:
    return " | ".join(f'"{m.value}"' for m in enum_cls)


def _contract(primary: int, backups: int) -> str:
    lo, hi = IDEA_SCHEMA.score_range
    return f"""FORMATO DE RESPUESTA (obligatorio):
{{
  "ideas": [
    {{
      "juego": "Nombre oficial del juego (obligatorio)",
      "categoria": {_options(Category)},
      "popularidad": {_options(Popularity)},
      "emocion": {_options(Emotion)},
      "estado": {_options(ReleaseStatus)},
      "tipo_juego": {_options(GameType)},
      "score_viral": número entero de {lo} a {hi},
      "anio": año de lanzamiento previsto (entero) o null,
      "fecha_anuncio": "AAAA-MM-DD" o null si no se conoce,
      "resumen": "2-3 frases con los hechos concretos",
      "gancho": "Primera frase del vídeo, pensada para retener en 3 segundos",
      "por_que": "Por qué puede funcionar ahora",
      "guion_corto": "Guion para un short de 30-45 segundos",
      "guion_largo": "Guion para un vídeo de 6-8 minutos, por bloques",
      "titulo_seo": "Título para YouTube de menos de 70 caracteres",
      "fuente": "Medio que publicó la noticia",
      "link_fuente": "URL de la noticia o null"
    }}
  ]
}}

Devuelve exactamente {primary + backups} ideas ordenadas de mejor a peor: las {primary} primeras son las principales y las {backups} últimas son de reserva.
Usa solo los valores permitidos en los campos con opciones. Un juego por idea, sin repetir juegos."""


def _history_block(history: Sequence[str]) -> str:
    if not history:
        return "No hay juegos cubiertos todavía."
    return "JUEGOS YA CUBIERTOS (no los repitas):\n" + "\n".join(f"- {name}" for name in history)


def _news_block(entries: Iterable[FeedEntry]) -> str:
    lines: List[str] = []
    for i, e in enumerate(entries, 1):
        lines.append(f"[{i}] {e.title}")
        lines.append(f"    Fuente: {e.source} | Fecha: {e.published_at.date().isoformat()} | Link: {e.link or '-'}")
        if e.snippet:
            lines.append(f"    {e.snippet}")
    return "\n".join(lines)


def build_news_prompt(entries: Sequence[FeedEntry], *, history: Sequence[str], primary: int, backups: int) -> str:
    return f"""Estas son las noticias de videojuegos más recientes:

{_news_block(entries)}

{_history_block(history)}

Elige las noticias con más potencial viral para un público hispanohablante y propón ideas de vídeo basadas SOLO en ellas.
Indica en "fuente" y "link_fuente" la noticia en la que se basa cada idea.

{_contract(primary, backups)}"""


def build_history_prompt(history: Sequence[str], *, primary: int, backups: int) -> str:
    return f"""Propón ideas de vídeo sobre videojuegos anunciados, revelados o lanzados recientemente
(tráilers, demos, acceso anticipado, betas, MMO y juegos como servicio) con potencial viral para un público hispanohablante.

{_history_block(history)}

{_contract(primary, backups)}"""
