"""Cross-run duplicate suppression for content ideas."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List, Sequence

from gamepulse.contracts.content_idea import CandidateIdea, Priority
from gamepulse.text.normalize import name_key, normalize_key

PRIMARY_IDEAS = 3
BACKUP_IDEAS = 2
MAX_IDEAS = PRIMARY_IDEAS + BACKUP_IDEAS


def _dedup_key(name: str) -> str:
    # names made only of symbols or emoji have an empty name_key
    return name_key(name) or normalize_key(name)


def filter_against_history(
    candidates: Sequence[CandidateIdea],
    history: Iterable[str],
    *,
    limit: int = MAX_IDEAS,
) -> List[CandidateIdea]:
    """Drop ideas whose game already exists in history or earlier in the batch.

    Order is preserved, the first idea of a name wins, and the result holds at
    most `limit` ideas.
    """
    seen = {_dedup_key(h) for h in history}
    seen.discard("")
    out: List[CandidateIdea] = []
    for idea in candidates:
        if len(out) >= limit:
            break
        key = _dedup_key(idea.name)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(idea)
    return out


def assign_priorities(candidates: Sequence[CandidateIdea], *, primary: int = PRIMARY_IDEAS) -> List[CandidateIdea]:
    return [
        replace(idea, priority=Priority.PRIMARY if i < primary else Priority.BACKUP)
        for i, idea in enumerate(candidates)
    ]
