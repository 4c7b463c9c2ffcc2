"""Keyword-overlap retrieval over the in-memory corpus."""

import re
from collections.abc import Sequence

from civicscoach.models import CorpusChunk, ScoredChunk

_DOMAIN_TERMS = re.compile(r"(constitution|amendment|article|fundamental|rights|doctrine)", re.IGNORECASE)
_DOMAIN_BONUS = 0.5


def score_chunk(keywords: Sequence[str], chunk: CorpusChunk) -> float:
    """One point per query keyword found in the chunk, plus a flat domain bonus."""
    text_lower = chunk.text.lower()
    score: float = sum(1 for kw in keywords if kw in text_lower)
    if _DOMAIN_TERMS.search(chunk.text):
        score += _DOMAIN_BONUS
    return score


def rank(query: str, corpus: Sequence[CorpusChunk], top_k: int) -> list[ScoredChunk]:
    """Return the top_k highest-scoring chunks, ties kept in corpus order.

    top_k is clamped to at least 1; a top_k larger than the corpus returns
    every chunk.
    """
    keywords = query.lower().split()
    scored = [
        ScoredChunk(id=c.id, text=c.text, metadata=c.metadata, score=score_chunk(keywords, c))
        for c in corpus
    ]
    # sorted() is stable, so equal scores keep their corpus order
    ranked = sorted(scored, key=lambda c: c.score, reverse=True)
    return ranked[: max(1, int(top_k))]
