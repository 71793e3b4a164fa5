"""Ordering rules for semantic and keyword search results."""

import math
from collections.abc import Iterable

from memory_bank.models.chunk import StoredChunk
from memory_bank.models.search_result import ScoredChunk, SearchResult


def rank_semantic(candidates: Iterable[ScoredChunk], top_k: int) -> list[SearchResult]:
    """Order vector-search hits by ascending distance.

    Distances are passed through unchanged. Equal distances fall back to
    ``(file_name, chunk_index)``; hits without a distance sort last.

    Args:
        candidates: Hits as returned by the store.
        top_k: Maximum number of results.

    Returns:
        At most ``top_k`` results, nearest first.
    """
    ordered = sorted(
        candidates,
        key=lambda s: (
            math.inf if s.distance is None else s.distance,
            s.chunk.file_name,
            s.chunk.chunk_index,
        ),
    )
    return [SearchResult.from_scored(s) for s in ordered[:top_k]]


def rank_keyword(
    candidates: Iterable[StoredChunk], query: str, top_k: int
) -> list[SearchResult]:
    """Keep chunks containing ``query`` (case-insensitive) in file order.

    The order is structural, ``(file_name, chunk_index)``, and does not
    depend on where or how often the query matches. Scores are ``None``.

    Args:
        candidates: Candidate chunks from the store.
        query: Text to look for.
        top_k: Maximum number of results.

    Returns:
        At most ``top_k`` matching results.
    """
    needle = query.lower()
    matches = [c for c in candidates if needle in c.text.lower()]
    matches.sort(key=lambda c: (c.file_name, c.chunk_index))
    return [
        SearchResult.from_scored(ScoredChunk(chunk=c, distance=None))
        for c in matches[:top_k]
    ]
