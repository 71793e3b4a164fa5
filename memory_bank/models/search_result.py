"""Search result data models."""

from enum import Enum
from typing import NewType

from pydantic import BaseModel

from memory_bank.models.chunk import StoredChunk

# Vector-search dissimilarity. Lower means more similar; never a similarity.
Distance = NewType("Distance", float)


class SearchMode(str, Enum):
    """Supported search strategies."""

    SEMANTIC = "semantic"
    KEYWORD = "keyword"


class ScoredChunk(BaseModel):
    """A chunk returned by the store, with its distance when one exists."""

    chunk: StoredChunk
    distance: Distance | None = None


class SearchResult(BaseModel):
    """A single ranked search hit.

    ``score`` is the raw vector distance for semantic searches and
    ``None`` for keyword searches.
    """

    text: str
    file_name: str
    chunk_index: int
    score: Distance | None = None

    @classmethod
    def from_scored(cls, scored: ScoredChunk) -> "SearchResult":
        return cls(
            text=scored.chunk.text,
            file_name=scored.chunk.file_name,
            chunk_index=scored.chunk.chunk_index,
            score=scored.distance,
        )
