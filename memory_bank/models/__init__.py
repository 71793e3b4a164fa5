"""Data models for the Memory Bank application."""

from memory_bank.models.chunk import StoredChunk
from memory_bank.models.project import Project
from memory_bank.models.requests import (
    CreateProjectRequest,
    FileRequest,
    SearchRequest,
    UpdateFileRequest,
    parse_request,
)
from memory_bank.models.search_result import (
    Distance,
    ScoredChunk,
    SearchMode,
    SearchResult,
)

__all__ = [
    "CreateProjectRequest",
    "Distance",
    "FileRequest",
    "Project",
    "ScoredChunk",
    "SearchMode",
    "SearchRequest",
    "SearchResult",
    "StoredChunk",
    "UpdateFileRequest",
    "parse_request",
]
