"""Chunk data model."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field


class StoredChunk(BaseModel):
    """A single chunk of a conceptual file as persisted in the chunk store."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    project_id: str
    file_name: str
    chunk_index: int = Field(default=0, ge=0)
    text: str
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
