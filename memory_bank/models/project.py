"""Project data model."""

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field


class Project(BaseModel):
    """An isolation boundary grouping conceptual files and their chunks."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    created_at: datetime = Field(default_factory=datetime.now)
    last_modified_at: datetime = Field(default_factory=datetime.now)
