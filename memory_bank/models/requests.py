"""Request schemas validated before any store or model call."""

import re
from typing import TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from memory_bank.errors import InvalidArgumentError
from memory_bank.models.search_result import SearchMode

RequestT = TypeVar("RequestT", bound=BaseModel)

FILE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+\.md$")
MAX_FILE_NAME_LENGTH = 100
MAX_PROJECT_NAME_LENGTH = 100


def _check_file_name(value: str) -> str:
    if len(value) > MAX_FILE_NAME_LENGTH:
        raise ValueError(f"file name longer than {MAX_FILE_NAME_LENGTH} characters")
    if not FILE_NAME_PATTERN.match(value):
        raise ValueError(
            f"invalid file name '{value}': expected safe characters ending in .md"
        )
    return value


class CreateProjectRequest(BaseModel):
    name: str = Field(min_length=1, max_length=MAX_PROJECT_NAME_LENGTH)


class FileRequest(BaseModel):
    """Identifies one conceptual file within a project."""

    project_id: str = Field(min_length=1)
    file_name: str

    @field_validator("file_name")
    @classmethod
    def _valid_file_name(cls, value: str) -> str:
        return _check_file_name(value)


class UpdateFileRequest(FileRequest):
    """Full replacement content for a conceptual file."""

    content: str

    @field_validator("content")
    @classmethod
    def _has_content(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must contain at least one non-whitespace character")
        return value


class SearchRequest(BaseModel):
    """Parameters of a project search.

    The query is trimmed for validation only; keyword matching uses the
    trimmed text as well.
    """

    project_id: str = Field(min_length=1)
    query: str
    search_type: SearchMode = SearchMode.SEMANTIC
    top_k: int = Field(default=5, ge=1)
    file_filter: list[str] | None = None

    @field_validator("query")
    @classmethod
    def _non_empty_query(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("query must not be empty")
        return stripped

    @field_validator("file_filter")
    @classmethod
    def _valid_filter(cls, value: list[str] | None) -> list[str] | None:
        if not value:
            return None
        return [_check_file_name(name) for name in value]


def parse_request(model: type[RequestT], **data: object) -> RequestT:
    """Validate request data, converting schema errors to InvalidArgumentError."""
    try:
        return model(**data)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'request'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidArgumentError(f"Invalid request: {details}") from e
