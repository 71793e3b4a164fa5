"""Configuration loader for the Memory Bank application."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "Memory Bank"
    version: str = "1.0.0"


class EmbeddingConfig(BaseModel):
    """Embedding model configuration."""

    model: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "auto"
    max_workers: int = Field(default=4, ge=1)


class ChunkingConfig(BaseModel):
    """Text chunking configuration, measured in tokens."""

    chunk_size: int = Field(default=450, gt=0)
    chunk_overlap: int = Field(default=50, ge=0)

    @model_validator(mode="after")
    def _overlap_below_size(self) -> "ChunkingConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        return self


class SearchConfig(BaseModel):
    """Search configuration."""

    default_top_k: int = 5
    max_top_k: int = 20
    keyword_candidate_limit: int = Field(default=100, gt=0)


class StorageConfig(BaseModel):
    """Storage paths configuration."""

    chroma_dir: str = "./db/chroma"
    chroma_url: str | None = None
    collection_name: str = "chunks"
    sqlite_path: str = "./db/memory_bank.db"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Environment variables take precedence over the YAML file:
    ``MEMORY_BANK_EMBEDDING_MODEL``, ``CHROMADB_URL`` and
    ``MEMORY_BANK_LOG_LEVEL``. Blank values are ignored.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    model = os.getenv("MEMORY_BANK_EMBEDDING_MODEL", "").strip()
    if model:
        config.embedding.model = model

    chroma_url = os.getenv("CHROMADB_URL", "").strip()
    if chroma_url:
        config.storage.chroma_url = chroma_url

    log_level = os.getenv("MEMORY_BANK_LOG_LEVEL", "").strip()
    if log_level:
        config.logging.level = log_level.upper()

    return config
