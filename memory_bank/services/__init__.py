"""Memory Bank services and their wiring."""

import logging
from dataclasses import dataclass
from typing import Any

from memory_bank.config import AppConfig
from memory_bank.ingestion.chunker import RecursiveChunker
from memory_bank.ingestion.model_loader import ModelHandles, load_embedding_model
from memory_bank.services.memory_bank_service import MemoryBankService
from memory_bank.services.project_service import ProjectService
from memory_bank.services.search_service import SearchService
from memory_bank.storage.chunk_store import ChunkStore, open_collection
from memory_bank.storage.database import initialize_database
from memory_bank.storage.projects import ProjectRegistry

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """The service objects sharing one store and one loaded model."""

    projects: ProjectService
    files: MemoryBankService
    search: SearchService


def build_services(
    config: AppConfig,
    handles: ModelHandles | None = None,
    collection: Any = None,
) -> Services:
    """Initialize storage and the model, then wire the services.

    Args:
        config: Application configuration.
        handles: Preloaded model handles; loaded from config when omitted.
        collection: A chromadb Collection; opened from config when omitted.

    Returns:
        Ready-to-use services.
    """
    initialize_database(config.storage.sqlite_path)
    if handles is None:
        handles = load_embedding_model(config.embedding, chunk_size=config.chunking.chunk_size)
    if collection is None:
        collection = open_collection(config.storage)

    store = ChunkStore(collection)
    projects = ProjectService(ProjectRegistry(config.storage.sqlite_path), store)
    chunker = RecursiveChunker(config.chunking, handles.tokenizer)
    files = MemoryBankService(
        projects,
        store,
        chunker,
        handles.embedder,
        max_workers=config.embedding.max_workers,
    )
    search = SearchService(config.search, projects, store, handles.embedder)
    logger.info("%s services ready (model: %s)", config.app.name, handles.model_name)
    return Services(projects=projects, files=files, search=search)


__all__ = [
    "MemoryBankService",
    "ProjectService",
    "SearchService",
    "Services",
    "build_services",
]
