"""ChromaDB-backed storage for file chunks and their vectors."""

import logging
import threading
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlparse
from uuid import uuid4

import chromadb
from chromadb.config import Settings

from memory_bank.config import StorageConfig
from memory_bank.errors import DependencyFailureError
from memory_bank.models.chunk import StoredChunk
from memory_bank.models.search_result import Distance, ScoredChunk

logger = logging.getLogger(__name__)


def open_collection(config: StorageConfig) -> Any:
    """Connect to ChromaDB and return the chunk collection.

    Uses an HTTP client when ``chroma_url`` is set, otherwise a persistent
    local client rooted at ``chroma_dir``. Distances are cosine distances.

    Args:
        config: Storage configuration.

    Returns:
        The chromadb Collection holding chunks.

    Raises:
        DependencyFailureError: If ChromaDB is unreachable.
    """
    settings = Settings(anonymized_telemetry=False)
    try:
        if config.chroma_url:
            url = urlparse(config.chroma_url)
            client = chromadb.HttpClient(
                host=url.hostname or "localhost",
                port=url.port or 8000,
                ssl=url.scheme == "https",
                settings=settings,
            )
            client.heartbeat()
            logger.info("Connected to ChromaDB at %s", config.chroma_url)
        else:
            Path(config.chroma_dir).mkdir(parents=True, exist_ok=True)
            client = chromadb.PersistentClient(path=config.chroma_dir, settings=settings)
            logger.info("Opened ChromaDB store at %s", config.chroma_dir)
        return client.get_or_create_collection(
            config.collection_name,
            metadata={"hnsw:space": "cosine"},
        )
    except Exception as e:
        target = config.chroma_url or config.chroma_dir
        logger.exception("ChromaDB initialization failed for %s", target)
        raise DependencyFailureError(f"ChromaDB initialization failed ({target}): {e}") from e


def _where(project_id: str, file_names: Sequence[str] | None = None) -> dict:
    """Build a metadata filter for a project and an optional file set."""
    if not file_names:
        return {"project_id": project_id}
    if len(file_names) == 1:
        file_clause: dict = {"file_name": file_names[0]}
    else:
        file_clause = {"file_name": {"$in": list(file_names)}}
    return {"$and": [{"project_id": project_id}, file_clause]}


class ChunkStore:
    """Persists ``(project, file, index) -> (text, vector)`` records.

    Writes and reads share one re-entrant lock, so readers in this process
    never observe a file replace half-applied.

    Args:
        collection: A chromadb Collection created with cosine space.
    """

    def __init__(self, collection: Any) -> None:
        self._collection = collection
        self._lock = threading.RLock()

    def replace_file_chunks(
        self,
        project_id: str,
        file_name: str,
        entries: Sequence[tuple[str, Sequence[float]]],
    ) -> list[StoredChunk]:
        """Replace every chunk of a file with ``entries`` in index order.

        The new chunks are inserted in a single batch before the old ones
        are removed. If the insert fails, the previous chunks stay intact.

        Args:
            project_id: Owning project.
            file_name: Conceptual file name.
            entries: ``(text, vector)`` pairs; position is the chunk index.

        Returns:
            The stored chunks, ordered by index.
        """
        now = datetime.now()
        chunks = [
            StoredChunk(
                project_id=project_id,
                file_name=file_name,
                chunk_index=index,
                text=text,
                embedding=list(vector),
                created_at=now,
                updated_at=now,
            )
            for index, (text, vector) in enumerate(entries)
        ]

        with self._lock:
            old_ids = self._file_chunk_ids(project_id, file_name)
            if chunks:
                self._add(chunks)
            if old_ids:
                try:
                    self._collection.delete(ids=old_ids)
                except Exception as e:
                    logger.exception(
                        "Failed to remove superseded chunks for %s/%s, rolling back",
                        project_id,
                        file_name,
                    )
                    self._rollback([c.id for c in chunks])
                    raise DependencyFailureError(f"DB error replacing file chunks: {e}") from e

        logger.debug(
            "Replaced %d chunk(s) with %d for %s/%s",
            len(old_ids),
            len(chunks),
            project_id,
            file_name,
        )
        return chunks

    def delete_file(self, project_id: str, file_name: str) -> None:
        with self._lock:
            try:
                self._collection.delete(where=_where(project_id, [file_name]))
            except Exception as e:
                logger.exception("Error deleting chunks for %s/%s", project_id, file_name)
                raise DependencyFailureError(f"DB error deleting file chunks: {e}") from e

    def delete_project(self, project_id: str) -> None:
        with self._lock:
            try:
                self._collection.delete(where=_where(project_id))
            except Exception as e:
                logger.exception("Error deleting chunks for project %s", project_id)
                raise DependencyFailureError(f"DB error deleting project chunks: {e}") from e

    def get_file_chunks(
        self, project_id: str, file_name: str, include_embeddings: bool = False
    ) -> list[StoredChunk]:
        """Fetch all chunks of a file ordered by ``chunk_index``."""
        include = ["documents", "metadatas"]
        if include_embeddings:
            include.append("embeddings")
        with self._lock:
            try:
                results = self._collection.get(
                    where=_where(project_id, [file_name]), include=include
                )
            except Exception as e:
                logger.exception("Error getting chunks for %s/%s", project_id, file_name)
                raise DependencyFailureError(f"DB error getting file chunks: {e}") from e

        chunks = _to_chunks(results)
        chunks.sort(key=lambda c: c.chunk_index)
        return chunks

    def list_file_names(self, project_id: str) -> list[str]:
        with self._lock:
            try:
                results = self._collection.get(
                    where=_where(project_id), include=["metadatas"]
                )
            except Exception as e:
                logger.exception("Error listing file names for project %s", project_id)
                raise DependencyFailureError(f"DB error listing file names: {e}") from e

        metadatas = results.get("metadatas") or []
        return sorted({str(meta["file_name"]) for meta in metadatas if meta})

    def query_nearest(
        self,
        project_id: str,
        query_vector: Sequence[float],
        top_k: int,
        file_names: Sequence[str] | None = None,
    ) -> list[ScoredChunk]:
        """Return up to ``top_k`` chunks nearest to ``query_vector``, in store order."""
        with self._lock:
            try:
                if self._collection.count() == 0:
                    return []
                results = self._collection.query(
                    query_embeddings=[list(query_vector)],
                    n_results=top_k,
                    where=_where(project_id, file_names),
                    include=["documents", "metadatas", "distances"],
                )
            except Exception as e:
                logger.exception("Semantic query failed for project %s", project_id)
                raise DependencyFailureError(f"DB error during semantic search: {e}") from e

        ids = (results.get("ids") or [[]])[0]
        documents = (results.get("documents") or [[]])[0]
        metadatas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        scored: list[ScoredChunk] = []
        for i, chunk_id in enumerate(ids):
            chunk = _to_chunk(chunk_id, documents[i], metadatas[i])
            if chunk is None:
                continue
            distance = Distance(float(distances[i])) if i < len(distances) else None
            scored.append(ScoredChunk(chunk=chunk, distance=distance))
        return scored

    def fetch_candidates(
        self,
        project_id: str,
        limit: int,
        file_names: Sequence[str] | None = None,
    ) -> list[StoredChunk]:
        """Return at most ``limit`` chunks of a project, in store order."""
        with self._lock:
            try:
                results = self._collection.get(
                    where=_where(project_id, file_names),
                    limit=limit,
                    include=["documents", "metadatas"],
                )
            except Exception as e:
                logger.exception("Candidate fetch failed for project %s", project_id)
                raise DependencyFailureError(f"DB error during keyword search: {e}") from e
        return _to_chunks(results)

    def _file_chunk_ids(self, project_id: str, file_name: str) -> list[str]:
        try:
            results = self._collection.get(where=_where(project_id, [file_name]), include=[])
        except Exception as e:
            logger.exception("Error reading chunk ids for %s/%s", project_id, file_name)
            raise DependencyFailureError(f"DB error reading file chunks: {e}") from e
        return list(results.get("ids") or [])

    def _add(self, chunks: list[StoredChunk]) -> None:
        try:
            self._collection.add(
                ids=[c.id for c in chunks],
                embeddings=[c.embedding for c in chunks],
                documents=[c.text for c in chunks],
                metadatas=[
                    {
                        "project_id": c.project_id,
                        "file_name": c.file_name,
                        "chunk_index": c.chunk_index,
                        "created_at": c.created_at.isoformat(),
                        "updated_at": c.updated_at.isoformat(),
                    }
                    for c in chunks
                ],
            )
        except Exception as e:
            logger.exception("Error inserting %d chunk(s)", len(chunks))
            raise DependencyFailureError(f"DB error inserting chunks: {e}") from e

    def _rollback(self, new_ids: list[str]) -> None:
        if not new_ids:
            return
        try:
            self._collection.delete(ids=new_ids)
        except Exception:
            logger.exception("Rollback of %d new chunk(s) failed", len(new_ids))


def _to_chunk(chunk_id: str, document: str | None, meta: dict | None) -> StoredChunk | None:
    if not meta or document is None:
        return None
    return StoredChunk(
        id=chunk_id,
        project_id=str(meta["project_id"]),
        file_name=str(meta["file_name"]),
        chunk_index=int(meta["chunk_index"]),
        text=document,
        created_at=datetime.fromisoformat(str(meta["created_at"])),
        updated_at=datetime.fromisoformat(str(meta["updated_at"])),
    )


def _to_chunks(results: dict) -> list[StoredChunk]:
    ids = results.get("ids") or []
    documents = results.get("documents") or [None] * len(ids)
    metadatas = results.get("metadatas") or [None] * len(ids)
    embeddings = results.get("embeddings")

    chunks: list[StoredChunk] = []
    for i, chunk_id in enumerate(ids):
        chunk = _to_chunk(chunk_id, documents[i], metadatas[i])
        if chunk is None:
            continue
        if embeddings is not None and embeddings[i] is not None:
            chunk.embedding = [float(x) for x in embeddings[i]]
        chunks.append(chunk)
    return chunks
