"""File-level operations: update, reconstruct, list and delete content."""

import logging
from concurrent.futures import ThreadPoolExecutor

from memory_bank.errors import DependencyFailureError, MemoryBankError, NotFoundError
from memory_bank.ingestion.chunker import RecursiveChunker
from memory_bank.ingestion.embedder import Embedder
from memory_bank.models.requests import FileRequest, UpdateFileRequest, parse_request
from memory_bank.services.project_service import ProjectService
from memory_bank.services.templates import STANDARD_FILES
from memory_bank.storage.chunk_store import ChunkStore

logger = logging.getLogger(__name__)


class MemoryBankService:
    """Stores conceptual files as embedded chunks and reads them back.

    Args:
        projects: Project service used as the existence oracle.
        store: Chunk store.
        chunker: Splitter applied to file content.
        embedder: Embedder applied to every chunk.
        max_workers: Threads used to embed the chunks of one file.
    """

    def __init__(
        self,
        projects: ProjectService,
        store: ChunkStore,
        chunker: RecursiveChunker,
        embedder: Embedder,
        max_workers: int = 4,
    ) -> None:
        self._projects = projects
        self._store = store
        self._chunker = chunker
        self._embedder = embedder
        self._max_workers = max_workers

    def update_file(self, project_id: str, file_name: str, content: str) -> int:
        """Replace a file's content: chunk, embed every chunk, then store.

        The store is only touched once every chunk has a vector, so a failed
        embedding leaves the previous chunks of the file untouched.

        Args:
            project_id: Owning project.
            file_name: Conceptual file name (``*.md``).
            content: Full new content.

        Returns:
            Number of chunks stored.

        Raises:
            InvalidArgumentError: If the file name or content is invalid.
            NotFoundError: If the project does not exist.
            DependencyFailureError: If tokenization, embedding or storage fails.
        """
        request = parse_request(
            UpdateFileRequest, project_id=project_id, file_name=file_name, content=content
        )
        self._projects.require_project(request.project_id)
        logger.debug("Updating file content %s/%s", request.project_id, request.file_name)

        chunks = self._chunker.chunk(request.content)
        if not chunks:
            logger.warning(
                "Content for %s/%s produced 0 chunks, clearing existing content",
                request.project_id,
                request.file_name,
            )
            self._store.delete_file(request.project_id, request.file_name)
            self._projects.touch(request.project_id)
            return 0

        vectors = self._embed_all(chunks)
        self._store.replace_file_chunks(
            request.project_id, request.file_name, list(zip(chunks, vectors))
        )
        self._projects.touch(request.project_id)

        logger.info(
            "Updated %s/%s with %d chunk(s)",
            request.project_id,
            request.file_name,
            len(chunks),
        )
        return len(chunks)

    def get_file_content(self, project_id: str, file_name: str) -> str:
        """Reconstruct a file by concatenating its chunks in index order.

        Overlapping regions between consecutive chunks appear twice.

        Raises:
            NotFoundError: If the project or the file has no content.
            DependencyFailureError: If the store fails.
        """
        request = parse_request(FileRequest, project_id=project_id, file_name=file_name)
        self._projects.require_project(request.project_id)

        chunks = self._store.get_file_chunks(request.project_id, request.file_name)
        if not chunks:
            logger.warning(
                "No content found for %s in project %s", request.file_name, request.project_id
            )
            raise NotFoundError(
                f"No content found for file '{request.file_name}' "
                f"in project '{request.project_id}'."
            )
        return "".join(chunk.text for chunk in chunks)

    def list_files(self, project_id: str) -> list[str]:
        self._projects.require_project(project_id)
        file_names = self._store.list_file_names(project_id)
        logger.info("Found %d file(s) for project %s", len(file_names), project_id)
        return file_names

    def delete_file(self, project_id: str, file_name: str) -> None:
        """Remove every chunk of a file. Deleting a missing file is a no-op."""
        request = parse_request(FileRequest, project_id=project_id, file_name=file_name)
        self._projects.require_project(request.project_id)
        self._store.delete_file(request.project_id, request.file_name)
        self._projects.touch(request.project_id)
        logger.info("Deleted file content %s/%s", request.project_id, request.file_name)

    def initialize_project(self, project_id: str) -> list[str]:
        """Write the standard memory-bank files into a project.

        Returns:
            Names of the files written.
        """
        self._projects.require_project(project_id)
        for file_name, content in STANDARD_FILES.items():
            self.update_file(project_id, file_name, content)
        logger.info("Initialized %d standard file(s) for project %s", len(STANDARD_FILES), project_id)
        return list(STANDARD_FILES)

    def _embed_all(self, chunks: list[str]) -> list[list[float]]:
        """Embed chunks concurrently; any single failure fails the batch."""
        try:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                vectors = list(executor.map(self._embedder.embed, chunks))
        except MemoryBankError:
            logger.error("Failed to generate embeddings for %d chunk(s)", len(chunks))
            raise
        except Exception as e:
            logger.exception("Failed to generate embeddings for %d chunk(s)", len(chunks))
            raise DependencyFailureError(f"Embedding generation failed: {e}") from e

        logger.debug("Embeddings generated for %d chunk(s)", len(vectors))
        return vectors
