"""Semantic and keyword search over a project's chunks."""

import logging

from memory_bank.config import SearchConfig
from memory_bank.errors import InvalidArgumentError
from memory_bank.ingestion.embedder import Embedder
from memory_bank.models.requests import SearchRequest, parse_request
from memory_bank.models.search_result import SearchMode, SearchResult
from memory_bank.retrieval.ranking import rank_keyword, rank_semantic
from memory_bank.services.project_service import ProjectService
from memory_bank.storage.chunk_store import ChunkStore

logger = logging.getLogger(__name__)


class SearchService:
    """Runs searches and applies the ordering rules of each mode.

    Args:
        config: Search limits and the keyword candidate pool size.
        projects: Project service used as the existence oracle.
        store: Chunk store.
        embedder: Embedder for semantic queries.
    """

    def __init__(
        self,
        config: SearchConfig,
        projects: ProjectService,
        store: ChunkStore,
        embedder: Embedder,
    ) -> None:
        self._config = config
        self._projects = projects
        self._store = store
        self._embedder = embedder

    def search(
        self,
        project_id: str,
        query: str,
        search_type: SearchMode | str = SearchMode.SEMANTIC,
        top_k: int | None = None,
        file_filter: list[str] | None = None,
    ) -> list[SearchResult]:
        """Search a project's chunks.

        Args:
            project_id: Project to search.
            query: Query text; embedded for semantic search, matched as a
                substring for keyword search.
            search_type: ``"semantic"`` or ``"keyword"``.
            top_k: Maximum number of results; defaults to the configured value.
            file_filter: Optional file names to restrict the search to.

        Returns:
            Semantic: nearest first, ``score`` is the raw distance.
            Keyword: ordered by file name then chunk index, ``score`` is None.

        Raises:
            InvalidArgumentError: If a parameter is invalid.
            NotFoundError: If the project does not exist.
            DependencyFailureError: If embedding or the store fails.
        """
        request = parse_request(
            SearchRequest,
            project_id=project_id,
            query=query,
            search_type=search_type,
            top_k=self._config.default_top_k if top_k is None else top_k,
            file_filter=file_filter,
        )
        if request.top_k > self._config.max_top_k:
            raise InvalidArgumentError(
                f"top_k must be between 1 and {self._config.max_top_k}, got {request.top_k}"
            )
        self._projects.require_project(request.project_id)

        logger.debug(
            "Performing %s search in project %s (top_k: %d, filter: %s)",
            request.search_type.value,
            request.project_id,
            request.top_k,
            request.file_filter,
        )

        if request.search_type is SearchMode.SEMANTIC:
            query_vector = self._embedder.embed(request.query)
            candidates = self._store.query_nearest(
                request.project_id, query_vector, request.top_k, request.file_filter
            )
            results = rank_semantic(candidates, request.top_k)
        else:
            pool = self._store.fetch_candidates(
                request.project_id,
                self._config.keyword_candidate_limit,
                request.file_filter,
            )
            results = rank_keyword(pool, request.query, request.top_k)

        logger.info(
            "%s search completed in project %s: %d result(s)",
            request.search_type.value.capitalize(),
            request.project_id,
            len(results),
        )
        return results
