"""Sentence embedding for chunks and queries."""

import logging
from typing import Any

from memory_bank.errors import DependencyFailureError

logger = logging.getLogger(__name__)


class Embedder:
    """Produces fixed-length, L2-normalized vectors for text.

    Wraps a ``sentence_transformers.SentenceTransformer``. Pooling is the
    model's own (mean pooling for the MiniLM family) and vectors are
    normalized so a dot product equals cosine similarity.

    Args:
        model: A loaded SentenceTransformer. ``None`` is a configuration error.
    """

    def __init__(self, model: Any) -> None:
        if model is None:
            raise DependencyFailureError("Embedding model is not initialized")
        self._model = model

    @property
    def dimension(self) -> int | None:
        return self._model.get_sentence_embedding_dimension()

    def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Raises:
            DependencyFailureError: If the model fails or returns no vector.
        """
        logger.debug("Generating embedding for text (length: %d)", len(text))
        try:
            vector = self._model.encode(
                text,
                convert_to_numpy=True,
                normalize_embeddings=True,
                show_progress_bar=False,
            )
        except Exception as e:
            logger.exception("Embedding generation failed")
            raise DependencyFailureError(f"Embedding generation failed: {e}") from e

        if vector is None or len(vector) == 0:
            raise DependencyFailureError("Embedding model returned an empty vector")
        return [float(x) for x in vector]
