"""One-time loading of the embedding model and its tokenizer."""

import logging
from dataclasses import dataclass

from memory_bank.config import EmbeddingConfig
from memory_bank.errors import DependencyFailureError
from memory_bank.ingestion.embedder import Embedder
from memory_bank.ingestion.tokenizer import TokenizerAdapter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelHandles:
    """Ready-to-use tokenizer and embedder sharing one loaded model."""

    model_name: str
    tokenizer: TokenizerAdapter
    embedder: Embedder


def load_embedding_model(config: EmbeddingConfig, chunk_size: int | None = None) -> ModelHandles:
    """Load the configured sentence-transformers model.

    Either both handles are returned fully initialized or an error is
    raised; nothing partially loaded escapes.

    Args:
        config: Embedding configuration naming the model and device.
        chunk_size: Configured chunk size in tokens; a warning is logged when
            the model truncates inputs shorter than this.

    Returns:
        ModelHandles wrapping the model and its tokenizer.

    Raises:
        DependencyFailureError: If the model or tokenizer cannot be loaded.
    """
    from sentence_transformers import SentenceTransformer

    device = None if config.device == "auto" else config.device
    logger.info("Loading embedding model and tokenizer: %s", config.model)
    try:
        model = SentenceTransformer(config.model, device=device)
    except Exception as e:
        logger.exception("Failed to load embedding model '%s'", config.model)
        raise DependencyFailureError(
            f"Failed to load embedding model '{config.model}': {e}"
        ) from e

    handles = ModelHandles(
        model_name=config.model,
        tokenizer=TokenizerAdapter(getattr(model, "tokenizer", None)),
        embedder=Embedder(model),
    )
    logger.info(
        "Embedding model '%s' loaded (dimension: %s)",
        config.model,
        handles.embedder.dimension,
    )
    max_seq_length = getattr(model, "max_seq_length", None)
    if chunk_size is not None and max_seq_length is not None and max_seq_length < chunk_size:
        logger.warning(
            "Model '%s' truncates input at %d tokens but chunks hold up to %d; "
            "embeddings of long chunks cover only their leading tokens",
            config.model,
            max_seq_length,
            chunk_size,
        )
    return handles
