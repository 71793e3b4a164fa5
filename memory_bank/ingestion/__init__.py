"""Content ingestion: tokenization, chunking and embedding."""

from memory_bank.ingestion.chunker import RecursiveChunker
from memory_bank.ingestion.embedder import Embedder
from memory_bank.ingestion.model_loader import ModelHandles, load_embedding_model
from memory_bank.ingestion.tokenizer import TokenizerAdapter

__all__ = [
    "Embedder",
    "ModelHandles",
    "RecursiveChunker",
    "TokenizerAdapter",
    "load_embedding_model",
]
