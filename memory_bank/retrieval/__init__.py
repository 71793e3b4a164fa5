"""Search result ranking."""

from memory_bank.retrieval.ranking import rank_keyword, rank_semantic

__all__ = ["rank_keyword", "rank_semantic"]
