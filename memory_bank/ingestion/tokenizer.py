"""Token measurement used by the chunker."""

import logging
from typing import Any

from memory_bank.errors import DependencyFailureError

logger = logging.getLogger(__name__)


class TokenizerAdapter:
    """Converts text to token ids and back using a Hugging Face tokenizer.

    The wrapped object must expose ``encode(text, add_special_tokens=...)``,
    ``decode(ids, skip_special_tokens=...)`` and, for character spans, be
    callable with ``return_offsets_mapping=True``, as ``transformers`` fast
    tokenizers are. Special tokens are never counted, so a chunk's token
    count is the length of its own text only.

    Args:
        tokenizer: A loaded tokenizer. ``None`` is a configuration error.
    """

    def __init__(self, tokenizer: Any) -> None:
        if tokenizer is None:
            raise DependencyFailureError("Tokenizer is not initialized")
        self._tokenizer = tokenizer

    def encode(self, text: str) -> list[int]:
        try:
            return list(self._tokenizer.encode(text, add_special_tokens=False))
        except Exception as e:
            logger.exception("Tokenizer failed to encode text (length %d)", len(text))
            raise DependencyFailureError(f"Tokenization failed: {e}") from e

    def decode(self, token_ids: list[int]) -> str:
        """Best-effort inverse of :meth:`encode`.

        Uncased vocabularies lowercase text and normalize spacing, so the
        result is not guaranteed to equal the original input.
        """
        try:
            return self._tokenizer.decode(token_ids, skip_special_tokens=True)
        except Exception as e:
            logger.exception("Tokenizer failed to decode %d tokens", len(token_ids))
            raise DependencyFailureError(f"Detokenization failed: {e}") from e

    def token_spans(self, text: str) -> list[tuple[int, int]]:
        """Return the ``(start, end)`` character span of each token of ``text``.

        Spans index into ``text`` itself, so slicing between them keeps the
        original characters, including ones the vocabulary maps to unknown.
        """
        try:
            encoding = self._tokenizer(
                text, add_special_tokens=False, return_offsets_mapping=True
            )
            spans = [(int(start), int(end)) for start, end in encoding["offset_mapping"]]
        except Exception as e:
            logger.exception("Tokenizer failed to map offsets (length %d)", len(text))
            raise DependencyFailureError(f"Token offset mapping failed: {e}") from e
        return spans

    def count_tokens(self, text: str) -> int:
        return len(self.encode(text))
