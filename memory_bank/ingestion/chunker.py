"""Recursive, tokenizer-aware text chunker."""

import logging

from memory_bank.config import ChunkingConfig
from memory_bank.ingestion.tokenizer import TokenizerAdapter

logger = logging.getLogger(__name__)

# Ordered from coarsest to finest. The trailing empty separator is the
# token-window fallback and always makes progress.
DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", "? ", "! ", " ", "")

# Rough characters-per-token ratio used to size the overlap tail.
CHARS_PER_TOKEN = 4


class RecursiveChunker:
    """Splits a document into ordered, overlapping, token-bounded chunks.

    Chunking strategy:
    1. Split on the coarsest separator and pack consecutive segments
       into chunks of at most ``chunk_size`` tokens.
    2. A segment that is too large on its own is split again with the
       next-finer separator.
    3. When a chunk closes, the next one starts with the tail of the
       previous chunk (about ``chunk_overlap`` tokens of characters).
    4. Below the finest textual separator, a token window of
       ``chunk_size`` slides with step ``chunk_size - chunk_overlap``.

    Args:
        config: ChunkingConfig with chunk_size and chunk_overlap.
        tokenizer: Adapter used to measure and cut at token boundaries.
        separators: Separator ladder; must end with the empty string.
    """

    def __init__(
        self,
        config: ChunkingConfig,
        tokenizer: TokenizerAdapter,
        separators: tuple[str, ...] = DEFAULT_SEPARATORS,
    ) -> None:
        if not separators or separators[-1] != "":
            raise ValueError("separators must end with the empty separator")
        self._config = config
        self._tokenizer = tokenizer
        self._separators = separators

    def chunk(self, text: str) -> list[str]:
        """Split a document into chunk strings.

        Args:
            text: The full document.

        Returns:
            Ordered chunk texts; empty when the text is blank.

        Raises:
            DependencyFailureError: If the tokenizer fails at any point.
        """
        if not text.strip():
            return []

        logger.debug("Chunking content (length: %d)", len(text))
        chunks = self._split(text, self._separators)
        logger.debug("Content split into %d chunks", len(chunks))
        return chunks

    def _split(self, text: str, separators: tuple[str, ...]) -> list[str]:
        """Split ``text`` with ``separators[0]``, recursing on oversized parts."""
        separator, finer = separators[0], separators[1:]
        if separator == "":
            return self._split_by_tokens(text)

        chunk_size = self._config.chunk_size
        chunks: list[str] = []
        current = ""
        current_tokens = 0

        for i, piece in enumerate(text.split(separator)):
            segment = separator + piece if i > 0 else piece
            segment_tokens = self._tokenizer.count_tokens(segment)

            if segment_tokens > chunk_size:
                logger.warning(
                    "Split segment too large (%d tokens > %d), recursing with finer separators",
                    segment_tokens,
                    chunk_size,
                )
                if current.strip():
                    chunks.append(current)
                else:
                    # keep leading separators attached to the text they precede
                    segment = current + segment
                chunks.extend(self._split(segment, finer))
                current, current_tokens = "", 0
                continue

            if current_tokens + segment_tokens <= chunk_size:
                current += segment
                current_tokens += segment_tokens
                continue

            if current.strip():
                chunks.append(current)
                current = self._overlap_tail(current) + segment
            else:
                current += segment
            current_tokens = self._tokenizer.count_tokens(current)

            if current_tokens > chunk_size:
                logger.warning(
                    "Overlap + new segment too large (%d tokens > %d), recursing with finer separators",
                    current_tokens,
                    chunk_size,
                )
                chunks.extend(self._split(current, finer))
                current, current_tokens = "", 0

        self._emit(chunks, current)
        return chunks

    def _split_by_tokens(self, text: str) -> list[str]:
        """Slide a token window over ``text``, cutting the text at token spans.

        Each window runs from its first token's start to the next window
        token's start, so with no overlap the windows tile ``text`` exactly.
        A window cut inside a word can re-tokenize into more pieces than it
        held; such a window is narrowed until it fits ``chunk_size``.
        """
        spans = self._tokenizer.token_spans(text)
        if not spans:
            return []

        chunk_size = self._config.chunk_size
        overlap = self._config.chunk_overlap
        chunks: list[str] = []
        start = 0
        while True:
            end = min(start + chunk_size, len(spans))
            window = self._window(text, spans, start, end)
            while end - start > 1 and self._tokenizer.count_tokens(window) > chunk_size:
                end -= 1
                window = self._window(text, spans, start, end)
            self._emit(chunks, window)
            if end >= len(spans):
                break
            start = max(end - overlap, start + 1)
        return chunks

    @staticmethod
    def _window(text: str, spans: list[tuple[int, int]], start: int, end: int) -> str:
        char_start = 0 if start == 0 else spans[start][0]
        char_end = spans[end][0] if end < len(spans) else len(text)
        return text[char_start:char_end]

    def _overlap_tail(self, chunk: str) -> str:
        """Return the trailing characters of ``chunk`` used to seed the next one."""
        overlap_chars = self._config.chunk_overlap * CHARS_PER_TOKEN
        if overlap_chars <= 0:
            return ""
        return chunk[-overlap_chars:]

    @staticmethod
    def _emit(chunks: list[str], chunk: str) -> None:
        if chunk.strip():
            chunks.append(chunk)
