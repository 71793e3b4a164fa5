"""Tests for the recursive, token-aware chunker."""

import math
import re

import pytest

from memory_bank.config import ChunkingConfig
from memory_bank.errors import DependencyFailureError
from memory_bank.ingestion.chunker import DEFAULT_SEPARATORS, RecursiveChunker
from memory_bank.ingestion.tokenizer import TokenizerAdapter


def _chunker(
    tokenizer: TokenizerAdapter, chunk_size: int = 450, chunk_overlap: int = 50
) -> RecursiveChunker:
    config = ChunkingConfig(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    return RecursiveChunker(config=config, tokenizer=tokenizer)


def _words(start: int, count: int) -> str:
    return " ".join(f"w{i}" for i in range(start, start + count))


@pytest.fixture
def chunker(tokenizer: TokenizerAdapter) -> RecursiveChunker:
    return _chunker(tokenizer)


# ── Edge cases ───────────────────────────────────────────────────────────────


class TestChunkerEdgeCases:
    def test_empty_text(self, chunker: RecursiveChunker) -> None:
        assert chunker.chunk("") == []

    def test_whitespace_only(self, chunker: RecursiveChunker) -> None:
        assert chunker.chunk("   \n\n   \t  ") == []

    def test_short_text_is_single_chunk(self, chunker: RecursiveChunker) -> None:
        text = "# Title\n\nA short note."
        assert chunker.chunk(text) == [text]

    def test_no_whitespace_only_chunks(self, tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(tokenizer, chunk_size=8, chunk_overlap=0)
        text = "\n\n\n\n".join(_words(i * 6, 6) for i in range(10)) + "\n\n\n\n   \n\n"
        chunks = chunker.chunk(text)
        assert chunks
        assert all(c.strip() for c in chunks)

    def test_separators_must_end_with_empty(self, tokenizer: TokenizerAdapter) -> None:
        with pytest.raises(ValueError):
            RecursiveChunker(ChunkingConfig(), tokenizer, separators=("\n\n", " "))

    def test_default_separator_ladder(self) -> None:
        assert DEFAULT_SEPARATORS[0] == "\n\n"
        assert DEFAULT_SEPARATORS[-1] == ""

    def test_tokenizer_failure_propagates(self, fake_model, tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(tokenizer)
        fake_model.tokenizer.fail = True
        with pytest.raises(DependencyFailureError):
            chunker.chunk("some text that needs measuring")


# ── Token ceiling and content preservation ──────────────────────────────────


class TestChunkerBounds:
    def test_every_chunk_within_chunk_size(self, tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(tokenizer, chunk_size=30, chunk_overlap=5)
        paragraphs = [
            _words(0, 10),
            _words(10, 120),
            "Sentence one. Sentence two? Sentence three! " * 8,
            "line a\nline b\n" + _words(200, 45),
        ]
        chunks = chunker.chunk("\n\n".join(paragraphs))
        assert len(chunks) > 1
        for chunk in chunks:
            assert tokenizer.count_tokens(chunk) <= 30

    def test_no_content_dropped(self, tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(tokenizer, chunk_size=25, chunk_overlap=5)
        text = "\n\n".join(_words(i * 40, 40) for i in range(6))
        joined = "".join(chunker.chunk(text))
        found = set(re.findall(r"w\d+", joined))
        assert found == set(re.findall(r"w\d+", text))

    def test_oversized_single_line_recurses(self, tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(tokenizer, chunk_size=450, chunk_overlap=50)
        text = _words(0, 2000)
        assert tokenizer.count_tokens(text) == 2000

        chunks = chunker.chunk(text)
        assert len(chunks) >= 5
        for chunk in chunks:
            assert tokenizer.count_tokens(chunk) <= 450

    def test_overlap_plus_segment_too_large_recurses(
        self, tokenizer: TokenizerAdapter
    ) -> None:
        chunker = _chunker(tokenizer, chunk_size=10, chunk_overlap=9)
        text = " ".join("abcdefghij") + "\n\n" + " ".join("klmno")
        chunks = chunker.chunk(text)
        for chunk in chunks:
            assert tokenizer.count_tokens(chunk) <= 10
        joined = "".join(chunks)
        for letter in "abcdefghijklmno":
            assert letter in joined


# ── Overlap ──────────────────────────────────────────────────────────────────


class TestChunkerOverlap:
    def test_consecutive_chunks_share_tail(self, tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(tokenizer, chunk_size=450, chunk_overlap=50)
        chunks = chunker.chunk(_words(0, 2000))
        # 50 tokens of overlap ~ 200 trailing characters
        assert chunks[1].startswith(chunks[0][-200:])

    def test_zero_overlap_concatenation_is_lossless(
        self, tokenizer: TokenizerAdapter
    ) -> None:
        chunker = _chunker(tokenizer, chunk_size=20, chunk_overlap=0)
        text = "\n\n".join(
            [_words(0, 8), _words(8, 9), _words(17, 50), "Short one. Another one.", _words(70, 12)]
        )
        chunks = chunker.chunk(text)
        assert len(chunks) > 3
        assert "".join(chunks) == text

    def test_paragraphs_are_packed_together(self, tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(tokenizer, chunk_size=20, chunk_overlap=0)
        text = "\n\n".join([_words(0, 5), _words(5, 5), _words(10, 5)])
        assert chunker.chunk(text) == [text]


# ── Token-window fallback ───────────────────────────────────────────────────


class TestChunkerTokenWindow:
    def test_window_count_and_step(self, tokenizer: TokenizerAdapter) -> None:
        chunker = RecursiveChunker(
            ChunkingConfig(chunk_size=30, chunk_overlap=10), tokenizer, separators=("",)
        )
        text = _words(0, 100)
        chunks = chunker.chunk(text)

        assert len(chunks) == math.ceil(100 / (30 - 10))
        for chunk in chunks:
            assert tokenizer.count_tokens(chunk) <= 30
        assert tokenizer.encode(chunks[1])[:10] == tokenizer.encode(chunks[0])[-10:]

    def test_window_covers_every_token(self, tokenizer: TokenizerAdapter) -> None:
        chunker = RecursiveChunker(
            ChunkingConfig(chunk_size=7, chunk_overlap=0), tokenizer, separators=("",)
        )
        text = _words(0, 50)
        assert "".join(chunker.chunk(text)) == text


class TestChunkerSubwordTokenizer:
    def test_windows_inside_words_stay_within_chunk_size(
        self, wordpiece_tokenizer: TokenizerAdapter
    ) -> None:
        chunker = _chunker(wordpiece_tokenizer, chunk_size=10, chunk_overlap=0)
        text = "Intro word\n\n" + "-".join(["Tokenizing"] * 40)

        chunks = chunker.chunk(text)

        assert len(chunks) > 2
        for chunk in chunks:
            assert wordpiece_tokenizer.count_tokens(chunk) <= 10
            assert "##" not in chunk
        assert "".join(chunks) == text

    def test_unknown_characters_are_kept(self, wordpiece_tokenizer: TokenizerAdapter) -> None:
        chunker = _chunker(wordpiece_tokenizer, chunk_size=10, chunk_overlap=0)
        text = "-".join(["word中"] * 20)

        chunks = chunker.chunk(text)

        for chunk in chunks:
            assert wordpiece_tokenizer.count_tokens(chunk) <= 10
        joined = "".join(chunks)
        assert joined == text
        assert joined.count("中") == 20

    def test_windows_overlap_in_original_text(
        self, wordpiece_tokenizer: TokenizerAdapter
    ) -> None:
        chunker = _chunker(wordpiece_tokenizer, chunk_size=8, chunk_overlap=3)
        text = "-".join(["intro"] * 30)

        chunks = chunker.chunk(text)

        assert len(chunks) > 1
        for previous, current in zip(chunks, chunks[1:]):
            assert wordpiece_tokenizer.count_tokens(current) <= 8
            assert wordpiece_tokenizer.encode(current)[:3] == wordpiece_tokenizer.encode(previous)[-3:]
