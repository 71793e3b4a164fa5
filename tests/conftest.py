"""Shared fixtures: deterministic tokenizer/model doubles and temp storage."""

import re
import zlib
from pathlib import Path

import chromadb
import numpy as np
import pytest
from chromadb.config import Settings

from memory_bank.config import AppConfig, ChunkingConfig, StorageConfig
from memory_bank.ingestion.embedder import Embedder
from memory_bank.ingestion.model_loader import ModelHandles
from memory_bank.ingestion.tokenizer import TokenizerAdapter
from memory_bank.services import Services, build_services
from memory_bank.storage.chunk_store import ChunkStore
from memory_bank.storage.database import initialize_database
from memory_bank.storage.projects import ProjectRegistry


class FakeHFTokenizer:
    """Lossless word-level tokenizer: each token is a word with its leading whitespace."""

    PATTERN = re.compile(r"\s*\S+|\s+")

    def __init__(self) -> None:
        self._ids: dict[str, int] = {}
        self._pieces: list[str] = []
        self.fail = False

    def encode(self, text: str, add_special_tokens: bool = True) -> list[int]:
        if self.fail:
            raise RuntimeError("tokenizer exploded")
        ids = []
        for piece in self.PATTERN.findall(text):
            if piece not in self._ids:
                self._ids[piece] = len(self._pieces)
                self._pieces.append(piece)
            ids.append(self._ids[piece])
        return ids

    def decode(self, token_ids: list[int], skip_special_tokens: bool = False) -> str:
        return "".join(self._pieces[i] for i in token_ids)

    def __call__(
        self, text: str, add_special_tokens: bool = True, return_offsets_mapping: bool = False
    ) -> dict[str, list]:
        ids = self.encode(text, add_special_tokens=add_special_tokens)
        encoding: dict[str, list] = {"input_ids": ids}
        if return_offsets_mapping:
            encoding["offset_mapping"] = [m.span() for m in self.PATTERN.finditer(text)]
        return encoding


class FakeSentenceModel:
    """Bag-of-words hashing model returning L2-normalized vectors."""

    DIMENSION = 32

    def __init__(self) -> None:
        self.tokenizer = FakeHFTokenizer()
        self.fail_marker: str | None = None

    def encode(self, text: str, **kwargs: object) -> np.ndarray:
        if self.fail_marker and self.fail_marker in text:
            raise RuntimeError(f"cannot embed text containing {self.fail_marker!r}")
        vector = np.zeros(self.DIMENSION, dtype=np.float32)
        for word in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(word.encode("utf-8")) % self.DIMENSION] += 1.0
        if not vector.any():
            vector[0] = 1.0
        return vector / np.linalg.norm(vector)

    def get_sentence_embedding_dimension(self) -> int:
        return self.DIMENSION


@pytest.fixture
def fake_model() -> FakeSentenceModel:
    return FakeSentenceModel()


@pytest.fixture
def tokenizer(fake_model: FakeSentenceModel) -> TokenizerAdapter:
    return TokenizerAdapter(fake_model.tokenizer)


WORDPIECE_VOCAB = [
    "[PAD]", "[UNK]", "[CLS]", "[SEP]", "[MASK]",
    "intro", "word", "token", "##izing", "iz", "##ing", "-", ".",
]


@pytest.fixture
def wordpiece_tokenizer() -> TokenizerAdapter:
    """An uncased subword tokenizer over a tiny vocabulary, built offline."""
    from tokenizers import Tokenizer, normalizers, pre_tokenizers
    from tokenizers.models import WordPiece
    from transformers import PreTrainedTokenizerFast

    vocab = {piece: i for i, piece in enumerate(WORDPIECE_VOCAB)}
    backend = Tokenizer(WordPiece(vocab, unk_token="[UNK]"))
    backend.normalizer = normalizers.BertNormalizer(lowercase=True)
    backend.pre_tokenizer = pre_tokenizers.BertPreTokenizer()
    return TokenizerAdapter(
        PreTrainedTokenizerFast(tokenizer_object=backend, unk_token="[UNK]", pad_token="[PAD]")
    )


@pytest.fixture
def embedder(fake_model: FakeSentenceModel) -> Embedder:
    return Embedder(fake_model)


@pytest.fixture
def handles(tokenizer: TokenizerAdapter, embedder: Embedder) -> ModelHandles:
    return ModelHandles(model_name="fake-model", tokenizer=tokenizer, embedder=embedder)


@pytest.fixture
def collection(tmp_path: Path):
    client = chromadb.PersistentClient(
        path=str(tmp_path / "chroma"), settings=Settings(anonymized_telemetry=False)
    )
    return client.get_or_create_collection("chunks", metadata={"hnsw:space": "cosine"})


@pytest.fixture
def store(collection) -> ChunkStore:
    return ChunkStore(collection)


@pytest.fixture
def registry(tmp_path: Path) -> ProjectRegistry:
    db_path = tmp_path / "memory_bank.db"
    initialize_database(db_path)
    return ProjectRegistry(db_path)


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        chunking=ChunkingConfig(chunk_size=40, chunk_overlap=5),
        storage=StorageConfig(
            chroma_dir=str(tmp_path / "chroma"),
            sqlite_path=str(tmp_path / "memory_bank.db"),
        ),
    )


@pytest.fixture
def services(app_config: AppConfig, handles: ModelHandles, collection) -> Services:
    return build_services(app_config, handles=handles, collection=collection)


@pytest.fixture
def project_id(services: Services) -> str:
    return services.projects.create_project("demo").id
