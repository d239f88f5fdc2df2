"""
Pytest fixtures for the notes service tests.
"""

import uuid

import chromadb
import pytest
from unittest.mock import MagicMock

from notes.config import NotesConfig
from notes.service import NoteService
from vector_store.embedder import BaseEmbedder, clear_model_cache
from vector_store.models import IndexStats
from vector_store.store import ChromaNoteIndex


INDEX_DIMENSION = 8
KEYWORDS = ("milk", "meeting", "gym", "book")


class KeywordEmbedder(BaseEmbedder):
    """
    Deterministic 4-dimension embedder counting a few keywords.

    Texts sharing keywords land close together, which is enough to check
    ordering against a real ChromaDB collection.
    """

    def __init__(self, target_dimension: int = INDEX_DIMENSION):
        super().__init__("keyword-test-model", target_dimension)
        self.calls: list[str] = []

    def _embed_native(self, text: str) -> list[float]:
        self.calls.append(text)
        low = text.lower()
        return [low.count(word) + 0.01 for word in KEYWORDS]

    def health_check(self) -> dict:
        return {"healthy": True, "model": self.model, "error": ""}


@pytest.fixture(autouse=True)
def _fresh_model_cache():
    clear_model_cache()
    yield
    clear_model_cache()


@pytest.fixture
def config():
    return NotesConfig(
        app_env="development",
        vector_dimension=INDEX_DIMENSION,
        assistant_owner="Alex",
    )


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def mock_index():
    """A MagicMock standing in for the Pinecone note index."""
    index = MagicMock()
    index.index_name = "test-index"
    index.query.return_value = []
    index.fetch.return_value = None
    index.describe_stats.return_value = IndexStats(
        dimension=INDEX_DIMENSION, total_record_count=0, fullness=0.0,
    )
    return index


@pytest.fixture
def mock_chat():
    chat = MagicMock()
    chat.complete.return_value = "I keep oat milk on my shopping list."
    return chat


@pytest.fixture
def service(config, embedder, mock_index, mock_chat):
    return NoteService(config=config, embedder=embedder, index=mock_index, chat=mock_chat)


@pytest.fixture
def chroma_index():
    """A ChromaNoteIndex on an in-memory ChromaDB client."""
    return ChromaNoteIndex(
        collection_name=f"test_{uuid.uuid4().hex[:8]}",
        dimension=INDEX_DIMENSION,
        chroma_client=chromadb.EphemeralClient(),
    )


@pytest.fixture
def chroma_service(config, embedder, chroma_index, mock_chat):
    return NoteService(config=config, embedder=embedder, index=chroma_index, chat=mock_chat)
