"""
Vector Store Module - note embeddings and the vector index they live in

Turns note text into fixed-length vectors and stores them, with their
metadata, in Pinecone (or a local ChromaDB collection).

Quick Start:
    from vector_store import SentenceTransformerEmbedder, PineconeNoteIndex

    embedder = SentenceTransformerEmbedder(target_dimension=1536)
    index = PineconeNoteIndex(api_key="...", index_name="portfolio-free")

    index.upsert("note_1", embedder.embed("Groceries oat milk"), {"title": "Groceries"})
    matches = index.query(embedder.embed("what do I need to buy?"), top_k=3)
"""

__version__ = "1.0.0"

from .embedder import (
    BaseEmbedder,
    OllamaEmbedder,
    SentenceTransformerEmbedder,
    create_embedder,
    pad_embedding,
)
from .models import IndexStats, VectorMatch, VectorRecord
from .store import ChromaNoteIndex, PineconeNoteIndex, create_index

__all__ = [
    "__version__",
    "BaseEmbedder",
    "SentenceTransformerEmbedder",
    "OllamaEmbedder",
    "create_embedder",
    "pad_embedding",
    "PineconeNoteIndex",
    "ChromaNoteIndex",
    "create_index",
    "VectorMatch",
    "VectorRecord",
    "IndexStats",
]
