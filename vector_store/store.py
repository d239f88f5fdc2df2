"""
Note Indexes - Vector storage for note embeddings

Two interchangeable backends with the same five operations:
- upsert(id, vector, metadata)
- query(vector, top_k, include_metadata, include_values) -> matches, best first
- fetch(id) -> record or None
- delete_one(id)
- describe_stats() -> IndexStats

Design:
- PineconeNoteIndex talks to a hosted Pinecone index; the client is created on
  first use so a missing API key does not stop the process from starting
- ChromaNoteIndex keeps notes in a local ChromaDB collection (cosine space),
  also opened on first use
- Every backend failure is re-raised as StoreUnavailableError

Usage:
    from vector_store.store import PineconeNoteIndex

    index = PineconeNoteIndex(api_key="...", index_name="portfolio-free")
    index.upsert("note_1", vector, {"title": "Groceries", "description": "..."})
    matches = index.query(vector, top_k=3)
"""

import logging
from typing import Any, Optional

import chromadb
from pinecone import Pinecone

from notes.exceptions import StoreUnavailableError

from .models import IndexStats, VectorMatch, VectorRecord

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a Pinecone response object or plain dict."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


class PineconeNoteIndex:
    """
    Note index backed by a hosted Pinecone index.
    """

    def __init__(
        self,
        api_key: Optional[str],
        index_name: str = "portfolio-free",
        index: Optional[Any] = None,
    ):
        """
        Args:
            api_key: Pinecone API key.
            index_name: Name of an existing Pinecone index.
            index: Optional pre-created index handle (for testing).
        """
        self.api_key = api_key
        self.index_name = index_name
        self._index = index

    @property
    def index(self) -> Any:
        if self._index is None:
            if not self.api_key:
                raise StoreUnavailableError("PINECONE_API_KEY is missing")
            try:
                self._index = Pinecone(api_key=self.api_key).Index(self.index_name)
            except Exception as e:
                raise StoreUnavailableError(
                    f"Cannot open Pinecone index '{self.index_name}'",
                    original_error=e,
                ) from e
        return self._index

    def upsert(self, record_id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        index = self.index
        try:
            index.upsert(vectors=[{"id": record_id, "values": vector, "metadata": metadata}])
        except Exception as e:
            raise StoreUnavailableError(operation="upsert", original_error=e) from e

    def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
        include_values: bool = False,
    ) -> list[VectorMatch]:
        index = self.index
        try:
            response = index.query(
                vector=vector,
                top_k=top_k,
                include_metadata=include_metadata,
                include_values=include_values,
            )
        except Exception as e:
            raise StoreUnavailableError(operation="query", original_error=e) from e

        return [
            VectorMatch(
                id=_field(match, "id"),
                score=float(_field(match, "score", 0.0) or 0.0),
                metadata=dict(_field(match, "metadata") or {}),
            )
            for match in _field(response, "matches") or []
        ]

    def fetch(self, record_id: str) -> Optional[VectorRecord]:
        index = self.index
        try:
            response = index.fetch(ids=[record_id])
        except Exception as e:
            raise StoreUnavailableError(operation="fetch", original_error=e) from e

        vectors = _field(response, "vectors") or {}
        record = vectors.get(record_id)
        if record is None:
            return None
        return VectorRecord(id=record_id, metadata=dict(_field(record, "metadata") or {}))

    def delete_one(self, record_id: str) -> None:
        index = self.index
        try:
            index.delete(ids=[record_id])
        except Exception as e:
            raise StoreUnavailableError(operation="delete", original_error=e) from e

    def describe_stats(self) -> IndexStats:
        index = self.index
        try:
            stats = index.describe_index_stats()
        except Exception as e:
            raise StoreUnavailableError(operation="describe_stats", original_error=e) from e

        return IndexStats(
            dimension=int(_field(stats, "dimension", 0) or 0),
            total_record_count=int(_field(stats, "total_vector_count", 0) or 0),
            fullness=float(_field(stats, "index_fullness", 0.0) or 0.0),
        )


class ChromaNoteIndex:
    """
    Note index backed by a local ChromaDB collection.

    ChromaDB has no fixed capacity, so fullness is always reported as 0.
    """

    def __init__(
        self,
        persist_directory: str = "./chroma_db",
        collection_name: str = "notes",
        dimension: int = 1536,
        chroma_client: Optional[chromadb.ClientAPI] = None,
    ):
        """
        Args:
            persist_directory: Directory for ChromaDB persistent storage.
            collection_name: ChromaDB collection name.
            dimension: Vector dimension reported by describe_stats().
            chroma_client: Optional pre-created ChromaDB client (for testing).
                           If not provided, a PersistentClient is created.
        """
        self.index_name = collection_name
        self.dimension = dimension
        self.persist_directory = persist_directory
        self._client = chroma_client
        self._collection = None

    @property
    def collection(self) -> Any:
        if self._collection is None:
            try:
                if self._client is None:
                    self._client = chromadb.PersistentClient(path=self.persist_directory)
                self._collection = self._client.get_or_create_collection(
                    name=self.index_name,
                    metadata={"hnsw:space": "cosine"},
                )
            except Exception as e:
                raise StoreUnavailableError(
                    f"Cannot open ChromaDB collection '{self.index_name}'",
                    original_error=e,
                ) from e
        return self._collection

    def upsert(self, record_id: str, vector: list[float], metadata: dict[str, Any]) -> None:
        collection = self.collection
        try:
            collection.upsert(
                ids=[record_id],
                embeddings=[vector],
                metadatas=[metadata],
            )
        except Exception as e:
            raise StoreUnavailableError(operation="upsert", original_error=e) from e

    def query(
        self,
        vector: list[float],
        top_k: int,
        include_metadata: bool = True,
        include_values: bool = False,
    ) -> list[VectorMatch]:
        include = ["distances"]
        if include_metadata:
            include.append("metadatas")
        if include_values:
            include.append("embeddings")

        collection = self.collection
        try:
            count = collection.count()
            if count == 0:
                return []
            raw = collection.query(
                query_embeddings=[vector],
                n_results=min(top_k, count),
                include=include,
            )
        except Exception as e:
            raise StoreUnavailableError(operation="query", original_error=e) from e

        matches: list[VectorMatch] = []
        if not raw["ids"] or not raw["ids"][0]:
            return matches

        for i, record_id in enumerate(raw["ids"][0]):
            distance = raw["distances"][0][i]
            metadata = raw["metadatas"][0][i] if include_metadata else None
            matches.append(VectorMatch(
                id=record_id,
                score=round(1 - distance, 6),
                metadata=dict(metadata or {}),
            ))
        return matches

    def fetch(self, record_id: str) -> Optional[VectorRecord]:
        collection = self.collection
        try:
            result = collection.get(ids=[record_id], include=["metadatas"])
        except Exception as e:
            raise StoreUnavailableError(operation="fetch", original_error=e) from e

        if not result["ids"]:
            return None
        return VectorRecord(id=result["ids"][0], metadata=dict(result["metadatas"][0] or {}))

    def delete_one(self, record_id: str) -> None:
        collection = self.collection
        try:
            collection.delete(ids=[record_id])
        except Exception as e:
            raise StoreUnavailableError(operation="delete", original_error=e) from e

    def describe_stats(self) -> IndexStats:
        collection = self.collection
        try:
            count = collection.count()
        except Exception as e:
            raise StoreUnavailableError(operation="describe_stats", original_error=e) from e
        return IndexStats(dimension=self.dimension, total_record_count=count, fullness=0.0)


def create_index(
    backend: str = "pinecone",
    pinecone_api_key: Optional[str] = None,
    pinecone_index_name: str = "portfolio-free",
    chroma_persist_directory: str = "./chroma_db",
    chroma_collection: str = "notes",
    dimension: int = 1536,
):
    """Build the note index for a configured backend name."""
    if backend == "pinecone":
        return PineconeNoteIndex(api_key=pinecone_api_key, index_name=pinecone_index_name)
    if backend == "chroma":
        return ChromaNoteIndex(
            persist_directory=chroma_persist_directory,
            collection_name=chroma_collection,
            dimension=dimension,
        )
    raise ValueError(f"Unsupported vector store backend: {backend}")
