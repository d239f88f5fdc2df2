"""
Data Models for the Vector Store

Defines:
1. VectorMatch - A single similarity-query hit with score and metadata
2. VectorRecord - A record fetched by id
3. IndexStats - Index statistics used for startup diagnostics

Design Principles:
- Pydantic v2 for validation (consistent with the notes API models)
- Backend-neutral: Pinecone and ChromaDB responses are both mapped here
"""

from typing import Any

from pydantic import BaseModel, Field


class VectorMatch(BaseModel):
    """A single result of a similarity query."""
    id: str = Field(
        ...,
        description="ID of the matching record",
    )
    score: float = Field(
        ...,
        description="Similarity score (1 = identical, lower = less similar)",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Record metadata (empty when not requested)",
    )


class VectorRecord(BaseModel):
    """A record looked up by id."""
    id: str = Field(
        ...,
        description="Record ID",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Record metadata",
    )


class IndexStats(BaseModel):
    """Statistics reported by the vector index."""
    dimension: int = Field(
        0,
        description="Vector dimensionality of the index",
    )
    total_record_count: int = Field(
        0,
        description="Number of stored records",
    )
    fullness: float = Field(
        0.0,
        description="Fraction of index capacity in use (0-1)",
    )
