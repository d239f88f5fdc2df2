from __future__ import annotations

from typing import Any

from vector_store.models import VectorMatch


def format_relevance(score: float) -> str:
    """Render a similarity score as a percentage with one decimal, e.g. "93.3%"."""
    return f"{score * 100:.1f}%"


def _match_block(idx: int, match: VectorMatch) -> str:
    metadata: dict[str, Any] = match.metadata or {}
    return (
        f'{idx}. Title: "{metadata.get("title")}"\n'
        f'   Description: "{metadata.get("description")}"\n'
        f"   Relevance: {format_relevance(match.score)}"
    )


def format_matches(matches: list[VectorMatch]) -> str:
    """Number the matches in store order and join them with a blank line."""
    return "\n\n".join(
        _match_block(idx, match) for idx, match in enumerate(matches, start=1)
    )
