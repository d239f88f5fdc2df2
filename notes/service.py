from __future__ import annotations

import logging
import random
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Optional

from generation.chat_client import ChatCompletionClient
from generation.context_builder import format_matches
from generation.prompts import (
    ANSWER_MAX_TOKENS,
    ANSWER_SYSTEM_PROMPT,
    ANSWER_TEMPERATURE,
    ANSWER_USER_TEMPLATE,
    NO_MATCH_MAX_TOKENS,
    NO_MATCH_SYSTEM_PROMPT,
    NO_MATCH_TEMPERATURE,
    NO_MATCH_USER_TEMPLATE,
)
from vector_store.embedder import create_embedder
from vector_store.models import IndexStats
from vector_store.store import create_index

from .config import NotesConfig
from .exceptions import EmbeddingError, NotFoundError, ValidationError
from .models import ListedNote, Note, SearchAnswer

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_note_id() -> str:
    """Time-based id with a random base-36 suffix, e.g. note_1718000000000_k3j9x0a1b."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"note_{int(time.time() * 1000)}_{suffix}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _require(value: Optional[str], message: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message, field=field)
    return value


class NoteService:
    """
    Orchestrates note storage and retrieval-augmented answers.

    Each operation runs its external calls strictly in sequence
    (embed -> store -> optionally chat). Nothing is rolled back when a later
    step fails.
    """

    def __init__(
        self,
        config: NotesConfig | None = None,
        embedder: Any = None,
        index: Any = None,
        chat: Any = None,
    ):
        self.config = config or NotesConfig.from_env()
        if embedder is None:
            embedder = create_embedder(
                backend=self.config.embedding_backend,
                model=self.config.embedding_model,
                target_dimension=self.config.vector_dimension,
                ollama_base_url=self.config.ollama_base_url,
            )
        if index is None:
            index = create_index(
                backend=self.config.vector_store_backend,
                pinecone_api_key=self.config.pinecone_api_key,
                pinecone_index_name=self.config.pinecone_index_name,
                chroma_persist_directory=self.config.chroma_persist_directory,
                chroma_collection=self.config.chroma_collection,
                dimension=self.config.vector_dimension,
            )
        if chat is None:
            chat = ChatCompletionClient(
                api_key=self.config.llm_api_key,
                model=self.config.llm_model,
                base_url=self.config.llm_base_url,
                max_retries=self.config.llm_max_retries,
            )
        self.embedder = embedder
        self.index = index
        self.chat = chat

    @property
    def index_name(self) -> str:
        return getattr(self.index, "index_name", "unknown")

    def startup(self) -> IndexStats:
        """Check the index and log its configuration."""
        stats = self.index.describe_stats()

        logger.info("Vector store connection successful")
        logger.info("Index name: %s", self.index_name)
        logger.info("Dimensions: %s", stats.dimension)
        logger.info("Total records: %s", stats.total_record_count)
        logger.info("Index fullness: %.2f%%", stats.fullness * 100)

        if stats.dimension > 0:
            self.embedder.target_dimension = stats.dimension

        try:
            native = self.embedder.detect_native_dimension()
        except EmbeddingError as e:
            logger.warning("Could not determine embedding dimension: %s", e)
            return stats

        expected = self.embedder.target_dimension
        if native != expected:
            logger.warning(
                "Dimension mismatch: index expects %s, model produces %s; "
                "embeddings are zero-padded",
                expected,
                native,
            )
        return stats

    def create_note(self, title: Optional[str], description: Optional[str]) -> Note:
        message = "Please provide both title and description"
        title = _require(title, message, "title")
        description = _require(description, message, "description")

        logger.info("Creating note: %r", title)
        note_id = generate_note_id()
        vector = self.embedder.embed(f"{title} {description}")
        logger.debug("Generated embedding, dimension: %d", len(vector))

        created_at = utc_timestamp()
        self.index.upsert(
            note_id,
            vector,
            {"title": title, "description": description, "createdAt": created_at},
        )
        logger.info("Stored note %s", note_id)
        return Note(id=note_id, title=title, description=description, created_at=created_at)

    def search_notes(self, query: Optional[str]) -> SearchAnswer:
        query = _require(query, "Query parameter is required", "query")
        logger.info("Searching for: %r", query)

        vector = self.embedder.embed(query)
        matches = self.index.query(vector, top_k=self.config.search_top_k, include_metadata=True)
        logger.info("Found %d matches", len(matches))

        owner = self.config.assistant_owner
        if not matches:
            answer = self.chat.complete(
                system_prompt=NO_MATCH_SYSTEM_PROMPT.format(owner=owner),
                user_prompt=NO_MATCH_USER_TEMPLATE.format(query=query),
                temperature=NO_MATCH_TEMPERATURE,
                max_tokens=NO_MATCH_MAX_TOKENS,
            )
            return SearchAnswer(query=query, answer=answer, found_results=False)

        context = format_matches(matches)
        logger.debug("Formatted results:\n%s", context)

        answer = self.chat.complete(
            system_prompt=ANSWER_SYSTEM_PROMPT.format(owner=owner),
            user_prompt=ANSWER_USER_TEMPLATE.format(query=query, context=context),
            temperature=ANSWER_TEMPERATURE,
            max_tokens=ANSWER_MAX_TOKENS,
        )
        logger.info("AI response generated")
        return SearchAnswer(query=query, answer=answer, found_results=True, matches=matches)

    def list_notes(self, limit: int = 10) -> list[ListedNote]:
        """
        Sample up to `limit` notes.

        The index has no list operation, so this queries with a random probe
        vector. Results are best-effort: notes far from the probe may be missed.
        """
        if limit < 1:
            raise ValidationError("limit must be a positive integer", field="limit")

        logger.info("Fetching up to %d notes", limit)
        probe = [random.random() for _ in range(self.embedder.target_dimension)]
        matches = self.index.query(probe, top_k=limit, include_metadata=True, include_values=False)
        return [
            ListedNote(
                id=match.id,
                title=match.metadata.get("title"),
                description=match.metadata.get("description"),
                created_at=match.metadata.get("createdAt"),
                score=match.score,
            )
            for match in matches
        ]

    def delete_note(self, note_id: Optional[str]) -> str:
        note_id = _require(note_id, "Note ID is required", "id")
        logger.info("Deleting note: %s", note_id)

        if self.index.fetch(note_id) is None:
            raise NotFoundError(note_id)

        self.index.delete_one(note_id)
        return note_id
