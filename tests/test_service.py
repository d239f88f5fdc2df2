"""Tests for notes.service.NoteService."""

import logging
import re

import pytest
from unittest.mock import MagicMock, patch

from generation.prompts import (
    ANSWER_MAX_TOKENS,
    ANSWER_TEMPERATURE,
    NO_MATCH_MAX_TOKENS,
    NO_MATCH_TEMPERATURE,
)
from notes.exceptions import (
    CompletionError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from notes.service import NoteService, generate_note_id, utc_timestamp
from vector_store.embedder import SentenceTransformerEmbedder
from vector_store.models import IndexStats, VectorMatch, VectorRecord

from conftest import INDEX_DIMENSION


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestIds:
    def test_id_format(self):
        assert re.fullmatch(r"note_\d{13}_[0-9a-z]{9}", generate_note_id())

    def test_ids_are_unique(self):
        ids = {generate_note_id() for _ in range(500)}
        assert len(ids) == 500

    def test_timestamp_format(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_timestamp())


# ---------------------------------------------------------------------------
# create_note
# ---------------------------------------------------------------------------

class TestCreateNote:
    def test_stores_padded_vector_and_metadata(self, service, mock_index, embedder):
        note = service.create_note("Groceries", "Buy oat milk")

        assert embedder.calls == ["Groceries Buy oat milk"]
        record_id, vector, metadata = mock_index.upsert.call_args.args
        assert record_id == note.id
        assert len(vector) == INDEX_DIMENSION
        assert metadata == {
            "title": "Groceries",
            "description": "Buy oat milk",
            "createdAt": note.created_at,
        }

    def test_returns_note(self, service):
        note = service.create_note("Groceries", "Buy oat milk")
        assert note.title == "Groceries"
        assert note.description == "Buy oat milk"
        assert note.id.startswith("note_")

    @pytest.mark.parametrize("title,description", [
        (None, "desc"),
        ("title", None),
        ("", "desc"),
        ("title", "   "),
    ])
    def test_missing_fields_rejected_before_any_call(
        self, service, mock_index, embedder, title, description
    ):
        with pytest.raises(ValidationError, match="Please provide both title and description"):
            service.create_note(title, description)

        assert embedder.calls == []
        mock_index.upsert.assert_not_called()

    def test_store_failure_propagates(self, service, mock_index):
        mock_index.upsert.side_effect = StoreUnavailableError(operation="upsert")
        with pytest.raises(StoreUnavailableError):
            service.create_note("Groceries", "Buy oat milk")


# ---------------------------------------------------------------------------
# search_notes
# ---------------------------------------------------------------------------

class TestSearchNotes:
    def test_blank_query_rejected(self, service, mock_chat, embedder):
        with pytest.raises(ValidationError, match="Query parameter is required"):
            service.search_notes("  ")
        assert embedder.calls == []
        mock_chat.complete.assert_not_called()

    def test_no_matches_uses_fallback_prompt(self, service, mock_index, mock_chat):
        mock_index.query.return_value = []

        result = service.search_notes("What is my wifi password?")

        assert result.found_results is False
        assert result.answer == "I keep oat milk on my shopping list."
        kwargs = mock_chat.complete.call_args.kwargs
        assert kwargs["temperature"] == NO_MATCH_TEMPERATURE
        assert kwargs["max_tokens"] == NO_MATCH_MAX_TOKENS
        assert "What is my wifi password?" in kwargs["user_prompt"]
        assert "Alex" in kwargs["system_prompt"]

    def test_matches_are_formatted_into_prompt(self, service, mock_index, mock_chat):
        mock_index.query.return_value = [
            VectorMatch(id="n1", score=0.9331, metadata={"title": "Groceries", "description": "Oat milk"}),
            VectorMatch(id="n2", score=0.5, metadata={"title": "Gym", "description": "Leg day"}),
        ]

        result = service.search_notes("What do I need to buy?")

        assert result.found_results is True
        assert [m.id for m in result.matches] == ["n1", "n2"]
        kwargs = mock_chat.complete.call_args.kwargs
        assert kwargs["temperature"] == ANSWER_TEMPERATURE
        assert kwargs["max_tokens"] == ANSWER_MAX_TOKENS
        prompt = kwargs["user_prompt"]
        assert 'Title: "Groceries"' in prompt
        assert "Relevance: 93.3%" in prompt
        assert prompt.index("Groceries") < prompt.index("Gym")

    def test_queries_top_three_with_metadata(self, service, mock_index):
        service.search_notes("anything")
        _, kwargs = mock_index.query.call_args
        assert kwargs["top_k"] == 3
        assert kwargs["include_metadata"] is True

    def test_completion_failure_propagates(self, service, mock_chat):
        mock_chat.complete.side_effect = CompletionError("Chat API rate limit exceeded")
        with pytest.raises(CompletionError):
            service.search_notes("anything")


# ---------------------------------------------------------------------------
# list_notes
# ---------------------------------------------------------------------------

class TestListNotes:
    def test_random_probe_of_index_dimension(self, service, mock_index):
        mock_index.query.return_value = [
            VectorMatch(
                id="n1",
                score=0.12,
                metadata={"title": "Groceries", "description": "Oat milk", "createdAt": "2024-06-10T08:00:00.000Z"},
            ),
        ]

        notes = service.list_notes(5)

        probe = mock_index.query.call_args.args[0]
        kwargs = mock_index.query.call_args.kwargs
        assert len(probe) == INDEX_DIMENSION
        assert all(0.0 <= v < 1.0 for v in probe)
        assert kwargs == {"top_k": 5, "include_metadata": True, "include_values": False}
        assert notes[0].created_at == "2024-06-10T08:00:00.000Z"
        assert notes[0].score == 0.12

    def test_missing_metadata_fields_are_none(self, service, mock_index):
        mock_index.query.return_value = [VectorMatch(id="n1", score=0.1, metadata={})]
        note = service.list_notes()[0]
        assert note.title is None
        assert note.created_at is None

    @pytest.mark.parametrize("limit", [0, -3])
    def test_non_positive_limit(self, service, mock_index, limit):
        with pytest.raises(ValidationError):
            service.list_notes(limit)
        mock_index.query.assert_not_called()


# ---------------------------------------------------------------------------
# delete_note
# ---------------------------------------------------------------------------

class TestDeleteNote:
    def test_missing_note_never_deletes(self, service, mock_index):
        mock_index.fetch.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            service.delete_note("note_missing")

        assert exc_info.value.note_id == "note_missing"
        assert exc_info.value.status_code == 404
        mock_index.delete_one.assert_not_called()

    def test_existing_note_deleted(self, service, mock_index):
        mock_index.fetch.return_value = VectorRecord(id="note_1", metadata={})
        assert service.delete_note("note_1") == "note_1"
        mock_index.delete_one.assert_called_once_with("note_1")

    def test_blank_id(self, service, mock_index):
        with pytest.raises(ValidationError, match="Note ID is required"):
            service.delete_note(" ")
        mock_index.fetch.assert_not_called()


# ---------------------------------------------------------------------------
# startup
# ---------------------------------------------------------------------------

class TestStartup:
    def test_index_dimension_overrides_config(self, service, mock_index, embedder):
        mock_index.describe_stats.return_value = IndexStats(dimension=16, total_record_count=3)

        stats = service.startup()

        assert stats.total_record_count == 3
        assert embedder.target_dimension == 16

        service.create_note("Groceries", "Buy oat milk")
        assert len(mock_index.upsert.call_args.args[1]) == 16

    def test_zero_dimension_keeps_config(self, service, mock_index, embedder):
        mock_index.describe_stats.return_value = IndexStats(dimension=0)
        service.startup()
        assert embedder.target_dimension == INDEX_DIMENSION


    def test_warns_when_model_dimension_differs_from_index(self, config, mock_index, mock_chat, caplog):
        model = MagicMock()
        model.get_sentence_embedding_dimension.return_value = 384
        mock_index.describe_stats.return_value = IndexStats(dimension=1536)

        with patch("vector_store.embedder.SentenceTransformer", return_value=model):
            embedder = SentenceTransformerEmbedder(target_dimension=1536)
            service = NoteService(config=config, embedder=embedder, index=mock_index, chat=mock_chat)
            with caplog.at_level(logging.WARNING, logger="notes.service"):
                service.startup()

        mismatch = [r for r in caplog.records if "Dimension mismatch" in r.getMessage()]
        assert len(mismatch) == 1
        assert "index expects 1536, model produces 384" in mismatch[0].getMessage()
        model.encode.assert_not_called()

    def test_no_warning_when_dimensions_match(self, config, mock_index, mock_chat, caplog):
        model = MagicMock()
        model.get_sentence_embedding_dimension.return_value = 384
        mock_index.describe_stats.return_value = IndexStats(dimension=384)

        with patch("vector_store.embedder.SentenceTransformer", return_value=model):
            service = NoteService(
                config=config,
                embedder=SentenceTransformerEmbedder(target_dimension=1536),
                index=mock_index,
                chat=mock_chat,
            )
            with caplog.at_level(logging.WARNING, logger="notes.service"):
                service.startup()

        assert not any("Dimension mismatch" in r.getMessage() for r in caplog.records)

    def test_model_load_failure_is_logged_not_raised(self, config, mock_index, mock_chat, caplog):
        with patch("vector_store.embedder.SentenceTransformer", side_effect=OSError("no network")):
            service = NoteService(
                config=config,
                embedder=SentenceTransformerEmbedder(),
                index=mock_index,
                chat=mock_chat,
            )
            with caplog.at_level(logging.WARNING, logger="notes.service"):
                stats = service.startup()

        assert stats.dimension == INDEX_DIMENSION
        assert any("Could not determine embedding dimension" in r.getMessage() for r in caplog.records)
    def test_store_failure_propagates(self, service, mock_index):
        mock_index.describe_stats.side_effect = StoreUnavailableError("PINECONE_API_KEY is missing")
        with pytest.raises(StoreUnavailableError):
            service.startup()


# ---------------------------------------------------------------------------
# End to end against ChromaDB
# ---------------------------------------------------------------------------

class TestWithChroma:
    def test_create_then_search_ranks_related_note_first(self, chroma_service, mock_chat):
        chroma_service.create_note("Groceries", "Buy milk and more milk")
        chroma_service.create_note("Training", "Gym session on Monday")

        result = chroma_service.search_notes("Do I need milk?")

        assert result.found_results is True
        assert result.matches[0].metadata["title"] == "Groceries"

    def test_delete_twice(self, chroma_service):
        note = chroma_service.create_note("Book club", "Read chapter 3 before the meeting")

        assert chroma_service.delete_note(note.id) == note.id
        with pytest.raises(NotFoundError):
            chroma_service.delete_note(note.id)

    def test_list_returns_stored_notes(self, chroma_service):
        created = {chroma_service.create_note(f"Note {i}", "gym book milk").id for i in range(3)}

        listed = chroma_service.list_notes(10)

        assert {n.id for n in listed} == created
        assert all(n.created_at for n in listed)
