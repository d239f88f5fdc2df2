"""
Second Brain notes service.

Stores short notes as embeddings in a vector index and answers questions
about them with a hosted chat model.

The service and HTTP app live in `notes.service` and `notes.app`; they are
not re-exported here because the vector store and generation packages import
`notes.exceptions`.
"""

__version__ = "1.0.0"

from .config import NotesConfig
from .exceptions import (
    CompletionError,
    EmbeddingError,
    InvalidInputError,
    NotFoundError,
    NoteServiceError,
    StoreUnavailableError,
    ValidationError,
)

__all__ = [
    "__version__",
    "NotesConfig",
    "NoteServiceError",
    "ValidationError",
    "InvalidInputError",
    "NotFoundError",
    "EmbeddingError",
    "StoreUnavailableError",
    "CompletionError",
]
