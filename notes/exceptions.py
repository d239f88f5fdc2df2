"""
Custom Exceptions for the Second Brain notes service.

Every failure that crosses a component boundary is raised as one of these,
so the HTTP layer can map it to a status code without knowing which
external service produced it.

Exception Hierarchy:
    NoteServiceError (base, 500)
    ├── ValidationError (400)
    │   └── InvalidInputError (400)
    ├── NotFoundError (404)
    ├── EmbeddingError (500)
    ├── StoreUnavailableError (500)
    └── CompletionError (500)

Usage:
    from notes.exceptions import NotFoundError, NoteServiceError

    try:
        service.delete_note(note_id)
    except NotFoundError as e:
        print(f"No such note: {e.note_id}")
    except NoteServiceError as e:
        print(f"Delete failed: {e}")
"""

from __future__ import annotations

from typing import Optional


# =============================================================================
# BASE EXCEPTION
# =============================================================================


class NoteServiceError(Exception):
    """
    Base exception for all notes-service errors.

    Attributes:
        message: Human-readable error description
        details: Additional technical details (optional)
        status_code: HTTP status the error maps to
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "A notes service error occurred",
        details: Optional[str] = None,
    ):
        self.message = message
        self.details = details

        full_message = message
        if details:
            full_message = f"{message} | Details: {details}"

        super().__init__(full_message)

    @property
    def is_client_error(self) -> bool:
        """True for errors caused by the caller's input (4xx)."""
        return 400 <= self.status_code < 500


# =============================================================================
# CLIENT ERRORS
# =============================================================================


class ValidationError(NoteServiceError):
    """Raised when a required field is missing or blank."""

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        field: Optional[str] = None,
    ):
        self.field = field
        super().__init__(message)


class InvalidInputError(ValidationError):
    """Raised when text handed to the embedding provider is empty."""

    def __init__(self, message: str = "Valid text input is required"):
        super().__init__(message, field="text")


class NotFoundError(NoteServiceError):
    """
    Raised when a referenced note does not exist.

    Attributes:
        note_id: The id that was looked up
    """

    status_code = 404

    def __init__(self, note_id: str, message: str = "Note not found"):
        self.note_id = note_id
        super().__init__(message)


# =============================================================================
# EXTERNAL SERVICE ERRORS
# =============================================================================


class EmbeddingError(NoteServiceError):
    """
    Raised when the embedding model cannot produce a vector.

    Attributes:
        model: Embedding model name
        original_error: The underlying exception, if any
    """

    def __init__(
        self,
        message: str = "Embedding generation failed",
        model: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.model = model
        self.original_error = original_error
        if model:
            message = f"{message} [{model}]"
        details = str(original_error) if original_error else None
        super().__init__(message, details)


class StoreUnavailableError(NoteServiceError):
    """
    Raised when the vector store cannot be reached or rejects a request.

    Attributes:
        operation: Store operation that failed (upsert, query, ...)
        original_error: The underlying client exception, if any
    """

    def __init__(
        self,
        message: str = "Vector store unavailable",
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.operation = operation
        self.original_error = original_error
        if operation:
            message = f"{message} during {operation}"
        details = str(original_error) if original_error else None
        super().__init__(message, details)


class CompletionError(NoteServiceError):
    """
    Raised when the chat completion API fails (auth, rate limit, timeout).

    Attributes:
        model: Chat model name
        status_code_remote: HTTP status returned by the API, if any
        original_error: The underlying client exception, if any
    """

    def __init__(
        self,
        message: str = "Chat completion failed",
        model: Optional[str] = None,
        original_error: Optional[Exception] = None,
        status_code_remote: Optional[int] = None,
    ):
        self.model = model
        self.original_error = original_error
        self.status_code_remote = status_code_remote
        if status_code_remote:
            message = f"{message} (HTTP {status_code_remote})"
        details = str(original_error) if original_error else None
        super().__init__(message, details)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def format_error_chain(error: BaseException) -> str:
    """
    Format an exception and its chain for logging.

    Returns a multi-line string showing the error hierarchy.
    """
    lines = []
    current: Optional[BaseException] = error
    depth = 0

    while current is not None:
        prefix = "  " * depth + ("└─ " if depth > 0 else "")
        lines.append(f"{prefix}{type(current).__name__}: {current}")

        original = getattr(current, "original_error", None)
        if original is not None and original is not current.__cause__:
            current = original
        else:
            current = current.__cause__
        depth += 1

    return "\n".join(lines)
