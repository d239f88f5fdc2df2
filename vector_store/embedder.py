"""
Embedders - Text to fixed-length vectors for the note index

Two backends share one contract: embed(text) returns a vector of exactly
`target_dimension` floats.

Design:
- SentenceTransformerEmbedder runs the model in-process. Loaded models are
  cached process-wide and loaded at most once, even under concurrent first use
- OllamaEmbedder calls a local Ollama server
- Native vectors shorter than the index dimension are zero-padded; longer
  ones are rejected (see pad_embedding)

Usage:
    from vector_store.embedder import SentenceTransformerEmbedder

    embedder = SentenceTransformerEmbedder(target_dimension=1536)
    vector = embedder.embed("Buy oat milk on Friday")
    assert len(vector) == 1536
"""

import logging
import threading
from typing import Optional

import ollama
from sentence_transformers import SentenceTransformer

from notes.exceptions import EmbeddingError, InvalidInputError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
DEFAULT_DIMENSION = 1536

_models: dict[str, SentenceTransformer] = {}
_models_lock = threading.Lock()


def load_model(model_name: str) -> SentenceTransformer:
    """
    Return the process-wide SentenceTransformer for `model_name`.

    The first caller loads the model while holding the lock; concurrent
    callers wait and then reuse it. A failed load is not cached.
    """
    model = _models.get(model_name)
    if model is not None:
        return model

    with _models_lock:
        model = _models.get(model_name)
        if model is None:
            logger.info("Loading embedding model %s", model_name)
            model = SentenceTransformer(model_name)
            _models[model_name] = model
            logger.info(
                "Model loaded (%s dimensions)",
                model.get_sentence_embedding_dimension(),
            )
    return model


def clear_model_cache() -> None:
    """Drop all cached models (used by tests)."""
    with _models_lock:
        _models.clear()


def pad_embedding(embedding: list[float], target_dimension: int) -> list[float]:
    """
    Fit a native embedding to the index dimension.

    Shorter vectors get trailing zeros; the values are not renormalized.
    Longer vectors raise EmbeddingError instead of being truncated.
    """
    current = len(embedding)
    if current == target_dimension:
        return list(embedding)
    if current > target_dimension:
        raise EmbeddingError(
            f"Embedding has {current} dimensions but the index expects {target_dimension}"
        )

    logger.debug("Padding %d dimensions to %d", current, target_dimension)
    return list(embedding) + [0.0] * (target_dimension - current)


class BaseEmbedder:
    """
    Shared validation and padding for all embedding backends.

    Subclasses implement `_embed_native`, which returns the model's own
    (unpadded) vector.
    """

    def __init__(self, model: str, target_dimension: int = DEFAULT_DIMENSION):
        self.model = model
        self.target_dimension = target_dimension
        self._native_dimension: Optional[int] = None

    @property
    def native_dimension(self) -> Optional[int]:
        """Native model dimension (available after the first embed call)."""
        return self._native_dimension

    def detect_native_dimension(self) -> int:
        """
        Native model dimension, embedding a short sample text if not yet known.

        Raises:
            EmbeddingError: If the model cannot be reached.
        """
        if self._native_dimension is None:
            self._native_dimension = len(self._embed_native("dimension check"))
        return self._native_dimension

    def embed(self, text: str) -> list[float]:
        """
        Generate an embedding of length `target_dimension` for `text`.

        Raises:
            InvalidInputError: If text is empty or not a string.
            EmbeddingError: If the model fails or its output is too long.
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError()

        logger.debug("Generating embedding for: %r", text[:50])
        native = self._embed_native(text)
        if self._native_dimension is None and len(native) < self.target_dimension:
            logger.warning(
                "Model %s produces %d dimensions, index expects %d; padding with zeros",
                self.model,
                len(native),
                self.target_dimension,
            )
        self._native_dimension = len(native)
        return pad_embedding(native, self.target_dimension)

    def _embed_native(self, text: str) -> list[float]:
        raise NotImplementedError

    def health_check(self) -> dict[str, bool | str]:
        raise NotImplementedError


class SentenceTransformerEmbedder(BaseEmbedder):
    """
    In-process embedder backed by sentence-transformers.

    Produces mean-pooled, L2-normalized embeddings. The model is loaded on
    the first embed call, not at construction.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        target_dimension: int = DEFAULT_DIMENSION,
    ):
        super().__init__(model, target_dimension)

    def _embed_native(self, text: str) -> list[float]:
        try:
            encoder = load_model(self.model)
            vector = encoder.encode(
                text,
                normalize_embeddings=True,
                convert_to_numpy=True,
            )
            return [float(v) for v in vector.tolist()]
        except Exception as e:
            raise EmbeddingError(model=self.model, original_error=e) from e

    def detect_native_dimension(self) -> int:
        if self._native_dimension is None:
            try:
                dimension = load_model(self.model).get_sentence_embedding_dimension()
            except Exception as e:
                raise EmbeddingError(model=self.model, original_error=e) from e
            if dimension is None:
                return super().detect_native_dimension()
            self._native_dimension = int(dimension)
        return self._native_dimension

    def health_check(self) -> dict[str, bool | str]:
        return {
            "healthy": True,
            "model": self.model,
            "model_loaded": self.model in _models,
            "error": "",
        }


class OllamaEmbedder(BaseEmbedder):
    """
    Generates text embeddings using a local Ollama model.

    The embedder connects to a running Ollama instance and uses a specified
    embedding model to convert text into dense vector representations.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        target_dimension: int = DEFAULT_DIMENSION,
    ):
        """
        Initialize the embedder.

        Args:
            model: Ollama model name for embeddings.
            base_url: Ollama API base URL.
            target_dimension: Dimension of the vector index.
        """
        super().__init__(model, target_dimension)
        self.base_url = base_url
        self._client = ollama.Client(host=base_url)

    def _embed_native(self, text: str) -> list[float]:
        try:
            response = self._client.embed(model=self.model, input=text)
            return list(response["embeddings"][0])
        except ollama.ResponseError as e:
            raise EmbeddingError(
                "Ollama embedding failed", model=self.model, original_error=e
            ) from e
        except Exception as e:
            if "Connection" in type(e).__name__ or "refused" in str(e).lower():
                raise EmbeddingError(
                    f"Cannot connect to Ollama at {self.base_url}",
                    model=self.model,
                    original_error=e,
                ) from e
            raise EmbeddingError(model=self.model, original_error=e) from e

    def health_check(self) -> dict[str, bool | str]:
        """
        Check if Ollama is running and the embedding model is available.

        Returns:
            Dict with 'healthy' (bool), 'model_available' (bool),
            'model' (str) and 'error' (str, if any).
        """
        result = {
            "healthy": False,
            "model_available": False,
            "model": self.model,
            "error": "",
        }

        try:
            models = self._client.list()
            model_names = [m.model for m in models.models]
            # Match by prefix (e.g., "nomic-embed-text" matches "nomic-embed-text:latest")
            result["model_available"] = any(
                m.startswith(self.model) for m in model_names
            )
            if result["model_available"]:
                result["healthy"] = True
            else:
                result["error"] = f"Model '{self.model}' not found. Pull it with: ollama pull {self.model}"
        except Exception as e:
            result["error"] = f"Cannot connect to Ollama: {e}"

        return result


def create_embedder(
    backend: str = "sentence-transformers",
    model: str = DEFAULT_MODEL,
    target_dimension: int = DEFAULT_DIMENSION,
    ollama_base_url: str = "http://localhost:11434",
) -> BaseEmbedder:
    """Build the embedder for a configured backend name."""
    if backend == "sentence-transformers":
        return SentenceTransformerEmbedder(model=model, target_dimension=target_dimension)
    if backend == "ollama":
        return OllamaEmbedder(
            model=model,
            base_url=ollama_base_url,
            target_dimension=target_dimension,
        )
    raise ValueError(f"Unsupported embedding backend: {backend}")
