"""
Generation component for the notes service.

Formats retrieved notes into prompts and asks a hosted chat model for a short,
first-person answer.
"""

__version__ = "1.0.0"

from .chat_client import ChatCompletionClient
from .context_builder import format_matches, format_relevance

__all__ = [
    "__version__",
    "ChatCompletionClient",
    "format_matches",
    "format_relevance",
]
