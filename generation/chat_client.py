"""
Chat completion client for OpenAI-compatible endpoints.

Defaults to Groq's OpenAI-compatible API; any endpoint that speaks the
chat-completions protocol works by changing `base_url`. One request per call,
no streaming, and no retries unless `max_retries` is raised.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from openai import APIConnectionError, APIStatusError, OpenAI, OpenAIError, RateLimitError

from notes.exceptions import CompletionError

logger = logging.getLogger(__name__)


class ChatCompletionClient:
    """
    Thin wrapper around `client.chat.completions.create`.

    Usage:
        client = ChatCompletionClient(api_key="gsk_...")
        text = client.complete(
            system_prompt="You are a helpful assistant.",
            user_prompt="Summarize my notes.",
            temperature=0.6,
            max_tokens=120,
        )
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "llama-3.1-8b-instant",
        base_url: Optional[str] = "https://api.groq.com/openai/v1",
        max_retries: int = 0,
        client: Optional[Any] = None,
    ):
        """
        Args:
            api_key: API key for the chat endpoint
            model: Chat model name
            base_url: OpenAI-compatible API base URL
            max_retries: Retries performed by the OpenAI client itself
            client: Optional pre-created OpenAI client (for testing)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.max_retries = max_retries
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise CompletionError("LLM API key is missing", model=self.model)
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=self.max_retries,
            )
        return self._client

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.6,
        max_tokens: int = 120,
    ) -> str:
        """
        Generate a reply for a system + user prompt pair.

        Returns:
            The generated text, stripped of surrounding whitespace

        Raises:
            CompletionError: On any API failure or an empty reply
        """
        client = self.client
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except RateLimitError as e:
            raise CompletionError(
                "Chat API rate limit exceeded", self.model, e, status_code_remote=429
            ) from e
        except APIConnectionError as e:
            raise CompletionError("Cannot connect to chat API", self.model, e) from e
        except APIStatusError as e:
            raise CompletionError(
                "Chat API error", self.model, e, status_code_remote=e.status_code
            ) from e
        except OpenAIError as e:
            raise CompletionError(model=self.model, original_error=e) from e

        content = response.choices[0].message.content if response.choices else None
        text = (content or "").strip()
        if not text:
            raise CompletionError("Empty response from chat API", model=self.model)

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                "Chat completion used %s prompt / %s completion tokens",
                getattr(usage, "prompt_tokens", "?"),
                getattr(usage, "completion_tokens", "?"),
            )
        return text
