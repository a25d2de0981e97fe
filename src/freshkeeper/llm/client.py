"""OpenAI-compatible LLM client.

This wraps the `openai` Python SDK and provides a minimal interface for chat completions,
reporting token usage alongside the text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

from openai import OpenAI

from freshkeeper.config import Settings
from freshkeeper.logging import get_logger

logger = get_logger(__name__)

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A chat message."""

    role: Role
    content: str


@dataclass(frozen=True)
class Completion:
    """Assistant text plus the tokens the call consumed."""

    text: str
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class Completer(Protocol):
    """Anything that turns chat messages into a :class:`Completion`."""

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> Completion:
        """Generate a completion."""


class LLMClient:
    """LLM client using OpenAI-compatible Chat Completions API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        if not settings.openai_api_key:
            raise ValueError(
                "Missing FRESHKEEPER_OPENAI_API_KEY. "
                "Set it in environment variables or a .env file."
            )

        # Retries are decided by the reconciliation engine, not the SDK.
        self._client = OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            max_retries=0,
        )

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.2,
        max_tokens: int | None = None,
    ) -> Completion:
        """Generate a completion.

        Args:
            messages: Chat messages.
            temperature: Sampling temperature.
            max_tokens: Output token cap; defaults to ``openai_max_tokens``.

        Returns:
            Assistant message content and usage.
        """

        payload: list[dict[str, str]] = [{"role": m.role, "content": m.content} for m in messages]
        resp = self._client.chat.completions.create(
            model=self._settings.openai_model,
            messages=payload,
            temperature=temperature,
            max_tokens=max_tokens or self._settings.openai_max_tokens,
            timeout=self._settings.openai_timeout_s,
        )

        prompt_tokens = 0
        completion_tokens = 0
        if resp.usage is not None:
            prompt_tokens = resp.usage.prompt_tokens or 0
            completion_tokens = resp.usage.completion_tokens or 0

        text = ""
        if resp.choices:
            choice = resp.choices[0]
            if choice.message and choice.message.content is not None:
                text = choice.message.content

        logger.debug("LLM completion: %d prompt / %d completion tokens", prompt_tokens, completion_tokens)
        return Completion(text=text, prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
