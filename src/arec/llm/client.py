"""OpenAI-compatible LLM client.

This wraps the `openai` Python SDK and exposes the one call the planner needs: a chat
completion, optionally constrained to a JSON object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

from openai import OpenAI

from arec.config import Settings
from arec.errors import ConfigError
from arec.logging import get_logger

logger = get_logger(__name__)

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    """A chat message."""

    role: Role
    content: str


class ChatModel(Protocol):
    """Anything that can turn a message list into assistant text."""

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> str:
        """Generate a completion."""


class LLMClient:
    """LLM client using OpenAI-compatible Chat Completions API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        if not settings.openai_api_key:
            raise ConfigError(
                "Missing AREC_OPENAI_API_KEY. "
                "Set it in environment variables or a .env file."
            )

        self._client = OpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> str:
        """Generate a completion.

        Args:
            messages: Chat messages.
            temperature: Sampling temperature.
            json_mode: Ask the server for a single JSON object.

        Returns:
            Assistant message content.
        """

        payload: list[dict[str, str]] = [{"role": m.role, "content": m.content} for m in messages]
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        resp = self._client.chat.completions.create(
            model=self._settings.openai_model,
            messages=payload,
            temperature=temperature,
            timeout=self._settings.openai_timeout_s,
            **kwargs,
        )
        if not resp.choices:
            logger.warning("LLM returned no choices", extra={"model": self._settings.openai_model})
            return ""
        choice = resp.choices[0]
        if not choice.message or choice.message.content is None:
            return ""
        return choice.message.content
