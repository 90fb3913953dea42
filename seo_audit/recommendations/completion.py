"""Completion backends used for AI-assisted recommendations.

All backends share one narrow interface::

    await provider.complete(prompt, max_output_tokens=100, temperature=0.5) -> str

Backends raise :class:`InvalidCredentialError` when the backend rejects the
configured key and :class:`CompletionError` for every other failure; the
recommendation layer decides what the user sees in either case.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import openai

from seo_audit.config import Settings, settings as default_settings


class CompletionError(Exception):
    """The backend could not produce a completion."""


class InvalidCredentialError(CompletionError):
    """The backend rejected the configured credential."""


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class CompletionProvider(ABC):
    """Abstract base class for a single-shot text completion backend."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""

    @abstractmethod
    async def complete(
        self, prompt: Prompt, max_output_tokens: int, temperature: float
    ) -> str:
        """Return the completion text (may be empty)."""


# ---------------------------------------------------------------------------
# OpenAI via LangChain
# ---------------------------------------------------------------------------

class OpenAICompletionProvider(CompletionProvider):
    """Chat completion through ``langchain_openai.ChatOpenAI``.

    The chat model is built lazily on first use so importing this module never
    requires a key.
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or default_settings

    @property
    def name(self) -> str:
        return "OpenAI"

    def _get_llm(self, max_output_tokens: int, temperature: float) -> Any:
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=self._settings.openai_chat_model,
            api_key=self._settings.openai_api_key,
            temperature=temperature,
            max_tokens=max_output_tokens,
        )

    async def complete(
        self, prompt: Prompt, max_output_tokens: int, temperature: float
    ) -> str:
        from langchain_core.messages import HumanMessage, SystemMessage

        llm = self._get_llm(max_output_tokens, temperature)
        try:
            response = await llm.ainvoke(
                [SystemMessage(content=prompt.system), HumanMessage(content=prompt.user)]
            )
        except openai.AuthenticationError as exc:
            raise InvalidCredentialError(str(exc)) from exc
        except Exception as exc:
            raise CompletionError(str(exc)) from exc

        content = getattr(response, "content", "")
        return content.strip() if isinstance(content, str) else ""
