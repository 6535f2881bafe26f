"""Chat completion providers."""

from __future__ import annotations

import logging
import re
from typing import Mapping, Protocol, Sequence

from openai import OpenAI, OpenAIError

from vector_agent.core.config import Settings
from vector_agent.core.errors import UpstreamProviderError
from vector_agent.retrieval.hybrid import keyword_score

logger = logging.getLogger(__name__)

Message = Mapping[str, str]

CONTEXT_MARKER = "Context:\n"
DECLINE_MESSAGE = "I don't know. The provided context does not contain enough information to answer that."
_HEADER_RE = re.compile(r"^\[Source: [^\]]+\]\n", re.MULTILINE)


class CompletionProvider(Protocol):
    def complete(self, messages: Sequence[Message]) -> str: ...


class OpenAICompletionModel:
    def __init__(self, model_name: str, api_key: str | None = None, client: OpenAI | None = None) -> None:
        self.model_name = model_name
        self._client = client or OpenAI(api_key=api_key)

    def complete(self, messages: Sequence[Message]) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": message["role"], "content": message["content"]} for message in messages],
            )
        except OpenAIError as exc:
            logger.warning("Completion request failed: %s", exc)
            raise UpstreamProviderError(f"completion request failed: {exc}") from exc
        return completion.choices[0].message.content or ""


class ExtractiveCompletionModel:
    """Offline provider: quotes the context block that best overlaps the question.

    Declines when the context is empty or nothing in it matches.
    """

    def complete(self, messages: Sequence[Message]) -> str:
        question = next((m["content"] for m in reversed(messages) if m.get("role") == "user"), "")
        system = next((m["content"] for m in messages if m.get("role") == "system"), "")
        blocks = _context_blocks(system)
        if not question or not blocks:
            return DECLINE_MESSAGE
        best_score, best_block = max(((keyword_score(question, block), block) for block in blocks), key=lambda item: item[0])
        if best_score <= 0:
            return DECLINE_MESSAGE
        return best_block


def _context_blocks(system_prompt: str) -> list[str]:
    _, marker, context = system_prompt.partition(CONTEXT_MARKER)
    if not marker:
        return []
    blocks = [block.strip() for block in _HEADER_RE.split(context)]
    return [block for block in blocks if block]


def build_completion_provider(settings: Settings) -> CompletionProvider:
    if settings.completion_backend == "openai":
        return OpenAICompletionModel(settings.completion_model, api_key=settings.openai_api_key)
    return ExtractiveCompletionModel()


__all__ = [
    "CompletionProvider",
    "OpenAICompletionModel",
    "ExtractiveCompletionModel",
    "build_completion_provider",
    "CONTEXT_MARKER",
    "DECLINE_MESSAGE",
]
