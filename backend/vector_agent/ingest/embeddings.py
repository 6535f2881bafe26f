"""Embedding providers."""

from __future__ import annotations

import hashlib
import logging
import math
import re
from array import array
from typing import Iterable, Protocol

from openai import OpenAI, OpenAIError

from vector_agent.core.config import Settings
from vector_agent.core.errors import UpstreamProviderError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+")


class EmbeddingProvider(Protocol):
    """Anything that maps text to a fixed-length vector."""

    @property
    def dim(self) -> int: ...

    def embed(self, text: str) -> list[float]: ...


class EmbeddingModel:
    """Lightweight hashed embedding model with deterministic output."""

    def __init__(
        self,
        model_name: str = "hashed",
        dim: int = 384,
    ) -> None:
        self.model_name = model_name
        self._dim = dim

    @property
    def dim(self) -> int:
        return self._dim

    def embed(self, text: str) -> list[float]:
        vector = [0.0] * self._dim
        for token in _tokenize(text):
            vector[_hash_token(token, self._dim)] += 1.0
        _normalize(vector)
        return vector


class OpenAIEmbeddingModel:
    """Embeddings from the OpenAI API; one request per text."""

    def __init__(self, model_name: str, dim: int, api_key: str | None = None, client: OpenAI | None = None) -> None:
        self.model_name = model_name
        self._dim = dim
        self._client = client or OpenAI(api_key=api_key)

    @property
    def dim(self) -> int:
        return self._dim

    def embed(self, text: str) -> list[float]:
        try:
            response = self._client.embeddings.create(model=self.model_name, input=text)
        except OpenAIError as exc:
            logger.warning("Embedding request failed: %s", exc)
            raise UpstreamProviderError(f"embedding request failed: {exc}") from exc
        vector = list(response.data[0].embedding)
        if len(vector) != self._dim:
            self._dim = len(vector)
        return vector


def build_embedding_provider(settings: Settings) -> EmbeddingProvider:
    if settings.embedding_backend == "openai":
        return OpenAIEmbeddingModel(
            model_name=settings.embedding_model,
            dim=settings.embedding_dim,
            api_key=settings.openai_api_key,
        )
    return EmbeddingModel(model_name="hashed", dim=settings.embedding_dim)


def vector_to_bytes(vector: Iterable[float]) -> bytes:
    return array("f", vector).tobytes()


def vector_from_bytes(payload: bytes) -> list[float]:
    floats = array("f")
    floats.frombytes(payload)
    return list(floats)


def _tokenize(text: str) -> list[str]:
    return _TOKEN_RE.findall(text.lower())


def _hash_token(token: str, dim: int) -> int:
    digest = hashlib.blake2b(token.encode("utf-8"), digest_size=8).digest()
    value = int.from_bytes(digest, "big")
    return value % dim


def _normalize(vector: list[float]) -> None:
    norm = math.sqrt(sum(value * value for value in vector))
    if norm == 0:
        return
    inv = 1.0 / norm
    for idx, value in enumerate(vector):
        vector[idx] = value * inv


__all__ = [
    "EmbeddingProvider",
    "EmbeddingModel",
    "OpenAIEmbeddingModel",
    "build_embedding_provider",
    "vector_to_bytes",
    "vector_from_bytes",
]
