"""Embedding backends for per-document indexes."""

from __future__ import annotations

from hashlib import blake2b
from math import sqrt

from langchain_core.embeddings import Embeddings


class HashingEmbeddings(Embeddings):
    """Deterministic bag-of-words embedding without external model calls.

    Used when no embedding model is configured, and in tests. Each lowercased
    token is hashed into one signed bucket; the vector is L2-normalized.
    """

    def __init__(self, dimension: int = 256) -> None:
        self.dimension = dimension

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._embed(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed(text)

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for token in text.lower().split():
            digest = blake2b(token.encode("utf-8"), digest_size=8).digest()
            bucket = int.from_bytes(digest[:4], "little") % self.dimension
            vector[bucket] += -1.0 if digest[4] % 2 else 1.0

        norm = sqrt(sum(value * value for value in vector))
        if norm == 0:
            return vector
        return [value / norm for value in vector]


def create_embeddings(model: str | None, api_key: str | None) -> Embeddings:
    if not model:
        return HashingEmbeddings()

    from langchain_openai import OpenAIEmbeddings

    return OpenAIEmbeddings(model=model, api_key=api_key)
