"""Per-document retrieval index: split, embed, search, answer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import sqrt
from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_text_splitters import RecursiveCharacterTextSplitter

from rag_connector.config import ChunkingConfig, RetrievalConfig
from rag_connector.errors import IndexingError, RetrievalQueryError
from rag_connector.ingest.embedder import HashingEmbeddings
from rag_connector.types import DocumentChunk, ParsedDocument, QueryResult, ScoredChunk

logger = logging.getLogger(__name__)

_ANSWER_PROMPT = """
Context information is below.
---------------------
{context}
---------------------
Given the context information and not prior knowledge, answer the query.
Query: {query}
Answer:
""".strip()


@dataclass(slots=True)
class _StoredChunk:
    chunk: DocumentChunk
    embedding: list[float]
    terms: frozenset[str]


class RetrievalIndex:
    """In-memory index over the chunks of one loaded document.

    `query` runs a semantic route (cosine similarity over embeddings) and a
    lexical route (query-term overlap), fuses them, and turns the top chunks
    into a response: the chunk texts themselves, or a model-written answer when
    a synthesizer chat model was supplied.
    """

    def __init__(
        self,
        chunks: list[_StoredChunk],
        embeddings: Embeddings,
        *,
        config: RetrievalConfig | None = None,
        synthesizer: Any | None = None,
    ) -> None:
        self._chunks = chunks
        self._embeddings = embeddings
        self.config = config or RetrievalConfig()
        self._synthesizer = synthesizer

    def __len__(self) -> int:
        return len(self._chunks)

    def query(self, text: str) -> QueryResult:
        if not self._chunks:
            return QueryResult(response=None)
        try:
            hits = self._fuse([self._semantic_search(text), self._lexical_search(text)])
            response = self._respond(text, hits)
        except Exception as exc:
            raise RetrievalQueryError(str(exc) or exc.__class__.__name__) from exc
        return QueryResult(response=response, sources=hits)

    def _semantic_search(self, text: str) -> list[ScoredChunk]:
        query_vector = self._embeddings.embed_query(text)
        scored = [
            ScoredChunk(
                chunk=stored.chunk,
                score=_cosine_similarity(query_vector, stored.embedding),
                route="semantic",
            )
            for stored in self._chunks
        ]
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored[: self.config.semantic_k]

    def _lexical_search(self, text: str) -> list[ScoredChunk]:
        query_terms = set(text.lower().split())
        if not query_terms:
            return []
        scored = []
        for stored in self._chunks:
            overlap = len(query_terms & stored.terms)
            if overlap:
                scored.append(
                    ScoredChunk(
                        chunk=stored.chunk,
                        score=overlap / len(query_terms),
                        route="lexical",
                    )
                )
        scored.sort(key=lambda item: item.score, reverse=True)
        return scored[: self.config.lexical_k]

    def _fuse(self, routes: list[list[ScoredChunk]]) -> list[ScoredChunk]:
        """Blend each chunk's best min-max score (0.6) with its summed RRF (0.4)."""
        best: dict[str, ScoredChunk] = {}
        rrf: dict[str, float] = {}
        for hits in routes:
            if not hits:
                continue
            high = hits[0].score
            low = hits[-1].score
            for rank, hit in enumerate(hits, start=1):
                key = hit.chunk.chunk_id
                rrf[key] = rrf.get(key, 0.0) + 1.0 / (self.config.rrf_k + rank)
                scaled = 1.0 if high == low else (hit.score - low) / (high - low)
                if key not in best or scaled > best[key].score:
                    best[key] = ScoredChunk(chunk=hit.chunk, score=scaled, route=hit.route)

        fused = [
            ScoredChunk(
                chunk=hit.chunk,
                score=0.6 * hit.score + 0.4 * rrf[key],
                route=hit.route,
            )
            for key, hit in best.items()
        ]
        fused.sort(key=lambda item: item.score, reverse=True)
        return fused[: self.config.final_k]

    def _respond(self, text: str, hits: list[ScoredChunk]) -> str | None:
        if not hits:
            return None
        context = "\n\n".join(hit.chunk.text for hit in hits)
        if self._synthesizer is None:
            return context

        reply = self._synthesizer.invoke(_ANSWER_PROMPT.format(context=context, query=text))
        content = getattr(reply, "content", reply)
        return str(content) if content else None


class IndexBuilder:
    """Builds a `RetrievalIndex` from parsed documents."""

    def __init__(
        self,
        embeddings: Embeddings | None = None,
        *,
        chunking: ChunkingConfig | None = None,
        retrieval: RetrievalConfig | None = None,
        synthesizer: Any | None = None,
    ) -> None:
        self.embeddings = embeddings or HashingEmbeddings()
        self.chunking = chunking or ChunkingConfig()
        self.retrieval = retrieval or RetrievalConfig()
        self.synthesizer = synthesizer

    def build(self, documents: list[ParsedDocument]) -> RetrievalIndex:
        try:
            chunks = self._split(documents)
            if not chunks:
                raise IndexingError("no indexable text in document")
            vectors = self.embeddings.embed_documents([chunk.text for chunk in chunks])
        except IndexingError:
            raise
        except Exception as exc:
            raise IndexingError(str(exc) or exc.__class__.__name__) from exc

        stored = [
            _StoredChunk(
                chunk=chunk,
                embedding=vector,
                terms=frozenset(chunk.text.lower().split()),
            )
            for chunk, vector in zip(chunks, vectors, strict=True)
        ]
        logger.debug("Built index with %d chunks from %d documents", len(stored), len(documents))
        return RetrievalIndex(
            stored,
            self.embeddings,
            config=self.retrieval,
            synthesizer=self.synthesizer,
        )

    def _split(self, documents: list[ParsedDocument]) -> list[DocumentChunk]:
        splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunking.chunk_size,
            chunk_overlap=self.chunking.chunk_overlap,
        )
        chunks: list[DocumentChunk] = []
        for document in documents:
            for position, piece in enumerate(splitter.split_text(document.text)):
                if not piece.strip():
                    continue
                chunks.append(
                    DocumentChunk(
                        chunk_id=f"{document.doc_id}-chunk-{position:04d}",
                        doc_id=document.doc_id,
                        text=piece,
                        metadata={**document.metadata, "chunk_index": position},
                    )
                )
        return chunks


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)
