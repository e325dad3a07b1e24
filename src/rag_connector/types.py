"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from rag_connector.retrieval.index import RetrievalIndex

Role = Literal["system", "user", "assistant"]


@dataclass(slots=True)
class ParsedDocument:
    """Text extracted from one source, before indexing."""

    doc_id: str
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class DocumentChunk:
    """A split section of a source document."""

    chunk_id: str
    doc_id: str
    text: str
    metadata: dict[str, Any]


@dataclass(slots=True)
class ScoredChunk:
    """A retrieval hit with score and route metadata."""

    chunk: DocumentChunk
    score: float
    route: str


@dataclass(slots=True)
class QueryResult:
    response: str | None
    sources: list[ScoredChunk] = field(default_factory=list)


@dataclass(slots=True)
class LoadedDocument:
    """A referenced document together with the index built over its text."""

    text: str
    index: RetrievalIndex
    source: str


@dataclass(slots=True)
class TextPart:
    text: str
    type: Literal["text"] = "text"


@dataclass(slots=True)
class ConversationMessage:
    role: Role
    content: list[TextPart] | None

    def text(self) -> str | None:
        if self.content is None:
            return None
        return "\n\n".join(part.text for part in self.content)


@dataclass(slots=True)
class ChatReply:
    """Outcome of one successful chat-completion call."""

    content: str | None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None
    model: str | None = None


@dataclass(slots=True)
class ErrorOutcome:
    """Outcome of a prompt whose processing raised."""

    error: str
    model: str


PromptOutcome = ChatReply | ErrorOutcome


class Completion(BaseModel):
    """One entry of the connector response, serialized with host field names."""

    model_config = ConfigDict(populate_by_name=True)

    content: str | None = Field(default=None, alias="Content")
    token_usage: int | None = Field(default=None, alias="TokenUsage")
    error: str | None = Field(default=None, alias="Error")


class ConnectorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    completions: list[Completion] = Field(alias="Completions")
    model_type: str = Field(alias="ModelType")

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the host shape; `Error` only appears on failed entries."""
        return {
            "Completions": [
                completion.model_dump(
                    by_alias=True,
                    exclude={"error"} if completion.error is None else None,
                )
                for completion in self.completions
            ],
            "ModelType": self.model_type,
        }
