"""Configuration models for the connector."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ConversationPolicy(str, Enum):
    """How a resolved document is spliced into the conversation."""

    STRIPPED_QUERY = "stripped-query"
    VERBATIM_ECHO = "verbatim-echo"


class ChunkingConfig(BaseModel):
    """Configures text splitting before indexing."""

    chunk_size: int = Field(default=1024, ge=64)
    chunk_overlap: int = Field(default=20, ge=0)


class RetrievalConfig(BaseModel):
    """Configures per-document retrieval and fusion heuristics."""

    semantic_k: int = Field(default=8, ge=1)
    lexical_k: int = Field(default=8, ge=1)
    final_k: int = Field(default=2, ge=1)
    rrf_k: int = Field(default=60, ge=1)


class ConnectorOptions(BaseModel):
    """Runtime options that are not part of the per-call properties."""

    conversation_policy: ConversationPolicy = ConversationPolicy.STRIPPED_QUERY
    recursive_directories: bool = True
    embedding_model: str | None = None
    synthesize_context: bool = False
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)


class ConnectorProperty(BaseModel):
    """A per-call option the host may show and forward to `main`."""

    id: str
    name: str
    value: Any
    type: str


class ConnectorSetting(BaseModel):
    """A connector-wide setting such as the API credential."""

    id: str
    name: str
    value: str = ""
    type: str = "string"


class ConnectorConfig(BaseModel):
    """Connector descriptor consumed by the prompting host."""

    connector_name: str
    description: str
    author: str
    models: list[str]
    properties: list[ConnectorProperty]
    settings: list[ConnectorSetting]

    def property_value(self, property_id: str) -> Any:
        for prop in self.properties:
            if prop.id == property_id:
                return prop.value
        return None


SYSTEM_PROMPT_PROPERTY = "prompt"
API_KEY_SETTING = "API_KEY"

CONNECTOR_CONFIG = ConnectorConfig(
    connector_name="Document RAG Connector",
    description=(
        "Answers prompts with retrieval over the documents, folders and URLs "
        "referenced inside them."
    ),
    author="Prompt Mixer",
    models=[
        "gpt-4o",
        "gpt-4o-2024-05-13",
        "gpt-4-turbo",
        "gpt-4-turbo-2024-04-09",
        "gpt-4-0125-preview",
        "gpt-4-turbo-preview",
        "gpt-4-vision-preview",
        "gpt-4-1106-vision-preview",
        "gpt-4-1106-preview",
        "gpt-4",
        "gpt-4-32k",
        "gpt-3.5-turbo-0125",
        "gpt-3.5-turbo-1106",
        "gpt-3.5-turbo",
        "gpt-3.5-turbo-instruct",
        "gpt-3.5-turbo-16k",
        "gpt-3.5-turbo-0613",
        "gpt-3.5-turbo-16k-0613",
    ],
    properties=[
        ConnectorProperty(
            id=SYSTEM_PROMPT_PROPERTY,
            name="System Prompt",
            value="You are a helpful assistant.",
            type="string",
        ),
        ConnectorProperty(id="max_tokens", name="Max Tokens", value=4096, type="number"),
        ConnectorProperty(id="temperature", name="Temperature", value=0.7, type="number"),
        ConnectorProperty(id="top_p", name="Top P", value=1, type="number"),
        ConnectorProperty(
            id="frequency_penalty", name="Frequency Penalty", value=0.5, type="number"
        ),
        ConnectorProperty(
            id="presence_penalty", name="Presence Penalty", value=0.5, type="number"
        ),
        ConnectorProperty(id="stop", name="Stop Sequences", value=["\n"], type="array"),
        ConnectorProperty(id="echo", name="Echo", value=False, type="boolean"),
        ConnectorProperty(id="best_of", name="Best Of", value=1, type="number"),
        ConnectorProperty(id="logprobs", name="LogProbs", value=False, type="boolean"),
    ],
    settings=[ConnectorSetting(id=API_KEY_SETTING, name="API Key")],
)
