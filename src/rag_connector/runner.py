"""Batch execution: references -> documents -> context -> model reply."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pydantic import BaseModel, Field

from rag_connector.config import (
    API_KEY_SETTING,
    CONNECTOR_CONFIG,
    SYSTEM_PROMPT_PROPERTY,
    ConnectorOptions,
)
from rag_connector.conversation import ConversationBuilder, ConversationHistory
from rag_connector.ingest.embedder import create_embeddings
from rag_connector.ingest.loader import DocumentLoader
from rag_connector.llm import ChatModelClient
from rag_connector.references import ReferenceExtractor
from rag_connector.response import error_completion, is_success, to_response
from rag_connector.retrieval.index import IndexBuilder
from rag_connector.types import ChatReply, ConnectorResponse, ConversationMessage, PromptOutcome, TextPart

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response."


class ChatCapability(Protocol):
    async def chat(self, history: ConversationHistory) -> ChatReply:
        """Return one completion for the full history."""


class ConnectorRequest(BaseModel):
    """Validated arguments of one `main` call."""

    model: str = Field(min_length=1)
    prompts: list[str]
    properties: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)

    def system_prompt(self) -> str:
        override = self.properties.get(SYSTEM_PROMPT_PROPERTY)
        return str(override or CONNECTOR_CONFIG.property_value(SYSTEM_PROMPT_PROPERTY))

    def model_properties(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in self.properties.items()
            if key != SYSTEM_PROMPT_PROPERTY
        }


class BatchRunner:
    """Processes prompts strictly in order against one shared history.

    Each prompt sees every message appended by the prompts before it. A prompt
    that raises is recorded as an error outcome and the batch moves on; messages
    it already appended stay in the history.
    """

    def __init__(
        self,
        *,
        model: str,
        history: ConversationHistory,
        chat: ChatCapability,
        loader: DocumentLoader | None = None,
        extractor: ReferenceExtractor | None = None,
        builder: ConversationBuilder | None = None,
    ) -> None:
        self.model = model
        self.history = history
        self.chat = chat
        self.loader = loader or DocumentLoader()
        self.extractor = extractor or ReferenceExtractor()
        self.builder = builder or ConversationBuilder()

    async def run(self, prompts: list[str]) -> list[PromptOutcome]:
        total = len(prompts)
        outcomes: list[PromptOutcome] = []
        for position, prompt in enumerate(prompts, start=1):
            try:
                outcome: PromptOutcome = await self._run_prompt(prompt)
            except Exception as exc:
                outcome = error_completion(exc, self.model)
                logger.exception("Prompt %d of %d failed on %s", position, total, outcome.model)
            outcomes.append(outcome)
            if is_success(outcome):
                logger.info(
                    "Response to prompt %d of %d from %s (%s prompt, %s completion, %s total tokens)",
                    position,
                    total,
                    outcome.model or self.model,
                    outcome.prompt_tokens,
                    outcome.completion_tokens,
                    outcome.total_tokens,
                )
        return outcomes

    async def _run_prompt(self, prompt: str) -> ChatReply:
        appended = 0
        for reference in self.extractor.extract(prompt):
            documents = await self.loader.load(reference)
            # Sequential on purpose: context turns land in document order
            # before the model call.
            for document in documents:
                await self.builder.append(self.history, document, prompt)
                appended += 1
        if not appended:
            self.builder.append_prompt(self.history, prompt)

        logger.debug("Message history: %s", self.history.dump())
        reply = await self.chat.chat(self.history)
        self.history.append("assistant", [TextPart(text=reply.content or NO_RESPONSE)])
        return reply


async def main(
    model: str,
    prompts: list[str],
    properties: dict[str, Any] | None = None,
    settings: dict[str, Any] | None = None,
    *,
    options: ConnectorOptions | None = None,
    chat: ChatCapability | None = None,
    loader: DocumentLoader | None = None,
) -> ConnectorResponse:
    """Connector entry point: answer `prompts` and map them to the host shape.

    Invalid arguments raise `pydantic.ValidationError` and abort the batch;
    everything after validation is isolated per prompt.
    """

    request = ConnectorRequest(
        model=model,
        prompts=prompts,
        properties=properties or {},
        settings=settings or {},
    )
    options = options or ConnectorOptions()
    api_key = request.settings.get(API_KEY_SETTING) or None

    chat_client = chat or ChatModelClient(request.model, request.model_properties(), api_key)
    if loader is None:
        loader = DocumentLoader(
            _build_index_builder(options, api_key, chat_client),
            recursive=options.recursive_directories,
        )

    runner = BatchRunner(
        model=request.model,
        history=ConversationHistory(request.system_prompt()),
        chat=chat_client,
        loader=loader,
        builder=ConversationBuilder(options.conversation_policy),
    )
    outcomes = await runner.run(request.prompts)
    return to_response(outcomes, request.model)


def _build_index_builder(
    options: ConnectorOptions, api_key: str | None, chat: ChatCapability
) -> IndexBuilder:
    synthesizer = None
    if options.synthesize_context and isinstance(chat, ChatModelClient):
        synthesizer = _SyncSynthesizer(chat)
    return IndexBuilder(
        create_embeddings(options.embedding_model, api_key),
        chunking=options.chunking,
        retrieval=options.retrieval,
        synthesizer=synthesizer,
    )


class _SyncSynthesizer:
    """Adapts the chat client for answer synthesis inside worker threads."""

    def __init__(self, client: ChatModelClient) -> None:
        self._client = client

    def invoke(self, prompt: str) -> str | None:
        reply = self._client.invoke_sync(
            [ConversationMessage(role="user", content=[TextPart(text=prompt)])]
        )
        return reply.content
