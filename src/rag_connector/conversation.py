"""Conversation history and retrieved-context splicing."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator

from rag_connector.config import ConversationPolicy
from rag_connector.references import strip_references
from rag_connector.types import ConversationMessage, LoadedDocument, Role, TextPart

logger = logging.getLogger(__name__)


class ConversationHistory:
    """Ordered, append-only message log shared by every prompt of one batch."""

    def __init__(self, system_prompt: str) -> None:
        self._messages: list[ConversationMessage] = [
            ConversationMessage(role="system", content=[TextPart(text=system_prompt)])
        ]

    def append(self, role: Role, content: list[TextPart] | None) -> ConversationMessage:
        message = ConversationMessage(role=role, content=content)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> tuple[ConversationMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ConversationMessage]:
        return iter(tuple(self._messages))

    def dump(self) -> list[dict[str, object]]:
        """Plain representation used for debug logging."""
        return [{"role": message.role, "content": message.text()} for message in self._messages]


class ConversationBuilder:
    """Pushes one user turn and one retrieved-context turn per document.

    Policies:
    - `stripped-query`: the user turn and the retrieval query both use the
      prompt with paths and URLs removed.
    - `verbatim-echo`: the user turn carries the raw prompt followed by the
      document text, and the raw prompt is used as the query.

    A query that fails or finds nothing still produces a system turn, with no
    content.
    """

    def __init__(self, policy: ConversationPolicy = ConversationPolicy.STRIPPED_QUERY) -> None:
        self.policy = policy

    async def append(
        self,
        history: ConversationHistory,
        document: LoadedDocument,
        user_prompt: str,
    ) -> None:
        query_text = self._prompt_text(user_prompt)
        user_content = [TextPart(text=query_text)]
        if self.policy is ConversationPolicy.VERBATIM_ECHO:
            user_content.append(TextPart(text=document.text))

        history.append("user", user_content)
        context = await self._query(document, query_text)
        history.append("system", [TextPart(text=context)] if context is not None else None)

    def append_prompt(self, history: ConversationHistory, user_prompt: str) -> None:
        """User turn for a prompt that resolved no documents."""
        history.append("user", [TextPart(text=self._prompt_text(user_prompt))])

    def _prompt_text(self, user_prompt: str) -> str:
        if self.policy is ConversationPolicy.VERBATIM_ECHO:
            return user_prompt
        return strip_references(user_prompt)

    @staticmethod
    async def _query(document: LoadedDocument, query_text: str) -> str | None:
        try:
            result = await asyncio.to_thread(document.index.query, query_text)
        except Exception as exc:
            logger.warning("Retrieval failed for %s: %s", document.source, exc)
            return None
        if result.response is None:
            logger.warning("Retrieval returned no answer for %s", document.source)
        else:
            logger.debug(
                "Retrieved %s for %s",
                [hit.chunk.chunk_id for hit in result.sources],
                document.source,
            )
        return result.response
