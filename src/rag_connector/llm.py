"""Chat-completion capability backed by LangChain's OpenAI chat model."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from rag_connector.errors import ModelCallError
from rag_connector.types import ChatReply, ConversationMessage

logger = logging.getLogger(__name__)

# Properties ChatOpenAI accepts as constructor fields.
_CHAT_FIELDS = (
    "max_tokens",
    "temperature",
    "top_p",
    "frequency_penalty",
    "presence_penalty",
    "stop",
    "logprobs",
)
# Legacy completions-endpoint options the chat endpoint rejects.
_COMPLETION_ONLY = ("echo", "best_of")


class ChatModelClient:
    """Sends the conversation history to a chat model and returns one reply.

    The underlying model is created on first use, so a missing credential
    surfaces as a `ModelCallError` for each prompt rather than failing the
    whole batch up front.
    """

    def __init__(
        self,
        model: str,
        properties: dict[str, Any] | None = None,
        api_key: str | None = None,
        *,
        chat_model: Any | None = None,
    ) -> None:
        self.model = model
        self.properties = dict(properties or {})
        self.api_key = api_key
        self._chat_model = chat_model

    async def chat(self, history: Iterable[ConversationMessage]) -> ChatReply:
        messages = to_langchain_messages(history)
        try:
            reply = await self._get_chat_model().ainvoke(messages)
        except ModelCallError:
            raise
        except Exception as exc:
            raise ModelCallError(str(exc) or exc.__class__.__name__) from exc
        return _to_reply(reply, self.model)

    def invoke_sync(self, history: Iterable[ConversationMessage]) -> ChatReply:
        """Blocking variant for callers already running in a worker thread."""
        messages = to_langchain_messages(history)
        try:
            reply = self._get_chat_model().invoke(messages)
        except ModelCallError:
            raise
        except Exception as exc:
            raise ModelCallError(str(exc) or exc.__class__.__name__) from exc
        return _to_reply(reply, self.model)

    def _get_chat_model(self) -> Any:
        if self._chat_model is None:
            self._chat_model = self._create_chat_model()
        return self._chat_model

    def _create_chat_model(self) -> Any:
        if not self.api_key:
            raise ModelCallError("API_KEY setting is required")

        from langchain_openai import ChatOpenAI

        options: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for name, value in self.properties.items():
            if value is None:
                continue
            if name in _CHAT_FIELDS:
                options[name] = value
            elif name in _COMPLETION_ONLY:
                logger.debug("Ignoring completion-only option %s for chat model", name)
            else:
                extra[name] = value

        return ChatOpenAI(model=self.model, api_key=self.api_key, model_kwargs=extra, **options)


def to_langchain_messages(history: Iterable[ConversationMessage]) -> list[BaseMessage]:
    messages: list[BaseMessage] = []
    for message in history:
        if message.role == "user":
            content: Any = [
                {"type": part.type, "text": part.text} for part in message.content or []
            ]
            messages.append(HumanMessage(content=content))
        elif message.role == "assistant":
            messages.append(AIMessage(content=message.text() or ""))
        else:
            # Absent retrieved context goes over the wire as an empty string.
            messages.append(SystemMessage(content=message.text() or ""))
    return messages


def _to_reply(reply: Any, model: str) -> ChatReply:
    content = getattr(reply, "content", None)
    if isinstance(content, list):
        content = " ".join(
            str(item.get("text", "")) if isinstance(item, dict) else str(item) for item in content
        ).strip()

    metadata = getattr(reply, "response_metadata", None) or {}
    usage = metadata.get("token_usage") or {}
    usage_metadata = getattr(reply, "usage_metadata", None) or {}
    return ChatReply(
        content=content or None,
        prompt_tokens=usage.get("prompt_tokens", usage_metadata.get("input_tokens")),
        completion_tokens=usage.get("completion_tokens", usage_metadata.get("output_tokens")),
        total_tokens=usage.get("total_tokens", usage_metadata.get("total_tokens")),
        model=metadata.get("model_name", model),
    )
