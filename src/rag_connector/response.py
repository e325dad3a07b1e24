"""Mapping of per-prompt outcomes to the connector response shape."""

from __future__ import annotations

import json
from collections.abc import Sequence

from rag_connector.types import ChatReply, Completion, ConnectorResponse, ErrorOutcome, PromptOutcome


def to_response(outcomes: Sequence[PromptOutcome], model: str) -> ConnectorResponse:
    completions: list[Completion] = []
    for outcome in outcomes:
        if isinstance(outcome, ErrorOutcome):
            completions.append(Completion(content=None, token_usage=None, error=outcome.error))
        else:
            completions.append(
                Completion(content=outcome.content, token_usage=outcome.prompt_tokens)
            )
    return ConnectorResponse(completions=completions, model_type=model)


def error_completion(error: BaseException, model: str) -> ErrorOutcome:
    message = str(error)
    if not message:
        try:
            message = json.dumps(error.args) if error.args else repr(error)
        except TypeError:
            message = repr(error)
    return ErrorOutcome(error=message, model=model)


def is_success(outcome: PromptOutcome) -> bool:
    return isinstance(outcome, ChatReply)
