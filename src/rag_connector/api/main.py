"""FastAPI entrypoint exposing the connector to a prompting host."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from rag_connector.config import CONNECTOR_CONFIG, ConnectorOptions, ConversationPolicy
from rag_connector.runner import main as run_connector


@lru_cache(maxsize=1)
def _options_from_env() -> ConnectorOptions:
    policy = os.getenv("RAG_CONNECTOR_POLICY", ConversationPolicy.STRIPPED_QUERY.value)
    try:
        conversation_policy = ConversationPolicy(policy)
    except ValueError as exc:
        raise HTTPException(
            status_code=500, detail=f"Invalid RAG_CONNECTOR_POLICY: {policy}"
        ) from exc
    return ConnectorOptions(
        conversation_policy=conversation_policy,
        embedding_model=os.getenv("RAG_CONNECTOR_EMBEDDING_MODEL") or None,
    )


class RunRequest(BaseModel):
    model: str = Field(min_length=1)
    prompts: list[str]
    properties: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)


app = FastAPI(title=CONNECTOR_CONFIG.connector_name, version="0.1.0")


@app.get("/health")
def health() -> dict[str, Any]:
    options = _options_from_env()
    return {
        "status": "ok",
        "conversation_policy": options.conversation_policy.value,
        "embedding_model": options.embedding_model or "hashing",
    }


@app.get("/config")
def config() -> dict[str, Any]:
    return CONNECTOR_CONFIG.model_dump()


@app.post("/run")
async def run(request: RunRequest) -> dict[str, Any]:
    if request.model not in CONNECTOR_CONFIG.models:
        raise HTTPException(status_code=400, detail=f"Unsupported model: {request.model}")
    options = _options_from_env()
    try:
        response = await run_connector(
            request.model,
            request.prompts,
            request.properties,
            request.settings,
            options=options,
        )
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return response.to_payload()
