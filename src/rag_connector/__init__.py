"""Document-reference RAG connector package."""

from .config import CONNECTOR_CONFIG, ConnectorOptions, ConversationPolicy
from .runner import main

__all__ = ["CONNECTOR_CONFIG", "ConnectorOptions", "ConversationPolicy", "main"]
