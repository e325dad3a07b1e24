"""Error taxonomy for reference resolution, indexing, retrieval and model calls."""

from __future__ import annotations


class ConnectorError(Exception):
    def __init__(self, message: str, *, reference: str | None = None) -> None:
        self.message = message
        self.reference = reference
        super().__init__(f"[{reference}] {message}" if reference else message)


class ReferenceResolutionError(ConnectorError):
    """A reference could not be fetched, classified or extracted."""


class IndexingError(ConnectorError):
    """Retrieval index construction failed for a loaded document."""


class RetrievalQueryError(ConnectorError):
    """Querying a built index failed."""


class ModelCallError(ConnectorError):
    """The chat-completion call failed (credentials, rate limit, network)."""
