"""Resolve a reference into loaded, indexed documents."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import tempfile
from pathlib import Path
from urllib.parse import urlparse

import httpx

from rag_connector.errors import ConnectorError, IndexingError, ReferenceResolutionError
from rag_connector.ingest.parser import FormatDispatcher
from rag_connector.retrieval.index import IndexBuilder
from rag_connector.types import LoadedDocument, ParsedDocument

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Loads a file, a directory or a remote URL and indexes what it reads.

    `load` never raises for a bad reference: failures are logged and the
    reference contributes nothing, so the remaining references of a prompt are
    still processed.
    """

    def __init__(
        self,
        index_builder: IndexBuilder | None = None,
        *,
        dispatcher: FormatDispatcher | None = None,
        http_client: httpx.AsyncClient | None = None,
        recursive: bool = True,
    ) -> None:
        self.index_builder = index_builder or IndexBuilder()
        self.dispatcher = dispatcher or FormatDispatcher()
        self._http_client = http_client
        self.recursive = recursive

    async def load(self, reference: str) -> list[LoadedDocument]:
        try:
            if await asyncio.to_thread(_is_directory, reference):
                return await self._load_directory(Path(reference))
            if _is_remote(reference):
                return [await self._load_remote(reference)]
            return [await self._load_file(Path(reference), source=reference)]
        except ConnectorError as exc:
            logger.warning("Skipping reference %s: %s", reference, exc)
            return []
        except Exception as exc:
            error = ReferenceResolutionError(
                f"{exc.__class__.__name__}: {exc}", reference=reference
            )
            logger.warning("Skipping reference %s: %s", reference, error)
            return []

    async def _load_directory(self, directory: Path) -> list[LoadedDocument]:
        try:
            entries = await asyncio.to_thread(self._list_directory, directory)
        except OSError as exc:
            raise ReferenceResolutionError(
                f"cannot list directory: {exc}", reference=str(directory)
            ) from exc
        documents: list[LoadedDocument] = []
        for entry in entries:
            try:
                documents.append(await self._load_file(entry, source=str(entry)))
            except Exception as exc:
                logger.warning("Skipping %s in %s: %s", entry.name, directory, exc)
        logger.debug("Loaded %d of %d files from %s", len(documents), len(entries), directory)
        return documents

    async def _load_file(self, path: Path, *, source: str) -> LoadedDocument:
        parsed = await asyncio.to_thread(self._extract, path, source)
        index = await asyncio.to_thread(self.index_builder.build, [parsed])
        return LoadedDocument(text=parsed.text, index=index, source=source)

    async def _load_remote(self, url: str) -> LoadedDocument:
        suffix = Path(urlparse(url).path).suffix
        payload = await self._fetch(url)
        fd, temp_name = tempfile.mkstemp(suffix=suffix)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            return await self._load_file(Path(temp_name), source=url)
        finally:
            os.unlink(temp_name)

    async def _fetch(self, url: str) -> bytes:
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ReferenceResolutionError(f"fetch failed: {exc}", reference=url) from exc
        return response.content

    def _extract(self, path: Path, source: str) -> ParsedDocument:
        try:
            parts = self.dispatcher.load_documents(path)
        except Exception as exc:
            raise ReferenceResolutionError(
                f"{exc.__class__.__name__}: {exc}", reference=source
            ) from exc

        text = "\n\n".join(part.text for part in parts if part.text)
        if not text.strip():
            raise IndexingError("document has no text", reference=source)
        metadata = dict(parts[0].metadata) if parts else {}
        metadata["source"] = source
        return ParsedDocument(doc_id=path.stem or path.name, text=text, metadata=metadata)

    def _list_directory(self, directory: Path) -> list[Path]:
        candidates = directory.rglob("*") if self.recursive else directory.iterdir()
        return sorted(
            path
            for path in candidates
            if path.is_file()
            and not any(part.startswith(".") for part in path.relative_to(directory).parts)
        )


def _is_directory(reference: str) -> bool:
    try:
        return stat.S_ISDIR(os.stat(reference).st_mode)
    except (OSError, ValueError) as exc:
        logger.debug("Not a directory: %s (%s)", reference, exc)
        return False


def _is_remote(reference: str) -> bool:
    return urlparse(reference).scheme in {"http", "https"}
