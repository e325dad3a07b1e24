"""Extension-based dispatch to structured-text extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from langchain_community.document_loaders import (
    BSHTMLLoader,
    CSVLoader,
    Docx2txtLoader,
    PyPDFLoader,
    TextLoader,
)
from langchain_core.documents import Document

from rag_connector.types import ParsedDocument


class Parser(ABC):
    """Turns one file into an ordered list of text documents."""

    format_name: str = "raw"

    @abstractmethod
    def load_documents(self, path: Path) -> list[ParsedDocument]:
        """Extract text from `path`."""


class _LangChainParser(Parser):
    def load_documents(self, path: Path) -> list[ParsedDocument]:
        return _to_parsed(self._load(path), path, self.format_name)

    @abstractmethod
    def _load(self, path: Path) -> Iterable[Document]:
        ...


class PdfParser(_LangChainParser):
    format_name = "pdf"

    def _load(self, path: Path) -> Iterable[Document]:
        return PyPDFLoader(str(path)).load()


class CsvParser(_LangChainParser):
    """One document per row, rendered as `column: value` lines."""

    format_name = "csv"

    def _load(self, path: Path) -> Iterable[Document]:
        return CSVLoader(file_path=str(path), encoding="utf-8").load()


class DocxParser(_LangChainParser):
    format_name = "docx"

    def _load(self, path: Path) -> Iterable[Document]:
        return Docx2txtLoader(str(path)).load()


class HtmlParser(_LangChainParser):
    format_name = "html"

    def _load(self, path: Path) -> Iterable[Document]:
        return BSHTMLLoader(str(path), open_encoding="utf-8").load()


class TextParser(_LangChainParser):
    format_name = "text"

    def _load(self, path: Path) -> Iterable[Document]:
        return TextLoader(str(path), encoding="utf-8").load()


class MarkdownParser(Parser):
    format_name = "markdown"

    def load_documents(self, path: Path) -> list[ParsedDocument]:
        text = path.read_text(encoding="utf-8")
        return [
            ParsedDocument(
                doc_id=path.stem,
                text=text,
                metadata={"source": str(path), "format": self.format_name},
            )
        ]


class RawTextParser(Parser):
    """Fallback for unknown extensions: read the file as UTF-8 text."""

    def load_documents(self, path: Path) -> list[ParsedDocument]:
        text = path.read_text(encoding="utf-8")
        return [
            ParsedDocument(
                doc_id=path.stem or path.name,
                text=text,
                metadata={"source": str(path), "format": self.format_name},
            )
        ]


class FormatDispatcher:
    """Closed mapping of file extension to extractor.

    The table is fixed on purpose: there is no `register`. Lookups are
    case-insensitive and every unlisted extension, including none at all, falls
    back to `RawTextParser`.
    """

    def __init__(self) -> None:
        self._parsers: dict[str, Parser] = {
            ".pdf": PdfParser(),
            ".csv": CsvParser(),
            ".docx": DocxParser(),
            ".html": HtmlParser(),
            ".md": MarkdownParser(),
            ".txt": TextParser(),
        }
        self._fallback: Parser = RawTextParser()

    @property
    def extensions(self) -> tuple[str, ...]:
        return tuple(self._parsers)

    def resolve(self, path: str | Path) -> Parser:
        suffix = Path(path).suffix.lower()
        return self._parsers.get(suffix, self._fallback)

    def load_documents(self, path: str | Path) -> list[ParsedDocument]:
        file_path = Path(path)
        return self.resolve(file_path).load_documents(file_path)


def _to_parsed(documents: Iterable[Document], path: Path, format_name: str) -> list[ParsedDocument]:
    parsed: list[ParsedDocument] = []
    for position, document in enumerate(documents):
        parsed.append(
            ParsedDocument(
                doc_id=f"{path.stem}-{position:04d}",
                text=document.page_content,
                metadata={
                    **document.metadata,
                    "source": str(path),
                    "format": format_name,
                },
            )
        )
    return parsed
