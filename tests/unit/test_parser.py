from pathlib import Path

from rag_connector.ingest.parser import (
    CsvParser,
    DocxParser,
    FormatDispatcher,
    HtmlParser,
    MarkdownParser,
    PdfParser,
    RawTextParser,
    TextParser,
)


def test_dispatch_table_is_fixed() -> None:
    dispatcher = FormatDispatcher()

    assert set(dispatcher.extensions) == {".pdf", ".csv", ".docx", ".html", ".md", ".txt"}
    assert isinstance(dispatcher.resolve("/x/a.pdf"), PdfParser)
    assert isinstance(dispatcher.resolve("/x/a.csv"), CsvParser)
    assert isinstance(dispatcher.resolve("/x/a.docx"), DocxParser)
    assert isinstance(dispatcher.resolve("/x/a.html"), HtmlParser)
    assert isinstance(dispatcher.resolve("/x/a.md"), MarkdownParser)
    assert isinstance(dispatcher.resolve("/x/a.txt"), TextParser)


def test_extension_lookup_ignores_case() -> None:
    assert isinstance(FormatDispatcher().resolve("/x/REPORT.PDF"), PdfParser)


def test_unknown_or_missing_extension_falls_back_to_raw_text() -> None:
    dispatcher = FormatDispatcher()

    assert isinstance(dispatcher.resolve("/x/data.xyz"), RawTextParser)
    assert isinstance(dispatcher.resolve("/x/Makefile"), RawTextParser)


def test_raw_text_fallback_reads_unknown_extension(tmp_path: Path) -> None:
    path = tmp_path / "notes.xyz"
    path.write_text("plain words in an unknown format", encoding="utf-8")

    docs = FormatDispatcher().load_documents(path)

    assert len(docs) == 1
    assert docs[0].text == "plain words in an unknown format"
    assert docs[0].metadata["format"] == "raw"


def test_text_and_markdown_parsers(tmp_path: Path) -> None:
    text_path = tmp_path / "policy.txt"
    text_path.write_text("Employees must encrypt customer data.", encoding="utf-8")
    md_path = tmp_path / "guide.md"
    md_path.write_text("# Guide\n\nRotate keys yearly.", encoding="utf-8")

    dispatcher = FormatDispatcher()
    text_docs = dispatcher.load_documents(text_path)
    md_docs = dispatcher.load_documents(md_path)

    assert text_docs[0].text == "Employees must encrypt customer data."
    assert text_docs[0].metadata["source"] == str(text_path)
    assert md_docs[0].metadata["format"] == "markdown"
    assert "Rotate keys yearly." in md_docs[0].text


def test_csv_rows_become_documents(tmp_path: Path) -> None:
    path = tmp_path / "team.csv"
    path.write_text("name,role\nAda,engineer\nGrace,admiral\n", encoding="utf-8")

    docs = FormatDispatcher().load_documents(path)

    assert len(docs) == 2
    assert "name: Ada" in docs[0].text
    assert "role: admiral" in docs[1].text
    assert docs[0].doc_id == "team-0000"
