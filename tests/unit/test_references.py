import re

from rag_connector.references import (
    ReferenceExtractor,
    RegexReferenceMatcher,
    strip_references,
)


def test_extracts_urls_and_paths_in_order() -> None:
    extractor = ReferenceExtractor()
    prompt = "compare https://a.io/x.pdf with /data/notes.txt and /data/reports"

    assert extractor.extract(prompt) == [
        "https://a.io/x.pdf",
        "/data/notes.txt",
        "/data/reports",
    ]


def test_windows_drive_path_is_recognized() -> None:
    extractor = ReferenceExtractor()

    assert extractor.extract(r"open C:\docs\plan.docx now") == [r"C:\docs\plan.docx"]


def test_duplicates_are_preserved() -> None:
    extractor = ReferenceExtractor()

    assert extractor.extract("/tmp/a.md then again /tmp/a.md") == ["/tmp/a.md", "/tmp/a.md"]


def test_reference_without_extension_is_kept_as_directory_candidate() -> None:
    extractor = ReferenceExtractor()

    assert extractor.extract("summarize everything in /srv/handbook") == ["/srv/handbook"]


def test_trailing_sentence_punctuation_is_trimmed() -> None:
    extractor = ReferenceExtractor()

    assert extractor.extract("Read https://example.com/a.pdf.") == ["https://example.com/a.pdf"]
    assert extractor.extract("(see /tmp/report.pdf)") == ["/tmp/report.pdf"]


def test_slashes_inside_words_are_not_paths() -> None:
    extractor = ReferenceExtractor()

    assert extractor.extract("use and/or logic") == []
    assert extractor.extract("no references here") == []
    assert extractor.extract("") == []


def test_matcher_is_pluggable() -> None:
    extractor = ReferenceExtractor(RegexReferenceMatcher(re.compile(r"doc:\w+")))

    assert extractor.extract("look at doc:alpha and doc:beta") == ["doc:alpha", "doc:beta"]


def test_strip_references_keeps_remaining_word_order() -> None:
    assert strip_references("see /tmp/report.pdf for details") == "see for details"


def test_strip_references_removes_urls_and_dotted_words() -> None:
    stripped = strip_references("summarize https://example.com/page and report.docx please")

    assert stripped == "summarize and please"
    assert "://" not in stripped


def test_path_with_spaces_is_cut_at_first_space() -> None:
    assert ReferenceExtractor().extract("see /tmp/my report.pdf now") == ["/tmp/my"]
