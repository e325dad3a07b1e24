"""Detection and removal of document references embedded in prompt text."""

from __future__ import annotations

import re
from typing import Protocol

# Three shapes, tried left to right at every position:
# 1. http(s) URLs, up to the next whitespace.
# 2. Windows drive-letter paths (`C:\...`).
# 3. POSIX absolute paths, only when the slash opens a word, so `and/or` or
#    the `//` inside a URL are not picked up.
#
# Known blind spots: paths containing spaces are cut at the first space, and
# any word starting with `/` is taken as a path (e.g. `/s` in chat slang).
DEFAULT_REFERENCE_PATTERN = re.compile(
    r"https?://\S+"
    r"|(?<!\w)[A-Za-z]:\\[^\s:<>\"|?]*"
    r"|(?<![\w:/.~\\])/[^\s:<>\"|?]+"
)

_TRAILING_PUNCTUATION = ".,;:!?)]}'\""
_PATH_LIKE_WORD = re.compile(r"(\.|\w+:/)")


class ReferenceMatcher(Protocol):
    """Finds candidate references in free text."""

    def find(self, text: str) -> list[str]:
        """Return matches in first-occurrence order."""


class RegexReferenceMatcher:
    def __init__(self, pattern: re.Pattern[str] = DEFAULT_REFERENCE_PATTERN) -> None:
        self.pattern = pattern

    def find(self, text: str) -> list[str]:
        matches: list[str] = []
        for match in self.pattern.finditer(text):
            # Sentence punctuation glued to the end of a reference.
            candidate = match.group(0).rstrip(_TRAILING_PUNCTUATION)
            if candidate:
                matches.append(candidate)
        return matches


class ReferenceExtractor:
    """Scans prompt text for URLs and filesystem paths.

    Every match is kept, including matches without a file extension; those are
    directory candidates and are resolved later by the loader. Duplicates are
    preserved so each occurrence contributes its own retrieved context.
    """

    def __init__(self, matcher: ReferenceMatcher | None = None) -> None:
        self.matcher = matcher or RegexReferenceMatcher()

    def extract(self, text: str) -> list[str]:
        if not text:
            return []
        return self.matcher.find(text.strip())


def strip_references(text: str) -> str:
    """Drop every word that looks like a path or URL.

    A word is anything between single spaces; it is dropped when it contains a
    dot or a `scheme:/` prefix. Remaining words keep their order.
    """

    return " ".join(word for word in text.split(" ") if not _PATH_LIKE_WORD.search(word))
