"""
OpenBibles - USFX Parser

Parses documents that nest verses inside chapters inside books:

    <usfx>
      <book id="GEN">
        <c n="1">
          <v n="1">בְּרֵאשִׁית בָּרָא ...</v>
          <v n="2">...</v>
        <c n="2">
          ...

Book ids are resolved against the book index; chapter and verse numbers are
read from the `n` attribute, falling back to `id`.
"""
import re
from typing import Dict, Iterator, Optional, Tuple

from data.schemas import ParseOutcome, ResolvedReference
from integrations.base import BaseVerseParser, ParseContext, parse_attributes
from integrations.detection import DocumentFormat

BOOK_START = re.compile(r"<book\b([^>]*)>")
CHAPTER_START = re.compile(r"<c\b([^>]*)>")
VERSE_ELEMENT = re.compile(
    r"<v\b(?P<attrs>[^>]*?)(?<!/)>(?P<body>.*?)</v\s*>",
    re.DOTALL,
)
NUMBER = re.compile(r"^\s*([0-9]+)\s*$")


def _number(attributes: Dict[str, str]) -> Optional[int]:
    """Positive integer from the n (or id) attribute, else None."""
    value = attributes.get("n", attributes.get("id"))
    match = NUMBER.match(value) if value is not None else None
    if not match or int(match.group(1)) < 1:
        return None
    return int(match.group(1))


def _split(pattern: re.Pattern, content: str) -> Iterator[Tuple[Dict[str, str], str]]:
    """Yield (start-tag attributes, body up to the next start tag) pairs."""
    pieces = pattern.split(content)
    # pieces[0] is whatever precedes the first start tag
    for i in range(1, len(pieces), 2):
        yield parse_attributes(pieces[i]), pieces[i + 1]


class BookChapterVerseParser(BaseVerseParser):
    """Parser for the book/chapter/verse nested (USFX-like) dialect."""

    document_format = DocumentFormat.USFX

    def parse(self, content: str, context: ParseContext) -> ParseOutcome:
        outcome = ParseOutcome()

        for book_attributes, book_body in _split(BOOK_START, content):
            book_id = book_attributes.get("id", "").strip()
            book = context.book_index.lookup(book_id) if book_id else None
            if book is None:
                outcome.unresolved += 1
                self.logger.warning("Unknown USFX book id", book_id=book_id or None)
                continue

            for chapter_attributes, chapter_body in _split(CHAPTER_START, book_body):
                chapter = _number(chapter_attributes)
                if chapter is None:
                    skipped = len(VERSE_ELEMENT.findall(chapter_body))
                    outcome.malformed += skipped
                    self.logger.warning(
                        "Chapter without valid number",
                        book_id=book_id,
                        attributes=chapter_attributes,
                        verses_skipped=skipped,
                    )
                    continue

                for match in VERSE_ELEMENT.finditer(chapter_body):
                    verse = _number(parse_attributes(match.group("attrs")))
                    if verse is None:
                        outcome.malformed += 1
                        self.logger.warning(
                            "Verse without valid number",
                            book_id=book_id,
                            chapter=chapter,
                        )
                        continue

                    reference = ResolvedReference(
                        book_number=book.book_number,
                        chapter=chapter,
                        verse=verse,
                        language=book.language,
                    )
                    self._emit(reference, match.group("body"), context, outcome)

        return outcome
