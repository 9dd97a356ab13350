"""
OpenBibles - Reference Resolver

Resolves dot-separated references ("Gen.1.1", "ps.119.176") against the
book index. Shared by the inline and milestone OSIS parsers.
"""
import re

from core.errors import MalformedReferenceError, UnknownBookError
from data.book_index import BookIndex
from data.schemas import ResolvedReference

POSITIVE_INT = re.compile(r"^[0-9]+$")


def _parse_positive(value: str, name: str, reference: str) -> int:
    value = value.strip()
    if not POSITIVE_INT.match(value) or int(value) < 1:
        raise MalformedReferenceError(
            f"Reference {reference!r} has invalid {name} {value!r}",
            reference=reference,
        )
    return int(value)


def resolve_reference(reference: str, book_index: BookIndex) -> ResolvedReference:
    """
    Resolve a book.chapter.verse reference.

    Only the first reference of a whitespace-separated list is used, so a
    range such as "Gen.1.1 Gen.1.2" resolves to Gen 1:1. Parts after the
    verse (e.g. "Gen.1.1.seID.00001") are ignored.

    Raises:
        MalformedReferenceError: Fewer than three parts, or chapter/verse
            not a positive integer.
        UnknownBookError: The book id is not in the book index.
    """
    first = reference.split()[0] if reference and reference.strip() else ""
    parts = first.split(".")
    if len(parts) < 3 or not parts[0]:
        raise MalformedReferenceError(
            f"Reference {reference!r} is not book.chapter.verse",
            reference=reference,
        )

    chapter = _parse_positive(parts[1], "chapter", reference)
    verse = _parse_positive(parts[2], "verse", reference)

    book = book_index.lookup(parts[0])
    if book is None:
        raise UnknownBookError(
            f"Unknown book id {parts[0]!r}",
            reference=reference,
            book_id=parts[0],
        )

    return ResolvedReference(
        book_number=book.book_number,
        chapter=chapter,
        verse=verse,
        language=book.language,
    )
