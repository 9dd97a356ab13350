"""
OpenBibles - Data Schemas

Normalized schemas shared by every parser and by the aggregation step.
All verse data leaving the parsers conforms to VerseRecord.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Tuple
from enum import Enum


# =============================================================================
# ENUMS - Standard values across the system
# =============================================================================

class Testament(str, Enum):
    """Testament designation."""
    OLD_TESTAMENT = "OT"
    NEW_TESTAMENT = "NT"


class Language(str, Enum):
    """Original languages of the source texts."""
    HEBREW = "hebrew"
    ARAMAIC = "aramaic"
    GREEK = "greek"


# Canonical book numbers up to and including this one are Old Testament.
OT_LAST_BOOK_NUMBER = 39


def testament_for(book_number: int, ot_last_book: int = OT_LAST_BOOK_NUMBER) -> Testament:
    """Classify a canonical book number by the fixed threshold."""
    if book_number <= ot_last_book:
        return Testament.OLD_TESTAMENT
    return Testament.NEW_TESTAMENT


# =============================================================================
# BOOK AND SOURCE DESCRIPTORS
# =============================================================================

@dataclass(frozen=True)
class BookDescriptor:
    """
    Canonical description of one book.

    Example:
    {
        "osis": "Gen",
        "bookNumber": 1,
        "language": "hebrew"
    }
    """
    textual_id: str
    book_number: int
    language: Language
    testament: Optional[Testament] = None
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceConfig:
    """One physical source collection (a directory of files in one dialect)."""
    code: str
    language: Language
    display_name: str
    testament: Testament

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceConfig":
        """Create from a sources-file entry."""
        return cls(
            code=data["code"],
            language=Language(str(data["language"]).lower()),
            display_name=data.get("display_name") or data.get("name") or data["code"],
            testament=Testament(str(data["testament"]).upper()),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "language": self.language.value,
            "display_name": self.display_name,
            "testament": self.testament.value,
        }


@dataclass(frozen=True)
class ResolvedReference:
    """A verse reference after book lookup."""
    book_number: int
    chapter: int
    verse: int
    language: Language


# =============================================================================
# VERSE RECORD
# =============================================================================

@dataclass(frozen=True)
class VerseRecord:
    """
    Normalized verse produced by a parser.

    Example:
    {
        "book_number": 1,
        "chapter": 1,
        "verse": 1,
        "language": "hebrew",
        "original_text": "בְּרֵאשִׁית בָּרָא אֱלֹהִים",
        "transliteration": null,
        "source": "WLC"
    }
    """
    book_number: int
    chapter: int
    verse: int
    language: Language
    original_text: str
    source: str
    transliteration: Optional[str] = None

    @classmethod
    def from_reference(
        cls,
        reference: ResolvedReference,
        text: str,
        source: str,
    ) -> "VerseRecord":
        return cls(
            book_number=reference.book_number,
            chapter=reference.chapter,
            verse=reference.verse,
            language=reference.language,
            original_text=text,
            source=source,
        )

    @property
    def location(self) -> Tuple[int, int, int]:
        """Sort key: (book_number, chapter, verse)."""
        return (self.book_number, self.chapter, self.verse)

    @property
    def identity_key(self) -> Tuple[int, int, int, str]:
        """Deduplication key: location plus source."""
        return (self.book_number, self.chapter, self.verse, self.source)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the external snake_case shape."""
        return {
            "book_number": self.book_number,
            "chapter": self.chapter,
            "verse": self.verse,
            "language": self.language.value,
            "original_text": self.original_text,
            "transliteration": self.transliteration,
            "source": self.source,
        }

    def to_transport_dict(self) -> Dict[str, Any]:
        """Serialize without the grouping key, as sent in an upload batch."""
        data = self.to_dict()
        del data["source"]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerseRecord":
        """Create from the serialized shape (also accepts camelCase bookNumber)."""
        book_number = data.get("book_number", data.get("bookNumber"))
        return cls(
            book_number=int(book_number),
            chapter=int(data["chapter"]),
            verse=int(data["verse"]),
            language=Language(data["language"]),
            original_text=data["original_text"],
            source=data["source"],
            transliteration=data.get("transliteration"),
        )


# =============================================================================
# PARSE OUTCOME
# =============================================================================

@dataclass
class ParseOutcome:
    """Records extracted from one document plus what was skipped and why."""
    records: List[VerseRecord] = field(default_factory=list)
    unresolved: int = 0   # unknown book id
    malformed: int = 0    # bad reference shape or number
    empty: int = 0        # no text after normalization
    unterminated: int = 0 # milestone verse still open at end of document

    @property
    def skipped(self) -> int:
        return self.unresolved + self.malformed + self.empty + self.unterminated

    def add(self, record: VerseRecord) -> None:
        self.records.append(record)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verses": len(self.records),
            "unresolved": self.unresolved,
            "malformed": self.malformed,
            "empty": self.empty,
            "unterminated": self.unterminated,
        }
