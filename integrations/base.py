"""
OpenBibles - Base Parser Classes

Common context and base class for the dialect parsers. Each parser is one
strategy behind the same capability: parse(content, context) -> ParseOutcome.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional
import re

from core.errors import MalformedReferenceError, UnknownBookError
from data.book_index import BookIndex
from data.schemas import ParseOutcome, ResolvedReference, SourceConfig, VerseRecord
from integrations.detection import DocumentFormat
from integrations.normalizer import normalize_text
from integrations.references import resolve_reference
from observability import get_logger

ATTRIBUTE = re.compile(r"""([\w:.-]+)\s*=\s*(?:"([^"]*)"|'([^']*)')""")


def parse_attributes(attribute_text: str) -> Dict[str, str]:
    """Parse the attribute part of a start tag, in any order and quote style."""
    return {
        match.group(1): match.group(2) if match.group(2) is not None else match.group(3)
        for match in ATTRIBUTE.finditer(attribute_text or "")
    }


@dataclass(frozen=True)
class ParseContext:
    """Read-only context threaded through every parse call."""
    book_index: BookIndex
    source: SourceConfig


class BaseVerseParser(ABC):
    """Base class for dialect parsers."""

    document_format: DocumentFormat = DocumentFormat.UNRECOGNIZED

    def __init__(self):
        self.logger = get_logger(f"openbibles.integrations.{self.__class__.__name__}")

    @abstractmethod
    def parse(self, content: str, context: ParseContext) -> ParseOutcome:
        """Extract verse records from a whole document."""
        pass

    def _resolve(
        self,
        reference: str,
        context: ParseContext,
        outcome: ParseOutcome,
    ) -> Optional[ResolvedReference]:
        """Resolve a reference, counting and logging failures instead of raising."""
        try:
            return resolve_reference(reference, context.book_index)
        except MalformedReferenceError as e:
            outcome.malformed += 1
            self.logger.warning("Malformed reference", reference=reference, error=e.message)
        except UnknownBookError as e:
            outcome.unresolved += 1
            self.logger.warning("Unknown book id", reference=reference, book_id=e.book_id)
        return None

    def _emit(
        self,
        reference: ResolvedReference,
        raw_content: str,
        context: ParseContext,
        outcome: ParseOutcome,
    ) -> Optional[VerseRecord]:
        """Normalize raw verse content and append a record unless it is empty."""
        text = normalize_text(raw_content)
        if not text:
            outcome.empty += 1
            self.logger.warning(
                "Verse has no text",
                book_number=reference.book_number,
                chapter=reference.chapter,
                verse=reference.verse,
            )
            return None

        record = VerseRecord.from_reference(reference, text, context.source.code)
        outcome.add(record)
        return record
