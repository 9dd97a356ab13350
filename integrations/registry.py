"""
OpenBibles - Parser Registry

Maps each detected document format to its parser. The set of formats is
closed; UNRECOGNIZED has no parser.
"""
from typing import Dict, Optional, Type

from integrations.base import BaseVerseParser
from integrations.detection import DocumentFormat
from integrations.milestone import MilestoneVerseParser
from integrations.osis import InlineVerseParser
from integrations.usfx import BookChapterVerseParser

PARSER_CLASSES: Dict[DocumentFormat, Type[BaseVerseParser]] = {
    DocumentFormat.USFX: BookChapterVerseParser,
    DocumentFormat.OSIS_MILESTONE: MilestoneVerseParser,
    DocumentFormat.OSIS_INLINE: InlineVerseParser,
}


class ParserRegistry:
    """Holds one parser instance per format; parsers keep no per-document state."""

    def __init__(self, parser_classes: Optional[Dict[DocumentFormat, Type[BaseVerseParser]]] = None):
        classes = parser_classes or PARSER_CLASSES
        self._parsers: Dict[DocumentFormat, BaseVerseParser] = {
            document_format: parser_class() for document_format, parser_class in classes.items()
        }

    def get(self, document_format: DocumentFormat) -> Optional[BaseVerseParser]:
        """Parser for a format, or None when the format has no parser."""
        return self._parsers.get(document_format)

    def supported_formats(self) -> list:
        return list(self._parsers)
