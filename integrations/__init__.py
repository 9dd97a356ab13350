"""
OpenBibles - Corpus Format Integrations

Dialect detection and parsing for the supported scripture markup formats:
- OSIS inline: <verse osisID="..">text</verse>
- OSIS milestone: <verse sID=".."/> text <verse eID=".."/>
- USFX-like: <book id=".."><c n=".."><v n="..">text</v>
"""
from integrations.base import BaseVerseParser, ParseContext, parse_attributes
from integrations.detection import DocumentFormat, detect_format
from integrations.normalizer import normalize_text
from integrations.references import resolve_reference
from integrations.osis import InlineVerseParser
from integrations.milestone import MilestoneVerseParser, MilestoneScanner, MilestoneState
from integrations.usfx import BookChapterVerseParser
from integrations.registry import ParserRegistry, PARSER_CLASSES

__all__ = [
    "BaseVerseParser",
    "ParseContext",
    "parse_attributes",
    "DocumentFormat",
    "detect_format",
    "normalize_text",
    "resolve_reference",
    "InlineVerseParser",
    "MilestoneVerseParser",
    "MilestoneScanner",
    "MilestoneState",
    "BookChapterVerseParser",
    "ParserRegistry",
    "PARSER_CLASSES",
]
