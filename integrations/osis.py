"""
OpenBibles - OSIS Inline Parser

Parses OSIS documents whose verses are whole elements:

    <verse osisID="Gen.1.1"><w lemma="b/7225">בְּ/רֵאשִׁ֖ית</w> ...</verse>

Self-closing verse elements (<verse eID="Gen.1.1"/>) carry no text and are
skipped.
"""
import re

from data.schemas import ParseOutcome
from integrations.base import BaseVerseParser, ParseContext, parse_attributes
from integrations.detection import DocumentFormat

VERSE_ELEMENT = re.compile(
    r"<verse\b(?P<attrs>[^>]*?)(?<!/)>(?P<body>.*?)</verse\s*>"
    r"|<verse\b(?P<empty_attrs>[^>]*?)/>",
    re.DOTALL,
)

REFERENCE_ATTRIBUTE = "osisID"


class InlineVerseParser(BaseVerseParser):
    """Parser for the inline-element OSIS dialect."""

    document_format = DocumentFormat.OSIS_INLINE

    def parse(self, content: str, context: ParseContext) -> ParseOutcome:
        outcome = ParseOutcome()

        for match in VERSE_ELEMENT.finditer(content):
            if match.group("attrs") is None:
                attributes = parse_attributes(match.group("empty_attrs"))
                outcome.empty += 1
                self.logger.debug(
                    "Skipping self-closing verse element",
                    reference=attributes.get(REFERENCE_ATTRIBUTE) or attributes.get("eID"),
                )
                continue

            attributes = parse_attributes(match.group("attrs"))
            reference = attributes.get(REFERENCE_ATTRIBUTE)
            if not reference:
                outcome.malformed += 1
                self.logger.warning("Verse element without osisID", attributes=attributes)
                continue

            resolved = self._resolve(reference, context, outcome)
            if resolved is None:
                continue

            self._emit(resolved, match.group("body"), context, outcome)

        return outcome
