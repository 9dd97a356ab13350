"""
OpenBibles - OSIS Milestone Parser

Parses OSIS documents whose verses are delimited by point markers:

    <verse osisID="Gen.1.1" sID="Gen.1.1"/>
      <w lemma="b/7225">בְּ/רֵאשִׁ֖ית</w> ...
    <verse eID="Gen.1.1"/>

Everything between a start marker and the next end marker belongs to the
verse, including other markup. The document is scanned once, marker by
marker, driving a two-state machine (idle / collecting).
"""
import re
from enum import Enum
from typing import List, Optional

from data.schemas import ParseOutcome, ResolvedReference
from integrations.base import BaseVerseParser, ParseContext, parse_attributes
from integrations.detection import DocumentFormat

VERSE_MARKER = re.compile(r"<verse\b[^>]*>")


class MilestoneState(str, Enum):
    """Scanner states."""
    IDLE = "idle"
    COLLECTING = "collecting"


class MilestoneScanner:
    """
    State machine for one milestone document.

    Transitions:
        start marker:  flush any open verse, then COLLECTING if the new
                       reference resolves, else IDLE
        end marker:    COLLECTING -> emit, IDLE; IDLE -> no-op
        content:       appended to the buffer only while COLLECTING
        stray verse:   counted as malformed, state unchanged
        end of input:  an open verse is discarded as unterminated
    """

    def __init__(self, parser: "MilestoneVerseParser", context: ParseContext):
        self.parser = parser
        self.context = context
        self.outcome = ParseOutcome()
        self.state = MilestoneState.IDLE
        self.active: Optional[ResolvedReference] = None
        self.buffer: List[str] = []

    def on_start(self, reference: Optional[str]) -> None:
        if self.state is MilestoneState.COLLECTING:
            # Missing end marker: the open verse ends here
            self._flush()

        self._reset()
        if not reference:
            self.outcome.malformed += 1
            self.parser.logger.warning("Start marker without reference")
            return

        resolved = self.parser._resolve(reference, self.context, self.outcome)
        if resolved is not None:
            self.active = resolved
            self.state = MilestoneState.COLLECTING

    def on_end(self) -> None:
        if self.state is MilestoneState.IDLE:
            self.parser.logger.debug("End marker without open verse")
            return
        self._flush()
        self._reset()

    def on_stray(self, reference: str) -> None:
        # Inline verse element in a milestone document
        self.outcome.malformed += 1
        self.parser.logger.warning("Verse element without milestone markers", reference=reference)

    def on_content(self, text: str) -> None:
        if self.state is MilestoneState.COLLECTING and text:
            self.buffer.append(text)

    def finish(self) -> ParseOutcome:
        if self.state is MilestoneState.COLLECTING:
            self.outcome.unterminated += 1
            self.parser.logger.warning(
                "Verse not closed before end of document",
                book_number=self.active.book_number,
                chapter=self.active.chapter,
                verse=self.active.verse,
            )
            self._reset()
        return self.outcome

    def _flush(self) -> None:
        self.parser._emit(self.active, "".join(self.buffer), self.context, self.outcome)

    def _reset(self) -> None:
        self.state = MilestoneState.IDLE
        self.active = None
        self.buffer = []


class MilestoneVerseParser(BaseVerseParser):
    """Parser for the sID/eID milestone OSIS dialect."""

    document_format = DocumentFormat.OSIS_MILESTONE

    def parse(self, content: str, context: ParseContext) -> ParseOutcome:
        scanner = MilestoneScanner(self, context)
        position = 0

        for match in VERSE_MARKER.finditer(content):
            scanner.on_content(content[position:match.start()])
            position = match.end()

            attributes = parse_attributes(match.group(0))
            if "sID" in attributes:
                scanner.on_start(attributes.get("osisID") or attributes["sID"])
            elif "eID" in attributes:
                scanner.on_end()
            elif "osisID" in attributes:
                scanner.on_stray(attributes["osisID"])
            else:
                scanner.on_content(match.group(0))

        scanner.on_content(content[position:])
        return scanner.finish()
