"""
OpenBibles - Format Detection

Classifies a raw document into one of the supported markup dialects with a
cheap marker scan (no XML parse).
"""
import re
from enum import Enum


class DocumentFormat(str, Enum):
    """Markup dialects, in detection priority order."""
    USFX = "usfx-like"
    OSIS_MILESTONE = "osis-milestone"
    OSIS_INLINE = "osis-inline"
    UNRECOGNIZED = "unrecognized"


USFX_ROOT = re.compile(r"<usfx\b", re.IGNORECASE)
# sID on a verse element; chapter and div milestones do not count.
START_ID_ATTRIBUTE = re.compile(r"<verse\b[^>]*\bsID\s*=")
OSIS_MARKER = re.compile(r"<(?:osis|verse\b)")


def detect_format(content: str) -> DocumentFormat:
    """Return the dialect of a document, or UNRECOGNIZED."""
    if USFX_ROOT.search(content):
        return DocumentFormat.USFX
    if START_ID_ATTRIBUTE.search(content):
        return DocumentFormat.OSIS_MILESTONE
    if OSIS_MARKER.search(content):
        return DocumentFormat.OSIS_INLINE
    return DocumentFormat.UNRECOGNIZED
