"""
OpenBibles - Verse Text Normalizer

Turns a markup-laden verse fragment into plain text.

Rules, in order:
1. word start tags (<w ...>) are deleted
2. word end tags (</w>) become a single space, so adjacent words stay apart
3. every other tag is deleted
4. whitespace runs collapse to one space
5. the result is trimmed

The function is pure and idempotent. An empty result means the verse has no
text and must not be emitted.
"""
import re

WORD_START = re.compile(r"<w\b[^>]*>")
WORD_END = re.compile(r"</w\s*>")
ANY_TAG = re.compile(r"<[^>]+>")
WHITESPACE = re.compile(r"\s+")


def normalize_text(fragment: str) -> str:
    """Strip markup from a verse fragment and normalize its whitespace."""
    if not fragment:
        return ""

    text = WORD_START.sub("", fragment)
    text = WORD_END.sub(" ", text)
    text = ANY_TAG.sub("", text)
    text = WHITESPACE.sub(" ", text)
    return text.strip()
