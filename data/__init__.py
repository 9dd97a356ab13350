"""
OpenBibles - Data Module

Schema definitions and the canonical book index.

Architecture:
- schemas.py: Frozen dataclasses for books, sources and verse records
- book_index.py: Case-insensitive book lookup and its JSON loader
"""
from data.schemas import (
    # Enums
    Testament,
    Language,
    # Descriptors
    BookDescriptor,
    SourceConfig,
    ResolvedReference,
    # Records
    VerseRecord,
    ParseOutcome,
    # Helpers
    OT_LAST_BOOK_NUMBER,
    testament_for,
)
from data.book_index import BookIndex, load_book_index

__all__ = [
    "Testament",
    "Language",
    "BookDescriptor",
    "SourceConfig",
    "ResolvedReference",
    "VerseRecord",
    "ParseOutcome",
    "OT_LAST_BOOK_NUMBER",
    "testament_for",
    "BookIndex",
    "load_book_index",
]
