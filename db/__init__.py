"""
OpenBibles - Database Import Module

Upload of the normalized verse collection to the remote verse store.
"""
from db.verse_importer import (
    ImportReport,
    ImportStats,
    SourceImportStats,
    VerseImporter,
    batched,
    group_by_source,
)

__all__ = [
    "ImportReport",
    "ImportStats",
    "SourceImportStats",
    "VerseImporter",
    "batched",
    "group_by_source",
]
