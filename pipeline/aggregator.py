"""
OpenBibles - Verse Aggregator

Merges the per-file record sequences of a run into the final collection:
sorted by (book_number, chapter, verse), one record per
(book_number, chapter, verse, source).
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set, Tuple

from data.schemas import OT_LAST_BOOK_NUMBER, Testament, VerseRecord, testament_for


@dataclass
class AggregateSummary:
    """Observational counts over the final collection."""
    total: int = 0
    per_source: Dict[str, int] = field(default_factory=dict)
    old_testament: int = 0
    new_testament: int = 0
    duplicates_dropped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "per_source": dict(self.per_source),
            "old_testament": self.old_testament,
            "new_testament": self.new_testament,
            "duplicates_dropped": self.duplicates_dropped,
        }


class VerseAggregator:
    """
    Sort and deduplicate verse records.

    Input order matters: for records sharing a location the earlier one
    sorts first, and for records sharing a location and source only the
    first is kept.
    """

    def __init__(self, ot_last_book: int = OT_LAST_BOOK_NUMBER):
        self.ot_last_book = ot_last_book

    def aggregate(self, records: Iterable[VerseRecord]) -> List[VerseRecord]:
        """Return the sorted, deduplicated collection."""
        return self.aggregate_with_summary(records)[0]

    def aggregate_with_summary(
        self,
        records: Iterable[VerseRecord],
    ) -> Tuple[List[VerseRecord], AggregateSummary]:
        """Return the collection together with its summary counts."""
        seen: Set[Tuple[int, int, int, str]] = set()
        unique: List[VerseRecord] = []
        dropped = 0

        for record in records:
            key = record.identity_key
            if key in seen:
                dropped += 1
                continue
            seen.add(key)
            unique.append(record)

        # sorted() is stable, so ties keep input order
        result = sorted(unique, key=lambda r: r.location)
        summary = self.summarize(result)
        summary.duplicates_dropped = dropped
        return result, summary

    def summarize(self, records: List[VerseRecord]) -> AggregateSummary:
        per_source = Counter(record.source for record in records)
        testaments = Counter(
            testament_for(record.book_number, self.ot_last_book) for record in records
        )
        return AggregateSummary(
            total=len(records),
            per_source=dict(per_source),
            old_testament=testaments[Testament.OLD_TESTAMENT],
            new_testament=testaments[Testament.NEW_TESTAMENT],
        )
