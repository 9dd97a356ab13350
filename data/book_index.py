"""
OpenBibles - Book Index

Case-insensitive lookup from a dialect's textual book id ("Gen", "GEN",
"gen") to its canonical BookDescriptor. Built once before the run and
shared read-only by every parser.
"""
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.errors import OpenBiblesConfigError
from data.schemas import BookDescriptor, Language, Testament


class BookIndex:
    """
    Immutable, case-insensitive book lookup.

    Each descriptor is reachable by its textual id and by any alias (e.g. the
    USFX code "GEN" next to the OSIS id "Gen"). Later descriptors with the
    same key replace earlier ones, matching how the book map is read top to
    bottom.
    """

    def __init__(self, descriptors: Iterable[BookDescriptor]):
        self._descriptors: Tuple[BookDescriptor, ...] = tuple(descriptors)
        by_id: Dict[str, BookDescriptor] = {}
        for descriptor in self._descriptors:
            for key in (descriptor.textual_id, *descriptor.aliases):
                by_id[key.strip().casefold()] = descriptor
        self._by_id: Mapping[str, BookDescriptor] = MappingProxyType(by_id)

    def lookup(self, textual_id: str) -> Optional[BookDescriptor]:
        """Find a book by its textual id, ignoring case."""
        return self._by_id.get(textual_id.strip().casefold())

    def __contains__(self, textual_id: object) -> bool:
        return isinstance(textual_id, str) and self.lookup(textual_id) is not None

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def descriptors(self) -> Tuple[BookDescriptor, ...]:
        return self._descriptors

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> "BookIndex":
        """
        Build from book map entries.

        Accepts `osis` or `osisCode` for the id and `bookNumber` or
        `book_number` for the canonical number. Optional `usfx` and
        `aliases` entries add further lookup keys.

        Raises:
            OpenBiblesConfigError: An entry is missing a field or carries an
                unknown language.
        """
        descriptors = []
        for position, entry in enumerate(records):
            try:
                textual_id = entry.get("osis") or entry.get("osisCode") or entry["textual_id"]
                book_number = entry.get("bookNumber", entry.get("book_number"))
                if book_number is None:
                    raise KeyError("bookNumber")
                testament = entry.get("testament")
                aliases = [str(a) for a in entry.get("aliases") or []]
                if entry.get("usfx"):
                    aliases.append(str(entry["usfx"]))
                descriptors.append(BookDescriptor(
                    textual_id=str(textual_id),
                    book_number=int(book_number),
                    language=Language(str(entry["language"]).lower()),
                    testament=Testament(str(testament).upper()) if testament else None,
                    aliases=tuple(aliases),
                ))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise OpenBiblesConfigError(
                    f"Invalid book map entry at position {position}: {e}",
                    config_key="book_map",
                    cause=e,
                ) from e
        return cls(descriptors)


def load_book_index(path: Path) -> BookIndex:
    """
    Load the canonical book table from a JSON file.

    Raises:
        OpenBiblesConfigError: The file is missing or is not a JSON array of
            book entries.
    """
    path = Path(path)
    if not path.is_file():
        raise OpenBiblesConfigError(
            f"Book map not found: {path}",
            config_key="BOOK_MAP_PATH",
            path=str(path),
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            records = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise OpenBiblesConfigError(
            f"Could not read book map {path}: {e}",
            config_key="BOOK_MAP_PATH",
            path=str(path),
            cause=e,
        ) from e

    if not isinstance(records, list):
        raise OpenBiblesConfigError(
            f"Book map must be a JSON array: {path}",
            config_key="BOOK_MAP_PATH",
            path=str(path),
        )

    return BookIndex.from_records(records)
