"""
OpenBibles - Verse Importer

Uploads the normalized collection to the `import-original-verses` edge
function, one source at a time, in fixed-size batches:

    POST {SUPABASE_URL}/functions/v1/import-original-verses
    Authorization: Bearer <anon key>
    apikey: <anon key>

    {"source_code": "WLC", "verses": [{book_number, chapter, verse, ...}, ...]}

The function answers with {inserted, updated, not_found, errors}. Upserts are
idempotent on the remote side, so a failed batch can simply be re-sent.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import httpx

from core.errors import ImportTransportError, ErrorContext
from core.resilience import RetryConfig, RetryPolicy
from data.schemas import VerseRecord
from observability import get_logger

logger = get_logger(__name__)

COUNTERS = ("inserted", "updated", "not_found", "errors")


@dataclass
class ImportStats:
    """Upsert counters reported by the edge function."""
    inserted: int = 0
    updated: int = 0
    not_found: int = 0
    errors: int = 0

    def add(self, other: "ImportStats") -> None:
        for name in COUNTERS:
            setattr(self, name, getattr(self, name) + getattr(other, name))

    @classmethod
    def from_response(cls, payload: Any) -> "ImportStats":
        payload = payload if isinstance(payload, dict) else {}
        return cls(**{name: int(payload.get(name) or 0) for name in COUNTERS})

    def to_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTERS}


@dataclass
class SourceImportStats(ImportStats):
    """Counters for one source plus its batch bookkeeping."""
    source_code: str = ""
    verses: int = 0
    batches: int = 0
    failed_batches: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source_code": self.source_code}
        data.update(super().to_dict())
        data.update(verses=self.verses, batches=self.batches, failed_batches=self.failed_batches)
        return data


@dataclass
class ImportReport:
    """Totals for an import run."""
    sources: Dict[str, SourceImportStats] = field(default_factory=dict)
    totals: ImportStats = field(default_factory=ImportStats)

    @property
    def verses(self) -> int:
        return sum(stats.verses for stats in self.sources.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources": {code: stats.to_dict() for code, stats in self.sources.items()},
            "totals": self.totals.to_dict(),
            "verses": self.verses,
        }


def group_by_source(records: Sequence[VerseRecord]) -> Dict[str, List[VerseRecord]]:
    """Group records by source, keeping first-appearance order of sources and records."""
    groups: Dict[str, List[VerseRecord]] = {}
    for record in records:
        groups.setdefault(record.source, []).append(record)
    return groups


def batched(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class VerseImporter:
    """
    Batch uploader for verse records.

    Usage:
        with VerseImporter.from_config(get_config().importer) as importer:
            report = importer.import_records(records)
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        function_name: str = "import-original-verses",
        batch_size: int = 100,
        delay_ms: int = 500,
        max_retries: int = 3,
        timeout: float = 30.0,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.endpoint = f"{url.rstrip('/')}/functions/v1/{function_name}"
        self.batch_size = max(1, batch_size)
        self.delay = delay_ms / 1000.0
        self._sleep = sleep
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            "apikey": api_key,
        }
        self.retry_policy = RetryPolicy(
            RetryConfig(
                max_attempts=max_retries + 1,
                base_delay=self.delay * 2,
                max_delay=30.0,
                jitter=False,
                retryable_exceptions={httpx.HTTPError, ValueError},
            ),
            sleep=sleep,
        )

    @classmethod
    def from_config(cls, config: Any, **kwargs: Any) -> "VerseImporter":
        """
        Build from an ImportConfig.

        Raises:
            OpenBiblesConfigError: URL or key not set.
        """
        config.validate()
        return cls(
            url=config.supabase_url,
            api_key=config.supabase_anon_key,
            function_name=config.function_name,
            batch_size=config.batch_size,
            delay_ms=config.delay_ms,
            max_retries=config.max_retries,
            timeout=config.timeout,
            **kwargs,
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "VerseImporter":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def send_batch(self, source_code: str, verses: Sequence[VerseRecord]) -> ImportStats:
        """
        POST one batch, retrying failures.

        Raises:
            ImportTransportError: The batch still failed after all retries,
                or the response counters were not numbers.
        """
        payload = {
            "source_code": source_code,
            "verses": [record.to_transport_dict() for record in verses],
        }
        try:
            return ImportStats.from_response(self.retry_policy.call(self._post, payload))
        except (httpx.HTTPError, ValueError, TypeError) as e:
            status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            raise ImportTransportError(
                f"Batch for {source_code} failed: {e}",
                source_code=source_code,
                status_code=status,
                cause=e,
                context=ErrorContext(
                    operation="send_batch",
                    component="db.verse_importer",
                    source=source_code,
                    metadata={"verses": len(verses)},
                ),
            ) from e

    def _post(self, payload: Dict[str, Any]) -> Any:
        response = self.client.post(self.endpoint, json=payload, headers=self.headers)
        response.raise_for_status()
        return response.json()

    def import_source(self, source_code: str, records: Sequence[VerseRecord]) -> SourceImportStats:
        stats = SourceImportStats(source_code=source_code, verses=len(records))
        total_batches = -(-len(records) // self.batch_size)
        logger.info("Importing source", source=source_code, verses=len(records), batches=total_batches)

        for number, batch in enumerate(batched(records, self.batch_size), start=1):
            if number > 1 and self.delay > 0:
                self._sleep(self.delay)
            stats.batches += 1
            first, last = batch[0], batch[-1]
            try:
                result = self.send_batch(source_code, batch)
            except ImportTransportError as e:
                stats.failed_batches += 1
                stats.errors += len(batch)
                logger.error(
                    "Batch failed",
                    source=source_code,
                    batch=number,
                    total_batches=total_batches,
                    status_code=e.status_code,
                    error=e.message,
                )
                continue

            stats.add(result)
            logger.info(
                "Batch imported",
                source=source_code,
                batch=number,
                total_batches=total_batches,
                first="{}:{}:{}".format(*first.location),
                last="{}:{}:{}".format(*last.location),
                inserted=result.inserted,
                updated=result.updated,
            )

        return stats

    def import_records(self, records: Sequence[VerseRecord]) -> ImportReport:
        """Upload every record, grouped by source."""
        report = ImportReport()
        for source_code, source_records in group_by_source(records).items():
            stats = self.import_source(source_code, source_records)
            report.sources[source_code] = stats
            report.totals.add(stats)

        logger.info("Import complete", **report.totals.to_dict())
        if report.totals.not_found:
            logger.warning(
                "Some verses have no matching row in bible_verses",
                not_found=report.totals.not_found,
            )
        return report
