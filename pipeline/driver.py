"""
OpenBibles - Pipeline Driver

Runs one extraction pass over the source tree:

    sources root/
      WLC/     Gen.xml Exod.xml ...
      SBLGNT/  Matt.xml ...

For each configured source (in order) and each file in that source's
directory (sorted by name): read, detect the dialect, parse with the
matching parser. Results are aggregated once at the end.

Only a missing book map or a missing sources root stops the run. Anything
that goes wrong inside a single file is logged with the filename and the
run moves on.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.errors import CorpusFileError, ErrorContext, OpenBiblesConfigError
from data.book_index import BookIndex, load_book_index
from data.schemas import ParseOutcome, SourceConfig, VerseRecord
from integrations.base import ParseContext
from integrations.detection import DocumentFormat, detect_format
from integrations.registry import ParserRegistry
from observability import LogContext, get_logger, get_tracer
from pipeline.aggregator import AggregateSummary, VerseAggregator

logger = get_logger(__name__)
tracer = get_tracer(__name__)


@dataclass
class SourceStats:
    """Per-source counters."""
    code: str
    display_name: str
    files: int = 0
    verses: int = 0
    skipped: int = 0
    missing: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "display_name": self.display_name,
            "files": self.files,
            "verses": self.verses,
            "skipped": self.skipped,
            "missing": self.missing,
        }


@dataclass
class RunReport:
    """Everything a run did, for the summary printout."""
    sources: Dict[str, SourceStats] = field(default_factory=dict)
    files_processed: int = 0
    files_failed: int = 0
    files_skipped: int = 0
    verses_extracted: int = 0
    unresolved: int = 0
    malformed: int = 0
    empty: int = 0
    unterminated: int = 0
    failures: List[Dict[str, Any]] = field(default_factory=list)
    summary: Optional[AggregateSummary] = None
    expected_min_verses: int = 0

    @property
    def verses_skipped(self) -> int:
        return self.unresolved + self.malformed + self.empty + self.unterminated

    @property
    def is_incomplete(self) -> bool:
        """True when some verses came out but fewer than expected."""
        total = self.summary.total if self.summary else 0
        return 0 < total < self.expected_min_verses

    def record_outcome(self, stats: SourceStats, outcome: ParseOutcome) -> None:
        self.files_processed += 1
        self.verses_extracted += len(outcome.records)
        self.unresolved += outcome.unresolved
        self.malformed += outcome.malformed
        self.empty += outcome.empty
        self.unterminated += outcome.unterminated
        stats.files += 1
        stats.verses += len(outcome.records)
        stats.skipped += outcome.skipped

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources": {code: stats.to_dict() for code, stats in self.sources.items()},
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "files_skipped": self.files_skipped,
            "verses_extracted": self.verses_extracted,
            "verses_skipped": self.verses_skipped,
            "unresolved": self.unresolved,
            "malformed": self.malformed,
            "empty": self.empty,
            "unterminated": self.unterminated,
            "failures": list(self.failures),
            "summary": self.summary.to_dict() if self.summary else None,
        }


class PipelineDriver:
    """
    Single-threaded driver owning the accumulated record sequence.

    Usage:
        driver = PipelineDriver(book_index, sources, Path("sources"))
        records, report = driver.run()
    """

    def __init__(
        self,
        book_index: BookIndex,
        sources: Sequence[SourceConfig],
        sources_dir: Path,
        extensions: Sequence[str] = (".xml",),
        encoding: str = "utf-8",
        registry: Optional[ParserRegistry] = None,
        aggregator: Optional[VerseAggregator] = None,
        expected_min_verses: int = 0,
    ):
        self.book_index = book_index
        self.sources = list(sources)
        self.sources_dir = Path(sources_dir)
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.encoding = encoding
        self.registry = registry or ParserRegistry()
        self.aggregator = aggregator or VerseAggregator()
        self.expected_min_verses = expected_min_verses

    @classmethod
    def from_config(cls, config: Any) -> "PipelineDriver":
        """
        Build a driver from a Config, loading the book map.

        Raises:
            OpenBiblesConfigError: Book map missing or invalid, or sources
                file invalid.
        """
        book_index = load_book_index(config.paths.book_map_path)
        logger.info(
            "Loaded book map",
            path=str(config.paths.book_map_path),
            books=len(book_index),
        )
        return cls(
            book_index=book_index,
            sources=config.sources(),
            sources_dir=config.paths.sources_dir,
            extensions=config.parsing.extensions,
            encoding=config.parsing.encoding,
            aggregator=VerseAggregator(config.parsing.ot_last_book_number),
            expected_min_verses=config.parsing.expected_min_verses,
        )

    def run(self) -> Tuple[List[VerseRecord], RunReport]:
        """
        Process every source and return the aggregated collection.

        Raises:
            OpenBiblesConfigError: The sources root does not exist.
        """
        if not self.sources_dir.is_dir():
            raise OpenBiblesConfigError(
                f"Sources directory not found: {self.sources_dir}",
                config_key="SOURCES_DIR",
                path=str(self.sources_dir),
            )

        report = RunReport(expected_min_verses=self.expected_min_verses)
        collected: List[VerseRecord] = []

        for source in self.sources:
            collected.extend(self.process_source(source, report))

        records, summary = self.aggregator.aggregate_with_summary(collected)
        report.summary = summary

        logger.info(
            "Run complete",
            files_processed=report.files_processed,
            files_failed=report.files_failed,
            files_skipped=report.files_skipped,
            verses=summary.total,
            verses_skipped=report.verses_skipped,
            old_testament=summary.old_testament,
            new_testament=summary.new_testament,
        )
        if report.is_incomplete:
            logger.warning(
                "Fewer verses than expected for a complete Bible",
                verses=summary.total,
                expected_min=self.expected_min_verses,
            )

        return records, report

    def source_files(self, source: SourceConfig) -> List[Path]:
        """Files of one source that match the configured extensions, by name."""
        directory = self.sources_dir / source.code
        return sorted(
            path for path in directory.iterdir()
            if path.is_file() and path.suffix.lower() in self.extensions
        )

    def process_source(self, source: SourceConfig, report: RunReport) -> List[VerseRecord]:
        stats = SourceStats(code=source.code, display_name=source.display_name)
        report.sources[source.code] = stats

        directory = self.sources_dir / source.code
        if not directory.is_dir():
            stats.missing = True
            logger.info("Source directory not found, skipping", source=source.code, path=str(directory))
            return []

        files = self.source_files(source)
        if not files:
            logger.warning("No source files found", source=source.code, path=str(directory))
            return []

        logger.info("Processing source", source=source.code, name=source.display_name, files=len(files))
        context = ParseContext(book_index=self.book_index, source=source)
        records: List[VerseRecord] = []

        for path in files:
            records.extend(self.process_file(path, context, stats, report))

        logger.info("Source complete", source=source.code, files=stats.files, verses=stats.verses)
        return records

    def process_file(
        self,
        path: Path,
        context: ParseContext,
        stats: SourceStats,
        report: RunReport,
    ) -> List[VerseRecord]:
        """Parse one file. Never raises; failures are counted on the report."""
        with LogContext(source=context.source.code, file=path.name):
            with tracer.start_as_current_span("openbibles.parse_file") as span:
                span.set_attribute("openbibles.source", context.source.code)
                span.set_attribute("openbibles.file", str(path))
                try:
                    content = path.read_text(encoding=self.encoding)
                    document_format, outcome = self.parse_document(content, context)
                except Exception as e:
                    error = CorpusFileError(
                        f"Failed to parse {path.name}: {e}",
                        file_path=str(path),
                        source=context.source.code,
                        cause=e,
                        context=ErrorContext(
                            operation="parse_file",
                            component="pipeline.driver",
                            source=context.source.code,
                            file_path=str(path),
                        ),
                    )
                    report.files_failed += 1
                    report.failures.append(error.to_dict())
                    logger.error("File failed", filename=path.name, error=str(e), exc_info=True)
                    return []

                span.set_attribute("openbibles.dialect", document_format.value)
                if outcome is None:
                    report.files_skipped += 1
                    logger.warning("Unrecognized format, skipping", filename=path.name)
                    return []

                span.set_attribute("openbibles.verses", len(outcome.records))
                report.record_outcome(stats, outcome)
                logger.info(
                    "Parsed file",
                    dialect=document_format.value,
                    **outcome.to_dict(),
                )
                return outcome.records

    def parse_document(
        self,
        content: str,
        context: ParseContext,
    ) -> Tuple[DocumentFormat, Optional[ParseOutcome]]:
        """Detect and parse; the outcome is None for unrecognized documents."""
        document_format = detect_format(content)
        parser = self.registry.get(document_format)
        if parser is None:
            return document_format, None
        return document_format, parser.parse(content, context)


def write_output(records: Sequence[VerseRecord], path: Path) -> Path:
    """Write the collection as a pretty-printed UTF-8 JSON array."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([record.to_dict() for record in records], f, indent=2, ensure_ascii=False)
    logger.info("Wrote output", path=str(path), verses=len(records))
    return path


def read_output(path: Path) -> List[VerseRecord]:
    """
    Read a collection written by write_output.

    Raises:
        OpenBiblesConfigError: The file is missing or not a JSON array.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            entries = json.load(f)
        if not isinstance(entries, list):
            raise ValueError("expected a JSON array")
        return [VerseRecord.from_dict(entry) for entry in entries]
    except (OSError, ValueError, KeyError, TypeError) as e:
        raise OpenBiblesConfigError(
            f"Could not read verses file {path}: {e}",
            config_key="OUTPUT_PATH",
            path=str(path),
            cause=e,
        ) from e


def run_pipeline(config: Any = None, output_path: Optional[Path] = None) -> Tuple[List[VerseRecord], RunReport]:
    """Build a driver from configuration, run it and write the output file."""
    if config is None:
        from config import get_config
        config = get_config()

    driver = PipelineDriver.from_config(config)
    records, report = driver.run()
    write_output(records, output_path or config.paths.output_path)
    return records, report
