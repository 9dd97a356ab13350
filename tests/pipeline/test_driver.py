"""
Tests for the pipeline driver.
"""
import json

import pytest

from config import Config, PathsConfig, ParsingConfig
from core.errors import OpenBiblesConfigError
from data.schemas import Language, SourceConfig, Testament
from integrations.detection import DocumentFormat
from integrations.osis import InlineVerseParser
from integrations.registry import PARSER_CLASSES, ParserRegistry
from pipeline.driver import PipelineDriver, read_output, run_pipeline, write_output


def source(code):
    return SourceConfig(code=code, language=Language.HEBREW, display_name=code, testament=Testament.OLD_TESTAMENT)


class ExplodingParser(InlineVerseParser):
    """Inline parser that fails on documents containing BOOM."""

    def parse(self, content, context):
        if "BOOM" in content:
            raise RuntimeError("boom")
        return super().parse(content, context)


@pytest.fixture
def sources_dir(tmp_path):
    path = tmp_path / "sources"
    path.mkdir()
    return path


def write(directory, name, content):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


class TestEndToEnd:
    """Two sources, one dialect each, Genesis 1:1-2 in both."""

    def test_four_records_interleaved_by_source(self, book_index, sources_dir, inline_document, usfx_document):
        write(sources_dir / "A", "Gen.xml", inline_document)
        write(sources_dir / "B", "Gen.xml", usfx_document)

        records, report = PipelineDriver(book_index, [source("A"), source("B")], sources_dir).run()

        assert [(*r.location, r.source) for r in records] == [
            (1, 1, 1, "A"),
            (1, 1, 1, "B"),
            (1, 1, 2, "A"),
            (1, 1, 2, "B"),
        ]
        assert report.files_processed == 2
        assert report.verses_extracted == 4
        assert report.sources["A"].verses == 2
        assert report.sources["B"].files == 1

    def test_source_order_decides_ties(self, book_index, sources_dir, inline_document, usfx_document):
        write(sources_dir / "A", "Gen.xml", inline_document)
        write(sources_dir / "B", "Gen.xml", usfx_document)

        records, _ = PipelineDriver(book_index, [source("B"), source("A")], sources_dir).run()
        assert [r.source for r in records] == ["B", "A", "B", "A"]

    def test_rerun_is_identical(self, book_index, sources_dir, inline_document, milestone_document):
        write(sources_dir / "A", "1.xml", inline_document)
        write(sources_dir / "A", "2.xml", milestone_document)
        driver = PipelineDriver(book_index, [source("A")], sources_dir)

        first, _ = driver.run()
        second, _ = driver.run()

        assert first == second
        # Same location and source in both files: the first file wins
        assert len(first) == 2


class TestErrorIsolation:
    """Per-file problems never stop the run."""

    def test_parser_exception_skips_file(self, book_index, sources_dir):
        write(sources_dir / "A", "1.xml", '<verse osisID="Gen.1.1">BOOM</verse>')
        write(sources_dir / "A", "2.xml", '<verse osisID="Gen.1.2">fine</verse>')
        registry = ParserRegistry({**PARSER_CLASSES, DocumentFormat.OSIS_INLINE: ExplodingParser})

        records, report = PipelineDriver(book_index, [source("A")], sources_dir, registry=registry).run()

        assert [r.original_text for r in records] == ["fine"]
        assert report.files_failed == 1
        assert report.files_processed == 1
        assert report.failures[0]["error_code"] == "CORPUS_FILE_ERROR"
        assert report.failures[0]["context"]["file_path"].endswith("1.xml")

    def test_undecodable_file_skipped(self, book_index, sources_dir):
        (sources_dir / "A").mkdir()
        (sources_dir / "A" / "bad.xml").write_bytes(b'<verse osisID="Gen.1.1">\xff\xfe</verse>')
        write(sources_dir / "A", "good.xml", '<verse osisID="Gen.1.1">ok</verse>')

        records, report = PipelineDriver(book_index, [source("A")], sources_dir).run()

        assert len(records) == 1
        assert report.files_failed == 1

    def test_unrecognized_file_skipped(self, book_index, sources_dir):
        write(sources_dir / "A", "readme.xml", "<html>not scripture</html>")
        write(sources_dir / "A", "Gen.xml", '<verse osisID="Gen.1.1">ok</verse>')

        records, report = PipelineDriver(book_index, [source("A")], sources_dir).run()

        assert len(records) == 1
        assert report.files_skipped == 1
        assert report.files_failed == 0

    def test_record_level_skips_counted(self, book_index, sources_dir):
        write(
            sources_dir / "A",
            "Gen.xml",
            '<verse osisID="Tob.1.1">x</verse><verse osisID="Gen.0.1">y</verse>'
            '<verse osisID="Gen.1.1"> </verse><verse osisID="Gen.1.2">z</verse>',
        )
        _, report = PipelineDriver(book_index, [source("A")], sources_dir).run()

        assert (report.unresolved, report.malformed, report.empty) == (1, 1, 1)
        assert report.verses_skipped == 3
        assert report.sources["A"].skipped == 3

    def test_missing_source_directory_is_not_fatal(self, book_index, sources_dir):
        write(sources_dir / "A", "Gen.xml", '<verse osisID="Gen.1.1">ok</verse>')

        records, report = PipelineDriver(book_index, [source("MISSING"), source("A")], sources_dir).run()

        assert len(records) == 1
        assert report.sources["MISSING"].missing is True

    def test_missing_sources_root_is_fatal(self, book_index, tmp_path):
        driver = PipelineDriver(book_index, [source("A")], tmp_path / "nowhere")
        with pytest.raises(OpenBiblesConfigError) as info:
            driver.run()
        assert info.value.config_key == "SOURCES_DIR"


class TestFileSelection:
    """Tests for source file enumeration."""

    def test_extension_filter_and_order(self, book_index, sources_dir):
        for name in ["b.XML", "a.xml", "notes.txt", "c.xml.bak"]:
            write(sources_dir / "A", name, "")
        (sources_dir / "A" / "sub.xml").mkdir()

        driver = PipelineDriver(book_index, [source("A")], sources_dir)
        assert [p.name for p in driver.source_files(source("A"))] == ["a.xml", "b.XML"]

    def test_configured_extensions(self, book_index, sources_dir):
        write(sources_dir / "A", "Gen.osis", '<verse osisID="Gen.1.1">ok</verse>')
        write(sources_dir / "A", "Gen.xml", '<verse osisID="Gen.1.2">ok</verse>')

        records, _ = PipelineDriver(book_index, [source("A")], sources_dir, extensions=[".OSIS"]).run()
        assert [r.verse for r in records] == [1]

    def test_empty_source_directory(self, book_index, sources_dir):
        (sources_dir / "A").mkdir()
        records, report = PipelineDriver(book_index, [source("A")], sources_dir).run()

        assert records == []
        assert report.sources["A"].files == 0


class TestReport:
    """Tests for the run report."""

    def test_incomplete_warning_threshold(self, book_index, sources_dir):
        write(sources_dir / "A", "Gen.xml", '<verse osisID="Gen.1.1">ok</verse>')

        _, report = PipelineDriver(book_index, [source("A")], sources_dir, expected_min_verses=31000).run()
        assert report.is_incomplete

        _, report = PipelineDriver(book_index, [source("A")], sources_dir, expected_min_verses=1).run()
        assert not report.is_incomplete

    def test_empty_run_is_not_incomplete(self, book_index, sources_dir):
        _, report = PipelineDriver(book_index, [source("A")], sources_dir, expected_min_verses=31000).run()
        assert not report.is_incomplete

    def test_to_dict(self, book_index, sources_dir):
        write(sources_dir / "A", "Gen.xml", '<verse osisID="Gen.1.1">ok</verse>')
        _, report = PipelineDriver(book_index, [source("A")], sources_dir).run()

        data = report.to_dict()
        assert data["summary"]["total"] == 1
        assert data["sources"]["A"]["verses"] == 1


class TestOutput:
    """Tests for write_output and read_output."""

    def test_written_shape(self, tmp_path, book_index, sources_dir, inline_document, sample_hebrew_text):
        write(sources_dir / "WLC", "Gen.xml", inline_document)
        records, _ = PipelineDriver(book_index, [source("WLC")], sources_dir).run()

        path = write_output(records, tmp_path / "out" / "verses.json")
        raw = path.read_text(encoding="utf-8")
        data = json.loads(raw)

        assert sample_hebrew_text in raw
        assert raw.startswith("[\n  {")
        assert data[0] == {
            "book_number": 1,
            "chapter": 1,
            "verse": 1,
            "language": "hebrew",
            "original_text": sample_hebrew_text,
            "transliteration": None,
            "source": "WLC",
        }
        assert read_output(path) == records

    def test_read_missing(self, tmp_path):
        with pytest.raises(OpenBiblesConfigError):
            read_output(tmp_path / "absent.json")


@pytest.mark.integration
class TestRunPipeline:
    """Tests for run_pipeline with a full configuration."""

    def _config(self, corpus_tree, **paths):
        return Config(
            paths=PathsConfig(
                sources_dir=paths.get("sources_dir", corpus_tree["sources_dir"]),
                book_map_path=paths.get("book_map", corpus_tree["book_map"]),
                output_path=corpus_tree["output"],
                sources_file=None,
            ),
            parsing=ParsingConfig(extensions=(".xml",), expected_min_verses=31000),
        )

    def test_default_sources(self, corpus_tree):
        records, report = run_pipeline(self._config(corpus_tree))

        assert [(r.book_number, r.source) for r in records] == [(1, "WLC"), (1, "WLC"), (43, "SBLGNT")]
        assert report.summary.old_testament == 2
        assert report.summary.new_testament == 1
        assert corpus_tree["output"].exists()

    def test_missing_book_map_is_fatal(self, corpus_tree):
        config = self._config(corpus_tree, book_map=corpus_tree["root"] / "absent.json")
        with pytest.raises(OpenBiblesConfigError):
            run_pipeline(config)
        assert not corpus_tree["output"].exists()
