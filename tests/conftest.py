"""
OpenBibles - Test Configuration

Pytest fixtures and configuration for all tests.
"""
import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from data.book_index import BookIndex
from data.schemas import Language, SourceConfig, Testament
from integrations.base import ParseContext
from observability import LoggingConfig, setup_logging


GEN_1_1 = "בְּרֵאשִׁית בָּרָא אֱלֹהִים"
GEN_1_2 = "וְהָאָרֶץ הָיְתָה תֹהוּ"
JOHN_1_1 = "Ἐν ἀρχῇ ἦν ὁ λόγος"


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Plain console logging for the whole session."""
    setup_logging(LoggingConfig(json_format=False, log_to_file=False), force=True)


@pytest.fixture
def sample_hebrew_text() -> str:
    """Sample Hebrew text for testing."""
    return GEN_1_1


@pytest.fixture
def sample_greek_text() -> str:
    """Sample Greek text for testing."""
    return JOHN_1_1


@pytest.fixture
def book_map_records() -> List[Dict[str, Any]]:
    """A small book map in the on-disk shape."""
    return [
        {"osis": "Gen", "usfx": "GEN", "bookNumber": 1, "language": "hebrew"},
        {"osis": "Exod", "usfx": "EXO", "bookNumber": 2, "language": "hebrew"},
        {"osis": "Ps", "usfx": "PSA", "bookNumber": 19, "language": "hebrew"},
        {"osis": "Dan", "usfx": "DAN", "bookNumber": 27, "language": "aramaic"},
        {"osis": "Matt", "usfx": "MAT", "bookNumber": 40, "language": "greek"},
        {"osis": "John", "usfx": "JHN", "bookNumber": 43, "language": "greek"},
    ]


@pytest.fixture
def book_index(book_map_records) -> BookIndex:
    """Book index built from the sample book map."""
    return BookIndex.from_records(book_map_records)


@pytest.fixture
def wlc_source() -> SourceConfig:
    return SourceConfig(
        code="WLC",
        language=Language.HEBREW,
        display_name="Westminster Leningrad Codex",
        testament=Testament.OLD_TESTAMENT,
    )


@pytest.fixture
def sblgnt_source() -> SourceConfig:
    return SourceConfig(
        code="SBLGNT",
        language=Language.GREEK,
        display_name="SBL Greek New Testament",
        testament=Testament.NEW_TESTAMENT,
    )


@pytest.fixture
def parse_context(book_index, wlc_source) -> ParseContext:
    """Parse context for the Hebrew source."""
    return ParseContext(book_index=book_index, source=wlc_source)


@pytest.fixture
def inline_document() -> str:
    """Genesis 1:1-2 as inline OSIS verse elements."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<osis xmlns="http://www.bibletechnologies.net/2003/OSIS/namespace">
  <osisText osisIDWork="WLC">
    <div type="book" osisID="Gen">
      <chapter osisID="Gen.1">
        <verse osisID="Gen.1.1"><w lemma="b/7225">{GEN_1_1.split()[0]}</w> <w lemma="1254 a">{GEN_1_1.split()[1]}</w> <w lemma="430">{GEN_1_1.split()[2]}</w></verse>
        <verse osisID="Gen.1.2"><w lemma="c/d/776">{GEN_1_2.split()[0]}</w> <w lemma="1961">{GEN_1_2.split()[1]}</w> <w lemma="8414">{GEN_1_2.split()[2]}</w></verse>
      </chapter>
    </div>
  </osisText>
</osis>
"""


@pytest.fixture
def milestone_document() -> str:
    """Genesis 1:1-2 delimited by sID/eID milestones."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<osis xmlns="http://www.bibletechnologies.net/2003/OSIS/namespace">
  <osisText osisIDWork="WLC">
    <div type="book" osisID="Gen">
      <chapter osisID="Gen.1" sID="Gen.1"/>
        <verse osisID="Gen.1.1" sID="Gen.1.1"/>
          <w lemma="b/7225">{GEN_1_1.split()[0]}</w>
          <w lemma="1254 a">{GEN_1_1.split()[1]}</w>
          <w lemma="430">{GEN_1_1.split()[2]}</w>
        <verse eID="Gen.1.1"/>
        <verse osisID="Gen.1.2" sID="Gen.1.2"/>
          <w lemma="c/d/776">{GEN_1_2.split()[0]}</w>
          <w lemma="1961">{GEN_1_2.split()[1]}</w>
          <w lemma="8414">{GEN_1_2.split()[2]}</w>
        <verse eID="Gen.1.2"/>
      <chapter eID="Gen.1"/>
    </div>
  </osisText>
</osis>
"""


@pytest.fixture
def usfx_document() -> str:
    """Genesis 1:1-2 in the nested book/chapter/verse dialect."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<usfx>
  <book id="GEN">
    <h>Genesis</h>
    <c n="1"/>
      <v n="1"><w s="H7225">{GEN_1_1.split()[0]}</w> <w s="H1254">{GEN_1_1.split()[1]}</w> <w s="H430">{GEN_1_1.split()[2]}</w></v>
      <v n="2">{GEN_1_2}</v>
  </book>
</usfx>
"""


@pytest.fixture
def corpus_tree(tmp_path, book_map_records, milestone_document, sblgnt_source) -> Dict[str, Path]:
    """
    A sources root with a WLC and an SBLGNT directory plus a book map.

    WLC holds Genesis as milestone OSIS; SBLGNT holds John 1:1 inline.
    """
    sources_dir = tmp_path / "sources"
    (sources_dir / "WLC").mkdir(parents=True)
    (sources_dir / "SBLGNT").mkdir(parents=True)

    (sources_dir / "WLC" / "Gen.xml").write_text(milestone_document, encoding="utf-8")
    (sources_dir / "SBLGNT" / "John.xml").write_text(
        f'<osis><osisText><verse osisID="John.1.1">{JOHN_1_1}</verse></osisText></osis>',
        encoding="utf-8",
    )

    data_dir = tmp_path / "data_normalized"
    data_dir.mkdir()
    book_map = data_dir / "book_map.json"
    book_map.write_text(json.dumps(book_map_records, ensure_ascii=False), encoding="utf-8")

    return {
        "root": tmp_path,
        "sources_dir": sources_dir,
        "book_map": book_map,
        "output": data_dir / "original_verses.json",
    }


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests that touch the filesystem end to end")
    config.addinivalue_line("markers", "property: marks property-based tests using Hypothesis")
