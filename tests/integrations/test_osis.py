"""
Tests for the inline OSIS parser.
"""
import pytest

from data.schemas import Language
from integrations.osis import InlineVerseParser
from tests.conftest import GEN_1_1, GEN_1_2


class TestInlineVerseParser:
    """Tests for InlineVerseParser."""

    @pytest.fixture
    def parser(self):
        return InlineVerseParser()

    def test_parses_document(self, parser, parse_context, inline_document):
        outcome = parser.parse(inline_document, parse_context)

        assert [r.location for r in outcome.records] == [(1, 1, 1), (1, 1, 2)]
        assert [r.original_text for r in outcome.records] == [GEN_1_1, GEN_1_2]
        assert all(r.source == "WLC" for r in outcome.records)
        assert all(r.language == Language.HEBREW for r in outcome.records)
        assert outcome.skipped == 0

    def test_record_language_comes_from_book(self, parser, parse_context):
        outcome = parser.parse('<verse osisID="Dan.2.4">מַלְכָּא</verse>', parse_context)
        assert outcome.records[0].language == Language.ARAMAIC

    def test_unknown_book_skips_only_that_verse(self, parser, parse_context):
        content = (
            '<verse osisID="Gen.1.1">first</verse>'
            '<verse osisID="Tob.1.1">apocryphal</verse>'
            '<verse osisID="Gen.1.2">second</verse>'
        )
        outcome = parser.parse(content, parse_context)

        assert [r.original_text for r in outcome.records] == ["first", "second"]
        assert outcome.unresolved == 1

    def test_malformed_reference(self, parser, parse_context):
        content = '<verse osisID="Gen.1">x</verse><verse osisID="Gen.x.1">y</verse><verse>z</verse>'
        outcome = parser.parse(content, parse_context)

        assert outcome.records == []
        assert outcome.malformed == 3

    def test_empty_text_skipped(self, parser, parse_context):
        content = '<verse osisID="Gen.1.1"><note type="x-footnote"></note>  </verse>'
        outcome = parser.parse(content, parse_context)

        assert outcome.records == []
        assert outcome.empty == 1

    def test_self_closing_elements_counted_as_empty(self, parser, parse_context):
        content = '<verse osisID="Gen.1.1">text</verse><verse eID="Gen.1.1"/>'
        outcome = parser.parse(content, parse_context)

        assert len(outcome.records) == 1
        assert outcome.empty == 1
        assert outcome.malformed == 0

    def test_verse_range_uses_first_reference(self, parser, parse_context):
        outcome = parser.parse('<verse osisID="Gen.1.1 Gen.1.2">joined</verse>', parse_context)
        assert outcome.records[0].location == (1, 1, 1)

    def test_single_quoted_attributes(self, parser, parse_context):
        outcome = parser.parse("<verse n='1' osisID='Gen.1.1'>text</verse>", parse_context)
        assert outcome.records[0].location == (1, 1, 1)

    def test_multiline_verse_body(self, parser, parse_context):
        content = '<verse osisID="Gen.1.1">\n  <w>a</w>\n  <w>b</w>\n</verse>'
        outcome = parser.parse(content, parse_context)
        assert outcome.records[0].original_text == "a b"

    def test_chapter_milestones_around_inline_verses(self, parser, parse_context):
        content = (
            '<osis><chapter osisID="Gen.1" sID="Gen.1"/>'
            '<verse osisID="Gen.1.1">text</verse>'
            '<chapter eID="Gen.1"/></osis>'
        )
        outcome = parser.parse(content, parse_context)
        assert [(r.location, r.original_text) for r in outcome.records] == [((1, 1, 1), "text")]
