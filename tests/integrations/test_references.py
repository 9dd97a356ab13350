"""
Tests for reference resolution.
"""
import pytest

from core.errors import MalformedReferenceError, ReferenceResolutionError, UnknownBookError
from data.schemas import Language
from integrations.references import resolve_reference


class TestResolveReference:
    """Tests for resolve_reference."""

    def test_resolves(self, book_index):
        resolved = resolve_reference("Gen.1.1", book_index)

        assert (resolved.book_number, resolved.chapter, resolved.verse) == (1, 1, 1)
        assert resolved.language == Language.HEBREW

    @pytest.mark.parametrize("reference", ["gen.1.1", "GEN.1.1", " Gen.1.1 ", "Gen.1.1.seID.00001"])
    def test_variants_resolve_to_same_location(self, book_index, reference):
        resolved = resolve_reference(reference, book_index)
        assert (resolved.book_number, resolved.chapter, resolved.verse) == (1, 1, 1)

    def test_range_uses_first_reference(self, book_index):
        resolved = resolve_reference("Ps.119.175 Ps.119.176", book_index)
        assert (resolved.book_number, resolved.chapter, resolved.verse) == (19, 119, 175)

    @pytest.mark.parametrize("reference", ["", "Gen", "Gen.1", ".1.1", "Gen..1", "Gen.0.1", "Gen.1.0", "Gen.1.a", "Gen:1:1", "Gen.١.1", "Gen.1.٣"])
    def test_malformed(self, book_index, reference):
        with pytest.raises(MalformedReferenceError) as info:
            resolve_reference(reference, book_index)
        assert info.value.reference == reference
        assert info.value.recoverable

    def test_unknown_book(self, book_index):
        with pytest.raises(UnknownBookError) as info:
            resolve_reference("Tob.1.1", book_index)

        assert info.value.book_id == "Tob"
        assert isinstance(info.value, ReferenceResolutionError)

    def test_malformed_shape_checked_before_book(self, book_index):
        """An unknown book with a bad chapter is reported as malformed."""
        with pytest.raises(MalformedReferenceError):
            resolve_reference("Tob.x.1", book_index)
