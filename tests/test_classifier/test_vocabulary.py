"""Tests for the trigger vocabulary and the OCR variant table."""

import pytest

from quill.classifier.vocabulary import (
    DEFAULT_VOCABULARY,
    FUZZY_VARIANT_TABLE,
    TRIGGER_TABLE,
    TriggerVocabulary,
)
from quill.models import NoteType, TriggerDefinition


class TestTriggerTable:
    """Test the canonical trigger table."""

    def test_every_marker_is_hash_delimited_lowercase(self):
        """Markers are stored lowercase with # on both ends."""
        for definition in TRIGGER_TABLE:
            assert definition.marker.startswith("#")
            assert definition.marker.endswith("#")
            assert definition.marker == definition.marker.lower()

    def test_general_has_no_markers(self):
        """General is never selected by a marker."""
        assert DEFAULT_VOCABULARY.markers_for(NoteType.GENERAL) == ()

    def test_every_other_type_has_a_marker(self):
        """Each non-general type can be forced by at least one marker."""
        for note_type in NoteType:
            if note_type == NoteType.GENERAL:
                continue
            assert DEFAULT_VOCABULARY.markers_for(note_type), note_type

    def test_todo_markers_in_table_order(self):
        assert DEFAULT_VOCABULARY.markers_for(NoteType.TODO) == (
            "#todo#",
            "#to-do#",
            "#tasks#",
            "#task#",
        )

    def test_claude_marker_selects_external_prompt(self):
        assert DEFAULT_VOCABULARY.lookup("#claude#").note_type == NoteType.EXTERNAL_PROMPT


class TestVariantTable:
    """Test the catalogued OCR misreads."""

    def test_variants_point_at_canonical_markers(self):
        """Every misread resolves to a marker in the default vocabulary."""
        for variant, canonical in FUZZY_VARIANT_TABLE.items():
            assert canonical in DEFAULT_VOCABULARY, variant

    def test_no_variant_is_itself_canonical(self):
        """A misread never shadows a real marker."""
        for variant in FUZZY_VARIANT_TABLE:
            assert variant not in DEFAULT_VOCABULARY

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            FUZZY_VARIANT_TABLE["#x#"] = "#todo#"


class TestTriggerVocabulary:
    """Test vocabulary construction and lookup."""

    def test_lookup_ignores_case(self):
        assert DEFAULT_VOCABULARY.lookup("#TODO#").note_type == NoteType.TODO
        assert DEFAULT_VOCABULARY.lookup("#Email#").note_type == NoteType.EMAIL

    def test_lookup_unknown_marker(self):
        assert DEFAULT_VOCABULARY.lookup("#unknown#") is None

    def test_contains(self):
        assert "#todo#" in DEFAULT_VOCABULARY
        assert "#TODO#" in DEFAULT_VOCABULARY
        assert "todo" not in DEFAULT_VOCABULARY
        assert 42 not in DEFAULT_VOCABULARY

    def test_pattern_matches_case_insensitively(self):
        match = DEFAULT_VOCABULARY.pattern.search("Notes #MeEtInG# here")
        assert match.group(0) == "#MeEtInG#"

    def test_pattern_prefers_longer_marker(self):
        """#remindme# is matched whole, not cut short at #remind."""
        match = DEFAULT_VOCABULARY.pattern.search("#remindme# call Mom")
        assert match.group(0) == "#remindme#"

    def test_tag_names_are_marker_bodies(self):
        names = DEFAULT_VOCABULARY.tag_names()
        assert "todo" in names
        assert "note-to-self" in names
        assert len(names) == len(DEFAULT_VOCABULARY)

    def test_custom_vocabulary(self):
        """A smaller vocabulary can be injected."""
        vocab = TriggerVocabulary([TriggerDefinition("#chore#", NoteType.TODO)])
        assert len(vocab) == 1
        assert vocab.lookup("#chore#").note_type == NoteType.TODO
        assert vocab.pattern.search("#todo#") is None

    def test_markers_normalized_to_lowercase(self):
        vocab = TriggerVocabulary([TriggerDefinition("#Chore#", NoteType.TODO)])
        assert vocab.definitions[0].marker == "#chore#"

    def test_empty_vocabulary_matches_nothing(self):
        vocab = TriggerVocabulary([])
        assert vocab.pattern.search("#todo# buy milk") is None

    def test_duplicate_marker_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            TriggerVocabulary(
                [
                    TriggerDefinition("#todo#", NoteType.TODO),
                    TriggerDefinition("#TODO#", NoteType.REMINDER),
                ]
            )

    def test_malformed_marker_rejected(self):
        with pytest.raises(ValueError, match="Malformed"):
            TriggerVocabulary([TriggerDefinition("todo", NoteType.TODO)])

    def test_general_marker_rejected(self):
        with pytest.raises(ValueError, match="general"):
            TriggerVocabulary([TriggerDefinition("#misc#", NoteType.GENERAL)])
