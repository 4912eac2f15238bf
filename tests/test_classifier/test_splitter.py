"""Tests for section splitting and marker utilities."""

import pytest

from quill.classifier.splitter import (
    extract_trigger_tag,
    normalize_content,
    plan_sections,
    split_sections,
    strip_all_triggers,
)
from quill.models import (
    HEURISTIC_FLOOR,
    ClassificationMethod,
    ClassificationResult,
    NoteType,
)

MULTI_NOTE = "#todo# Buy groceries\n\n#email# Draft response to Sarah"


def _general(text: str) -> ClassificationResult:
    return ClassificationResult(NoteType.GENERAL, HEURISTIC_FLOOR, ClassificationMethod.HEURISTIC)


def _assert_ordered_spans(text, sections):
    """Sections are ordered, non-overlapping and point back into the text."""
    previous_end = 0
    for section in sections:
        assert previous_end <= section.start_offset <= section.end_offset <= len(text)
        assert normalize_content(text[section.start_offset : section.end_offset]) == section.content
        previous_end = section.end_offset


class TestSplitSections:
    """Test marker-led splitting."""

    def test_two_markers(self, local_classifier):
        sections = local_classifier.split_into_sections_local(MULTI_NOTE)

        assert [s.note_type for s in sections] == [NoteType.TODO, NoteType.EMAIL]
        assert [s.content for s in sections] == ["Buy groceries", "Draft response to Sarah"]
        assert all(s.result.method == ClassificationMethod.EXPLICIT for s in sections)
        assert all(s.confidence == 1.0 for s in sections)
        _assert_ordered_spans(MULTI_NOTE, sections)

    def test_offsets_exclude_marker(self):
        sections = plan_sections(MULTI_NOTE)
        first = sections[0]
        assert MULTI_NOTE[first.start_offset : first.end_offset] == "Buy groceries"

    def test_text_before_first_marker_is_general(self):
        text = "Weekend plans\n#todo# Buy milk"
        sections = plan_sections(text)

        assert [s.note_type for s in sections] == [NoteType.GENERAL, NoteType.TODO]
        leading = sections[0]
        assert leading.content == "Weekend plans"
        assert leading.confidence == HEURISTIC_FLOOR
        assert leading.result.method == ClassificationMethod.HEURISTIC
        _assert_ordered_spans(text, sections)

    def test_blank_text_before_marker_ignored(self):
        sections = plan_sections("   \n\n#todo# Buy milk")
        assert [s.note_type for s in sections] == [NoteType.TODO]

    def test_empty_marker_section_dropped(self):
        sections = plan_sections("#todo#\n\n#email# Hi Sarah")
        assert [s.note_type for s in sections] == [NoteType.EMAIL]

    def test_only_empty_sections_keeps_text_whole(self, local_classifier):
        """Markers with nothing after them leave the capture unsplit."""
        text = "#todo# #email#"
        assert plan_sections(text) is None

        sections = local_classifier.split_into_sections_local(text)
        assert len(sections) == 1
        assert sections[0].note_type == NoteType.TODO
        assert sections[0].content == text

    def test_trailing_empty_marker_keeps_leading_text(self, local_classifier):
        """An empty marker section is dropped; the text before it still splits off."""
        text = "Call Sam tomorrow\n#todo#"
        sections = local_classifier.split_into_sections_local(text)

        assert len(sections) == 1
        assert sections[0].note_type == NoteType.GENERAL
        assert sections[0].content == "Call Sam tomorrow"
        assert all("#todo#" not in s.content for s in sections)
        _assert_ordered_spans(text, sections)

    @pytest.mark.asyncio
    async def test_trailing_empty_marker_async(self, classifier, fake_fallback):
        sections = await classifier.split_into_sections("Call Sam tomorrow\n#todo#")

        assert [s.content for s in sections] == ["Call Sam tomorrow"]
        assert fake_fallback.calls == []

    def test_no_markers_classifies_whole_text(self, local_classifier):
        sections = local_classifier.split_into_sections_local("Remind me to call Mom on Sunday")
        assert len(sections) == 1
        assert sections[0].note_type == NoteType.REMINDER
        assert sections[0].result.method == ClassificationMethod.HEURISTIC

    def test_markers_beyond_classification_window(self, local_classifier):
        """Splitting scans the whole text, unlike single-note classification."""
        text = "x" * 150 + "\n#todo# Buy milk"
        sections = local_classifier.split_into_sections_local(text)
        assert [s.note_type for s in sections] == [NoteType.GENERAL, NoteType.TODO]

    def test_repeated_type(self):
        sections = plan_sections("#todo# Milk\n#todo# Eggs")
        assert [s.content for s in sections] == ["Milk", "Eggs"]

    def test_blank_lines_collapsed(self):
        text = "#todo# Buy milk\n\n\n\nCall Sam"
        sections = plan_sections(text)
        assert sections[0].content == "Buy milk\n\nCall Sam"
        assert text[sections[0].start_offset : sections[0].end_offset] == "Buy milk\n\n\n\nCall Sam"

    def test_case_insensitive_markers(self):
        sections = plan_sections("#TODO# a\n#Email# b")
        assert [s.note_type for s in sections] == [NoteType.TODO, NoteType.EMAIL]

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_input_gives_one_general_section(self, local_classifier, value):
        sections = local_classifier.split_into_sections_local(value)
        assert len(sections) == 1
        assert sections[0].note_type == NoteType.GENERAL
        assert sections[0].content == ""
        assert (sections[0].start_offset, sections[0].end_offset) == (0, 0)

    @pytest.mark.parametrize(
        "text",
        [
            MULTI_NOTE,
            "Intro\n#meeting# Sync\n#todo#\n#idea# What if\n\n\n\nwe shipped early",
            "#shopping# eggs #recipe# pancakes #expense# $4.50",
            "No markers at all",
        ],
    )
    def test_sections_are_ordered_and_disjoint(self, local_classifier, text):
        sections = local_classifier.split_into_sections_local(text)
        assert sections
        _assert_ordered_spans(text, sections)

    def test_sync_helper_uses_callback_for_unsplit_text(self):
        calls = []

        def classify(text):
            calls.append(text)
            return _general(text)

        sections = split_sections("plain text", classify)
        assert calls == ["plain text"]
        assert sections[0].note_type == NoteType.GENERAL

        split_sections(MULTI_NOTE, classify)
        assert calls == ["plain text"]


@pytest.mark.asyncio
class TestAsyncSplit:
    """Test the async splitter, which may consult the fallback for unsplit text."""

    async def test_marker_split_skips_fallback(self, classifier, fake_fallback):
        sections = await classifier.split_into_sections(MULTI_NOTE)
        assert len(sections) == 2
        assert fake_fallback.calls == []

    async def test_unsplit_low_confidence_uses_fallback(self, classifier, fake_fallback):
        sections = await classifier.split_into_sections("Random thoughts on the project")
        assert len(sections) == 1
        assert sections[0].note_type == NoteType.IDEA
        assert sections[0].result.method == ClassificationMethod.LLM
        assert len(fake_fallback.calls) == 1


class TestExtractTriggerTag:
    """Test first-marker extraction."""

    def test_marker_at_start(self):
        assert extract_trigger_tag("#TODO# Buy groceries") == ("#TODO#", "Buy groceries")

    def test_marker_in_middle(self):
        assert extract_trigger_tag("Buy #email# milk") == ("#email#", "Buy  milk")

    def test_first_marker_only(self):
        tag, rest = extract_trigger_tag("#todo# milk #email# Sarah")
        assert tag == "#todo#"
        assert rest == "milk #email# Sarah"

    def test_marker_anywhere_in_text(self):
        tag, _ = extract_trigger_tag("x" * 300 + " #idea# late")
        assert tag == "#idea#"

    def test_no_marker(self):
        assert extract_trigger_tag("No marker here") is None

    def test_classifier_method(self, local_classifier):
        assert local_classifier.extract_trigger_tag("#idea# Solar kettle") == (
            "#idea#",
            "Solar kettle",
        )


class TestStripAllTriggers:
    """Test marker removal."""

    def test_removes_marker(self):
        assert strip_all_triggers("#todo# Buy milk", NoteType.TODO) == "Buy milk"

    def test_removes_every_marker_of_type(self):
        result = strip_all_triggers("#todo# Buy milk\n#task# Call Sam", NoteType.TODO)
        assert "#todo#" not in result
        assert "#task#" not in result
        assert "Buy milk" in result
        assert "Call Sam" in result

    def test_other_types_untouched(self):
        result = strip_all_triggers("#todo# Buy milk #email# Sarah", NoteType.TODO)
        assert "#email#" in result
        assert "#todo#" not in result

    def test_removes_misread_markers(self):
        assert strip_all_triggers("#tod0# Buy milk", NoteType.TODO) == "Buy milk"

    def test_case_insensitive(self):
        assert strip_all_triggers("#ToDo# Buy milk", NoteType.TODO) == "Buy milk"

    def test_collapses_blank_lines(self):
        text = "Buy milk\n\n\n\n#todo#\n\n\n\nCall Sam"
        result = strip_all_triggers(text, NoteType.TODO)
        assert "\n\n\n" not in result

    def test_general_returns_text_unchanged(self):
        text = "  #todo# keep everything  \n\n\n\n"
        assert strip_all_triggers(text, NoteType.GENERAL) == text

    def test_idempotent(self):
        text = "#todo# Buy milk\n.todo. Eggs\n#tod0# Bread"
        once = strip_all_triggers(text, NoteType.TODO)
        assert strip_all_triggers(once, NoteType.TODO) == once

    def test_non_text(self):
        assert strip_all_triggers(None, NoteType.TODO) == ""

    def test_classifier_method(self, local_classifier):
        assert local_classifier.strip_all_triggers("#idea# Solar kettle", NoteType.IDEA) == (
            "Solar kettle"
        )
