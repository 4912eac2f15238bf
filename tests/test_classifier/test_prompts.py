"""Tests for prompt formatting."""

import pytest

from quill.classifier.prompts import build_classification_prompt, build_section_detection_prompt
from quill.models import NoteType


class TestPromptFormatting:
    """Test classification prompt formatting."""

    @pytest.mark.parametrize("note_type", list(NoteType), ids=lambda t: t.value)
    def test_every_type_described(self, note_type):
        """The model can only answer with types it was told about."""
        assert f"- {note_type.value}:" in build_classification_prompt("x")
        assert f"- {note_type.value}:" in build_section_detection_prompt("x")

    def test_content_included(self):
        prompt = build_classification_prompt("Buy milk and eggs")
        assert "Buy milk and eggs" in prompt

    def test_known_tags_listed(self):
        prompt = build_classification_prompt("x", known_tags=["work", "home"])
        assert "work, home" in prompt

    def test_no_known_tags(self):
        assert "(none)" in build_classification_prompt("x")

    def test_long_content_truncated(self):
        prompt = build_classification_prompt("y" * 50, max_chars=10)
        assert "y" * 11 not in prompt
        assert "[truncated]" in prompt

    def test_json_shape_requested(self):
        """Literal braces survive formatting."""
        assert '{"type":' in build_classification_prompt("x")
        assert '{"hasSections":' in build_section_detection_prompt("x")

    def test_braces_in_content_are_safe(self):
        prompt = build_classification_prompt('{"type": "fake"} {placeholder}')
        assert "{placeholder}" in prompt
