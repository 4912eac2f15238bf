"""Section splitting and marker-removal utilities.

A single photographed page often holds several notes, each introduced by
its own marker:

    #todo# Buy groceries

    #email# Draft response to Sarah

Unlike single-note classification, which only honours markers near the
start of a capture, splitting scans the entire text for every exact marker.
"""

import logging
import re
from collections.abc import Callable, Mapping
from typing import Optional

from ..models import (
    HEURISTIC_FLOOR,
    ClassificationMethod,
    ClassificationResult,
    NoteType,
    Section,
    TriggerMatch,
)
from .matchers import find_all_exact, find_all_fuzzy
from .vocabulary import DEFAULT_VOCABULARY, FUZZY_VARIANT_TABLE, TriggerVocabulary

logger = logging.getLogger("quill.classifier.splitter")

__all__ = [
    "extract_trigger_tag",
    "normalize_content",
    "plan_sections",
    "split_sections",
    "strip_all_triggers",
    "unsplit_section",
]

_EXCESS_BLANK_LINES = re.compile(r"\n(?:[ \t]*\n){2,}")


def normalize_content(text: str) -> str:
    """Trim and collapse runs of blank lines to a single blank line."""
    return _EXCESS_BLANK_LINES.sub("\n\n", text).strip()


def _trimmed_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Shrink [start, end) so it neither starts nor ends with whitespace."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def _leading_result() -> ClassificationResult:
    return ClassificationResult(
        note_type=NoteType.GENERAL,
        confidence=HEURISTIC_FLOOR,
        method=ClassificationMethod.HEURISTIC,
        reasoning="Content before the first marker",
    )


def plan_sections(
    text: str, vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY
) -> Optional[list[Section]]:
    """Cut text into sections at every exact marker.

    Each marker opens a section that runs to the next marker or the end of
    the text. Non-blank text before the first marker becomes a leading
    general section. Sections left empty once the marker and surrounding
    whitespace are removed are dropped.

    Returns:
        The sections in text order, or None when the text has no markers or
        no section survives. Callers then keep the text whole.
    """
    matches = find_all_exact(text, vocabulary)
    if not matches:
        return None

    sections: list[Section] = []

    start, end = _trimmed_span(text, 0, matches[0].offset)
    if start < end:
        sections.append(
            Section(
                note_type=NoteType.GENERAL,
                content=normalize_content(text[start:end]),
                start_offset=start,
                end_offset=end,
                result=_leading_result(),
            )
        )

    for index, match in enumerate(matches):
        next_offset = matches[index + 1].offset if index + 1 < len(matches) else len(text)
        start, end = _trimmed_span(text, match.end, next_offset)
        if start == end:
            logger.debug(
                "empty_section_dropped",
                extra={"marker": match.definition.marker, "offset": match.offset},
            )
            continue
        sections.append(
            Section(
                note_type=match.note_type,
                content=normalize_content(text[start:end]),
                start_offset=start,
                end_offset=end,
                result=match.to_result(),
            )
        )

    return sections or None


def unsplit_section(text: str, result: ClassificationResult) -> Section:
    """Wrap the whole text as one section carrying ``result``."""
    start, end = _trimmed_span(text, 0, len(text))
    if start == end:
        start = end = 0
    return Section(
        note_type=result.note_type,
        content=normalize_content(text[start:end]),
        start_offset=start,
        end_offset=end,
        result=result,
    )


def split_sections(
    text: str,
    classify_unsplit: Callable[[str], ClassificationResult],
    vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY,
) -> list[Section]:
    """Split text into typed sections; always returns at least one.

    Args:
        text: Capture text
        classify_unsplit: Classifies the text when it is kept whole
        vocabulary: Trigger vocabulary to split on

    Returns:
        Ordered, non-overlapping sections
    """
    if not isinstance(text, str):
        text = ""
    sections = plan_sections(text, vocabulary)
    if sections is None:
        return [unsplit_section(text, classify_unsplit(text))]
    return sections


def extract_trigger_tag(
    text: str, vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY
) -> Optional[tuple[str, str]]:
    """Find the first marker and return it with the text it was removed from.

    Returns:
        (marker as written, remaining text trimmed), or None without a marker

    Example:
        >>> extract_trigger_tag("#TODO# Buy groceries")
        ('#TODO#', 'Buy groceries')
    """
    matches = find_all_exact(text, vocabulary)
    if not matches:
        return None
    first = matches[0]
    cleaned = text[: first.offset] + text[first.end :]
    return first.matched_text, cleaned.strip()


def strip_all_triggers(
    text: str,
    note_type: NoteType,
    vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY,
    variants: Mapping[str, str] = FUZZY_VARIANT_TABLE,
) -> str:
    """Remove every marker of ``note_type`` from text, misreads included.

    Markers of other types are left alone. General has no markers, so the
    text comes back unchanged.
    """
    if not isinstance(text, str):
        return ""
    if note_type == NoteType.GENERAL:
        return text

    found: list[TriggerMatch] = [
        m
        for m in (*find_all_exact(text, vocabulary), *find_all_fuzzy(text, vocabulary, variants))
        if m.note_type == note_type
    ]
    if not found:
        return normalize_content(text)

    pieces: list[str] = []
    cursor = 0
    for match in sorted(found, key=lambda m: m.offset):
        if match.offset < cursor:
            continue
        pieces.append(text[cursor : match.offset])
        cursor = match.end
    pieces.append(text[cursor:])
    return normalize_content("".join(pieces))
