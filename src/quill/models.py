"""Data models for note classification and section splitting.

Every object here is built per request and immutable once returned; nothing
is persisted by this package.
"""

import math
import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional

__all__ = [
    "FUZZY_CONFIDENCE_RANGE",
    "HEURISTIC_CONFIDENCE_RANGE",
    "HEURISTIC_FLOOR",
    "HEURISTIC_MAX",
    "METHOD_CONFIDENCE_RANGES",
    "ClassificationMethod",
    "ClassificationResult",
    "NoteType",
    "Section",
    "TriggerDefinition",
    "TriggerMatch",
]

HEURISTIC_FLOOR = 0.3
HEURISTIC_MAX = 0.9

HEURISTIC_CONFIDENCE_RANGE = (HEURISTIC_FLOOR, HEURISTIC_MAX)
# Upper bound is exclusive so fuzzy never ties an explicit marker
FUZZY_CONFIDENCE_RANGE = (0.85, 0.95)

HIGH_CONFIDENCE = 0.85
LOW_CONFIDENCE = 0.70
CONFIRMATION_THRESHOLD = 0.80


class NoteType(str, Enum):
    """Semantic category of a note."""

    GENERAL = "general"
    TODO = "todo"
    EMAIL = "email"
    MEETING = "meeting"
    REMINDER = "reminder"
    CONTACT = "contact"
    EXPENSE = "expense"
    SHOPPING = "shopping"
    RECIPE = "recipe"
    EVENT = "event"
    IDEA = "idea"
    EXTERNAL_PROMPT = "external_prompt"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_identifier(cls, value: Any) -> Optional["NoteType"]:
        """Resolve a loosely formatted type name to a NoteType.

        Accepts enum values (``todo``), marker forms (``#todo#``), camelCase or
        spaced spellings (``externalPrompt``, ``To-Do``) and common aliases that
        remote classifiers return (``claude``, ``task``, ``appointment``).

        Returns:
            The matching NoteType, or None when the value names no type.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        key = re.sub(r"[^a-z0-9]", "", value.strip().lower())
        if not key:
            return None
        return _IDENTIFIER_ALIASES.get(key)


_DISPLAY_NAMES = {
    NoteType.GENERAL: "General",
    NoteType.TODO: "To-Do",
    NoteType.EMAIL: "Email",
    NoteType.MEETING: "Meeting",
    NoteType.REMINDER: "Reminder",
    NoteType.CONTACT: "Contact",
    NoteType.EXPENSE: "Expense",
    NoteType.SHOPPING: "Shopping",
    NoteType.RECIPE: "Recipe",
    NoteType.EVENT: "Event",
    NoteType.IDEA: "Idea",
    NoteType.EXTERNAL_PROMPT: "Prompt",
}

_IDENTIFIER_ALIASES = {
    **{re.sub(r"[^a-z0-9]", "", t.value): t for t in NoteType},
    "note": NoteType.GENERAL,
    "other": NoteType.GENERAL,
    "task": NoteType.TODO,
    "tasks": NoteType.TODO,
    "checklist": NoteType.TODO,
    "mail": NoteType.EMAIL,
    "notes": NoteType.MEETING,
    "minutes": NoteType.MEETING,
    "remind": NoteType.REMINDER,
    "person": NoteType.CONTACT,
    "businesscard": NoteType.CONTACT,
    "receipt": NoteType.EXPENSE,
    "shop": NoteType.SHOPPING,
    "grocery": NoteType.SHOPPING,
    "groceries": NoteType.SHOPPING,
    "appointment": NoteType.EVENT,
    "thought": NoteType.IDEA,
    "prompt": NoteType.EXTERNAL_PROMPT,
    "claude": NoteType.EXTERNAL_PROMPT,
    "claudeprompt": NoteType.EXTERNAL_PROMPT,
    "feature": NoteType.EXTERNAL_PROMPT,
    "featurerequest": NoteType.EXTERNAL_PROMPT,
}


class ClassificationMethod(str, Enum):
    """Tier that produced a classification."""

    EXPLICIT = "explicit"
    FUZZY = "fuzzy"
    HEURISTIC = "heuristic"
    LLM = "llm"
    LLM_FALLBACK_FAILED = "llm_fallback_failed"


# (low, high, high_inclusive) per method
METHOD_CONFIDENCE_RANGES: dict[ClassificationMethod, tuple[float, float, bool]] = {
    ClassificationMethod.EXPLICIT: (1.0, 1.0, True),
    ClassificationMethod.FUZZY: (*FUZZY_CONFIDENCE_RANGE, False),
    ClassificationMethod.HEURISTIC: (*HEURISTIC_CONFIDENCE_RANGE, True),
    ClassificationMethod.LLM: (0.0, 1.0, True),
    ClassificationMethod.LLM_FALLBACK_FAILED: (*HEURISTIC_CONFIDENCE_RANGE, True),
}


@dataclass(frozen=True)
class TriggerDefinition:
    """A canonical marker and the type it selects.

    Attributes:
        marker: Lowercase canonical form, delimiters included (``#todo#``)
        note_type: Type selected when the marker is found
    """

    marker: str
    note_type: NoteType

    @property
    def body(self) -> str:
        """Marker text without its delimiters (``todo`` for ``#todo#``)."""
        return self.marker.strip("#")


@dataclass(frozen=True)
class TriggerMatch:
    """A marker located in capture text.

    Attributes:
        definition: The canonical trigger that matched
        offset: Index of the first matched character in the input
        matched_text: Input text that matched, original casing preserved
        confidence: 1.0 for exact matches, below 0.95 for fuzzy ones
        method: EXPLICIT or FUZZY
    """

    definition: TriggerDefinition
    offset: int
    matched_text: str
    confidence: float = 1.0
    method: ClassificationMethod = ClassificationMethod.EXPLICIT

    @property
    def end(self) -> int:
        return self.offset + len(self.matched_text)

    @property
    def note_type(self) -> NoteType:
        return self.definition.note_type

    def to_result(self) -> "ClassificationResult":
        if self.method == ClassificationMethod.EXPLICIT:
            reasoning = f"Explicit marker {self.definition.marker}"
        else:
            reasoning = (
                f"Marker {self.matched_text!r} read as {self.definition.marker}"
            )
        return ClassificationResult(
            note_type=self.definition.note_type,
            confidence=self.confidence,
            method=self.method,
            reasoning=reasoning,
            matched_marker=self.matched_text,
        )


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying one passage.

    Attributes:
        note_type: Assigned type
        confidence: Score within the declared range of ``method``
        method: Tier that produced the result
        reasoning: Short human-readable explanation, when available
        matched_marker: Marker text as it appeared in the input (explicit/fuzzy)

    Raises:
        ValueError: If confidence falls outside the range declared for method
    """

    note_type: NoteType
    confidence: float
    method: ClassificationMethod
    reasoning: Optional[str] = None
    matched_marker: Optional[str] = None

    def __post_init__(self):
        low, high, high_inclusive = METHOD_CONFIDENCE_RANGES[self.method]
        value = self.confidence
        in_range = (
            isinstance(value, (int, float))
            and not math.isnan(value)
            and low <= value
            and (value <= high if high_inclusive else value < high)
        )
        if not in_range:
            raise ValueError(
                f"Confidence {value!r} outside range for {self.method.value} "
                f"[{low}, {high}{']' if high_inclusive else ')'}"
            )

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence >= HIGH_CONFIDENCE

    @property
    def is_low_confidence(self) -> bool:
        return self.confidence < LOW_CONFIDENCE

    @property
    def needs_confirmation(self) -> bool:
        """Whether the UI should ask before acting on this type."""
        return (
            self.method != ClassificationMethod.EXPLICIT
            and self.confidence < CONFIRMATION_THRESHOLD
        )

    def with_method(
        self, method: ClassificationMethod, reasoning: Optional[str] = None
    ) -> "ClassificationResult":
        """Copy of this result re-tagged with another method."""
        return ClassificationResult(
            note_type=self.note_type,
            confidence=self.confidence,
            method=method,
            reasoning=reasoning if reasoning is not None else self.reasoning,
            matched_marker=self.matched_marker,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["note_type"] = self.note_type.value
        data["method"] = self.method.value
        return data


@dataclass(frozen=True)
class Section:
    """One note carved out of a capture.

    ``text[start_offset:end_offset]`` is the raw span of the input the section
    was built from; ``content`` is that span trimmed, with runs of three or
    more newlines collapsed to a single blank line.
    """

    note_type: NoteType
    content: str
    start_offset: int
    end_offset: int
    result: ClassificationResult

    @property
    def confidence(self) -> float:
        return self.result.confidence

    def to_dict(self) -> dict:
        return {
            "note_type": self.note_type.value,
            "content": self.content,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
            "result": self.result.to_dict(),
        }
