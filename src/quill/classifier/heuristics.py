"""Content heuristics for captures that carry no marker.

Each check looks for structural signals of one note type and returns a
confidence, or None when it does not fire. Checks run in the fixed order of
HEURISTIC_PRIORITY and the first one that fires decides the type. Several
types look alike on paper (todo vs reminder, idea vs meeting); the order
below is the only tie-break.

    1. email            To:/Subject: headers, "Dear X," salutations, "draft email"
    2. contact          business card score >= 40
    3. external_prompt  "@claude", "feature request", "bug report"
    4. reminder         "remind me", "set a reminder", "don't forget"
    5. todo             checkboxes, "checklist", "to-do list", "TODO:"
    6. expense          currency amounts with a total, several amounts, or an amount line
    7. meeting          attendees, agenda, action items, "meeting with"
    8. recipe           ingredients, directions, kitchen measurements
    9. shopping         "grocery list", "<X> store:"
    10. event           appointment, RSVP, registration, venue (+ date/time)
    11. idea            "what if", "Idea:", "brainstorm"
    12. todo            task-verb lines ("- Buy milk", "Pick up dry cleaning")

Nothing fires -> general at HEURISTIC_FLOOR. Confidences stay within
[HEURISTIC_FLOOR, HEURISTIC_MAX].
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from ..models import (
    HEURISTIC_FLOOR,
    HEURISTIC_MAX,
    ClassificationMethod,
    ClassificationResult,
    NoteType,
)
from .vocabulary import DEFAULT_VOCABULARY, TriggerVocabulary

logger = logging.getLogger("quill.classifier.heuristics")

__all__ = [
    "BUSINESS_CARD_THRESHOLD",
    "HEURISTIC_PRIORITY",
    "HeuristicCheck",
    "business_card_score",
    "match_heuristic",
]

BUSINESS_CARD_THRESHOLD = 40

_FLAGS = re.IGNORECASE | re.MULTILINE


def _word_pattern(*words: str) -> re.Pattern:
    """Case-insensitive alternation bounded by non-letters on both sides."""
    alternation = "|".join(re.escape(w) for w in words)
    return re.compile(rf"(?<![a-z])(?:{alternation})(?![a-z])", re.IGNORECASE)


def _graded(score: float, base: float = 0.5, step: float = 0.1) -> float:
    return round(min(HEURISTIC_MAX, max(HEURISTIC_FLOOR, base + step * score)), 2)


# =============================================================================
# EMAIL
# =============================================================================

_EMAIL_HEADER = re.compile(r"^\s*(to|subject|cc|bcc|re)\s*:", _FLAGS)
_EMAIL_PHRASE = re.compile(
    r"\b(draft|write|send|reply to|respond to)\s+(an?\s+|the\s+)?e-?mail\b|\be-?mail\s+to\b",
    re.IGNORECASE,
)
_SALUTATION = re.compile(r"^\s*dear\s+\w+", _FLAGS)
_SIGN_OFF = re.compile(
    r"^\s*(best regards|kind regards|regards|sincerely|best|cheers|thanks|thank you)\s*,",
    _FLAGS,
)


def check_email(text: str) -> Optional[float]:
    headers = {m.group(1).lower() for m in _EMAIL_HEADER.finditer(text)}
    score = min(len(headers), 2)
    if _EMAIL_PHRASE.search(text):
        score += 1
    if _SALUTATION.search(text):
        score += 1
        if _SIGN_OFF.search(text):
            score += 1
    if score == 0:
        return None
    return _graded(score, base=0.6)


# =============================================================================
# CONTACT (business card)
# =============================================================================

_PHONE = re.compile(r"\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
_EMAIL_ADDRESS = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_URL = re.compile(
    r"https?://|www\.|[A-Za-z0-9-]+\.(com|org|net|io|co)\b", re.IGNORECASE
)
_ADDRESS = re.compile(r"[A-Za-z\s]+,\s*[A-Z]{2}\s*\d{5}")
_COMPANY = _word_pattern(
    "inc", "llc", "ltd", "corp", "corporation", "company", "co.", "group",
    "holdings", "solutions", "services", "consulting", "partners",
    "technologies", "tech", "systems", "enterprises",
)
_TITLE = _word_pattern(
    "ceo", "cto", "cfo", "president", "director", "manager", "engineer",
    "designer", "developer", "consultant", "analyst", "specialist",
    "coordinator", "founder", "partner", "owner", "vp", "vice president",
)


def business_card_score(
    text: str, vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY
) -> int:
    """Score how much a capture looks like a photographed business card.

    Contact details (phone, email, website, address) carry most of the
    weight; compact layout and company/title words add a little. A marker
    anywhere disqualifies the text, and long prose is penalized.

    Returns:
        Integer score; BUSINESS_CARD_THRESHOLD or more reads as a contact
    """
    if vocabulary.pattern.search(text):
        return -100

    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return 0

    word_count = len(text.split())
    score = 0

    if len(lines) > 15:
        score -= 20
    if word_count > 50 and word_count / len(lines) > 10:
        score -= 50

    if _PHONE.search(text):
        score += 20
    if _EMAIL_ADDRESS.search(text):
        score += 20
    # an email's own domain is not a website
    if _URL.search(_EMAIL_ADDRESS.sub(" ", text)):
        score += 15
    if _ADDRESS.search(text):
        score += 15

    if 2 <= len(lines) <= 10:
        score += 10
    if _COMPANY.search(text):
        score += 10
    if sum(len(line) for line in lines) / len(lines) < 40:
        score += 5
    if _TITLE.search(text):
        score += 5

    first_words = lines[0].split()
    if 2 <= len(first_words) <= 4 and all(w[0].isupper() and w.isalpha() for w in first_words):
        score += 5

    return score


def check_contact(
    text: str, vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY
) -> Optional[float]:
    score = business_card_score(text, vocabulary)
    if score < BUSINESS_CARD_THRESHOLD:
        return None
    return _graded(score - BUSINESS_CARD_THRESHOLD, base=0.6, step=0.01)


# =============================================================================
# EXTERNAL PROMPT
# =============================================================================

_EXTERNAL_PROMPT = re.compile(
    r"@claude\b|^\s*(hey\s+)?claude\s*[,:]|\bask claude\b|\bfeature request\b|\bbug report\b",
    _FLAGS,
)


def check_external_prompt(text: str) -> Optional[float]:
    if _EXTERNAL_PROMPT.search(text):
        return 0.8
    return None


# =============================================================================
# REMINDER
# =============================================================================

_REMINDER_STRONG = re.compile(
    r"\bremind me\b"
    r"|\b(create|set|add|make|schedule)\s+(me\s+)?(a|an)?\s*reminder\b"
    r"|\bdon['’]?t forget\b"
    r"|^\s*reminder\s*:",
    _FLAGS,
)
_REMINDER_WEAK = re.compile(r"\breminder\b|\bremember to\b", re.IGNORECASE)


def check_reminder(text: str) -> Optional[float]:
    if _REMINDER_STRONG.search(text):
        return 0.8
    if _REMINDER_WEAK.search(text):
        return 0.65
    return None


# =============================================================================
# TO-DO
# =============================================================================

_CHECKBOX = re.compile(r"\[\s?\]|\[[xX✓✔]\]|[☐☑☒]")
_TODO_PHRASE = re.compile(
    r"\bchecklist\b|\bto-?do list\b|\btask list\b|^\s*(to-?do|tasks?)\s*:",
    _FLAGS,
)


def check_todo(text: str) -> Optional[float]:
    boxes = len(_CHECKBOX.findall(text))
    confidence = None
    if boxes >= 2:
        confidence = 0.8
    elif boxes == 1:
        confidence = 0.65
    if _TODO_PHRASE.search(text):
        confidence = max(confidence or 0.0, 0.75)
    return confidence


_TASK_VERBS = (
    "buy", "pick up", "drop off", "clean", "fix", "finish", "submit", "pay",
    "return", "renew", "wash", "book", "order", "water", "file", "cancel",
)
_TASK_LINE = re.compile(
    r"^\s*(?:[-*•]\s*|\d+[.)]\s*)?(?:"
    + "|".join(re.escape(v) for v in _TASK_VERBS)
    + r")\b",
    re.IGNORECASE,
)


def check_task_opening(text: str) -> Optional[float]:
    """Task-verb lines: a list of several is a todo, a lone short one a weak todo."""
    lines = [line for line in text.splitlines() if line.strip()]
    task_lines = sum(1 for line in lines if _TASK_LINE.match(line))
    if task_lines >= 2:
        return 0.75
    if 0 < len(lines) <= 3 and _TASK_LINE.match(lines[0]):
        return 0.45
    return None


# =============================================================================
# EXPENSE
# =============================================================================

_AMOUNT = re.compile(r"[$€£¥]\s?\d[\d,]*(?:\.\d{2})?|\b\d+\.\d{2}\b")
_TOTAL = re.compile(r"\b(total|subtotal|sum|tax|tip|amount due|balance due)\b", re.IGNORECASE)
_SPEND_WORDS = re.compile(r"\b(receipt|paid|spent|cost|bought|invoice)\b", re.IGNORECASE)
_AMOUNT_LINE = re.compile(r"^\s*[$€£¥]\s?\d[\d,]*(?:\.\d{2})?\s*$", _FLAGS)


def check_expense(text: str) -> Optional[float]:
    amounts = len(_AMOUNT.findall(text))
    if amounts == 0:
        return None
    if _TOTAL.search(text):
        return 0.85
    if amounts >= 2 or _SPEND_WORDS.search(text):
        return 0.7
    if _AMOUNT_LINE.search(text):
        return 0.6
    return None


# =============================================================================
# MEETING
# =============================================================================

_MEETING_SIGNALS: tuple[tuple[re.Pattern, int], ...] = (
    (re.compile(r"^\s*attendees\s*:", _FLAGS), 2),
    (re.compile(r"^\s*participants\s*:", _FLAGS), 2),
    (re.compile(r"\bagenda\b", re.IGNORECASE), 2),
    (re.compile(r"\baction items?\b", re.IGNORECASE), 2),
    (re.compile(r"\b(meeting|call|sync|catch-?up)\s+with\b", re.IGNORECASE), 2),
    (re.compile(r"\bmeeting\b", re.IGNORECASE), 1),
    (re.compile(r"\bminutes\b", re.IGNORECASE), 1),
    (re.compile(r"^\s*discussion\s*:", _FLAGS), 1),
    (re.compile(r"\b(stand-?up|one-on-one|1:1|conference call)\b", re.IGNORECASE), 1),
)


def check_meeting(text: str) -> Optional[float]:
    score = sum(weight for pattern, weight in _MEETING_SIGNALS if pattern.search(text))
    if score == 0:
        return None
    return _graded(score, base=0.55)


# =============================================================================
# RECIPE
# =============================================================================

_MEASUREMENT = re.compile(
    r"\b\d+(?:/\d+)?\s*(cups?|tbsp|tsp|tablespoons?|teaspoons?|oz|ounces?|grams?|g|ml|lbs?|pounds?)\b",
    re.IGNORECASE,
)
_RECIPE_SIGNALS: tuple[tuple[re.Pattern, int], ...] = (
    (re.compile(r"\bingredients\b", re.IGNORECASE), 2),
    (re.compile(r"^\s*(instructions|directions|method|steps)\s*:", _FLAGS), 1),
    (re.compile(r"\bpreheat\b", re.IGNORECASE), 1),
    (re.compile(r"\b(simmer|whisk|saute|knead|stir in)\b", re.IGNORECASE), 1),
)


def check_recipe(text: str) -> Optional[float]:
    score = sum(weight for pattern, weight in _RECIPE_SIGNALS if pattern.search(text))
    measurements = len(_MEASUREMENT.findall(text))
    score += min(measurements, 2)
    if score < 2:
        return None
    return _graded(score)


# =============================================================================
# SHOPPING
# =============================================================================

_SHOPPING_LIST = re.compile(r"\b(grocery|shopping)\s+list\b", re.IGNORECASE)
_SHOPPING_HEADER = re.compile(r"^\s*(groceries|grocery|shopping|to buy)\s*:", _FLAGS)
_STORE_HEADER = re.compile(r"^\s*[\w'&\- ]{1,30}\s+(store|market|mart)\s*:", _FLAGS)


def check_shopping(text: str) -> Optional[float]:
    if _SHOPPING_LIST.search(text):
        return 0.85
    if _SHOPPING_HEADER.search(text):
        return 0.8
    if _STORE_HEADER.search(text):
        return 0.75
    return None


# =============================================================================
# EVENT
# =============================================================================

_EVENT_SIGNALS: tuple[tuple[re.Pattern, int], ...] = (
    (re.compile(r"\bappointment\b", re.IGNORECASE), 2),
    (re.compile(r"\brsvp\b", re.IGNORECASE), 2),
    (re.compile(r"\bregistration\b", re.IGNORECASE), 1),
    (re.compile(r"\bkeynote\b", re.IGNORECASE), 1),
    (re.compile(r"\bvenue\b", re.IGNORECASE), 1),
    (re.compile(r"\bconvention center\b", re.IGNORECASE), 1),
    (re.compile(r"\b(concert|wedding|birthday party|reception)\b", re.IGNORECASE), 1),
)
_DATE_OR_TIME = re.compile(
    r"\b\d{1,2}(:\d{2})?\s*(am|pm)\b"
    r"|\b\d{1,2}/\d{1,2}(/\d{2,4})?\b"
    r"|\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday|tomorrow)\b"
    r"|\b(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+\d{1,2}\b",
    re.IGNORECASE,
)


def check_event(text: str) -> Optional[float]:
    score = sum(weight for pattern, weight in _EVENT_SIGNALS if pattern.search(text))
    if score == 0:
        return None
    if _DATE_OR_TIME.search(text):
        score += 1
    return _graded(score)


# =============================================================================
# IDEA
# =============================================================================

_IDEA_SIGNALS: tuple[tuple[re.Pattern, int], ...] = (
    (re.compile(r"\bwhat if\b", re.IGNORECASE), 2),
    (re.compile(r"^\s*([\w-]+\s+)?idea\s*:", _FLAGS), 2),
    (re.compile(r"\bideas?\s+(from|for)\b", re.IGNORECASE), 2),
    (re.compile(r"\bbrainstorm", re.IGNORECASE), 1),
    (re.compile(r"\b(we|i) could\b", re.IGNORECASE), 1),
)


def check_idea(text: str) -> Optional[float]:
    score = sum(weight for pattern, weight in _IDEA_SIGNALS if pattern.search(text))
    if score == 0:
        return None
    return _graded(score)


# =============================================================================
# PRIORITY
# =============================================================================


@dataclass(frozen=True)
class HeuristicCheck:
    """One entry of the heuristic priority list."""

    name: str
    note_type: NoteType
    check: Callable[..., Optional[float]]
    # the check also takes the classifier's vocabulary
    uses_vocabulary: bool = False


HEURISTIC_PRIORITY: tuple[HeuristicCheck, ...] = (
    HeuristicCheck("email", NoteType.EMAIL, check_email),
    HeuristicCheck("business_card", NoteType.CONTACT, check_contact, uses_vocabulary=True),
    HeuristicCheck("external_prompt", NoteType.EXTERNAL_PROMPT, check_external_prompt),
    HeuristicCheck("reminder", NoteType.REMINDER, check_reminder),
    HeuristicCheck("checklist", NoteType.TODO, check_todo),
    HeuristicCheck("expense", NoteType.EXPENSE, check_expense),
    HeuristicCheck("meeting", NoteType.MEETING, check_meeting),
    HeuristicCheck("recipe", NoteType.RECIPE, check_recipe),
    HeuristicCheck("shopping", NoteType.SHOPPING, check_shopping),
    HeuristicCheck("event", NoteType.EVENT, check_event),
    HeuristicCheck("idea", NoteType.IDEA, check_idea),
    HeuristicCheck("task_opening", NoteType.TODO, check_task_opening),
)


def match_heuristic(
    text: str,
    checks: tuple[HeuristicCheck, ...] = HEURISTIC_PRIORITY,
    vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY,
) -> ClassificationResult:
    """Classify marker-free text by content signals.

    Never raises and never returns None: when no check fires the result is
    general at the floor confidence.

    Args:
        text: Capture text
        checks: Ordered checks; the first one that fires wins
        vocabulary: Markers that disqualify a business card

    Returns:
        ClassificationResult with method HEURISTIC
    """
    if isinstance(text, str) and text.strip():
        for entry in checks:
            if entry.uses_vocabulary:
                confidence = entry.check(text, vocabulary)
            else:
                confidence = entry.check(text)
            if confidence is None:
                continue
            confidence = min(HEURISTIC_MAX, max(HEURISTIC_FLOOR, confidence))
            logger.debug(
                "heuristic_match",
                extra={
                    "check": entry.name,
                    "type": entry.note_type.value,
                    "confidence": confidence,
                },
            )
            return ClassificationResult(
                note_type=entry.note_type,
                confidence=confidence,
                method=ClassificationMethod.HEURISTIC,
                reasoning=f"Content matched {entry.name.replace('_', ' ')} signals",
            )

    return ClassificationResult(
        note_type=NoteType.GENERAL,
        confidence=HEURISTIC_FLOOR,
        method=ClassificationMethod.HEURISTIC,
        reasoning="No content signals matched",
    )
