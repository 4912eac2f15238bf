"""Exact and fuzzy trigger matchers.

Both matchers look only at the leading ``window`` characters of a capture:
a marker must end inside the window to count. The section splitter uses
``find_all_exact`` instead, which scans the whole text.

Fuzzy matching tolerates handwriting OCR damage to a marker:
- a period read instead of ``#`` (``.todo.``)
- a missing closing ``#`` or a stray space inside the delimiters
- a catalogued misread of the keyword (``#ernail#``)
- any other keyword within a small edit distance of a canonical one
"""

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Optional

from rapidfuzz.distance import Levenshtein

from ..models import ClassificationMethod, TriggerDefinition, TriggerMatch
from .vocabulary import DEFAULT_VOCABULARY, FUZZY_VARIANT_TABLE, TriggerVocabulary

logger = logging.getLogger("quill.classifier.matchers")

__all__ = [
    "FUZZY_EDIT_CONFIDENCE",
    "FUZZY_TABLE_CONFIDENCE",
    "TRIGGER_WINDOW",
    "find_all_exact",
    "find_all_fuzzy",
    "match_exact",
    "match_fuzzy",
]

TRIGGER_WINDOW = 100

FUZZY_TABLE_CONFIDENCE = 0.92
FUZZY_EDIT_CONFIDENCE = 0.87

# Edit budget for keyword bodies; short keywords get the tight one so
# ordinary hashtags like "#work" are not read as "#cook#"
SHORT_BODY_LENGTH = 5
SHORT_BODY_BUDGET = 1
LONG_BODY_BUDGET = 2
MAX_LENGTH_DIFFERENCE = 2
MIN_EDIT_BODY_LENGTH = 3

_CANDIDATE = re.compile(
    r"(?P<open>[#.])(?P<lead>[ \t]?)(?P<body>[a-z0-9][a-z0-9\-]{1,23})(?P<trail>[ \t]?)(?P<close>[#.])?",
    re.IGNORECASE,
)


def match_exact(
    text: str,
    vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY,
    window: int = TRIGGER_WINDOW,
) -> Optional[TriggerMatch]:
    """Find the first canonical marker, by position, within the window.

    Args:
        text: Capture text
        vocabulary: Trigger vocabulary to match against
        window: Number of leading characters scanned

    Returns:
        TriggerMatch with confidence 1.0, or None when no marker ends in the window
    """
    if not isinstance(text, str) or not text:
        return None

    match = vocabulary.pattern.search(text, 0, window)
    if match is None:
        return None

    definition = vocabulary.lookup(match.group(0))
    return TriggerMatch(
        definition=definition,
        offset=match.start(),
        matched_text=match.group(0),
    )


def find_all_exact(
    text: str, vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY
) -> list[TriggerMatch]:
    """Every canonical marker occurrence in the whole text, in position order."""
    if not isinstance(text, str) or not text:
        return []

    return [
        TriggerMatch(
            definition=vocabulary.lookup(m.group(0)),
            offset=m.start(),
            matched_text=m.group(0),
        )
        for m in vocabulary.pattern.finditer(text)
    ]


def match_fuzzy(
    text: str,
    vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY,
    variants: Mapping[str, str] = FUZZY_VARIANT_TABLE,
    window: int = TRIGGER_WINDOW,
) -> Optional[TriggerMatch]:
    """Find the first OCR-damaged marker, by position, within the window.

    Meant to run only after ``match_exact`` found nothing. Each delimiter-led
    candidate is normalized to ``#body#`` and tried, in text order, against
    the canonical markers and the variant table, then by edit distance.

    Args:
        text: Capture text
        vocabulary: Trigger vocabulary to match against
        variants: Catalogued misread -> canonical marker
        window: Number of leading characters scanned

    Returns:
        TriggerMatch with method FUZZY, or None
    """
    if not isinstance(text, str) or not text:
        return None

    for match in _iter_fuzzy(text, vocabulary, variants, window):
        logger.debug(
            "fuzzy_marker_matched",
            extra={
                "marker": match.definition.marker,
                "offset": match.offset,
                "confidence": match.confidence,
            },
        )
        return match
    return None


def find_all_fuzzy(
    text: str,
    vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY,
    variants: Mapping[str, str] = FUZZY_VARIANT_TABLE,
) -> list[TriggerMatch]:
    """Every marker-like token in the whole text that resolves to a trigger.

    Canonical markers are included (their delimiters parse as a candidate too),
    so callers wanting only damaged markers should drop exact occurrences.
    """
    if not isinstance(text, str) or not text:
        return []
    return list(_iter_fuzzy(text, vocabulary, variants, len(text)))


def _iter_fuzzy(
    text: str,
    vocabulary: TriggerVocabulary,
    variants: Mapping[str, str],
    endpos: int,
) -> Iterator[TriggerMatch]:
    pos = 0
    while True:
        candidate = _CANDIDATE.search(text, pos, endpos)
        if candidate is None:
            return
        # a closing delimiter is not reused as the next opener
        pos = candidate.end() if candidate.group("close") else candidate.end("body")

        if not _is_plausible_marker(text, candidate):
            continue

        body = candidate.group("body").lower()
        definition, confidence = _resolve_candidate(body, vocabulary, variants)
        if definition is None:
            continue

        yield TriggerMatch(
            definition=definition,
            offset=candidate.start(),
            matched_text=candidate.group(0),
            confidence=confidence,
            method=ClassificationMethod.FUZZY,
        )


def _is_plausible_marker(text: str, candidate: re.Match) -> bool:
    """Reject period-led candidates that are just sentence punctuation.

    A period stands in for ``#`` only when it starts a word, hugs the keyword
    and is closed again, as in ``.todo.`` or ``.todo#``.
    """
    if candidate.group("open") == "#":
        return True
    start = candidate.start()
    if start > 0 and not text[start - 1].isspace():
        return False
    return (
        not candidate.group("lead")
        and not candidate.group("trail")
        and candidate.group("close") is not None
    )


def _resolve_candidate(
    body: str, vocabulary: TriggerVocabulary, variants: Mapping[str, str]
) -> tuple[Optional[TriggerDefinition], float]:
    key = f"#{body}#"

    definition = vocabulary.lookup(key)
    if definition is not None:
        return definition, FUZZY_TABLE_CONFIDENCE

    canonical = variants.get(key)
    if canonical is not None:
        definition = vocabulary.lookup(canonical)
        if definition is not None:
            return definition, FUZZY_TABLE_CONFIDENCE

    if len(body) < MIN_EDIT_BODY_LENGTH:
        return None, 0.0

    best: Optional[TriggerDefinition] = None
    best_distance = LONG_BODY_BUDGET + 1
    for definition in vocabulary:
        target = definition.body
        if abs(len(target) - len(body)) > MAX_LENGTH_DIFFERENCE:
            continue
        budget = SHORT_BODY_BUDGET if len(target) <= SHORT_BODY_LENGTH else LONG_BODY_BUDGET
        # score_cutoff makes the distance come back as budget + 1 once exceeded
        distance = Levenshtein.distance(body, target, score_cutoff=budget)
        # strict < keeps the earlier vocabulary entry on ties
        if distance <= budget and distance < best_distance:
            best, best_distance = definition, distance

    if best is None:
        return None, 0.0
    return best, FUZZY_EDIT_CONFIDENCE
