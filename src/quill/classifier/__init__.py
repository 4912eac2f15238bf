"""Note classification and section splitting.

Public API:
    - NoteClassifier: classify(), classify_local(), split_into_sections()
    - SectionDetector: marker or semantic section detection for the preview
    - match_exact() / match_fuzzy() / match_heuristic(): the local tiers
    - extract_trigger_tag() / strip_all_triggers(): marker utilities
    - RemoteClassifier / RemoteSectionSplitter: contracts for remote tiers
"""

from .detector import DetectionMethod, SectionDetectionResult, SectionDetector
from .fallback import (
    FallbackUnavailableError,
    QuillError,
    RemoteClassification,
    RemoteClassifier,
    RemoteSection,
    RemoteSectionProposal,
    RemoteSectionSplitter,
)
from .heuristics import HEURISTIC_PRIORITY, business_card_score, match_heuristic
from .matchers import (
    FUZZY_EDIT_CONFIDENCE,
    FUZZY_TABLE_CONFIDENCE,
    TRIGGER_WINDOW,
    find_all_exact,
    match_exact,
    match_fuzzy,
)
from .orchestrator import ClassificationStage, NoteClassifier
from .splitter import extract_trigger_tag, split_sections, strip_all_triggers
from .vocabulary import (
    DEFAULT_VOCABULARY,
    FUZZY_VARIANT_TABLE,
    TRIGGER_TABLE,
    TriggerVocabulary,
)

__all__ = [
    "DEFAULT_VOCABULARY",
    "FUZZY_EDIT_CONFIDENCE",
    "FUZZY_TABLE_CONFIDENCE",
    "FUZZY_VARIANT_TABLE",
    "HEURISTIC_PRIORITY",
    "TRIGGER_TABLE",
    "TRIGGER_WINDOW",
    "ClassificationStage",
    "DetectionMethod",
    "FallbackUnavailableError",
    "NoteClassifier",
    "QuillError",
    "RemoteClassification",
    "RemoteClassifier",
    "RemoteSection",
    "RemoteSectionProposal",
    "RemoteSectionSplitter",
    "SectionDetectionResult",
    "SectionDetector",
    "TriggerVocabulary",
    "business_card_score",
    "extract_trigger_tag",
    "find_all_exact",
    "match_exact",
    "match_fuzzy",
    "match_heuristic",
    "split_sections",
    "strip_all_triggers",
]
