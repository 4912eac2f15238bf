"""Quill - classification and section splitting for handwritten captures.

Takes OCR text from a photographed page and decides what kind of note it
is, and whether the page holds several notes that should be saved apart:
- Explicit ``#marker#`` triggers, with tolerance for OCR misreads
- Content heuristics when no marker is present
- Optional remote (LLM) fallback, injected and never fatal

Python Version: 3.11+ required
"""

# Configure logging before the other imports so their loggers inherit it
from .logging_config import StructuredFormatter, configure_logging

configure_logging()

from .__version__ import __version__
from .classifier import (
    NoteClassifier,
    SectionDetectionResult,
    SectionDetector,
    extract_trigger_tag,
    strip_all_triggers,
)
from .config import ClassifierConfig, get_config, reset_config
from .models import (
    ClassificationMethod,
    ClassificationResult,
    NoteType,
    Section,
    TriggerDefinition,
    TriggerMatch,
)

__all__ = [
    "ClassificationMethod",
    "ClassificationResult",
    "ClassifierConfig",
    "NoteClassifier",
    "NoteType",
    "Section",
    "SectionDetectionResult",
    "SectionDetector",
    "StructuredFormatter",
    "TriggerDefinition",
    "TriggerMatch",
    "__version__",
    "configure_logging",
    "extract_trigger_tag",
    "get_config",
    "reset_config",
    "strip_all_triggers",
]
