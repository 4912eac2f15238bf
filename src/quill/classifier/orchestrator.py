"""Classification orchestrator.

Runs the tiers in a fixed order and stops at the first that answers:

    AWAITING_TEXT -> EXACT_MATCH -> FUZZY_MATCH -> HEURISTIC_SCORE
        -> (confidence gate) -> LLM_FALLBACK? -> RESOLVED

The three local tiers are synchronous and deterministic. The remote
fallback is injected, runs only when the heuristic result is below the
confidence gate, and can never fail a classification: any error, timeout
or unusable answer resolves to the heuristic result tagged
``llm_fallback_failed``.
"""

import asyncio
import logging
import math
import time
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Optional

from ..config import ClassifierConfig, get_config
from ..models import ClassificationMethod, ClassificationResult, NoteType, Section
from .fallback import RemoteClassifier
from .heuristics import match_heuristic
from .matchers import match_exact, match_fuzzy
from .metrics import record_classification, record_fallback, record_split
from .splitter import (
    extract_trigger_tag,
    plan_sections,
    strip_all_triggers,
    unsplit_section,
)
from .vocabulary import DEFAULT_VOCABULARY, FUZZY_VARIANT_TABLE, TriggerVocabulary

logger = logging.getLogger("quill.classifier.orchestrator")

__all__ = ["ClassificationStage", "NoteClassifier"]


class ClassificationStage(str, Enum):
    """States a classification request moves through."""

    AWAITING_TEXT = "awaiting_text"
    EXACT_MATCH = "exact_match"
    FUZZY_MATCH = "fuzzy_match"
    HEURISTIC_SCORE = "heuristic_score"
    LLM_FALLBACK = "llm_fallback"
    RESOLVED = "resolved"


class NoteClassifier:
    """Classifies captures and splits them into typed sections.

    Built by dependency injection; tests pass a fake fallback and a config
    instance instead of relying on process-wide state.

    Example:
        >>> classifier = NoteClassifier()
        >>> classifier.classify_local("#todo# Buy milk").note_type
        <NoteType.TODO: 'todo'>
    """

    def __init__(
        self,
        vocabulary: TriggerVocabulary = DEFAULT_VOCABULARY,
        fallback: Optional[RemoteClassifier] = None,
        config: Optional[ClassifierConfig] = None,
        variants: Mapping[str, str] = FUZZY_VARIANT_TABLE,
    ):
        """Initialize classifier.

        Args:
            vocabulary: Canonical triggers
            fallback: Remote classifier consulted for low-confidence results
            config: Settings (default: process-wide ``get_config()``)
            variants: Catalogued OCR misreads of the canonical markers
        """
        self.vocabulary = vocabulary
        self.fallback = fallback
        self.config = config or get_config()
        self.variants = variants

    # ------------------------------------------------------------------
    # Single-note classification
    # ------------------------------------------------------------------

    def classify_local(self, text: str) -> ClassificationResult:
        """Run the exact, fuzzy and heuristic tiers.

        Never raises; non-string input is treated as empty text.
        """
        self._transition(ClassificationStage.AWAITING_TEXT)
        started = time.perf_counter()
        result = self._run_local(text if isinstance(text, str) else "")
        record_classification(
            result.method.value,
            result.note_type.value,
            result.confidence,
            time.perf_counter() - started,
        )
        return result

    async def classify(
        self,
        text: str,
        image: Optional[Any] = None,
        known_tag_vocabulary: Optional[Sequence[str]] = None,
    ) -> ClassificationResult:
        """Classify one note, consulting the remote fallback when unsure.

        Args:
            text: Capture text
            image: Opaque image handle, only handed to the fallback
            known_tag_vocabulary: Tag names already in use (default: marker names)

        Returns:
            Exactly one ClassificationResult. Fallback failures resolve to the
            heuristic result with method ``llm_fallback_failed``.

        Raises:
            asyncio.CancelledError: Only when the calling task itself is cancelled
        """
        text = text if isinstance(text, str) else ""
        result = self.classify_local(text)

        if not self._should_escalate(result):
            self._transition(ClassificationStage.RESOLVED, result=result)
            return result

        resolved = await self._run_fallback(text, result, image, known_tag_vocabulary)
        self._transition(ClassificationStage.RESOLVED, result=resolved)
        return resolved

    def _run_local(self, text: str) -> ClassificationResult:
        window = self.config.trigger_window

        self._transition(ClassificationStage.EXACT_MATCH, text_length=len(text))
        match = match_exact(text, self.vocabulary, window)
        if match is not None:
            return match.to_result()

        self._transition(ClassificationStage.FUZZY_MATCH)
        match = match_fuzzy(text, self.vocabulary, self.variants, window)
        if match is not None:
            return match.to_result()

        self._transition(ClassificationStage.HEURISTIC_SCORE)
        return match_heuristic(text, vocabulary=self.vocabulary)

    def _should_escalate(self, result: ClassificationResult) -> bool:
        return (
            result.method == ClassificationMethod.HEURISTIC
            and result.confidence < self.config.confidence_gate
            and self.fallback is not None
            and self.config.llm_enabled
        )

    async def _run_fallback(
        self,
        text: str,
        local: ClassificationResult,
        image: Optional[Any],
        known_tag_vocabulary: Optional[Sequence[str]],
    ) -> ClassificationResult:
        self._transition(
            ClassificationStage.LLM_FALLBACK,
            local_type=local.note_type.value,
            local_confidence=local.confidence,
        )
        tags = (
            list(known_tag_vocabulary)
            if known_tag_vocabulary is not None
            else self.vocabulary.tag_names()
        )
        started = time.perf_counter()

        try:
            remote = await asyncio.wait_for(
                self.fallback.classify_remote(text, image, tags),
                timeout=self.config.fallback_timeout_seconds,
            )
            result = self._accept_remote(remote)
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                record_fallback("cancelled", time.perf_counter() - started)
                logger.info("fallback_cancelled_by_caller")
                raise
            return self._degrade(local, "cancelled", started)
        except Exception as e:
            return self._degrade(local, type(e).__name__, started, error=str(e))

        latency = time.perf_counter() - started
        record_fallback("success", latency)
        record_classification(
            result.method.value, result.note_type.value, result.confidence, latency, stage="remote"
        )
        logger.info(
            "fallback_classified",
            extra={
                "type": result.note_type.value,
                "confidence": result.confidence,
                "local_type": local.note_type.value,
                "latency_seconds": latency,
            },
        )
        return result

    @staticmethod
    def _accept_remote(remote: Any) -> ClassificationResult:
        """Turn a remote answer into a result, rejecting unusable answers.

        Raises:
            ValueError: Unknown type label or non-numeric confidence
        """
        note_type = NoteType.from_identifier(getattr(remote, "note_type", None))
        if note_type is None:
            raise ValueError(f"Unknown note type from fallback: {getattr(remote, 'note_type', None)!r}")
        try:
            confidence = float(remote.confidence)
        except (TypeError, ValueError) as err:
            raise ValueError(f"Invalid confidence from fallback: {remote.confidence!r}") from err
        if math.isnan(confidence):
            raise ValueError("Fallback confidence is NaN")
        return ClassificationResult(
            note_type=note_type,
            confidence=min(1.0, max(0.0, confidence)),
            method=ClassificationMethod.LLM,
            reasoning=getattr(remote, "reasoning", None) or None,
        )

    def _degrade(
        self,
        local: ClassificationResult,
        reason: str,
        started: float,
        error: Optional[str] = None,
    ) -> ClassificationResult:
        record_fallback("failed", time.perf_counter() - started)
        logger.warning(
            "fallback_failed",
            extra={"reason": reason, "error": error, "local_type": local.note_type.value},
        )
        return local.with_method(
            ClassificationMethod.LLM_FALLBACK_FAILED,
            reasoning=f"{local.reasoning or 'Heuristic result'} (remote fallback failed: {reason})",
        )

    @staticmethod
    def _transition(stage: ClassificationStage, **context: Any) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("classification_stage", extra={"stage": stage.value, **context})

    # ------------------------------------------------------------------
    # Multi-note splitting
    # ------------------------------------------------------------------

    def split_into_sections_local(self, text: str) -> list[Section]:
        """Split on markers; a capture kept whole is classified by the local tiers."""
        text = text if isinstance(text, str) else ""
        sections = plan_sections(text, self.vocabulary)
        method = "markers"
        if sections is None:
            method = "none"
            sections = [unsplit_section(text, self.classify_local(text))]
        record_split(method, len(sections))
        return sections

    async def split_into_sections(
        self,
        text: str,
        image: Optional[Any] = None,
        known_tag_vocabulary: Optional[Sequence[str]] = None,
    ) -> list[Section]:
        """Split on markers; a capture kept whole goes through ``classify``.

        Returns:
            At least one section, ordered and non-overlapping
        """
        text = text if isinstance(text, str) else ""
        sections = plan_sections(text, self.vocabulary)
        method = "markers"
        if sections is None:
            method = "none"
            result = await self.classify(text, image, known_tag_vocabulary)
            sections = [unsplit_section(text, result)]
        record_split(method, len(sections))
        logger.debug(
            "capture_split",
            extra={
                "sections": len(sections),
                "types": [s.note_type.value for s in sections],
            },
        )
        return sections

    # ------------------------------------------------------------------
    # Marker utilities
    # ------------------------------------------------------------------

    def extract_trigger_tag(self, text: str) -> Optional[tuple[str, str]]:
        return extract_trigger_tag(text, self.vocabulary)

    def strip_all_triggers(self, text: str, note_type: NoteType) -> str:
        return strip_all_triggers(text, note_type, self.vocabulary, self.variants)
