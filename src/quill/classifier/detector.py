"""Section detection for the capture preview.

Marker-led captures are split deterministically. For captures without
markers, an injected remote splitter may propose a semantic split (say, a
grocery list followed by meeting notes). The proposal is only a
suggestion: ``should_auto_split`` pre-selects splitting in the preview when
the model is confident enough, and the user still confirms before anything
is saved.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import ClassifierConfig
from ..models import ClassificationMethod, ClassificationResult, NoteType, Section
from .fallback import RemoteSectionProposal, RemoteSectionSplitter
from .metrics import record_split
from .orchestrator import NoteClassifier
from .splitter import normalize_content, plan_sections, unsplit_section

logger = logging.getLogger("quill.classifier.detector")

__all__ = ["DetectionMethod", "SectionDetectionResult", "SectionDetector"]

MIN_SEMANTIC_SECTIONS = 2


class DetectionMethod(str, Enum):
    EXPLICIT_MARKERS = "explicit_markers"
    SEMANTIC_LLM = "semantic_llm"
    NONE = "none"


@dataclass(frozen=True)
class SectionDetectionResult:
    """Sections offered to the preview, and whether to pre-select splitting."""

    sections: list[Section]
    should_auto_split: bool
    method: DetectionMethod

    @property
    def has_multiple_sections(self) -> bool:
        return len(self.sections) >= MIN_SEMANTIC_SECTIONS


class SectionDetector:
    """Finds the notes inside one capture.

    Args:
        classifier: Classifier used for marker vocabulary and whole-capture fallback
        splitter: Remote splitter for marker-free captures (optional)
        config: Settings (default: the classifier's config)
    """

    def __init__(
        self,
        classifier: NoteClassifier,
        splitter: Optional[RemoteSectionSplitter] = None,
        config: Optional[ClassifierConfig] = None,
    ):
        self.classifier = classifier
        self.splitter = splitter
        self.config = config or classifier.config

    async def detect(self, text: str) -> SectionDetectionResult:
        text = text if isinstance(text, str) else ""

        sections = plan_sections(text, self.classifier.vocabulary)
        if sections is not None:
            record_split(DetectionMethod.EXPLICIT_MARKERS.value, len(sections))
            return SectionDetectionResult(
                sections=sections,
                should_auto_split=len(sections) >= MIN_SEMANTIC_SECTIONS,
                method=DetectionMethod.EXPLICIT_MARKERS,
            )

        if self._semantic_enabled(text):
            proposal = await self._propose(text)
            if proposal is not None:
                detected = self._from_proposal(text, proposal)
                if detected is not None:
                    record_split(DetectionMethod.SEMANTIC_LLM.value, len(detected.sections))
                    return detected

        result = await self.classifier.classify(text)
        record_split(DetectionMethod.NONE.value, 1)
        return SectionDetectionResult(
            sections=[unsplit_section(text, result)],
            should_auto_split=False,
            method=DetectionMethod.NONE,
        )

    def _semantic_enabled(self, text: str) -> bool:
        return (
            self.splitter is not None
            and self.config.llm_enabled
            and len(text.strip()) > self.config.min_semantic_split_chars
        )

    async def _propose(self, text: str) -> Optional[RemoteSectionProposal]:
        try:
            return await asyncio.wait_for(
                self.splitter.propose_sections(text),
                timeout=self.config.fallback_timeout_seconds,
            )
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.warning("section_proposal_failed", extra={"reason": "cancelled"})
        except Exception as e:
            logger.warning(
                "section_proposal_failed",
                extra={"reason": type(e).__name__, "error": str(e)},
            )
        return None

    def _from_proposal(
        self, text: str, proposal: RemoteSectionProposal
    ) -> Optional[SectionDetectionResult]:
        """Anchor proposed sections in the original text.

        Proposed content is searched for in order, each search starting where
        the previous section ended, so offsets refer to the real capture.
        Sections that cannot be found are dropped.
        """
        if not proposal.has_sections or len(proposal.sections) < MIN_SEMANTIC_SECTIONS:
            return None

        try:
            confidence = float(proposal.confidence)
        except (TypeError, ValueError):
            return None
        if math.isnan(confidence):
            return None
        confidence = min(1.0, max(0.0, confidence))

        sections: list[Section] = []
        cursor = 0
        for proposed in proposal.sections:
            needle = proposed.content.strip()
            if not needle:
                continue
            start = text.find(needle, cursor)
            if start < 0:
                logger.debug("proposed_section_not_found", extra={"length": len(needle)})
                continue
            end = start + len(needle)
            cursor = end
            note_type = NoteType.from_identifier(proposed.note_type) or NoteType.GENERAL
            sections.append(
                Section(
                    note_type=note_type,
                    content=normalize_content(needle),
                    start_offset=start,
                    end_offset=end,
                    result=ClassificationResult(
                        note_type=note_type,
                        confidence=confidence,
                        method=ClassificationMethod.LLM,
                        reasoning=proposed.reasoning or None,
                    ),
                )
            )

        if len(sections) < MIN_SEMANTIC_SECTIONS:
            return None

        should_auto_split = confidence >= self.config.auto_split_threshold
        logger.info(
            "semantic_sections_detected",
            extra={
                "sections": len(sections),
                "confidence": confidence,
                "auto_split": should_auto_split,
            },
        )
        return SectionDetectionResult(
            sections=sections,
            should_auto_split=should_auto_split,
            method=DetectionMethod.SEMANTIC_LLM,
        )
