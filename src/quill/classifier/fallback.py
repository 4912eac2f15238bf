"""Contracts for the remote (LLM) tiers.

The classifier core never talks to a model directly. It is handed objects
that satisfy these protocols; ``quill.classifier.providers`` has adapters
for Anthropic and Ollama, and tests pass in-memory fakes.

Any exception raised by a remote call counts as a failure and is absorbed
by the caller, which then falls back to the local result.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

__all__ = [
    "FallbackUnavailableError",
    "QuillError",
    "RemoteClassification",
    "RemoteClassifier",
    "RemoteSection",
    "RemoteSectionProposal",
    "RemoteSectionSplitter",
]


class QuillError(Exception):
    """Base class for errors raised by this package."""


class FallbackUnavailableError(QuillError):
    """Raised when no remote provider could serve a request."""

    def __init__(self, message: str, errors: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


@dataclass(frozen=True)
class RemoteClassification:
    """Answer from a remote classifier.

    ``note_type`` is the raw label the model produced; the orchestrator maps
    it onto NoteType and treats unknown labels as a failed call.
    """

    note_type: str
    confidence: float
    reasoning: str = ""


@dataclass(frozen=True)
class RemoteSection:
    content: str
    note_type: str
    reasoning: str = ""
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class RemoteSectionProposal:
    """A model's proposal for splitting marker-free text into notes."""

    has_sections: bool
    confidence: float
    sections: tuple[RemoteSection, ...] = field(default_factory=tuple)


@runtime_checkable
class RemoteClassifier(Protocol):
    async def classify_remote(
        self,
        content: str,
        image: Optional[Any] = None,
        known_tag_vocabulary: Sequence[str] = (),
    ) -> RemoteClassification:
        """Classify content remotely.

        Args:
            content: Capture text
            image: Opaque image handle, passed through untouched
            known_tag_vocabulary: Tag names the caller already uses, as a hint

        Raises:
            Exception: Any failure; callers degrade instead of propagating
        """
        ...


@runtime_checkable
class RemoteSectionSplitter(Protocol):
    async def propose_sections(self, content: str) -> RemoteSectionProposal:
        """Ask a model whether marker-free text holds several notes."""
        ...
