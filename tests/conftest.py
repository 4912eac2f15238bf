"""Shared pytest fixtures for Quill classifier tests.

Fixture Organization:
    - Config fixtures: ClassifierConfig instances built per test, never from the cached global
    - Fake remote tiers: in-memory RemoteClassifier / RemoteSectionSplitter doubles
    - Classifier fixtures: NoteClassifier wired with the fakes
"""

import asyncio
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional

import pytest

from quill.classifier import (
    NoteClassifier,
    RemoteClassification,
    RemoteSectionProposal,
)
from quill.config import ClassifierConfig, reset_config

# Test modules import the fakes below with "from conftest import ..."
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

# =============================================================================
# Fake remote tiers
# =============================================================================


class FakeFallback:
    """RemoteClassifier double that records calls.

    Args:
        answer: Returned from classify_remote
        error: Raised from classify_remote instead of answering
        delay: Seconds to sleep before answering (for timeout tests)
    """

    def __init__(
        self,
        answer: Optional[RemoteClassification] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.answer = answer
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, Any, list[str]]] = []

    async def classify_remote(
        self,
        content: str,
        image: Optional[Any] = None,
        known_tag_vocabulary: Sequence[str] = (),
    ) -> RemoteClassification:
        self.calls.append((content, image, list(known_tag_vocabulary)))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeSplitter:
    """RemoteSectionSplitter double that records calls."""

    def __init__(
        self,
        proposal: Optional[RemoteSectionProposal] = None,
        error: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.proposal = proposal
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def propose_sections(self, content: str) -> RemoteSectionProposal:
        self.calls.append(content)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.proposal


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep QUILL_* variables from the developer's shell out of every test."""
    for key in list(os.environ):
        if key.startswith("QUILL_") or key == "ANTHROPIC_API_KEY":
            monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config() -> ClassifierConfig:
    """Config with a short fallback timeout so slow fakes fail fast."""
    return ClassifierConfig(fallback_timeout_seconds=0.5)


@pytest.fixture
def local_classifier(config) -> NoteClassifier:
    """Classifier with no remote fallback."""
    return NoteClassifier(config=config)


@pytest.fixture
def fallback_answer() -> RemoteClassification:
    return RemoteClassification(note_type="idea", confidence=0.82, reasoning="Open-ended musing")


@pytest.fixture
def fake_fallback(fallback_answer) -> FakeFallback:
    return FakeFallback(answer=fallback_answer)


@pytest.fixture
def classifier(config, fake_fallback) -> NoteClassifier:
    """Classifier wired to a fake fallback that answers ``idea``."""
    return NoteClassifier(fallback=fake_fallback, config=config)
