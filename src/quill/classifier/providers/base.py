"""Base class for remote classification providers.

A provider is one model endpoint. It implements both remote contracts
(``RemoteClassifier`` and ``RemoteSectionSplitter``) on top of a single
``_complete(prompt)`` call, and maps its transport errors onto:

- TimeoutError: the request exceeded the timeout
- ConnectionError: the provider is unreachable or refused the request
- ValueError: the reply could not be parsed
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Optional

from ..fallback import RemoteClassification, RemoteSection, RemoteSectionProposal
from ..prompts import build_classification_prompt, build_section_detection_prompt

logger = logging.getLogger("quill.classifier.providers")

__all__ = ["BaseProvider"]


class BaseProvider(ABC):
    """Abstract base class for remote providers (Claude, Ollama)."""

    def __init__(self, timeout: float = 10.0, max_input_chars: int = 4000):
        """Initialize provider.

        Args:
            timeout: Request timeout in seconds
            max_input_chars: Capture text beyond this is truncated in prompts
        """
        self.timeout = timeout
        self.max_input_chars = max_input_chars

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and metrics ("claude", "ollama")."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider is configured well enough to be called."""

    @abstractmethod
    async def _complete(self, prompt: str) -> str:
        """Send a prompt and return the raw text reply.

        Raises:
            TimeoutError: If request exceeds timeout
            ConnectionError: If provider is unreachable
            ValueError: If the reply is malformed
        """

    async def classify_remote(
        self,
        content: str,
        image: Optional[Any] = None,
        known_tag_vocabulary: Sequence[str] = (),
    ) -> RemoteClassification:
        """Classify content with this provider.

        ``image`` is accepted for contract compatibility; text-only providers
        ignore it.
        """
        prompt = build_classification_prompt(
            content, known_tag_vocabulary, max_chars=self.max_input_chars
        )
        data = self._parse_json(await self._complete(prompt))

        if "type" not in data:
            raise ValueError("Missing 'type' in response")
        try:
            confidence = float(data.get("confidence", 0.0))
        except (TypeError, ValueError) as err:
            raise ValueError(f"Invalid confidence value: {data.get('confidence')}") from err

        logger.info(
            "remote_classification",
            extra={"provider": self.name, "type": data["type"], "confidence": confidence},
        )
        return RemoteClassification(
            note_type=str(data["type"]),
            confidence=confidence,
            reasoning=str(data.get("reasoning", "")),
        )

    async def propose_sections(self, content: str) -> RemoteSectionProposal:
        """Ask this provider whether marker-free text holds several notes."""
        prompt = build_section_detection_prompt(content, max_chars=self.max_input_chars)
        data = self._parse_json(await self._complete(prompt))

        raw_sections = data.get("sections") or []
        if not isinstance(raw_sections, list):
            raise ValueError("'sections' must be a list")

        sections = []
        for item in raw_sections:
            if not isinstance(item, dict) or not str(item.get("content", "")).strip():
                continue
            tags = item.get("tags") or []
            if not isinstance(tags, list):
                tags = [tags]
            sections.append(
                RemoteSection(
                    content=str(item["content"]),
                    note_type=str(item.get("type", "general")),
                    reasoning=str(item.get("reasoning", "")),
                    tags=tuple(str(t) for t in tags),
                )
            )

        try:
            confidence = float(data.get("confidence", 0.0))
        except (TypeError, ValueError) as err:
            raise ValueError(f"Invalid confidence value: {data.get('confidence')}") from err

        return RemoteSectionProposal(
            has_sections=bool(data.get("hasSections", data.get("has_sections", False))),
            confidence=confidence,
            sections=tuple(sections),
        )

    def _parse_json(self, response_text: str) -> dict:
        """Extract a JSON object from a model reply.

        Handles clean JSON, JSON wrapped in a markdown code block, and JSON
        surrounded by prose.

        Raises:
            ValueError: If no JSON object can be parsed
        """
        text = response_text.strip()

        candidates = [text]
        code_block = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
        if code_block:
            candidates.append(code_block.group(1))
        braces = re.search(r"\{.*\}", text, re.DOTALL)
        if braces:
            candidates.append(braces.group(0))

        for candidate in candidates:
            try:
                result = json.loads(candidate)
            except json.JSONDecodeError:
                continue
            if isinstance(result, dict):
                return result

        logger.warning(
            "json_parse_failed", extra={"provider": self.name, "response_length": len(text)}
        )
        raise ValueError(f"Could not parse JSON from {self.name} response")

    async def aclose(self) -> None:
        """Release network resources. Override in subclasses that hold any."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
