"""Remote classification providers.

Adapters that satisfy the remote contracts in ``quill.classifier.fallback``.
"""

from .base import BaseProvider
from .chain import FallbackChain, build_default_chain, build_provider
from .claude import ClaudeProvider
from .ollama import OllamaProvider

__all__ = [
    "BaseProvider",
    "ClaudeProvider",
    "FallbackChain",
    "OllamaProvider",
    "build_default_chain",
    "build_provider",
]
