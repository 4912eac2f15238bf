"""Version information for the Quill capture classifier.

Single source of truth for version number.
Follows PEP 440 and semantic versioning principles.
"""

__version__ = "1.2.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Version history:
# 1.2.0 - Semantic section detection, accuracy harness
# 1.1.0 - Fuzzy trigger matching for OCR misreads, provider chain
# 1.0.0 - Explicit triggers, content heuristics, section splitting
