"""Classify and split a handwritten capture.

Demonstrates:
- Local classification (explicit markers, OCR-damaged markers, heuristics)
- Section splitting for pages that hold several notes
- Remote fallback through the provider chain, with graceful degradation
- Context manager cleanup of provider connections

Requirements:
- Python 3.11+
- Optional: ANTHROPIC_API_KEY set, or an Ollama server on localhost:11434

Run:
    python3 examples/classify_capture.py
"""

import asyncio
import logging

from quill import NoteClassifier, SectionDetector, get_config
from quill.classifier.providers import build_default_chain

logger = logging.getLogger("quill.examples")

PAGE = """Weekend

#todo# Pick up dry cleaning
Buy milk

#email# Draft reply to Sarah about Thursday

#idea# What if the kettle ran on solar?"""

MARKERLESS = """Grocery list:
- Milk
- Bread

Meeting with design team on Thursday
Agenda: onboarding flow, next steps"""


async def main():
    config = get_config()
    chain = build_default_chain(config)

    try:
        classifier = NoteClassifier(fallback=chain, config=config)

        print("Single notes:")
        for text in ("#todo# Buy milk", ".meeting. Weekly sync", "Random thoughts on the project"):
            result = await classifier.classify(text)
            print(f"  {text!r:40} -> {result.note_type.value} ({result.method.value}, {result.confidence:.2f})")

        print("\nMarker-split page:")
        for section in await classifier.split_into_sections(PAGE):
            print(f"  [{section.note_type.display_name}] {section.content!r}")

        print("\nSemantic detection:")
        detection = await SectionDetector(classifier, splitter=chain).detect(MARKERLESS)
        print(f"  method={detection.method.value} auto_split={detection.should_auto_split}")
        for section in detection.sections:
            print(f"  [{section.note_type.display_name}] {section.content!r}")
    finally:
        await chain.aclose()


if __name__ == "__main__":
    asyncio.run(main())
