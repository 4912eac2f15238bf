"""Prompt templates for the remote classification tiers.

Both prompts ask for a bare JSON object so providers can parse the reply
with ``BaseProvider._parse_json``.
"""

from collections.abc import Sequence

__all__ = [
    "CLASSIFICATION_PROMPT",
    "SECTION_DETECTION_PROMPT",
    "build_classification_prompt",
    "build_section_detection_prompt",
]

_TYPE_GUIDE = """- general: anything that fits no other type (quotes, journal entries, loose notes)
- todo: tasks or checklists to complete
- email: a message to draft or send, with recipient, subject or salutation
- meeting: meeting notes, agendas, attendees, action items
- reminder: something to be reminded of at a time or place
- contact: a person's details, business cards
- expense: receipts, purchases, amounts spent
- shopping: items to buy, grocery lists
- recipe: ingredients and cooking steps
- event: appointments and scheduled happenings with a date or time
- idea: ideas, brainstorms, "what if" thoughts
- external_prompt: a request addressed to an AI assistant, feature requests, bug reports"""

CLASSIFICATION_PROMPT = """You classify handwritten notes captured by OCR.

Choose EXACTLY ONE type for the note below.

## NOTE TYPES
{type_guide}

## TAGS ALREADY IN USE
{known_tags}

## NOTE
<<<
{content}
>>>

OCR may have misread characters. Judge the intent of the note as a whole.

Respond with ONLY a JSON object:
{{"type": "<one of the types above>", "confidence": <0.0-1.0>, "reasoning": "<one sentence>"}}"""

SECTION_DETECTION_PROMPT = """You analyze handwritten notes captured by OCR.

Decide whether the text below contains SEVERAL independent notes (for
example a shopping list followed by meeting notes) or a single note.

## NOTE TYPES
{type_guide}

## TEXT
<<<
{content}
>>>

Rules:
- Copy each section's content VERBATIM from the text, in order.
- Only propose sections when the topics are clearly unrelated.
- A single note must be returned with hasSections false.

Respond with ONLY a JSON object:
{{"hasSections": <true|false>, "confidence": <0.0-1.0>, "sections": [{{"content": "<verbatim text>", "type": "<type>", "tags": ["<tag>"], "reasoning": "<one sentence>"}}]}}"""


def _truncate(content: str, max_chars: int) -> str:
    if len(content) > max_chars:
        return content[:max_chars] + "\n... [truncated]"
    return content


def build_classification_prompt(
    content: str, known_tags: Sequence[str] = (), max_chars: int = 4000
) -> str:
    """Build the single-note classification prompt.

    Args:
        content: Capture text (truncated to ``max_chars``)
        known_tags: Tag names already in use, offered for consistent wording
        max_chars: Maximum capture length included in the prompt

    Returns:
        Formatted prompt string
    """
    tags = ", ".join(known_tags) if known_tags else "(none)"
    return CLASSIFICATION_PROMPT.format(
        type_guide=_TYPE_GUIDE,
        known_tags=tags,
        content=_truncate(content, max_chars),
    )


def build_section_detection_prompt(content: str, max_chars: int = 4000) -> str:
    return SECTION_DETECTION_PROMPT.format(
        type_guide=_TYPE_GUIDE, content=_truncate(content, max_chars)
    )

