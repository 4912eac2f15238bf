"""Trigger vocabulary: canonical markers and catalogued OCR misreads.

A marker is a hashtag-delimited keyword written by hand (``#todo#``) that
forces a note's type. Handwriting OCR regularly corrupts markers, so the
known corruptions are catalogued per canonical marker in
FUZZY_VARIANT_TABLE.

Both tables are immutable and built at import time.
"""

import re
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Optional

from ..models import NoteType, TriggerDefinition

__all__ = [
    "DEFAULT_VOCABULARY",
    "FUZZY_VARIANT_TABLE",
    "TRIGGER_TABLE",
    "TriggerVocabulary",
]

_CANONICAL_MARKERS: dict[NoteType, tuple[str, ...]] = {
    NoteType.TODO: ("#todo#", "#to-do#", "#tasks#", "#task#"),
    NoteType.EMAIL: ("#email#", "#mail#"),
    NoteType.MEETING: ("#meeting#", "#notes#", "#minutes#"),
    NoteType.REMINDER: ("#reminder#", "#remind#", "#remindme#"),
    NoteType.CONTACT: ("#contact#", "#person#", "#phone#"),
    NoteType.EXPENSE: ("#expense#", "#receipt#", "#spent#", "#paid#"),
    NoteType.SHOPPING: ("#shopping#", "#shop#", "#grocery#", "#groceries#", "#list#"),
    NoteType.RECIPE: ("#recipe#", "#cook#", "#bake#"),
    NoteType.EVENT: ("#event#", "#appointment#", "#schedule#", "#appt#"),
    NoteType.IDEA: ("#idea#", "#thought#", "#note-to-self#", "#notetoself#"),
    NoteType.EXTERNAL_PROMPT: ("#claude#", "#feature#", "#prompt#", "#request#", "#issue#"),
}

TRIGGER_TABLE: tuple[TriggerDefinition, ...] = tuple(
    TriggerDefinition(marker=marker, note_type=note_type)
    for note_type, markers in _CANONICAL_MARKERS.items()
    for marker in markers
)

# canonical marker -> misreads seen in handwriting OCR output
_VARIANTS_BY_CANONICAL: dict[str, tuple[str, ...]] = {
    "#todo#": ("#tod0#", "#todoo#", "#todolt#", "#todott#"),
    "#task#": ("#taskk#", "#tash#"),
    "#tasks#": ("#tashs#",),
    "#email#": ("#emaill#", "#emailtt#", "#ernail#", "#emai1#", "#emailt#"),
    "#mail#": ("#maill#", "#mai1#"),
    "#meeting#": ("#meetinq#", "#meetimg#", "#rneetinq#", "#rneeting#"),
    "#notes#": ("#notess#", "#note5#"),
    "#minutes#": ("#rninutes#", "#minutess#"),
    "#reminder#": ("#reminde#", "#rerinder#", "#rerninder#"),
    "#remind#": ("#rernind#", "#rernlnd#"),
    "#remindme#": ("#remindm3#",),
    "#contact#": ("#contacl#", "#contaci#", "#coniact#"),
    "#person#": ("#pers0n#", "#persun#"),
    "#phone#": ("#phon3#", "#fone#"),
    "#expense#": ("#expens3#", "#expanse#", "#expensee#"),
    "#receipt#": ("#recipt#", "#reciept#", "#recelpt#"),
    "#spent#": ("#spentt#", "#sp3nt#"),
    "#paid#": ("#pald#", "#pa1d#"),
    "#shopping#": ("#shoppinq#", "#shopplng#", "#shoppingg#"),
    "#shop#": ("#shopp#",),
    "#groceries#": ("#grocer1es#",),
    "#grocery#": ("#qrocery#",),
    "#list#": ("#listt#",),
    "#recipe#": ("#recipee#", "#recip3#", "#reclpe#"),
    "#cook#": ("#cookk#", "#c00k#"),
    "#bake#": ("#bakee#", "#bak3#"),
    "#event#": ("#eventt#", "#evnt#", "#3vent#"),
    "#appointment#": ("#appointrnent#", "#apointment#", "#appointmentt#"),
    "#schedule#": ("#schedu1e#", "#schedulle#"),
    "#appt#": ("#apptt#",),
    "#idea#": ("#ideaa#", "#1dea#", "#ldea#"),
    "#thought#": ("#thoughtt#", "#thouqht#", "#thoughl#"),
    "#notetoself#": ("#note2self#",),
    "#claude#": ("#c1aude#", "#ciaude#", "#claudee#", "#claube#"),
    "#feature#": ("#featur#", "#featuer#", "#featuree#", "#f3ature#"),
    "#prompt#": ("#prompl#", "#prornpt#", "#promptt#"),
    "#request#": ("#requesl#", "#requesi#", "#requestt#"),
    "#issue#": ("#issu3#", "#issuse#", "#issuee#"),
}

FUZZY_VARIANT_TABLE: Mapping[str, str] = MappingProxyType(
    {
        variant: canonical
        for canonical, variants in _VARIANTS_BY_CANONICAL.items()
        for variant in variants
    }
)


class TriggerVocabulary:
    """Immutable, injectable set of canonical triggers.

    Compiles a single case-insensitive alternation over every marker,
    longest first so ``#tasks#`` wins over ``#task#`` at the same offset.
    Matching is done on the original text so offsets need no translation.

    Example:
        >>> vocab = TriggerVocabulary(TRIGGER_TABLE)
        >>> vocab.lookup("#TODO#").note_type
        <NoteType.TODO: 'todo'>
    """

    __slots__ = ("_definitions", "_by_marker", "_pattern")

    def __init__(self, definitions: Iterable[TriggerDefinition]):
        defs = tuple(definitions)
        by_marker: dict[str, TriggerDefinition] = {}
        for definition in defs:
            marker = definition.marker.lower()
            if not (marker.startswith("#") and marker.endswith("#") and len(marker) > 2):
                raise ValueError(f"Malformed trigger marker: {definition.marker!r}")
            if marker in by_marker:
                raise ValueError(f"Duplicate trigger marker: {definition.marker!r}")
            if definition.note_type == NoteType.GENERAL:
                raise ValueError("The general type has no triggers")
            by_marker[marker] = TriggerDefinition(marker, definition.note_type)

        self._definitions = tuple(by_marker.values())
        self._by_marker = MappingProxyType(by_marker)
        alternation = "|".join(
            re.escape(m) for m in sorted(by_marker, key=len, reverse=True)
        )
        # (?!) never matches, for an empty vocabulary
        self._pattern = re.compile(alternation or "(?!)", re.IGNORECASE)

    @property
    def definitions(self) -> tuple[TriggerDefinition, ...]:
        return self._definitions

    @property
    def pattern(self) -> re.Pattern:
        """Compiled case-insensitive alternation of every marker."""
        return self._pattern

    def lookup(self, marker: str) -> Optional[TriggerDefinition]:
        """Return the definition for a marker, ignoring case."""
        return self._by_marker.get(marker.lower())

    def markers_for(self, note_type: NoteType) -> tuple[str, ...]:
        return tuple(d.marker for d in self._definitions if d.note_type == note_type)

    def tag_names(self) -> list[str]:
        """Marker bodies, for prompting remote classifiers about known tags."""
        return [d.body for d in self._definitions]

    def __contains__(self, marker: object) -> bool:
        return isinstance(marker, str) and marker.lower() in self._by_marker

    def __iter__(self):
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"TriggerVocabulary({len(self._definitions)} markers)"


DEFAULT_VOCABULARY = TriggerVocabulary(TRIGGER_TABLE)
