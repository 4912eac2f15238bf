"""Tests for content heuristics."""

import pytest

from quill.accuracy import ACCURACY_CASES
from quill.classifier.heuristics import (
    BUSINESS_CARD_THRESHOLD,
    HEURISTIC_PRIORITY,
    HeuristicCheck,
    business_card_score,
    match_heuristic,
)
from quill.classifier.orchestrator import NoteClassifier
from quill.classifier.vocabulary import TriggerVocabulary
from quill.models import (
    HEURISTIC_FLOOR,
    HEURISTIC_MAX,
    ClassificationMethod,
    NoteType,
    TriggerDefinition,
)

BUSINESS_CARD = """John Smith
Senior Developer
Acme Corp
john.smith@acme.com
(555) 123-4567"""


class TestMatchHeuristic:
    """Test heuristic classification of marker-free text."""

    def test_email_headers(self):
        result = match_heuristic("To: team@company.com\nSubject: Update\nHi all")
        assert result.note_type == NoteType.EMAIL
        assert result.confidence == 0.8

    def test_email_salutation_and_sign_off(self):
        result = match_heuristic("Dear John,\nThanks for the notes.\nBest regards,\nAmy")
        assert result.note_type == NoteType.EMAIL

    def test_business_card(self):
        result = match_heuristic(BUSINESS_CARD)
        assert result.note_type == NoteType.CONTACT
        assert result.confidence == HEURISTIC_MAX

    def test_external_prompt(self):
        result = match_heuristic("@Claude: write a parser for these receipts")
        assert result.note_type == NoteType.EXTERNAL_PROMPT

    def test_reminder(self):
        result = match_heuristic("Remind me to call Mom on Sunday")
        assert result.note_type == NoteType.REMINDER
        assert result.confidence == 0.8

    def test_checkboxes(self):
        result = match_heuristic("[ ] Buy milk\n[ ] Clean room")
        assert result.note_type == NoteType.TODO
        assert result.confidence == 0.8

    def test_receipt_with_total(self):
        result = match_heuristic("Pens: $12.99\nTotal: $12.99")
        assert result.note_type == NoteType.EXPENSE
        assert result.confidence == 0.85

    def test_meeting(self):
        result = match_heuristic("Meeting with Marketing Team\nAttendees: Sarah, Mike")
        assert result.note_type == NoteType.MEETING

    def test_grocery_list(self):
        result = match_heuristic("Grocery list:\n- Milk\n- Bread")
        assert result.note_type == NoteType.SHOPPING
        assert result.confidence == 0.85

    def test_idea(self):
        result = match_heuristic("What if the homepage had only three buttons?")
        assert result.note_type == NoteType.IDEA

    def test_task_lines(self):
        result = match_heuristic("- Buy groceries\n- Call dentist\n- Finish report")
        assert result.note_type == NoteType.TODO
        assert result.confidence == 0.75

    def test_single_short_task_is_weak(self):
        """A lone errand is a todo, but not one confident enough to skip the fallback."""
        result = match_heuristic("Pick up dry cleaning")
        assert result.note_type == NoteType.TODO
        assert result.confidence < 0.7

    def test_nothing_matches(self):
        result = match_heuristic("Random thoughts on the project")
        assert result.note_type == NoteType.GENERAL
        assert result.confidence == HEURISTIC_FLOOR
        assert result.method == ClassificationMethod.HEURISTIC
        assert result.reasoning == "No content signals matched"

    @pytest.mark.parametrize("value", ["", "   \n\t", None])
    def test_empty_input_is_general(self, value):
        result = match_heuristic(value)
        assert result.note_type == NoteType.GENERAL
        assert result.confidence == HEURISTIC_FLOOR

    def test_priority_breaks_ties(self):
        """Reminder outranks todo when both fire."""
        result = match_heuristic("Don't forget:\n[ ] Submit timesheet\n[ ] Renew permit")
        assert result.note_type == NoteType.REMINDER

    def test_custom_checks_clamped(self):
        """Out-of-range check confidences are clamped into the heuristic range."""
        checks = (
            HeuristicCheck("loud", NoteType.IDEA, lambda text: 5.0),
        )
        result = match_heuristic("anything", checks=checks)
        assert result.note_type == NoteType.IDEA
        assert result.confidence == HEURISTIC_MAX

        checks = (HeuristicCheck("quiet", NoteType.IDEA, lambda text: 0.01),)
        assert match_heuristic("anything", checks=checks).confidence == HEURISTIC_FLOOR

    def test_reasoning_names_the_check(self):
        result = match_heuristic("Remind me to water the plants")
        assert "reminder" in result.reasoning

    @pytest.mark.parametrize("case", ACCURACY_CASES, ids=lambda c: c.id)
    def test_confidence_within_range(self, case):
        result = match_heuristic(case.text)
        assert HEURISTIC_FLOOR <= result.confidence <= HEURISTIC_MAX
        assert result.method == ClassificationMethod.HEURISTIC


class TestBusinessCardScore:
    """Test business card scoring."""

    def test_card_scores_above_threshold(self):
        assert business_card_score(BUSINESS_CARD) >= BUSINESS_CARD_THRESHOLD

    def test_marker_disqualifies(self):
        assert business_card_score("#todo# " + BUSINESS_CARD) < 0

    def test_prose_scores_low(self):
        prose = (
            "I spent the afternoon reading about the history of typography and how "
            "printers in the fifteenth century set each line by hand, which made me "
            "think about how much we take for granted when we open a word processor "
            "and start typing without any thought for the craft behind it."
        )
        assert business_card_score(prose) < BUSINESS_CARD_THRESHOLD

    def test_empty(self):
        assert business_card_score("") == 0


class TestCustomVocabulary:
    """Only markers of the vocabulary in use disqualify a business card."""

    CHORES = TriggerVocabulary([TriggerDefinition("#chore#", NoteType.TODO)])
    CARD_WITH_HASHTAG = BUSINESS_CARD + "\n#todo#"

    def test_foreign_marker_does_not_disqualify(self):
        assert business_card_score(self.CARD_WITH_HASHTAG, self.CHORES) >= BUSINESS_CARD_THRESHOLD
        assert business_card_score(BUSINESS_CARD + "\n#chore#", self.CHORES) < 0

    def test_match_heuristic_uses_vocabulary(self):
        result = match_heuristic(self.CARD_WITH_HASHTAG, vocabulary=self.CHORES)
        assert result.note_type == NoteType.CONTACT

    def test_classifier_passes_its_vocabulary(self):
        classifier = NoteClassifier(vocabulary=self.CHORES)
        result = classifier.classify_local(self.CARD_WITH_HASHTAG)

        assert result.note_type == NoteType.CONTACT
        assert result.method == ClassificationMethod.HEURISTIC


class TestPriorityList:
    def test_email_checked_before_contact(self):
        """Emails quote addresses too; the email check must run first."""
        names = [check.name for check in HEURISTIC_PRIORITY]
        assert names.index("email") < names.index("business_card")

    def test_task_opening_runs_last(self):
        assert HEURISTIC_PRIORITY[-1].name == "task_opening"

    def test_general_never_in_priority_list(self):
        assert all(check.note_type != NoteType.GENERAL for check in HEURISTIC_PRIORITY)
