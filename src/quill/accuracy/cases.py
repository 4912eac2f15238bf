"""Labelled captures for measuring classification accuracy.

Cases are grouped by how clear-cut they are (category) and how hard they
are for the local tiers (difficulty). Hard and ambiguous cases are expected
to need the remote fallback; they are kept to make regressions visible,
not because the heuristics must get them right.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import NoteType

__all__ = ["ACCURACY_CASES", "AccuracyCase", "CaseCategory", "Difficulty", "cases_for"]


class CaseCategory(str, Enum):
    OBVIOUS = "obvious"
    EDGE_CASE = "edge_case"
    AMBIGUOUS = "ambiguous"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class AccuracyCase:
    id: str
    text: str
    expected_type: NoteType
    category: CaseCategory
    difficulty: Difficulty
    notes: Optional[str] = None


def _case(id, text, expected_type, category, difficulty, notes=None) -> AccuracyCase:
    return AccuracyCase(id, text.strip("\n"), expected_type, category, difficulty, notes)


_O, _E, _A = CaseCategory.OBVIOUS, CaseCategory.EDGE_CASE, CaseCategory.AMBIGUOUS
_EASY, _MEDIUM, _HARD = Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD

ACCURACY_CASES: tuple[AccuracyCase, ...] = (
    # todo
    _case("todo-001", """
- Buy groceries
- Call dentist
- Finish report
""", NoteType.TODO, _O, _EASY, "Bulleted task list"),
    _case("todo-002", """
TODO:
1. Review budget
2. Send invoices
3. Update spreadsheet
""", NoteType.TODO, _O, _EASY, "Numbered list with TODO label"),
    _case("todo-003", """
[ ] Buy milk
[ ] Clean room
""", NoteType.TODO, _O, _EASY, "Checkboxes"),
    # quotes have no dedicated type
    _case("quote-001", """
"The best time to plant a tree was 20 years ago. The second best time is now."
- Chinese Proverb
""", NoteType.GENERAL, _O, _EASY, "Proverb with attribution"),
    _case("quote-002", """
"Do or do not. There is no try."
- Yoda
""", NoteType.GENERAL, _O, _EASY, "Famous quote with attribution"),
    _case("quote-003", """
Quote from today's meeting:
"We need to ship by Friday or we'll miss the deadline"
""", NoteType.MEETING, _E, _HARD, "Quoted line inside meeting context"),
    _case("quote-004", """
Remember what Sarah said: "Please call me back before 5pm"
""", NoteType.REMINDER, _E, _HARD, "Intent is a reminder, the quote is incidental"),
    # contact
    _case("contact-001", """
John Smith
Senior Developer
Acme Corp
john.smith@acme.com
(555) 123-4567
""", NoteType.CONTACT, _O, _EASY, "Classic business card layout"),
    _case("contact-002", """
Sarah Johnson
sarah.j@example.com
555-9876
""", NoteType.CONTACT, _O, _EASY, "Minimal contact info"),
    _case("contact-003", """
Met Jane at conference
jane@startup.io
Wants to discuss partnership
""", NoteType.CONTACT, _E, _MEDIUM, "Contact with context"),
    # meeting
    _case("meeting-001", """
Meeting with Marketing Team
Jan 15, 2026 - 2pm
Attendees: Sarah, Mike, Tom
Agenda:
- Q1 campaign review
- Budget discussion
Action items:
- Sarah to send report by Friday
""", NoteType.MEETING, _O, _EASY, "Full meeting structure"),
    _case("meeting-002", """
Call with client at 3pm tomorrow
Discuss project timeline
Need to review their feedback
""", NoteType.MEETING, _O, _MEDIUM, "Informal meeting note"),
    # event
    _case("event-001", """
Tech Conference 2026
March 15-17
San Francisco Convention Center
Registration: 8am
Keynote: 9:30am
""", NoteType.EVENT, _O, _EASY, "Event flyer"),
    _case("event-002", """
Doctor appointment
Thursday 2pm
City Medical Center
""", NoteType.EVENT, _O, _EASY, "Simple appointment"),
    # email
    _case("email-001", """
To: team@company.com
Subject: Project Update
Hi Team,
Quick update on the project status...
Best,
Mike
""", NoteType.EMAIL, _O, _EASY, "Email with headers"),
    _case("email-002", """
Draft email to Sarah:
Thanks for your help yesterday. Can we schedule a follow-up call?
""", NoteType.EMAIL, _O, _MEDIUM, "Informal email draft"),
    # expense
    _case("expense-001", """
Office Supplies Store
Jan 4, 2026
Pens: $12.99
Notebooks: $24.50
Stapler: $8.99
Total: $46.48
""", NoteType.EXPENSE, _O, _EASY, "Itemized receipt"),
    _case("expense-002", """
Lunch meeting with client
$87.50
Italian Restaurant
""", NoteType.EXPENSE, _O, _MEDIUM, "Single amount on its own line"),
    # shopping
    _case("shopping-001", """
Grocery list:
- Milk
- Bread
- Eggs
- Apples
- Chicken
""", NoteType.SHOPPING, _O, _EASY, "Classic grocery list"),
    _case("shopping-002", """
Hardware store:
Screws
Paint (blue)
Brushes
""", NoteType.SHOPPING, _O, _EASY, "Non-grocery shopping"),
    # recipe
    _case("recipe-001", """
Mom's Chocolate Chip Cookies
Ingredients:
- 2 cups flour
- 1 cup butter
- 1 cup sugar
- 2 eggs
- Chocolate chips
Bake at 350°F for 12 minutes
""", NoteType.RECIPE, _O, _EASY, "Ingredients and instructions"),
    # idea
    _case("idea-001", """
App idea: Collaborative whiteboard with real-time sync
Features:
- Multi-user drawing
- Voice chat
- Export to PDF
Could integrate with our existing platform
""", NoteType.IDEA, _O, _MEDIUM, "Product idea with details"),
    _case("idea-002", """
What if we redesigned the homepage with a minimalist approach?
Focus on three key actions instead of overwhelming new users.
""", NoteType.IDEA, _O, _MEDIUM, "Design idea"),
    # reminder
    _case("reminder-001", """
Remind me to call Mom on Sunday
""", NoteType.REMINDER, _O, _EASY, "Voice-command reminder"),
    _case("reminder-002", """
Don't forget:
- Submit timesheet by Friday
- Renew parking permit
""", NoteType.REMINDER, _E, _MEDIUM, "Could be todo; 'don't forget' decides"),
    # external prompt
    _case("prompt-001", """
@Claude: Help me write a function that validates email addresses in Swift
Include error handling and unit tests
""", NoteType.EXTERNAL_PROMPT, _O, _EASY, "Explicit assistant mention"),
    _case("prompt-002", """
Write a regex pattern for phone number validation
Should support US and international formats
""", NoteType.EXTERNAL_PROMPT, _E, _HARD, "Request without an explicit mention"),
    # edge cases
    _case("edge-001", """
Pick up dry cleaning
""", NoteType.TODO, _A, _MEDIUM, "Could be todo or reminder"),
    _case("edge-002", """
Coffee meeting notes
Discussed new project timeline
Next steps: draft proposal
""", NoteType.MEETING, _E, _MEDIUM, "Informal meeting note"),
    _case("edge-003", """
Ideas from brainstorming session:
1. Mobile app redesign
2. API improvements
3. Better analytics
""", NoteType.IDEA, _E, _MEDIUM, "Idea list that reads like meeting notes"),
    _case("edge-004", """
Random thoughts on the project
""", NoteType.GENERAL, _A, _HARD, "Too vague to classify"),
    _case("general-001", """
Just some notes from reading today
Interesting perspective on productivity
""", NoteType.GENERAL, _O, _EASY, "Clearly general"),
    # markers
    _case("marker-001", "#todo# Buy milk", NoteType.TODO, _O, _EASY, "Exact marker"),
    _case("marker-002", "#tod0# Buy milk", NoteType.TODO, _O, _EASY, "OCR-damaged marker"),
    _case("marker-003", ".meeting. Weekly sync", NoteType.MEETING, _E, _MEDIUM, "Periods read for hashes"),
)


def cases_for(
    category: Optional[CaseCategory] = None, difficulty: Optional[Difficulty] = None
) -> list[AccuracyCase]:
    return [
        case
        for case in ACCURACY_CASES
        if (category is None or case.category == category)
        and (difficulty is None or case.difficulty == difficulty)
    ]
