"""Run the accuracy cases through a classifier and tally the results."""

import logging
import time
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..classifier.orchestrator import NoteClassifier
from ..models import ClassificationMethod, NoteType
from .cases import ACCURACY_CASES, AccuracyCase, Difficulty

logger = logging.getLogger("quill.accuracy.runner")

__all__ = ["AccuracyReport", "CaseOutcome", "Tally", "format_report", "run_accuracy"]


@dataclass
class Tally:
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0

    def add(self, passed: bool) -> None:
        self.total += 1
        if passed:
            self.correct += 1


@dataclass(frozen=True)
class CaseOutcome:
    case: AccuracyCase
    actual_type: NoteType
    confidence: float
    method: ClassificationMethod

    @property
    def passed(self) -> bool:
        return self.actual_type == self.case.expected_type


@dataclass
class AccuracyReport:
    overall: Tally = field(default_factory=Tally)
    by_type: dict[NoteType, Tally] = field(default_factory=lambda: defaultdict(Tally))
    by_difficulty: dict[Difficulty, Tally] = field(default_factory=lambda: defaultdict(Tally))
    outcomes: list[CaseOutcome] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def failures(self) -> list[CaseOutcome]:
        return [o for o in self.outcomes if not o.passed]

    def record(self, outcome: CaseOutcome) -> None:
        self.outcomes.append(outcome)
        self.overall.add(outcome.passed)
        self.by_type[outcome.case.expected_type].add(outcome.passed)
        self.by_difficulty[outcome.case.difficulty].add(outcome.passed)

    def low_accuracy_types(self, threshold: float = 0.7) -> list[NoteType]:
        """Types whose accuracy falls below ``threshold``, worst first."""
        low = [t for t, tally in self.by_type.items() if tally.accuracy < threshold]
        return sorted(low, key=lambda t: (self.by_type[t].accuracy, t.value))


async def run_accuracy(
    classifier: NoteClassifier, cases: Iterable[AccuracyCase] = ACCURACY_CASES
) -> AccuracyReport:
    """Classify every case and collect the outcome.

    Cases run one after another so remote providers see a steady request
    rate rather than a burst.
    """
    report = AccuracyReport()
    started = time.perf_counter()

    for case in cases:
        result = await classifier.classify(case.text)
        outcome = CaseOutcome(
            case=case,
            actual_type=result.note_type,
            confidence=result.confidence,
            method=result.method,
        )
        report.record(outcome)
        if not outcome.passed:
            logger.debug(
                "accuracy_case_failed",
                extra={
                    "case_id": case.id,
                    "expected": case.expected_type.value,
                    "actual": result.note_type.value,
                    "method": result.method.value,
                },
            )

    report.elapsed_seconds = time.perf_counter() - started
    logger.info(
        "accuracy_run_complete",
        extra={
            "cases": report.overall.total,
            "correct": report.overall.correct,
            "accuracy": round(report.overall.accuracy, 3),
        },
    )
    return report


def _pct(tally: Tally) -> str:
    return f"{tally.accuracy * 100:5.1f}% ({tally.correct}/{tally.total})"


def format_report(report: AccuracyReport, threshold: float = 0.7) -> str:
    """Plain-text summary for the terminal."""
    lines = [
        "Classification accuracy",
        "=" * 40,
        f"Overall:    {_pct(report.overall)}",
        f"Elapsed:    {report.elapsed_seconds:.2f}s",
        "",
        "By difficulty:",
    ]
    for difficulty in Difficulty:
        if difficulty in report.by_difficulty:
            lines.append(f"  {difficulty.value:<10} {_pct(report.by_difficulty[difficulty])}")

    lines += ["", "By type:"]
    for note_type in NoteType:
        if note_type in report.by_type:
            lines.append(f"  {note_type.value:<16} {_pct(report.by_type[note_type])}")

    failures = report.failures
    if failures:
        lines += ["", f"Failures ({len(failures)}):"]
        for outcome in failures:
            lines.append(
                f"  {outcome.case.id}: expected {outcome.case.expected_type.value}, "
                f"got {outcome.actual_type.value} "
                f"({outcome.method.value}, {outcome.confidence:.2f})"
            )

    low = report.low_accuracy_types(threshold)
    if low:
        lines += ["", f"Below {threshold:.0%}: " + ", ".join(t.value for t in low)]

    return "\n".join(lines)
