"""Accuracy harness: labelled captures and a runner that scores a classifier."""

from .cases import ACCURACY_CASES, AccuracyCase, CaseCategory, Difficulty, cases_for
from .runner import AccuracyReport, CaseOutcome, Tally, format_report, run_accuracy

__all__ = [
    "ACCURACY_CASES",
    "AccuracyCase",
    "AccuracyReport",
    "CaseCategory",
    "CaseOutcome",
    "Difficulty",
    "Tally",
    "cases_for",
    "format_report",
    "run_accuracy",
]
