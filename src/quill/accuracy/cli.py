"""Score the note classifier against the labelled accuracy cases.

Runs locally by default. With --with-llm, low-confidence captures are sent
through the configured provider chain, so API keys or a running Ollama
server are needed.

Exit code is 1 when overall accuracy falls below --min-accuracy.
"""

import argparse
import asyncio
import sys

from ..classifier import NoteClassifier
from ..classifier.providers import build_default_chain
from ..config import get_config
from .cases import ACCURACY_CASES, CaseCategory, Difficulty, cases_for
from .runner import format_report, run_accuracy


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="quill-accuracy",
        description="Score the note classifier against the labelled accuracy cases.",
    )
    parser.add_argument(
        "--with-llm",
        action="store_true",
        help="Escalate low-confidence captures to the provider chain",
    )
    parser.add_argument(
        "--category",
        choices=[c.value for c in CaseCategory],
        help="Only run cases of this category",
    )
    parser.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        help="Only run cases of this difficulty",
    )
    parser.add_argument(
        "--min-accuracy",
        type=float,
        default=0.0,
        help="Fail when overall accuracy is below this fraction (0.0-1.0)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.7,
        help="Per-type accuracy below this is listed in the report",
    )
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    config = get_config()
    chain = build_default_chain(config) if args.with_llm else None
    classifier = NoteClassifier(fallback=chain, config=config)

    if args.category or args.difficulty:
        cases = cases_for(
            category=CaseCategory(args.category) if args.category else None,
            difficulty=Difficulty(args.difficulty) if args.difficulty else None,
        )
    else:
        cases = list(ACCURACY_CASES)

    try:
        report = await run_accuracy(classifier, cases)
    finally:
        if chain is not None:
            await chain.aclose()

    print(format_report(report, threshold=args.threshold))
    return 0 if report.overall.accuracy >= args.min_accuracy else 1


def main(argv=None) -> None:
    args = parse_args(argv)
    try:
        sys.exit(asyncio.run(_run(args)))
    except KeyboardInterrupt:
        sys.exit(130)
