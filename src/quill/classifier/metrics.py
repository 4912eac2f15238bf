"""Prometheus metrics for note classification and splitting.

All metrics use the ``quill_`` prefix. Labels are low-cardinality enums
(method, type, outcome, provider); capture text never becomes a label.
"""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger("quill.classifier.metrics")

__all__ = [
    "classifier_confidence",
    "classifier_fallback_total",
    "classifier_latency_seconds",
    "classifier_requests_total",
    "provider_failures_total",
    "record_classification",
    "record_fallback",
    "record_provider_failure",
    "record_split",
    "splitter_sections",
]

# =============================================================================
# PROMETHEUS METRICS
# =============================================================================

classifier_requests_total = Counter(
    "quill_classifier_requests_total",
    "Classification results by resolving method and type",
    ["method", "note_type"],
)

classifier_confidence = Histogram(
    "quill_classifier_confidence",
    "Confidence of resolved classifications",
    ["method"],
    buckets=[0.3, 0.5, 0.7, 0.8, 0.85, 0.9, 0.95, 1.0],
)

classifier_latency_seconds = Histogram(
    "quill_classifier_latency_seconds",
    "Classification latency, local tiers and remote fallback separately",
    ["stage"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

classifier_fallback_total = Counter(
    "quill_classifier_fallback_total",
    "Remote fallback attempts by outcome",
    ["outcome"],  # success / failed / cancelled
)

provider_failures_total = Counter(
    "quill_provider_failures_total",
    "Failed remote provider calls",
    ["provider", "reason"],
)

splitter_sections = Histogram(
    "quill_splitter_sections",
    "Sections produced per split capture",
    ["method"],
    buckets=[1, 2, 3, 4, 5, 8, 13],
)

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def record_classification(
    method: str, note_type: str, confidence: float, latency_seconds: float, stage: str = "local"
) -> None:
    """Record one resolved classification.

    Args:
        method: ClassificationMethod value that resolved the request
        note_type: NoteType value assigned
        confidence: Confidence of the result
        latency_seconds: Time spent in ``stage``
        stage: "local" for the synchronous tiers, "remote" for the fallback

    Example:
        >>> record_classification("explicit", "todo", 1.0, 0.0002)
    """
    classifier_requests_total.labels(method=method, note_type=note_type).inc()
    classifier_confidence.labels(method=method).observe(confidence)
    classifier_latency_seconds.labels(stage=stage).observe(latency_seconds)


def record_fallback(outcome: str, latency_seconds: float) -> None:
    classifier_fallback_total.labels(outcome=outcome).inc()
    classifier_latency_seconds.labels(stage="remote").observe(latency_seconds)

    logger.debug(
        "fallback_recorded",
        extra={"outcome": outcome, "latency_seconds": latency_seconds},
    )


def record_provider_failure(provider: str, reason: str) -> None:
    """Record a failed provider call (timeout, connection, parse, circuit_open)."""
    provider_failures_total.labels(provider=provider, reason=reason).inc()


def record_split(method: str, section_count: int) -> None:
    splitter_sections.labels(method=method).observe(section_count)
