"""Structured logging configuration for the Quill classifier.

Every module logs under the ``quill`` namespace with a snake_case event
name and its details in ``extra=``. Level and format come from
ClassifierConfig (QUILL_LOG_LEVEL, QUILL_LOG_FORMAT).

Capture text is user content; log events carry lengths, types and
confidences, never the note body itself.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from .config import get_config

__all__ = ["SENSITIVE_KEYS", "StructuredFormatter", "TextFormatter", "configure_logging"]

# Provider extras are the only place a credential could reach a record
SENSITIVE_KEYS = frozenset({"api_key", "authorization"})

# Attributes every LogRecord carries; anything else arrived through extra=
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record.

    Fields: timestamp (UTC, ``Z`` suffix), level, logger, message, plus
    ``context`` for extras and ``exception`` when the record carries one.
    Values under SENSITIVE_KEYS are replaced with ``[REDACTED]``.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            key: "[REDACTED]" if key.lower() in SENSITIVE_KEYS else value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if context:
            log_data["context"] = context

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # default=str keeps enums and other non-JSON extras printable
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines for local runs (QUILL_LOG_FORMAT=text)."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Attach one handler to the ``quill`` logger and set its level.

    Args:
        level: Level override; defaults to ClassifierConfig.log_level.
    """
    config = get_config()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)

    logger = logging.getLogger("quill")
    logger.setLevel(log_level)

    # repeated calls only adjust the level
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            TextFormatter() if config.log_format == "text" else StructuredFormatter()
        )
        logger.addHandler(handler)

    logger.propagate = False
