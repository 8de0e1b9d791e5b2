"""Structured logging for volume ingestion.

Events are emitted through structlog on top of the stdlib ``logging`` module
so that library users can route them with ordinary handlers. Header values
that identify a patient are masked before rendering, and numpy scalars are
turned into plain numbers so the JSON renderer accepts them.
"""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

import numpy as np
import structlog
from structlog.types import EventDict, Processor, WrappedLogger

REDACTED = "***REDACTED***"

#: Event keys (compared lower-cased) whose values are never rendered
SENSITIVE_FIELDS = {
    "patient_id",
    "patient_name",
    "patient_birth_date",
    "patientid",
    "patientname",
    "patientbirthdate",
    "other_patient_ids",
    "patient_address",
}


def redact_sensitive_data(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask values stored under patient-identifying keys.

    Both snake_case names and DICOM keywords (``PatientName``) are matched.
    """
    for key in event_dict:
        if key.lower() in SENSITIVE_FIELDS:
            event_dict[key] = REDACTED
    return event_dict


def coerce_numpy_values(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace numpy scalars with their Python equivalents."""
    for key, value in event_dict.items():
        if isinstance(value, np.generic):
            event_dict[key] = value.item()
    return event_dict


def add_timestamp(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def _build_processors(json_format: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        coerce_numpy_values,
        redact_sensitive_data,
    ]
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer()
    )
    processors.append(renderer)
    return processors


def configure_logging(
    log_level: str = "INFO", json_format: bool = True, log_file: Path | None = None
) -> None:
    """Set up structlog and the root stdlib logger.

    Any handlers already on the root logger are removed. Output goes to
    stderr, so stdout stays free for command results.

    Args:
        log_level: Level name, e.g. "DEBUG" or "WARNING"
        json_format: Render one JSON object per line instead of console text
        log_file: Also append rendered events to this file

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
        >>> get_logger("dicom_volume").info("volume_loaded", dimensions=(512, 512, 120))

    """
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    structlog.configure(
        processors=_build_processors(json_format),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.root.addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
