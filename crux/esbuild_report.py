"""Normalisation, ordering and logging of bundler diagnostics."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable

from crux.validate import BuildError

logger = logging.getLogger(__name__)


class Severity(enum.Enum):
    WARNING = 0
    ERROR = 1


@dataclass(frozen=True)
class Location:
    file: str = ""
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Message:
    text: str
    location: Location | None = None


@dataclass(frozen=True)
class ReportEntry:
    severity: Severity
    message: str
    line: int = 0
    column: int = 0


def lower_first(text: str) -> str:
    """Lower-case the first character of a string."""
    if not text:
        return text
    return text[0].lower() + text[1:]


def format_location(location: Location) -> str:
    """Format a location as "file:line:column", or "(unknown)" without a file."""
    if location.file:
        return f"{location.file}:{location.line}:{location.column}"
    return "(unknown)"


def normalize_message(message: Message, severity: Severity) -> ReportEntry:
    """Turn a diagnostic into a report entry carrying its position for sorting."""
    text = lower_first(message.text)
    if message.location is None:
        return ReportEntry(severity=severity, message=text)
    loc = message.location
    return ReportEntry(
        severity=severity,
        message=f"{format_location(loc)}: {text}",
        line=loc.line,
        column=loc.column,
    )


def normalize_and_sort(errors: Iterable[Message], warnings: Iterable[Message]) -> list[ReportEntry]:
    """Normalise errors then warnings and sort them stably by line and column."""
    entries = [normalize_message(m, Severity.ERROR) for m in errors]
    entries.extend(normalize_message(m, Severity.WARNING) for m in warnings)
    return sorted(entries, key=lambda e: (e.line, e.column))


def process_build_result(errors: Iterable[Message], warnings: Iterable[Message]) -> list[ReportEntry]:
    """Log all diagnostics in order; raise BuildError if any error is present."""
    errors = list(errors)
    warnings = list(warnings)
    if not errors and not warnings:
        return []

    entries = normalize_and_sort(errors, warnings)
    for entry in entries:
        if entry.severity is Severity.WARNING:
            logger.warning(entry.message)
        else:
            logger.error(entry.message)

    if not errors:
        logger.warning("build completed with %d warning(s)", len(warnings))
        return entries

    raise BuildError(f"{len(errors)} error(s) encountered during the build process")