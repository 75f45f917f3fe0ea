"""
Field validation for raw time-log entries
"""

import re
from datetime import datetime
from re import Pattern
from typing import List, Optional, Sequence, Tuple

from entry import (
    PREFERRED_DATE_FORMAT,
    PREFERRED_TIME_FORMAT,
    Invalid,
    NormalizedEntry,
    RawEntry,
    Valid,
    ValidationResult,
)

INVALID_PROJECT = "Invalid project"
INVALID_TIME = "Invalid time"
INVALID_DATE = "Invalid date"

# Tried in order, first match wins. The regex pins the exact shape so strptime
# never accepts single digit fields or trailing text. "24:00" and "p.m." are
# rejected on purpose; only these three shapes are accepted.
VALID_TIME_FORMATS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^\d{2}:\d{2}$"), "%H:%M"),
    (re.compile(r"^\d{4}$"), "%H%M"),
    (re.compile(r"^\d{2}:\d{2} [AaPp][Mm]$"), "%I:%M %p"),
]
VALID_DATE_FORMATS: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^\d{4}-\d{2}-\d{2}$"), PREFERRED_DATE_FORMAT),
]


def parse_strict(value: str, formats: Sequence[Tuple[Pattern[str], str]]) -> Optional[datetime]:
    """Return the first successful parse of value, or None."""
    for shape, fmt in formats:
        if not shape.match(value):
            continue
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


class RawEntryValidator:
    """Check a raw entry and normalize its date and time to canonical strings"""

    def __init__(
        self,
        time_formats: Optional[Sequence[Tuple[Pattern[str], str]]] = None,
        date_formats: Optional[Sequence[Tuple[Pattern[str], str]]] = None,
    ):
        self.time_formats = list(time_formats or VALID_TIME_FORMATS)
        self.date_formats = list(date_formats or VALID_DATE_FORMATS)

    def validate(self, raw: RawEntry) -> ValidationResult:
        errors: List[str] = []

        if not raw.project:
            errors.append(INVALID_PROJECT)

        parsed_time = parse_strict(raw.start, self.time_formats)
        if parsed_time is None:
            errors.append(INVALID_TIME)

        parsed_date = parse_strict(raw.date, self.date_formats)
        if parsed_date is None:
            errors.append(INVALID_DATE)

        if errors:
            return Invalid(value=raw, errors=tuple(errors))

        return Valid(
            value=NormalizedEntry(
                project=raw.project,
                task=raw.task,
                start=parsed_time.strftime(PREFERRED_TIME_FORMAT),
                date=parsed_date.date().isoformat(),
            )
        )


_default_validator = RawEntryValidator()


def validate(raw: RawEntry) -> ValidationResult:
    return _default_validator.validate(raw)
