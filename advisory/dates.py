"""
advisory/dates.py -- RFC3339 date-time handling shared by every date rule.

CSAF requires date-times of the form YYYY-MM-DDTHH:MM:SS[.fraction] followed
by a mandatory timezone designator (Z or +HH:MM / -HH:MM). The pattern is
compiled once at import and reused by every rule invocation.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.models import ValidationError

RFC3339_RE = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2})T([0-9]{2}):([0-9]{2}):([0-5][0-9])(\.[0-9]+)?(Z|[+-][0-9]{2}:[0-9]{2})"
)


class InvalidDateTime(ValueError):
    """Raised when a string is not a usable CSAF date-time."""

    def __init__(self, raw: str, message: str) -> None:
        super().__init__(message)
        self.raw = raw
        self.message = message

    def to_validation_error(self, instance_path: str) -> ValidationError:
        return ValidationError(message=self.message, instance_path=instance_path)


def _offset(designator: str) -> Optional[timezone]:
    if designator == "Z":
        return timezone.utc
    sign = -1 if designator[0] == "-" else 1
    hours, minutes = int(designator[1:3]), int(designator[4:6])
    if hours > 23 or minutes > 59:
        return None
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_csaf_datetime(raw: str) -> datetime:
    """Parse a CSAF date-time into a timezone-aware datetime.

    Fractions longer than microseconds are truncated. Raises InvalidDateTime
    when the string does not match RFC3339 or names an impossible instant.
    """
    match = RFC3339_RE.fullmatch(raw)
    if match is None:
        raise InvalidDateTime(
            raw,
            f"Invalid date-time string {raw}, expected RFC3339-compliant format with non-empty timezone",
        )
    year, month, day, hour, minute, second, fraction, designator = match.groups()
    micro = int((fraction[1:] + "000000")[:6]) if fraction else 0
    tz = _offset(designator)
    try:
        if tz is None:
            raise ValueError("timezone offset out of range")
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
        )
    except ValueError:
        raise InvalidDateTime(
            raw,
            f"Date-time string {raw} matched RFC3339 regex but is not a valid calendar date-time",
        ) from None


def is_valid_datetime(raw: str) -> bool:
    try:
        parse_csaf_datetime(raw)
    except InvalidDateTime:
        return False
    return True
