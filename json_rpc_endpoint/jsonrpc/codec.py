"""Lossless wire codec for values plain JSON cannot carry.

Two extended kinds travel as strings:

* big integers (beyond the IEEE-754 safe range) as decimal digits, an
  optional trailing ``n`` being accepted on decode;
* ``datetime`` instants as strict UTC ISO-8601 strings ending in ``Z``.

Decoding is pattern based, so a plain string that looks like digits or like
an ISO timestamp comes back as an ``int`` or a ``datetime``. Callers that
need such strings verbatim should not run them through :func:`decode`.
"""
import re
from datetime import datetime, timezone
from typing import Any

MAX_SAFE_INTEGER = 2**53 - 1

# Matched with fullmatch; ASCII digits only.
BIGINT_PATTERN = re.compile(r"\d+n?", re.ASCII)
ISO_DATE_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?Z", re.ASCII
)


def is_big_int(value: Any) -> bool:
    """Return True for ints a JSON number cannot hold exactly."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and abs(value) > MAX_SAFE_INTEGER
    )


def format_datetime(value: datetime) -> str:
    """Format a datetime as UTC ISO-8601 with a trailing ``Z``.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    timespec = "milliseconds" if value.microsecond % 1000 == 0 else "microseconds"
    return value.replace(tzinfo=None).isoformat(timespec=timespec) + "Z"


def parse_datetime(value: str) -> Any:
    """Parse a strict UTC ISO-8601 string, or return None if it is not one."""
    match = ISO_DATE_PATTERN.fullmatch(value)
    if not match:
        return None
    base, fraction = match.groups()
    try:
        parsed = datetime.strptime(base, "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return None
    if fraction:
        parsed = parsed.replace(microsecond=int(fraction[:6].ljust(6, "0")))
    return parsed.replace(tzinfo=timezone.utc)


def encode(value: Any) -> Any:
    """Recursively turn big ints and datetimes into their wire strings."""
    if is_big_int(value):
        return str(value)
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, (list, tuple)):
        return [encode(item) for item in value]
    if isinstance(value, dict):
        return {key: encode(item) for key, item in value.items()}
    return value


def decode(value: Any) -> Any:
    """Recursively rebuild big ints and datetimes from their wire strings.

    The integer check runs first, so ``"2024"`` is an int, never a date.
    """
    if isinstance(value, str):
        if BIGINT_PATTERN.fullmatch(value):
            return int(value.rstrip("n"))
        parsed = parse_datetime(value)
        if parsed is not None:
            return parsed
        return value
    if isinstance(value, list):
        return [decode(item) for item in value]
    if isinstance(value, dict):
        return {key: decode(item) for key, item in value.items()}
    return value
