"""
Due-date encoding for the TickTick wire format.

TickTick expects ``YYYY-MM-DDTHH:MM:SS+HHMM``. Users type either a UTC
literal (trailing ``Z``) or a naive local time; local times are stamped
with a Pacific offset chosen by calendar rule.
"""

import calendar
import re
from datetime import date, datetime

from ticktick_cli import config
from ticktick_cli.exceptions import InvalidDueDate

_LITERAL_FORMAT = "%Y-%m-%dT%H:%M:%S"
_OFFSET_RE = re.compile(r"^(?P<clock>.+?)(?P<offset>[+-]\d{4})$")


def _nth_weekday(year, month, weekday, n):
    """Day-of-month of the n-th *weekday* (Mon=0) in the given month."""
    first = date(year, month, 1).weekday()
    return 1 + (weekday - first) % 7 + (n - 1) * 7


def is_daylight_fixed(d):
    """Mar 8 through Nov 1 inclusive, any year."""
    return (3, 8) <= (d.month, d.day) <= (11, 1)


def is_daylight_us(d):
    """Second Sunday in March up to (not including) the first Sunday in November."""
    start = date(d.year, 3, _nth_weekday(d.year, 3, calendar.SUNDAY, 2))
    end = date(d.year, 11, _nth_weekday(d.year, 11, calendar.SUNDAY, 1))
    return start <= d < end


def local_offset(d, rule=None):
    """Return the wire offset (``-0700`` / ``-0800``) for a local date."""
    rule = rule or config.DST_RULE
    daylight = is_daylight_us(d) if rule == "us" else is_daylight_fixed(d)
    return config.DAYLIGHT_OFFSET if daylight else config.STANDARD_OFFSET


def _parse_clock(clock, original):
    try:
        return datetime.strptime(clock, _LITERAL_FORMAT)
    except ValueError:
        raise InvalidDueDate(
            f"[ERROR] Invalid due date '{original}'. Use YYYY-MM-DDTHH:MM:SS, "
            "optionally followed by Z."
        ) from None


def encode_due_date(literal, rule=None):
    """Encode a user due-date literal into the wire format.

    ``2025-06-15T10:00:00Z`` -> ``2025-06-15T10:00:00+0000`` (clock unchanged).
    ``2025-06-15T10:00:00``  -> ``2025-06-15T10:00:00-0700``.
    ``2025-12-15T10:00:00``  -> ``2025-12-15T10:00:00-0800``.
    An explicit ``+HHMM``/``-HHMM`` suffix is kept as given.

    Raises InvalidDueDate for malformed literals and impossible calendar
    values such as ``2025-02-30``.
    """
    if literal is None:
        raise InvalidDueDate("[ERROR] Due date is empty.")
    text = str(literal).strip()
    if not text:
        raise InvalidDueDate("[ERROR] Due date is empty.")

    if text.endswith(("Z", "z")):
        clock = text[:-1]
        offset = "+0000"
        _parse_clock(clock, literal)
    else:
        match = _OFFSET_RE.match(text)
        if match:
            clock = match.group("clock")
            offset = match.group("offset")
            _parse_clock(clock, literal)
        else:
            clock = text
            offset = local_offset(_parse_clock(clock, literal).date(), rule)

    encoded = clock + offset
    # Round-trip the constructed literal.
    try:
        datetime.strptime(encoded, _LITERAL_FORMAT + "%z")
    except ValueError:
        raise InvalidDueDate(f"[ERROR] Invalid due date '{literal}'.") from None
    return encoded
