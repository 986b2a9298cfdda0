"""
Weekly recurrence expansion.

Turns (anchor date, weekday set, inclusive end date) into the concrete dates a
series occurs on. Pure: no I/O, no clock reads.

Weekdays are written as RFC 5545 BYDAY codes ("MO".."SU"). Integer input uses
the date.weekday() convention (0 = Monday).
"""
from datetime import date, datetime, time
from typing import Iterable, List, Tuple, Union

from dateutil.rrule import FR, MO, SA, SU, TH, TU, WE, WEEKLY, rrule

WEEKDAY_CODES: Tuple[str, ...] = ("MO", "TU", "WE", "TH", "FR", "SA", "SU")

_RRULE_WEEKDAYS = {"MO": MO, "TU": TU, "WE": WE, "TH": TH, "FR": FR, "SA": SA, "SU": SU}

_WEEKDAY_ALIASES = {}
for _code, _name in zip(WEEKDAY_CODES, ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")):
    _WEEKDAY_ALIASES[_code.lower()] = _code
    _WEEKDAY_ALIASES[_name[:3]] = _code
    _WEEKDAY_ALIASES[_name] = _code

# End date is inclusive: the rule runs until the last second of that day
_UNTIL_TIME = time(23, 59, 59)


def normalize_weekdays(values: Iterable[Union[str, int]]) -> Tuple[str, ...]:
    """
    Normalize weekday input to a Monday-first tuple of unique BYDAY codes.

    Accepts "MO", "mon", "Monday" (any case) or 0-6.

    Raises:
        ValueError: unknown weekday name or index out of range
    """
    codes = set()
    for value in values:
        if isinstance(value, bool):
            raise ValueError(f"Invalid weekday: {value!r}")
        if isinstance(value, int):
            if not 0 <= value <= 6:
                raise ValueError(f"Weekday index out of range (0-6): {value}")
            codes.add(WEEKDAY_CODES[value])
            continue
        code = _WEEKDAY_ALIASES.get(str(value).strip().lower())
        if code is None:
            raise ValueError(f"Unknown weekday: {value!r}")
        codes.add(code)
    return tuple(c for c in WEEKDAY_CODES if c in codes)


def _weekly_rule(anchor_date: date, codes: Tuple[str, ...], end_date: date) -> rrule:
    # dateutil only yields dtstart when it matches byweekday, so the anchor
    # is not implicitly part of the series.
    return rrule(
        WEEKLY,
        dtstart=datetime.combine(anchor_date, time.min),
        until=datetime.combine(end_date, _UNTIL_TIME),
        byweekday=[_RRULE_WEEKDAYS[c] for c in codes],
    )


def expand(anchor_date: date, weekdays: Iterable[Union[str, int]], end_date: date) -> List[date]:
    """
    Expand a weekly recurrence into concrete dates.

    A date is included iff its weekday is in `weekdays` and
    anchor_date <= date <= end_date. Output is strictly ascending and may be
    empty (empty weekday set, end before anchor, or no matching day in range).
    """
    codes = normalize_weekdays(weekdays)
    if not codes or end_date < anchor_date:
        return []
    return [occurrence.date() for occurrence in _weekly_rule(anchor_date, codes, end_date)]


def build_rrule_string(anchor_date: date, weekdays: Iterable[Union[str, int]], end_date: date) -> str:
    """RFC 5545 text (DTSTART + RRULE lines) describing the series, stored for reference."""
    codes = normalize_weekdays(weekdays)
    if not codes:
        raise ValueError("At least one weekday is required")
    return str(_weekly_rule(anchor_date, codes, end_date))
