"""Recurrence parsing utilities for maintenance template intervals."""

import re
from datetime import datetime, timedelta

from croniter import croniter
from dateutil.relativedelta import relativedelta


# Named intervals map onto a month-step INTERVAL encoding
_NAMED_MONTH_INTERVALS = {
    "monthly": 1,
    "quarterly": 3,
    "semi-annually": 6,
    "semiannually": 6,
    "twice a year": 6,
    "annually": 12,
    "yearly": 12,
}

_NAMED_DAY_INTERVALS = {
    "daily": 1,
    "weekly": 7,
}

_EVERY_PATTERN = re.compile(r"^every\s+(\d+)\s+(day|week|month|year)s?$")


def parse_recurrence(recurrence: str) -> str:
    """Normalize a template recurrence interval.

    Supports:
    - Direct CRON expressions (e.g., "0 9 1 */3 *")
    - Named intervals ("daily", "weekly", "monthly", "quarterly", "semi-annually", "annually")
    - "every N days|weeks|months|years"

    Day-based intervals encode as ``INTERVAL:D:<days>`` and month-based as
    ``INTERVAL:M:<months>`` so they can be stepped without invalid CRON syntax.

    Args:
        recurrence: Recurrence string from a template

    Returns:
        Normalized recurrence (CRON expression or INTERVAL encoding)

    Raises:
        ValueError: If recurrence format is invalid
    """
    text = recurrence.strip()
    if text.startswith("INTERVAL:"):
        _decode_interval(text)
        return text

    if croniter.is_valid(text):
        return text

    lowered = text.lower()
    if lowered in _NAMED_DAY_INTERVALS:
        return f"INTERVAL:D:{_NAMED_DAY_INTERVALS[lowered]}"
    if lowered in _NAMED_MONTH_INTERVALS:
        return f"INTERVAL:M:{_NAMED_MONTH_INTERVALS[lowered]}"

    match = _EVERY_PATTERN.match(lowered)
    if match:
        count = int(match.group(1))
        unit = match.group(2)
        if count < 1:
            msg = f"Invalid recurrence format: {recurrence}. Interval must be at least 1"
            raise ValueError(msg)
        if unit == "day":
            return f"INTERVAL:D:{count}"
        if unit == "week":
            return f"INTERVAL:D:{count * 7}"
        if unit == "month":
            return f"INTERVAL:M:{count}"
        return f"INTERVAL:M:{count * 12}"

    msg = (
        f"Invalid recurrence format: {recurrence}. "
        "Use a CRON expression, 'monthly', 'quarterly', 'annually', or 'every N days|weeks|months|years'"
    )
    raise ValueError(msg)


def _decode_interval(encoded: str) -> tuple[str, int]:
    parts = encoded.split(":")
    if len(parts) != 3 or parts[1] not in {"D", "M"} or not parts[2].isdigit() or int(parts[2]) < 1:  # noqa: PLR2004
        msg = f"Invalid recurrence format: {encoded}"
        raise ValueError(msg)
    return parts[1], int(parts[2])


def next_occurrence(recurrence: str, after: datetime) -> datetime:
    """Calculate the next occurrence of a recurrence after a given time.

    Interval recurrences float from ``after`` and land on midnight; CRON
    expressions use the next matching time.
    """
    normalized = parse_recurrence(recurrence)

    if normalized.startswith("INTERVAL:"):
        unit, count = _decode_interval(normalized)
        step = timedelta(days=count) if unit == "D" else relativedelta(months=count)
        next_time = after + step
        return next_time.replace(hour=0, minute=0, second=0, microsecond=0)

    cron = croniter(normalized, after)
    return cron.get_next(datetime)


def describe_recurrence(recurrence: str) -> str:
    """Convert a recurrence to human-readable text.

    Args:
        recurrence: Any recurrence accepted by parse_recurrence

    Returns:
        Human-readable description (e.g., "every 3 months")
    """
    try:
        normalized = parse_recurrence(recurrence)
    except ValueError:
        return recurrence

    if normalized.startswith("INTERVAL:"):
        unit, count = _decode_interval(normalized)
        if unit == "D":
            if count == 1:
                return "daily"
            if count % 7 == 0:
                weeks = count // 7
                return "weekly" if weeks == 1 else f"every {weeks} weeks"
            return f"every {count} days"
        if count == 1:
            return "monthly"
        if count % 12 == 0:
            years = count // 12
            return "annually" if years == 1 else f"every {years} years"
        return f"every {count} months"

    _minute, _hour, day_of_month, month, day_of_week = normalized.split()[:5]
    if day_of_month != "*" and month == "*" and day_of_week == "*":
        return f"monthly on day {day_of_month}"
    if day_of_week != "*" and day_of_month == "*" and month == "*":
        return f"weekly (day {day_of_week})"
    if day_of_month == "*" and month == "*" and day_of_week == "*":
        return "daily"
    return f"scheduled ({normalized})"
