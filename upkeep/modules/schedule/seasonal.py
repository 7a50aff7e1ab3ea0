"""Seasonal window evaluation for maintenance reminders.

Window descriptors are free text authored on templates ("September-November",
"Fall", "Q1", "Every spring and fall", "Before March"). Relevance is decided by
the first rule that matches:

1. Month range, with wrap-around across the year end
2. Season keyword
3. Quarter code (exact)
4. The word "every"
5. The current month's full name
"""

import re
from datetime import datetime

from upkeep.core.config import constants
from upkeep.core.errors import UnresolvableSeasonalWindowError
from upkeep.domain.task import Task, TaskStatus


MONTH_NAMES: tuple[str, ...] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

SEASON_MONTHS: dict[str, frozenset[int]] = {
    "spring": frozenset({2, 3, 4}),
    "summer": frozenset({5, 6, 7}),
    "fall": frozenset({8, 9, 10}),
    "autumn": frozenset({8, 9, 10}),
    "winter": frozenset({11, 0, 1}),
}

QUARTER_MONTHS: dict[str, frozenset[int]] = {
    "q1": frozenset({0, 1, 2}),
    "q2": frozenset({3, 4, 5}),
    "q3": frozenset({6, 7, 8}),
    "q4": frozenset({9, 10, 11}),
}

_MONTH_RANGE_RE = re.compile(r"([a-z]+)\.?\s*(?:-|–|to|through)\s*([a-z]+)")
_SEASON_RE = re.compile(r"\b(spring|summer|fall|autumn|winter)\b")
_MIN_MONTH_PREFIX = 3


def _month_from_token(token: str) -> int | None:
    """Resolve a month name or prefix ("sep", "Sept") to a 0-based index."""
    if len(token) < _MIN_MONTH_PREFIX:
        return None
    for index, name in enumerate(MONTH_NAMES):
        if name.startswith(token):
            return index
    return None


def _month_range(text: str) -> tuple[int, int] | None:
    """Find the first ``<month>-<month>`` pair in ``text``."""
    for match in _MONTH_RANGE_RE.finditer(text):
        start = _month_from_token(match.group(1))
        end = _month_from_token(match.group(2))
        if start is not None and end is not None:
            return start, end
    return None


def _resolve(descriptor: str, month_index: int) -> bool:
    """Apply the resolution rules in order.

    Raises:
        UnresolvableSeasonalWindowError: If the descriptor is empty or not text
    """
    if not isinstance(descriptor, str) or not descriptor.strip():
        msg = f"Cannot resolve seasonal window: {descriptor!r}"
        raise UnresolvableSeasonalWindowError(msg)

    text = descriptor.strip().lower()

    month_range = _month_range(text)
    if month_range is not None:
        start, end = month_range
        if start <= end:
            return start <= month_index <= end
        return month_index >= start or month_index <= end

    seasons = _SEASON_RE.findall(text)
    if seasons:
        return any(month_index in SEASON_MONTHS[season] for season in seasons)

    if text in QUARTER_MONTHS:
        return month_index in QUARTER_MONTHS[text]

    if "every" in text:
        return True

    return MONTH_NAMES[month_index] in text


def is_in_window(descriptor: str | None, month_index: int) -> bool:
    """Decide whether a seasonal window descriptor covers a month.

    Args:
        descriptor: Window descriptor text (e.g., "November-February", "Q1")
        month_index: 0-based month (0 = January)

    Returns:
        True if the month is inside the window. Descriptors that cannot be
        interpreted are never relevant.

    Raises:
        ValueError: If month_index is not between 0 and 11
    """
    if not 0 <= month_index <= 11:  # noqa: PLR2004
        msg = f"Month index must be 0-11, got {month_index}"
        raise ValueError(msg)

    try:
        return _resolve(descriptor, month_index)  # type: ignore[arg-type]
    except UnresolvableSeasonalWindowError:
        return False


def current_season(month_index: int) -> str:
    """Season name for a 0-based month, using meteorological buckets."""
    for season in ("Spring", "Summer", "Fall", "Winter"):
        if month_index in SEASON_MONTHS[season.lower()]:
            return season
    msg = f"Month index must be 0-11, got {month_index}"
    raise ValueError(msg)


def should_show_seasonal_reminder(task: Task, now: datetime) -> bool:
    """Whether a seasonal reminder for ``task`` should be surfaced at ``now``.

    The task must be seasonal, unscheduled, still Identified, not snoozed past
    ``now``, and its recommended window must cover the current month.
    """
    if not task.is_seasonal or task.scheduled_date is not None or task.status != TaskStatus.IDENTIFIED:
        return False

    if task.reminder_snoozed_until is not None:
        snoozed_until = task.reminder_snoozed_until
        if (snoozed_until.tzinfo is None) != (now.tzinfo is None):
            snoozed_until = snoozed_until.replace(tzinfo=now.tzinfo)
        if snoozed_until > now:
            return False

    descriptor = task.recommended_completion_window or constants.YEAR_ROUND_SEASON
    if descriptor == constants.YEAR_ROUND_SEASON:
        return True
    return is_in_window(descriptor, now.month - 1)
