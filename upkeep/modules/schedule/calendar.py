"""Calendar windows, time-of-day buckets and effort formatting."""

import math
from collections.abc import Iterable
from datetime import date, timedelta
from enum import StrEnum

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from upkeep.core.config import constants
from upkeep.domain.task import Task, TimeRange


class CalendarView(StrEnum):
    """Calendar granularity."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    SEASON = "season"  # 3-month window


class CalendarWindow(BaseModel):
    """Inclusive range of calendar days shown by one view."""

    view: CalendarView
    start: date
    end: date

    def contains(self, day: date) -> bool:
        """Whether ``day`` falls inside the window."""
        return self.start <= day <= self.end

    @property
    def days(self) -> list[date]:
        """Every day in the window, in order."""
        return [self.start + timedelta(days=offset) for offset in range((self.end - self.start).days + 1)]


def compute_window(anchor: date, view: CalendarView, step: int = 0) -> CalendarWindow:
    """Compute the window for ``view`` around ``anchor``, shifted by ``step`` views.

    Weeks start on Sunday. Month and season windows start on the first of the
    anchor's month; a season spans three months.
    """
    view = CalendarView(view)

    if view == CalendarView.DAY:
        day = anchor + timedelta(days=step)
        return CalendarWindow(view=view, start=day, end=day)

    if view == CalendarView.WEEK:
        days_since_sunday = (anchor.weekday() + 1) % 7
        start = anchor - timedelta(days=days_since_sunday) + timedelta(weeks=step)
        return CalendarWindow(view=view, start=start, end=start + timedelta(days=6))

    months = 1 if view == CalendarView.MONTH else 3
    start = anchor.replace(day=1) + relativedelta(months=months * step)
    end = start + relativedelta(months=months) - timedelta(days=1)
    return CalendarWindow(view=view, start=start, end=end)


def tasks_in_window(tasks: Iterable[Task], window: CalendarWindow) -> list[Task]:
    """Scheduled tasks whose date falls inside ``window``, ordered by date."""
    dated = [task for task in tasks if task.scheduled_date is not None and window.contains(task.scheduled_date)]
    return sorted(dated, key=lambda task: task.scheduled_date)  # type: ignore[arg-type,return-value]


def bucket_by_time_of_day(tasks: Iterable[Task]) -> dict[TimeRange, list[Task]]:
    """Split one day's tasks into morning, afternoon and evening.

    Tasks without a time range go to the morning.
    """
    buckets: dict[TimeRange, list[Task]] = {time_range: [] for time_range in TimeRange}
    for task in tasks:
        buckets[task.time_range or TimeRange.MORNING].append(task)
    return buckets


def format_estimated_time(hours: float | None) -> str | None:
    """Human label for an effort estimate ("~45 min", "~2.5 hrs", "~2 days").

    Days are counted as full working days. Returns None for missing or zero
    estimates.
    """
    if not hours or hours <= 0:
        return None
    if hours < 1:
        return f"~{round(hours * 60)} min"
    if hours == 1:
        return "~1 hr"
    if hours < constants.DAY_CAPACITY_HOURS:
        return f"~{hours:.1f} hrs"
    days = math.ceil(hours / constants.DAY_CAPACITY_HOURS)
    return f"~{days} day{'s' if days > 1 else ''}"
