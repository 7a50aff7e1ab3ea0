"""Per-day workload analysis.

Two thresholds are applied independently: a day at or above the capacity
(8h by default) is overloaded at the calendar-cell level, and a day at or
above the warning threshold (6h by default) raises the list-level banner.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel, Field

from upkeep.core.config import constants
from upkeep.domain.task import Task


class DayWorkload(BaseModel):
    """Scheduled effort on one calendar day."""

    day: date
    task_ids: list[str] = Field(default_factory=list)
    total_hours: float = 0.0
    capacity_hours: float = constants.DAY_CAPACITY_HOURS
    warning_hours: float = constants.WORKLOAD_WARNING_HOURS

    @property
    def available_hours(self) -> float:
        """Remaining capacity, never negative."""
        return max(0.0, self.capacity_hours - self.total_hours)

    @property
    def is_available(self) -> bool:
        """Below capacity at the cell level."""
        return self.total_hours < self.capacity_hours

    @property
    def is_overloaded(self) -> bool:
        """At or above capacity at the cell level."""
        return self.total_hours >= self.capacity_hours

    @property
    def overloaded_by(self) -> float:
        """Hours above capacity, 0 when not overloaded."""
        return max(0.0, self.total_hours - self.capacity_hours)

    @property
    def needs_warning(self) -> bool:
        """At or above the list-level advisory threshold."""
        return self.total_hours >= self.warning_hours


def compute_workload(
    tasks: Iterable[Task],
    *,
    capacity_hours: float | None = None,
    warning_hours: float | None = None,
) -> dict[date, DayWorkload]:
    """Group dated tasks by day and sum their hours.

    Hours come from ``estimated_hours``, falling back to ``diy_time_hours``;
    tasks with neither count as 0. Undated tasks are ignored.

    Returns:
        Workload per day, ordered by day
    """
    capacity = constants.DAY_CAPACITY_HOURS if capacity_hours is None else capacity_hours
    warning = constants.WORKLOAD_WARNING_HOURS if warning_hours is None else warning_hours

    by_day: dict[date, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.scheduled_date is not None:
            by_day[task.scheduled_date].append(task)

    return {
        day: DayWorkload(
            day=day,
            task_ids=[task.id for task in day_tasks],
            total_hours=sum(task.hours for task in day_tasks),
            capacity_hours=capacity,
            warning_hours=warning,
        )
        for day, day_tasks in sorted(by_day.items())
    }


def is_day_overloaded(tasks: Iterable[Task], day: date, *, capacity_hours: float | None = None) -> bool:
    """Cell-level check for a single day."""
    workload = compute_workload(tasks, capacity_hours=capacity_hours).get(day)
    return workload is not None and workload.is_overloaded


def days_needing_warning(tasks: Iterable[Task], *, threshold_hours: float | None = None) -> list[date]:
    """Days whose total reaches the list-level warning threshold."""
    workloads = compute_workload(tasks, warning_hours=threshold_hours)
    return [day for day, workload in workloads.items() if workload.needs_warning]
