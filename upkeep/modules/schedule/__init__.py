"""Seasonal windows, calendar views, workload and scheduling."""

from upkeep.modules.schedule import calendar, scheduler, seasonal, workload


__all__ = [
    "calendar",
    "scheduler",
    "seasonal",
    "workload",
]
