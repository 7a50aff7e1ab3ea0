"""Priority ranking, cost summaries and batch grouping over task collections.

Everything here is a pure function of its inputs. Filters and criteria are
passed explicitly by the caller.
"""

from collections.abc import Callable, Iterable
from enum import StrEnum

from pydantic import BaseModel, Field

from upkeep.core.config import constants
from upkeep.domain.task import PRIORITY_WEIGHTS, PriorityTier, Task, TaskStatus


class RankCriterion(StrEnum):
    """Comparator used to order tasks."""

    CASCADE_RISK = "cascade_risk"
    COST = "cost"
    PRIORITY = "priority"


class TaskFilter(BaseModel):
    """Selection applied before ranking."""

    unit_tag: str | None = Field(default=None, description="Keep only tasks with this unit tag")
    priority: PriorityTier | None = Field(default=None, description="Keep only tasks with this tier")
    min_cascade_score: float | None = Field(default=None, ge=0, le=10, description="Minimum cascade risk")
    exclude_completed: bool = Field(default=False, description="Drop completed tasks")

    def matches(self, task: Task) -> bool:
        """Whether ``task`` passes every configured filter."""
        if self.unit_tag is not None and task.unit_tag != self.unit_tag:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.min_cascade_score is not None and (task.cascade_risk_score or 0) < self.min_cascade_score:
            return False
        return not (self.exclude_completed and task.status == TaskStatus.COMPLETED)


_SORT_KEYS: dict[RankCriterion, Callable[[Task], float]] = {
    RankCriterion.CASCADE_RISK: lambda task: task.cascade_risk_score or 0,
    RankCriterion.COST: lambda task: task.current_fix_cost or 0,
    RankCriterion.PRIORITY: lambda task: PRIORITY_WEIGHTS.get(task.priority, 0),
}


def rank_tasks(tasks: Iterable[Task], criterion: RankCriterion, filters: TaskFilter | None = None) -> list[Task]:
    """Filter, then order tasks descending by ``criterion``.

    Ties keep their input order. Missing scores and costs rank as 0.
    """
    key = _SORT_KEYS[RankCriterion(criterion)]
    selected = [task for task in tasks if filters is None or filters.matches(task)]
    return sorted(selected, key=lambda task: -key(task))


class CostSummary(BaseModel):
    """Aggregate cost picture for a task list."""

    current_total: float
    potential_total: float
    high_priority_count: int
    cascade_alert_count: int

    @property
    def savings_from_acting_now(self) -> float:
        """Cost avoided by fixing everything now instead of later."""
        return self.potential_total - self.current_total


def summarize_costs(tasks: Iterable[Task]) -> CostSummary:
    """Sum current and delayed fix costs across tasks.

    Tasks without a delayed estimate contribute their current cost to the
    potential total.
    """
    current_total = 0.0
    potential_total = 0.0
    high_priority = 0
    cascade_alerts = 0
    for task in tasks:
        current = task.current_fix_cost or 0
        current_total += current
        potential_total += task.delayed_fix_cost if task.delayed_fix_cost is not None else current
        if task.priority == PriorityTier.HIGH:
            high_priority += 1
        if (task.cascade_risk_score or 0) >= constants.CASCADE_ALERT_THRESHOLD:
            cascade_alerts += 1
    return CostSummary(
        current_total=current_total,
        potential_total=potential_total,
        high_priority_count=high_priority,
        cascade_alert_count=cascade_alerts,
    )


class BatchGroup(BaseModel):
    """Tasks sharing one fan-out batch id, with progress counts."""

    batch_id: str
    tasks: list[Task]
    completed: int
    scheduled: int
    pending: int

    @property
    def total(self) -> int:
        """Number of tasks in the batch."""
        return len(self.tasks)


def group_by_batch(tasks: Iterable[Task]) -> list[BatchGroup]:
    """Group batched tasks by batch id in order of first appearance.

    Tasks without a batch id are left out.
    """
    grouped: dict[str, list[Task]] = {}
    for task in tasks:
        if task.batch_id:
            grouped.setdefault(task.batch_id, []).append(task)

    return [
        BatchGroup(
            batch_id=batch_id,
            tasks=members,
            completed=sum(1 for t in members if t.status == TaskStatus.COMPLETED),
            scheduled=sum(1 for t in members if t.status == TaskStatus.SCHEDULED),
            pending=sum(1 for t in members if t.status in (TaskStatus.IDENTIFIED, TaskStatus.DEFERRED)),
        )
        for batch_id, members in grouped.items()
    ]
