"""Task service for creation, queries, deletion and bulk operations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, Field

from upkeep.agents.advisory_agent import Advisor, enrich_with_advisory
from upkeep.core import db_client
from upkeep.core.config import constants
from upkeep.core.errors import MissingRequiredFieldError
from upkeep.core.logging import span
from upkeep.core.recurrence_parser import next_occurrence, parse_recurrence
from upkeep.domain.task import PriorityTier, Task, TaskCreate, TaskScope, TaskStatus
from upkeep.modules.tasks import state_machine


logger = logging.getLogger(__name__)


class BulkResult(BaseModel):
    """Per-task outcome of a bulk operation. Nothing is rolled back."""

    succeeded: list[str] = Field(default_factory=list, description="Task IDs the operation applied to")
    failed: dict[str, str] = Field(default_factory=dict, description="Task ID to error message")

    @property
    def all_succeeded(self) -> bool:
        """True when no task failed."""
        return not self.failed


async def create_task(task: TaskCreate, *, advisor: Advisor | None = None) -> Task:
    """Create a single task directly (manual entry).

    Args:
        task: Task payload
        advisor: Optional advisor used to fill missing risk and cost fields

    Returns:
        Created task

    Raises:
        MissingRequiredFieldError: If a per-unit task has no unit tag
        ValueError: If the recurrence interval is invalid
        db_client.DatabaseError: If the store operation fails
    """
    with span("task_service.create_task"):
        if task.scope == TaskScope.PER_UNIT and not task.unit_tag:
            raise MissingRequiredFieldError(field="unit_tag", context="a per-unit task")

        if task.recurrence_interval:
            task = task.model_copy(update={"recurrence_interval": parse_recurrence(task.recurrence_interval)})

        task = await enrich_with_advisory(task, advisor)

        record = await db_client.create_record(collection="tasks", data=task.model_dump(mode="json"))
        logger.info("Created task: %s (property: %s, unit: %s)", task.title, task.property_id, task.unit_tag or "-")
        return Task.model_validate(record)


async def get_tasks(
    *,
    property_id: str | None = None,
    status: TaskStatus | None = None,
    unit_tag: str | None = None,
    batch_id: str | None = None,
    template_origin_id: str | None = None,
) -> list[Task]:
    """Get tasks with optional filters.

    Args:
        property_id: Filter by owning property
        status: Filter by lifecycle state
        unit_tag: Filter by unit tag
        batch_id: Filter by fan-out batch
        template_origin_id: Filter by origin template

    Returns:
        Tasks matching all filters, oldest first
    """
    with span("task_service.get_tasks"):
        filters = []

        if property_id:
            filters.append(f'property_id = "{db_client.sanitize_param(property_id)}"')

        if status:
            filters.append(f'status = "{db_client.sanitize_param(status)}"')

        if unit_tag:
            filters.append(f'unit_tag = "{db_client.sanitize_param(unit_tag)}"')

        if batch_id:
            filters.append(f'batch_id = "{db_client.sanitize_param(batch_id)}"')

        if template_origin_id:
            filters.append(f'template_origin_id = "{db_client.sanitize_param(template_origin_id)}"')

        filter_query = " && ".join(filters)

        records = await db_client.list_records(
            collection="tasks",
            filter_query=filter_query,
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
            sort="+created",
        )

        logger.debug("Retrieved %d tasks with filters: %s", len(records), filter_query)

        return [Task.model_validate(record) for record in records]


async def delete_task(*, task_id: str) -> None:
    """Delete a task. Deleted tasks are never recreated by the engine."""
    with span("task_service.delete_task"):
        await db_client.delete_record(collection="tasks", record_id=task_id)
        logger.info("Deleted task %s", task_id)


async def update_priority(*, task_id: str, priority: PriorityTier) -> Task:
    """Change a task's priority tier."""
    with span("task_service.update_priority"):
        record = await db_client.update_record(
            collection="tasks",
            record_id=task_id,
            data={"priority": PriorityTier(priority)},
        )
        logger.info("Set priority of task %s to %s", task_id, priority)
        return Task.model_validate(record)


async def _run_bulk(
    operation: str,
    task_ids: Sequence[str],
    action: Callable[[str], Awaitable[Any]],
) -> BulkResult:
    """Apply ``action`` to every id concurrently and collect per-id outcomes."""
    with span(f"task_service.{operation}"):
        ids = list(dict.fromkeys(task_ids))
        results = await asyncio.gather(*(action(task_id) for task_id in ids), return_exceptions=True)

        outcome = BulkResult()
        for task_id, result in zip(ids, results, strict=True):
            if isinstance(result, BaseException):
                outcome.failed[task_id] = str(result)
            else:
                outcome.succeeded.append(task_id)

        if outcome.failed:
            logger.warning(
                "Bulk %s: %d of %d succeeded",
                operation,
                len(outcome.succeeded),
                len(ids),
                extra={"failed": list(outcome.failed)},
            )
        else:
            logger.info("Bulk %s applied to %d task(s)", operation, len(ids))
        return outcome


async def bulk_transition(  # noqa: PLR0913
    *,
    task_ids: Sequence[str],
    target: TaskStatus,
    scheduled_date: date | None = None,
    completion_date: date | None = None,
    actual_cost: float | None = None,
) -> BulkResult:
    """Transition many tasks independently; each may fail on its own."""

    async def _apply(task_id: str) -> Task:
        return await state_machine.transition(
            task_id=task_id,
            target=target,
            scheduled_date=scheduled_date,
            completion_date=completion_date,
            actual_cost=actual_cost,
        )

    return await _run_bulk("bulk_transition", task_ids, _apply)


async def bulk_update_priority(*, task_ids: Sequence[str], priority: PriorityTier) -> BulkResult:
    """Set the same priority on many tasks."""

    async def _apply(task_id: str) -> Task:
        return await update_priority(task_id=task_id, priority=priority)

    return await _run_bulk("bulk_update_priority", task_ids, _apply)


async def bulk_delete(*, task_ids: Sequence[str]) -> BulkResult:
    """Delete many tasks."""

    async def _apply(task_id: str) -> None:
        await delete_task(task_id=task_id)

    return await _run_bulk("bulk_delete", task_ids, _apply)


def next_occurrence_for(task: Task) -> date | None:
    """Next due day of a recurring task, counted from its completion (or scheduled) day.

    Returns None for tasks without a recurrence or without a reference day.
    """
    if not task.recurrence_interval:
        return None
    reference = task.completion_date or task.scheduled_date
    if reference is None:
        return None
    return next_occurrence(task.recurrence_interval, datetime.combine(reference, time.min)).date()
