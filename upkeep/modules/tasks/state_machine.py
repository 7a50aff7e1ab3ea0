"""State transition functions for maintenance task lifecycle management."""

import logging
from datetime import date
from typing import Any

from upkeep.core import db_client
from upkeep.core.errors import InvalidTransitionError, MissingRequiredFieldError
from upkeep.core.logging import span
from upkeep.domain.task import ExecutionMethod, Task, TaskStatus, TimeRange


logger = logging.getLogger(__name__)


TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.IDENTIFIED: frozenset({TaskStatus.SCHEDULED, TaskStatus.DEFERRED, TaskStatus.COMPLETED}),
    TaskStatus.SCHEDULED: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED, TaskStatus.IDENTIFIED}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.COMPLETED}),
    TaskStatus.DEFERRED: frozenset({TaskStatus.IDENTIFIED}),
    TaskStatus.COMPLETED: frozenset(),  # Terminal: handed off to history
}


def allowed_targets(status: TaskStatus) -> frozenset[TaskStatus]:
    """Statuses reachable from ``status`` in one step."""
    return TRANSITIONS[status]


def validate_transition(current: TaskStatus, target: TaskStatus, *, task_id: str | None = None) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is in the table."""
    if target not in TRANSITIONS[current]:
        raise InvalidTransitionError(task_id=task_id, current=current, target=target)


def build_transition_update(  # noqa: PLR0913
    task: Task,
    target: TaskStatus,
    *,
    scheduled_date: date | None = None,
    completion_date: date | None = None,
    actual_cost: float | None = None,
    execution_method: ExecutionMethod | None = None,
    photo_urls: list[str] | None = None,
    time_range: TimeRange | None = None,
) -> dict[str, Any]:
    """Build the partial update for a legal transition.

    Only the fields the target state owns are written, so everything already
    recorded on the task (costs, photos, dates) survives completion.

    Raises:
        InvalidTransitionError: If the move is not in the transition table
        MissingRequiredFieldError: If the target state needs a field that is absent
    """
    validate_transition(task.status, target, task_id=task.id)

    update: dict[str, Any] = {"status": target}

    if target == TaskStatus.SCHEDULED:
        if scheduled_date is None:
            raise MissingRequiredFieldError(field="scheduled_date", context="scheduling a task")
        update["scheduled_date"] = scheduled_date.isoformat()
        if execution_method is not None:
            update["execution_method"] = execution_method
        if time_range is not None:
            update["time_range"] = time_range

    elif target == TaskStatus.COMPLETED:
        if completion_date is None:
            raise MissingRequiredFieldError(field="completion_date", context="completing a task")
        update["completion_date"] = completion_date.isoformat()
        if actual_cost is not None:
            update["actual_cost"] = actual_cost
        if photo_urls:
            update["photo_urls"] = [*task.photo_urls, *(url for url in photo_urls if url not in task.photo_urls)]
        if execution_method is not None:
            update["execution_method"] = execution_method

    elif target == TaskStatus.IDENTIFIED and task.status == TaskStatus.SCHEDULED:
        # Sending back to the queue releases the calendar slot
        update["scheduled_date"] = None
        update["execution_method"] = ExecutionMethod.UNSET
        update["time_range"] = None

    elif target == TaskStatus.IN_PROGRESS and execution_method is not None:
        update["execution_method"] = execution_method

    return update


async def get_task(*, task_id: str) -> Task:
    """Load a task from the store as a typed model.

    Raises:
        db_client.RecordNotFoundError: If the task does not exist
    """
    record = await db_client.get_record(collection="tasks", record_id=task_id)
    return Task.model_validate(record)


async def transition(  # noqa: PLR0913
    *,
    task_id: str,
    target: TaskStatus,
    scheduled_date: date | None = None,
    completion_date: date | None = None,
    actual_cost: float | None = None,
    execution_method: ExecutionMethod | None = None,
    photo_urls: list[str] | None = None,
    time_range: TimeRange | None = None,
) -> Task:
    """Move a task to ``target``, enforcing the transition table and required fields."""
    with span("task_state_machine.transition"):
        task = await get_task(task_id=task_id)
        update = build_transition_update(
            task,
            target,
            scheduled_date=scheduled_date,
            completion_date=completion_date,
            actual_cost=actual_cost,
            execution_method=execution_method,
            photo_urls=photo_urls,
            time_range=time_range,
        )

        record = await db_client.update_record(collection="tasks", record_id=task_id, data=update)

        logger.info("Transitioned task %s from %s to %s", task_id, task.status, target)
        return Task.model_validate(record)


async def schedule_task(
    *,
    task_id: str,
    scheduled_date: date,
    execution_method: ExecutionMethod | None = None,
    time_range: TimeRange | None = None,
) -> Task:
    """Transition task to Scheduled on the given day."""
    return await transition(
        task_id=task_id,
        target=TaskStatus.SCHEDULED,
        scheduled_date=scheduled_date,
        execution_method=execution_method,
        time_range=time_range,
    )


async def start_task(*, task_id: str, execution_method: ExecutionMethod | None = None) -> Task:
    """Transition a scheduled task to In Progress."""
    return await transition(task_id=task_id, target=TaskStatus.IN_PROGRESS, execution_method=execution_method)


async def complete_task(
    *,
    task_id: str,
    completion_date: date,
    actual_cost: float | None = None,
    photo_urls: list[str] | None = None,
) -> Task:
    """Transition task to Completed; the record is final from here on."""
    with span("task_state_machine.complete_task"):
        task = await transition(
            task_id=task_id,
            target=TaskStatus.COMPLETED,
            completion_date=completion_date,
            actual_cost=actual_cost,
            photo_urls=photo_urls,
        )
        logger.info(
            "Task completed",
            extra={"task_id": task_id, "completion_date": completion_date.isoformat(), "actual_cost": actual_cost},
        )
        return task


async def defer_task(*, task_id: str) -> Task:
    """Transition an identified task to Deferred."""
    return await transition(task_id=task_id, target=TaskStatus.DEFERRED)


async def reactivate_task(*, task_id: str) -> Task:
    """Bring a deferred task back to Identified."""
    return await _transition_from(task_id=task_id, expected=TaskStatus.DEFERRED, target=TaskStatus.IDENTIFIED)


async def send_back_to_identified(*, task_id: str) -> Task:
    """Return a scheduled task to the queue, clearing its date and execution method."""
    return await _transition_from(task_id=task_id, expected=TaskStatus.SCHEDULED, target=TaskStatus.IDENTIFIED)


async def _transition_from(*, task_id: str, expected: TaskStatus, target: TaskStatus) -> Task:
    """Transition only when the task is currently in ``expected``."""
    task = await get_task(task_id=task_id)
    if task.status != expected:
        raise InvalidTransitionError(task_id=task_id, current=task.status, target=target)
    return await transition(task_id=task_id, target=target)
