"""Calendar mutations: assign, unassign, move and snooze."""

import logging
from datetime import date, datetime

from upkeep.core import db_client
from upkeep.core.logging import span
from upkeep.domain.task import ExecutionMethod, Task, TaskStatus, TimeRange
from upkeep.modules.tasks import state_machine


logger = logging.getLogger(__name__)


async def assign_date(
    *,
    task_id: str,
    day: date,
    execution_method: ExecutionMethod | None = None,
    time_range: TimeRange | None = None,
) -> Task:
    """Put a task on the calendar.

    Identified tasks transition to Scheduled. A task that is already
    Scheduled keeps its status and is re-targeted to ``day``.

    Raises:
        InvalidTransitionError: If the task cannot be scheduled from its status
    """
    with span("scheduler.assign_date"):
        task = await state_machine.get_task(task_id=task_id)

        if task.status == TaskStatus.SCHEDULED:
            update: dict = {"scheduled_date": day.isoformat()}
            if execution_method is not None:
                update["execution_method"] = execution_method
            if time_range is not None:
                update["time_range"] = time_range
            record = await db_client.update_record(collection="tasks", record_id=task_id, data=update)
            logger.info("Moved task %s to %s", task_id, day.isoformat())
            return Task.model_validate(record)

        return await state_machine.schedule_task(
            task_id=task_id,
            scheduled_date=day,
            execution_method=execution_method,
            time_range=time_range,
        )


async def unassign(*, task_id: str) -> Task:
    """Take a scheduled task off the calendar and send it back to Identified."""
    with span("scheduler.unassign"):
        return await state_machine.send_back_to_identified(task_id=task_id)


async def move_task(*, task_id: str, new_day: date) -> Task:
    """Drag-and-drop move; same effect as assigning the new day."""
    with span("scheduler.move_task"):
        return await assign_date(task_id=task_id, day=new_day)


async def snooze_reminder(*, task_id: str, until: datetime) -> Task:
    """Hide a task's seasonal reminder until ``until``."""
    with span("scheduler.snooze_reminder"):
        record = await db_client.update_record(
            collection="tasks",
            record_id=task_id,
            data={"reminder_snoozed_until": until.isoformat()},
        )
        logger.info("Snoozed seasonal reminder for task %s until %s", task_id, until.isoformat())
        return Task.model_validate(record)
