"""Model factories shared by tests."""

from typing import Any

from upkeep.domain.task import PriorityTier, Task, TaskStatus
from upkeep.domain.template import Template, TemplateScope


def make_task(task_id: str = "1", **overrides: Any) -> Task:
    """Build a Task with sensible defaults for pure-function tests."""
    data: dict[str, Any] = {
        "id": task_id,
        "property_id": "prop-1",
        "title": f"Task {task_id}",
        "priority": PriorityTier.MEDIUM,
        "status": TaskStatus.IDENTIFIED,
    }
    data.update(overrides)
    return Task.model_validate(data)


def make_template(template_id: str = "tpl-1", **overrides: Any) -> Template:
    """Build a per-unit Template with sensible defaults."""
    data: dict[str, Any] = {
        "id": template_id,
        "title": "Test smoke detectors",
        "description": "Press the test button on every detector",
        "system_type": "Safety",
        "priority": PriorityTier.HIGH,
        "seasons": ("Fall",),
        "scope": TemplateScope.PER_UNIT,
        "recurrence_interval": "semi-annually",
        "estimated_hours": 0.5,
        "is_diy_friendly": True,
    }
    data.update(overrides)
    return Template.model_validate(data)
