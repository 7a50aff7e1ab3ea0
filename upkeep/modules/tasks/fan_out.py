"""Fan-out planning: expand one template into concrete tasks for a property."""

import asyncio
import logging
import uuid
from collections.abc import Iterable, Sequence
from enum import StrEnum

from upkeep.core import db_client
from upkeep.core.config import constants
from upkeep.core.errors import FanOutPartialFailureError, InvalidFanOutIntentError, MissingRequiredFieldError
from upkeep.core.logging import log_with_context, span
from upkeep.core.recurrence_parser import parse_recurrence
from upkeep.domain.property import FlowType, Property
from upkeep.domain.task import ExecutionMethod, Task, TaskCreate, TaskScope
from upkeep.domain.template import Template, TemplateScope
from upkeep.modules.schedule.seasonal import current_season


logger = logging.getLogger(__name__)


class FanOutIntent(StrEnum):
    """How the operator wants a template spread across a property's units."""

    SINGLE = "single"
    BUILDING_WIDE = "building_wide"
    PER_UNIT_ALL = "per_unit_all"
    PER_UNIT_SELECTED = "per_unit_selected"
    UNIT1 = "unit1"
    UNIT2 = "unit2"
    BOTH = "both"


_DUAL_UNIT_INTENTS = frozenset({FanOutIntent.UNIT1, FanOutIntent.UNIT2, FanOutIntent.BOTH})


def _task_from_template(
    template: Template,
    property_: Property,
    *,
    scope: TaskScope,
    unit_tag: str | None,
    applies_to_unit_count: int = 1,
) -> TaskCreate:
    """Build one task payload from a template (no batch id yet)."""
    recurrence = parse_recurrence(template.recurrence_interval) if template.recurrence_interval else None
    return TaskCreate(
        property_id=property_.id,
        title=template.title,
        description=template.description,
        system_type=template.system_type,
        priority=template.priority,
        scope=scope,
        unit_tag=unit_tag,
        applies_to_unit_count=applies_to_unit_count,
        template_origin_id=template.id,
        execution_method=ExecutionMethod.DIY if template.is_diy_friendly else ExecutionMethod.UNSET,
        estimated_hours=template.estimated_hours,
        is_seasonal=True,
        recommended_completion_window=template.window_descriptor,
        recurrence_interval=recurrence,
    )


def _selected_tags(property_: Property, selected_units: Sequence[str] | None) -> list[str]:
    """Deduplicate and validate an explicit unit selection, keeping caller order."""
    if not selected_units:
        raise MissingRequiredFieldError(field="selected_units", context="a per-unit selected fan-out")

    known = set(property_.unit_tags)
    tags = list(dict.fromkeys(selected_units))
    unknown = [tag for tag in tags if tag not in known]
    if unknown:
        msg = f"Units not found on property {property_.id}: {', '.join(unknown)}"
        raise InvalidFanOutIntentError(msg)
    return tags


def plan_fan_out(
    template: Template,
    property_: Property,
    intent: FanOutIntent,
    selected_units: Sequence[str] | None = None,
) -> list[TaskCreate]:
    """Plan the tasks a fan-out would create, without touching the store.

    Args:
        template: Template to expand
        property_: Target property with its normalized unit list
        intent: Operator-chosen fan-out intent
        selected_units: Unit tags for ``per_unit_selected``

    Returns:
        Task payloads. When more than one task is planned they all share one
        freshly generated batch id.

    Raises:
        MissingRequiredFieldError: If ``per_unit_selected`` has no selection
        InvalidFanOutIntentError: If the intent does not fit the property
    """
    try:
        intent = FanOutIntent(intent)
    except ValueError as e:
        msg = f"Unknown fan-out intent: {intent}"
        raise InvalidFanOutIntentError(msg) from e

    flow_type = property_.flow_type

    if flow_type == FlowType.SINGLE_FAMILY:
        return [_task_from_template(template, property_, scope=TaskScope.PROPERTY_WIDE, unit_tag=None)]

    common_area = [
        _task_from_template(template, property_, scope=TaskScope.PROPERTY_WIDE, unit_tag=constants.COMMON_AREA_TAG)
    ]
    if template.scope == TemplateScope.PROPERTY_WIDE:
        return common_area

    if intent in _DUAL_UNIT_INTENTS and flow_type != FlowType.DUAL_UNIT:
        msg = f"Intent '{intent}' is only valid for two-unit properties"
        raise InvalidFanOutIntentError(msg)

    unit_tags = property_.unit_tags
    if intent in _DUAL_UNIT_INTENTS and len(unit_tags) < 2:  # noqa: PLR2004
        msg = f"Property {property_.id} defines fewer than two units"
        raise InvalidFanOutIntentError(msg)

    match intent:
        case FanOutIntent.SINGLE:
            tasks = common_area
        case FanOutIntent.BUILDING_WIDE:
            count = property_.unit_count
            tasks = [
                _task_from_template(
                    template,
                    property_,
                    scope=TaskScope.BUILDING_WIDE,
                    unit_tag=constants.ALL_UNITS_TAG_TEMPLATE.format(count=count),
                    applies_to_unit_count=count,
                )
            ]
        case FanOutIntent.PER_UNIT_ALL:
            tags = unit_tags
            tasks = [_task_from_template(template, property_, scope=TaskScope.PER_UNIT, unit_tag=t) for t in tags]
        case FanOutIntent.PER_UNIT_SELECTED:
            tags = _selected_tags(property_, selected_units)
            tasks = [_task_from_template(template, property_, scope=TaskScope.PER_UNIT, unit_tag=t) for t in tags]
        case FanOutIntent.UNIT1:
            tasks = [_task_from_template(template, property_, scope=TaskScope.PER_UNIT, unit_tag=unit_tags[0])]
        case FanOutIntent.UNIT2:
            tasks = [_task_from_template(template, property_, scope=TaskScope.PER_UNIT, unit_tag=unit_tags[1])]
        case FanOutIntent.BOTH:
            tasks = [
                _task_from_template(template, property_, scope=TaskScope.PER_UNIT, unit_tag=t) for t in unit_tags[:2]
            ]

    if len(tasks) > 1:
        batch_id = uuid.uuid4().hex
        tasks = [task.model_copy(update={"batch_id": batch_id}) for task in tasks]
    return tasks


async def fan_out(
    *,
    template: Template,
    property_: Property,
    intent: FanOutIntent,
    selected_units: Sequence[str] | None = None,
) -> list[Task]:
    """Plan and create the tasks for one fan-out.

    Creations are issued concurrently and independently. Siblings that were
    created are kept even when others fail.

    Returns:
        Created tasks, in planning order

    Raises:
        MissingRequiredFieldError: If ``per_unit_selected`` has no selection
        InvalidFanOutIntentError: If the intent does not fit the property
        FanOutPartialFailureError: If any unit-level creation failed
    """
    with span("fan_out.fan_out"):
        planned = plan_fan_out(template, property_, intent, selected_units)

        results = await asyncio.gather(
            *(db_client.create_record(collection="tasks", data=task.model_dump(mode="json")) for task in planned),
            return_exceptions=True,
        )

        created: list[Task] = []
        failures: dict[str, str] = {}
        for task, result in zip(planned, results, strict=True):
            if isinstance(result, BaseException):
                label = task.unit_tag or constants.COMMON_AREA_TAG
                failures[label] = str(result)
                logger.error("Fan-out creation failed for '%s' (%s): %s", task.title, label, result)
            else:
                created.append(Task.model_validate(result))

        if failures:
            log_with_context(
                logger,
                "warning",
                "Fan-out partially failed",
                template_id=template.id,
                batch_id=planned[0].batch_id,
                created_count=len(created),
                failed_units=list(failures),
            )
            raise FanOutPartialFailureError(created=created, failures=failures, total=len(planned))

        logger.info(
            "Fanned out template '%s' into %d task(s)",
            template.title,
            len(created),
            extra={"template_id": template.id, "property_id": property_.id, "intent": str(intent)},
        )
        return created


def available_templates(templates: Iterable[Template], existing_tasks: Iterable[Task]) -> list[Template]:
    """Templates that no existing task was planned from."""
    used = {task.template_origin_id for task in existing_tasks if task.template_origin_id}
    return [template for template in templates if template.id not in used]


def suggest_templates(
    templates: Iterable[Template],
    property_: Property,
    existing_tasks: Iterable[Task],
    month_index: int,
    *,
    compact: bool = False,
) -> list[Template]:
    """Seasonal template suggestions for a property.

    Keeps templates for the current season (or year-round) and the property's
    climate zone (or all climates) that have not been planned yet. Featured
    templates are preferred; the list is topped up with the rest in sort order.
    """
    season = current_season(month_index)
    limit = constants.SUGGESTION_LIMIT_COMPACT if compact else constants.SUGGESTION_LIMIT

    def fits(template: Template) -> bool:
        in_season = season in template.seasons or constants.YEAR_ROUND_SEASON in template.seasons
        in_climate = (
            constants.ALL_CLIMATES in template.climate_zones
            or (property_.climate_zone is not None and property_.climate_zone in template.climate_zones)
        )
        return in_season and in_climate

    candidates = sorted(
        (template for template in available_templates(templates, existing_tasks) if fits(template)),
        key=lambda t: t.sort_order,
    )
    featured = [template for template in candidates if template.featured]
    others = [template for template in candidates if not template.featured]
    return [*featured, *others][:limit]


async def get_templates() -> list[Template]:
    """Load all templates from the store in display order."""
    with span("fan_out.get_templates"):
        records = await db_client.list_records(
            collection="templates",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
            sort="sort_order",
        )
        return [Template.model_validate(record) for record in records]
