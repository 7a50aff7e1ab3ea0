"""Task domain models and enums."""

from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator


class TaskStatus(StrEnum):
    """Task lifecycle state."""

    IDENTIFIED = "Identified"
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    DEFERRED = "Deferred"
    COMPLETED = "Completed"


class PriorityTier(StrEnum):
    """Priority tier assigned to a task or template."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    ROUTINE = "Routine"


PRIORITY_WEIGHTS: dict[PriorityTier, int] = {
    PriorityTier.HIGH: 3,
    PriorityTier.MEDIUM: 2,
    PriorityTier.LOW: 1,
    PriorityTier.ROUTINE: 0,
}


class TaskScope(StrEnum):
    """Which part of a property a task applies to."""

    PROPERTY_WIDE = "property_wide"
    BUILDING_WIDE = "building_wide"
    PER_UNIT = "per_unit"


class ExecutionMethod(StrEnum):
    """Who carries out the work."""

    DIY = "DIY"
    CONTRACTOR = "Contractor"
    OPERATOR = "Operator"
    UNSET = "unset"


class TimeRange(StrEnum):
    """Time-of-day bucket used by the day calendar view."""

    MORNING = "morning"  # 6am - 12pm
    AFTERNOON = "afternoon"  # 12pm - 6pm
    EVENING = "evening"  # 6pm - 12am


def _coerce_date(value: object) -> object:
    """Accept dates, datetimes and ISO strings; discard any time component."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:  # noqa: PLR2004
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


class TaskFields(BaseModel):
    """Fields shared by stored tasks and creation payloads."""

    property_id: str = Field(..., description="Owning property ID")
    title: str = Field(..., description="Task title (e.g., 'Clean gutters')")
    description: str = Field(default="", description="Detailed task description")
    system_type: str = Field(default="General", description="Home system the task belongs to")
    priority: PriorityTier = Field(default=PriorityTier.MEDIUM, description="Priority tier")
    scope: TaskScope = Field(default=TaskScope.PROPERTY_WIDE, description="Property, building, or unit scope")
    unit_tag: str | None = Field(default=None, description="Unit tag, required for per-unit scope")
    applies_to_unit_count: int = Field(default=1, ge=1, description="Number of units the task covers")
    batch_id: str | None = Field(default=None, description="Shared ID of tasks created by one fan-out")
    template_origin_id: str | None = Field(default=None, description="Template the task was planned from")

    status: TaskStatus = Field(default=TaskStatus.IDENTIFIED, description="Current lifecycle state")
    scheduled_date: date | None = Field(default=None, description="Calendar day the task is scheduled on")
    completion_date: date | None = Field(default=None, description="Day the task was completed")
    execution_method: ExecutionMethod = Field(default=ExecutionMethod.UNSET, description="DIY, contractor, or operator")
    time_range: TimeRange | None = Field(default=None, description="Time-of-day bucket on the scheduled day")

    cascade_risk_score: float | None = Field(default=None, ge=0, le=10, description="0-10 secondary damage risk")
    risk_rationale: str | None = Field(default=None, description="Why the risk score was assigned")
    current_fix_cost: float | None = Field(default=None, ge=0, description="Cost to fix now")
    delayed_fix_cost: float | None = Field(default=None, ge=0, description="Cost to fix if deferred")
    actual_cost: float | None = Field(default=None, ge=0, description="Cost recorded at completion")
    estimated_hours: float | None = Field(default=None, ge=0, description="Estimated effort in hours")
    diy_time_hours: float | None = Field(default=None, ge=0, description="DIY-specific effort estimate in hours")

    is_seasonal: bool = Field(default=False, description="Whether the task is tied to a seasonal window")
    recommended_completion_window: str | None = Field(default=None, description="Seasonal window descriptor")
    reminder_snoozed_until: datetime | None = Field(default=None, description="Seasonal reminder snooze expiry")
    recurrence_interval: str | None = Field(default=None, description="Normalized recurrence copied from template")

    photo_urls: list[str] = Field(default_factory=list, description="Photo references attached to the task")

    @field_validator("scheduled_date", "completion_date", mode="before")
    @classmethod
    def discard_time_component(cls, v: object) -> object:
        """Store calendar days only."""
        return _coerce_date(v)

    @model_validator(mode="after")
    def require_unit_tag_for_per_unit(self) -> "TaskFields":
        """Per-unit tasks must say which unit they belong to."""
        if self.scope == TaskScope.PER_UNIT and not self.unit_tag:
            msg = "unit_tag is required for per-unit tasks"
            raise ValueError(msg)
        return self


class TaskCreate(TaskFields):
    """Pydantic model for creating a task record."""


class Task(TaskFields):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID from the store")
    created: str | None = Field(default=None, description="Creation timestamp (ISO format)")
    updated: str | None = Field(default=None, description="Last update timestamp (ISO format)")

    @property
    def hours(self) -> float:
        """Effort used for workload, falling back to the DIY estimate."""
        if self.estimated_hours is not None:
            return self.estimated_hours
        if self.diy_time_hours is not None:
            return self.diy_time_hours
        return 0.0
