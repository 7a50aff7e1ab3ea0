"""Maintenance template domain model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from upkeep.domain.task import PriorityTier


class TemplateScope(StrEnum):
    """Scope a template is authored for."""

    PROPERTY_WIDE = "property_wide"
    PER_UNIT = "per_unit"


class Template(BaseModel):
    """Reusable seasonal task blueprint.

    Templates are read-only inputs to the fan-out planner. ``usage_count`` is
    maintained by the store, never by the engine.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique template ID")
    title: str = Field(..., description="Template title")
    description: str = Field(default="", description="Template description")
    system_type: str = Field(default="General", description="Home system the template targets")
    priority: PriorityTier = Field(default=PriorityTier.MEDIUM, description="Default priority of planned tasks")
    seasons: tuple[str, ...] = Field(default=("Year-Round",), description="Applicable seasons")
    climate_zones: tuple[str, ...] = Field(default=("All Climates",), description="Applicable climate zones")
    scope: TemplateScope = Field(default=TemplateScope.PROPERTY_WIDE, description="Property-wide or per-unit")
    recurrence_interval: str | None = Field(default=None, description="How often the work recurs")
    completion_window: str | None = Field(default=None, description="Seasonal window descriptor for reminders")
    estimated_hours: float | None = Field(default=None, ge=0, description="Typical effort in hours")
    is_diy_friendly: bool = Field(default=False, description="Whether a homeowner can do it themselves")
    featured: bool = Field(default=False, description="Highlighted in seasonal suggestions")
    sort_order: int = Field(default=0, description="Display ordering")
    usage_count: int = Field(default=0, ge=0, description="Number of times planned, maintained by the store")

    @property
    def window_descriptor(self) -> str:
        """Descriptor used by the seasonal evaluator for tasks planned from this template."""
        if self.completion_window:
            return self.completion_window
        if "Year-Round" in self.seasons:
            return "Every month"
        return ", ".join(self.seasons)
