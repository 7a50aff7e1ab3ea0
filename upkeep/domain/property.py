"""Property and unit domain models."""

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator


class FlowType(StrEnum):
    """Property topology class derived from the unit count."""

    SINGLE_FAMILY = "single_family"
    DUAL_UNIT = "dual_unit"
    MULTI_UNIT = "multi_unit"


class Unit(BaseModel):
    """One dwelling unit of a property."""

    unit_id: str | None = Field(default=None, description="Stable unit identifier")
    nickname: str | None = Field(default=None, description="Display name (e.g., 'Upstairs')")
    floor: int | None = Field(default=None, description="Floor number")
    occupancy_status: str | None = Field(default=None, description="Occupied, vacant, owner-occupied")
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: float | None = Field(default=None, ge=0)

    @property
    def tag(self) -> str:
        """Tag written onto per-unit tasks."""
        return self.unit_id or self.nickname or ""


class Property(BaseModel):
    """A property with its normalized unit list.

    The door count decides the topology; the unit list only supplies tags.
    When no explicit units are stored but the door count is above one, units
    ``Unit 1..N`` are synthesized at construction so planners never re-derive them.
    """

    id: str = Field(..., description="Property ID")
    address: str | None = Field(default=None, description="Street address")
    door_count: int | None = Field(default=None, ge=1, description="Number of doors/units at the address")
    climate_zone: str | None = Field(default=None, description="Climate zone used for template suggestions")
    units: list[Unit] = Field(default_factory=list, description="Normalized unit list")

    @model_validator(mode="after")
    def synthesize_units(self) -> "Property":
        """Fill in ``Unit 1..N`` when only a door count is known and tag every unit uniquely."""
        if not self.units and self.door_count and self.door_count > 1:
            self.units = [Unit(unit_id=f"Unit {i}", nickname=f"Unit {i}") for i in range(1, self.door_count + 1)]
        for index, unit in enumerate(self.units, start=1):
            if not unit.tag:
                unit.unit_id = f"Unit {index}"

        duplicates = sorted({tag for tag in self.unit_tags if self.unit_tags.count(tag) > 1})
        if duplicates:
            msg = f"Duplicate unit tags on property {self.id}: {', '.join(duplicates)}"
            raise ValueError(msg)
        return self

    @property
    def unit_count(self) -> int:
        """Number of doors, falling back to the unit list when the door count is unknown."""
        return self.door_count or len(self.units) or 1

    @property
    def flow_type(self) -> FlowType:
        """Topology class of the property."""
        if self.unit_count == 1:
            return FlowType.SINGLE_FAMILY
        if self.unit_count == 2:  # noqa: PLR2004
            return FlowType.DUAL_UNIT
        return FlowType.MULTI_UNIT

    @property
    def unit_tags(self) -> list[str]:
        """Tags of all normalized units, in order."""
        return [unit.tag for unit in self.units]
