"""Home system and preservation opportunity models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SystemCondition(StrEnum):
    """Inspected condition of a home system."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    URGENT = "Urgent"


class OpportunityPriority(StrEnum):
    """How soon a preservation opportunity should be acted on."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class HomeSystem(BaseModel):
    """A documented home system (roof, HVAC, plumbing, ...)."""

    id: str | None = Field(default=None, description="System record ID")
    system_type: str = Field(..., description="System type (e.g., 'HVAC System')")
    installation_year: int | None = Field(default=None, description="Year the system was installed")
    condition: str | None = Field(default=None, description="Inspected condition, free text")


class Intervention(BaseModel):
    """One preservation action with its cost and expected life extension."""

    model_config = ConfigDict(frozen=True)

    name: str
    cost: float = Field(..., ge=0)
    extension_years: float = Field(..., ge=0)
    description: str = ""


class PreservationOpportunity(BaseModel):
    """Computed recommendation to extend a system's life rather than replace it."""

    system: HomeSystem
    priority: OpportunityPriority
    strategies: list[Intervention]
    investment: float
    extension_years: float
    replacement_cost: float
    annual_savings: float
    roi: float
    failure_risk: int
    percent_lifespan: float
    age: int
    lifespan: int


class PreservationPortfolio(BaseModel):
    """Opportunities across a set of systems with aggregate ROI."""

    opportunities: list[PreservationOpportunity]
    total_investment: float
    total_savings: float
    total_roi: float


class PreservationPlan(BaseModel):
    """Narrative plan for acting on a preservation opportunity."""

    why_now: str
    consequences_of_skipping: str
    best_timing: str
    preventive_tips: list[str]
