"""Domain models and DTOs."""

from upkeep.domain.property import FlowType, Property, Unit
from upkeep.domain.system import (
    HomeSystem,
    Intervention,
    OpportunityPriority,
    PreservationOpportunity,
    PreservationPlan,
    PreservationPortfolio,
    SystemCondition,
)
from upkeep.domain.task import (
    ExecutionMethod,
    PriorityTier,
    Task,
    TaskCreate,
    TaskScope,
    TaskStatus,
    TimeRange,
)
from upkeep.domain.template import Template, TemplateScope


__all__ = [
    "ExecutionMethod",
    "FlowType",
    "HomeSystem",
    "Intervention",
    "OpportunityPriority",
    "PreservationOpportunity",
    "PreservationPlan",
    "PreservationPortfolio",
    "PriorityTier",
    "Property",
    "SystemCondition",
    "Task",
    "TaskCreate",
    "TaskScope",
    "TaskStatus",
    "Template",
    "TemplateScope",
    "TimeRange",
    "Unit",
]
