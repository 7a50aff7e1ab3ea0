"""Preservation ROI engine.

Finds systems late enough in their life that a bundle of interventions is
worth more than planning a replacement, and scores each opportunity.
"""

import logging
import math
from collections.abc import Iterable
from datetime import UTC, datetime

from upkeep.core.config import constants
from upkeep.core.errors import NoPreservationBracketError
from upkeep.domain.system import (
    HomeSystem,
    Intervention,
    OpportunityPriority,
    PreservationOpportunity,
    PreservationPlan,
    PreservationPortfolio,
)
from upkeep.modules.preservation.tables import DEFAULT_STRATEGY_TABLE, StrategyTable


logger = logging.getLogger(__name__)


_PRIORITY_ORDER = {
    OpportunityPriority.HIGH: 0,
    OpportunityPriority.MEDIUM: 1,
    OpportunityPriority.LOW: 2,
}

_BEST_TIMING = {
    OpportunityPriority.HIGH: "Schedule within the next 30 days",
    OpportunityPriority.MEDIUM: "Schedule within the next 3 months",
    OpportunityPriority.LOW: "Schedule within the next 6 months",
}

PREVENTIVE_TIPS = (
    "Schedule regular professional inspections",
    "Keep maintenance records up to date",
    "Address small issues before they become big problems",
    "Follow manufacturer maintenance recommendations",
)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _base_failure_risk(percent_lifespan: float) -> int:
    if percent_lifespan >= 90:  # noqa: PLR2004
        return 40
    if percent_lifespan >= 80:  # noqa: PLR2004
        return 30
    if percent_lifespan >= 70:  # noqa: PLR2004
        return 20
    if percent_lifespan >= 60:  # noqa: PLR2004
        return 15
    return 10


def calculate_failure_risk(percent_lifespan: float, condition: str | None, *, table: StrategyTable) -> int:
    """Two-year failure risk percentage, adjusted for condition and capped."""
    risk = _base_failure_risk(percent_lifespan) * table.condition_multiplier(condition)
    return min(_round_half_up(risk), constants.FAILURE_RISK_CAP)


def priority_for(percent_lifespan: float) -> OpportunityPriority:
    """Urgency tier from how far through its life a system is."""
    if percent_lifespan > constants.HIGH_PRIORITY_PERCENT:
        return OpportunityPriority.HIGH
    if percent_lifespan > constants.MEDIUM_PRIORITY_PERCENT:
        return OpportunityPriority.MEDIUM
    return OpportunityPriority.LOW


def select_bundle(system_type: str, age: int, *, table: StrategyTable = DEFAULT_STRATEGY_TABLE) -> list[Intervention]:
    """Intervention bundle for a system type and age.

    Raises:
        NoPreservationBracketError: If the table has no bracket for the age
    """
    return list(table.bundle_for(system_type, age))


def analyze_preservation_opportunity(
    system: HomeSystem,
    *,
    table: StrategyTable = DEFAULT_STRATEGY_TABLE,
    current_year: int | None = None,
) -> PreservationOpportunity | None:
    """Score one system as a preservation opportunity.

    Args:
        system: System with type, install year and condition
        table: Strategy, lifespan and cost tables
        current_year: Year to compute age against (defaults to this year)

    Returns:
        The opportunity, or None when the age is unknown, the system is
        outside 50-95% of its lifespan, or no intervention bundle applies
    """
    if system.installation_year is None:
        return None

    year = current_year if current_year is not None else datetime.now(UTC).year
    age = year - system.installation_year
    if age <= 0:
        return None

    lifespan = table.lifespan_for(system.system_type)
    percent_lifespan = age * 100 / lifespan
    if not constants.PRESERVATION_MIN_PERCENT <= percent_lifespan <= constants.PRESERVATION_MAX_PERCENT:
        return None

    try:
        strategies = select_bundle(system.system_type, age, table=table)
    except NoPreservationBracketError as e:
        logger.debug("No preservation opportunity: %s", e)
        return None

    investment = sum(strategy.cost for strategy in strategies)
    extension_years = sum(strategy.extension_years for strategy in strategies)
    if investment <= 0 or extension_years <= 0:
        return None

    replacement_cost = table.replacement_cost_for(system.system_type)
    annual_savings = replacement_cost / extension_years

    return PreservationOpportunity(
        system=system,
        priority=priority_for(percent_lifespan),
        strategies=strategies,
        investment=investment,
        extension_years=extension_years,
        replacement_cost=replacement_cost,
        annual_savings=annual_savings,
        roi=annual_savings / investment,
        failure_risk=calculate_failure_risk(percent_lifespan, system.condition, table=table),
        percent_lifespan=_round_half_up(percent_lifespan),
        age=age,
        lifespan=lifespan,
    )


def build_portfolio(
    systems: Iterable[HomeSystem],
    *,
    table: StrategyTable = DEFAULT_STRATEGY_TABLE,
    current_year: int | None = None,
) -> PreservationPortfolio | None:
    """Aggregate opportunities across systems.

    Opportunities are ordered HIGH, MEDIUM, LOW and by descending ROI within a
    tier. Returns None when no system qualifies.
    """
    opportunities = [
        opportunity
        for system in systems
        if (opportunity := analyze_preservation_opportunity(system, table=table, current_year=current_year))
        is not None
    ]
    if not opportunities:
        return None

    opportunities.sort(key=lambda o: (_PRIORITY_ORDER[o.priority], -o.roi))

    total_investment = sum(o.investment for o in opportunities)
    total_savings = sum(o.replacement_cost for o in opportunities)

    return PreservationPortfolio(
        opportunities=opportunities,
        total_investment=total_investment,
        total_savings=total_savings,
        total_roi=total_savings / total_investment,
    )


def build_preservation_plan(system: HomeSystem, opportunity: PreservationOpportunity) -> PreservationPlan:
    """Plain-language plan for acting on an opportunity."""
    extension = f"{opportunity.extension_years:g}"
    return PreservationPlan(
        why_now=(
            f"Your {system.system_type} is {opportunity.age} years old "
            f"({opportunity.percent_lifespan:g}% of its expected lifespan). "
            f"Acting now can extend its life by {extension} years and save you "
            f"${opportunity.replacement_cost:,.0f} in replacement costs."
        ),
        consequences_of_skipping=(
            f"Without preservation, your {system.system_type} has a {opportunity.failure_risk}% chance of "
            "failure in the next 2 years. Emergency replacements typically cost 20-40% more than planned ones."
        ),
        best_timing=_BEST_TIMING[opportunity.priority],
        preventive_tips=list(PREVENTIVE_TIPS),
    )
