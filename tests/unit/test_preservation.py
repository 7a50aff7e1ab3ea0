"""Unit tests for the preservation ROI engine."""

import pytest

from upkeep.core.errors import NoPreservationBracketError
from upkeep.domain.system import HomeSystem, Intervention, OpportunityPriority
from upkeep.modules.preservation import (
    DEFAULT_STRATEGY_TABLE,
    StrategyTable,
    analyze_preservation_opportunity,
    build_portfolio,
    build_preservation_plan,
    select_bundle,
)


CURRENT_YEAR = 2025


def _hvac(age: int, condition: str | None = "Good", system_id: str = "hvac") -> HomeSystem:
    return HomeSystem(
        id=system_id,
        system_type="HVAC System",
        installation_year=CURRENT_YEAR - age,
        condition=condition,
    )


@pytest.fixture
def example_table() -> StrategyTable:
    """Table with a single $300 / 2-year bundle for an $8,000 system."""
    return StrategyTable(
        strategies={
            "Heat Pump": {
                "10-19": (
                    Intervention(name="Coil service", cost=180, extension_years=1),
                    Intervention(name="Refrigerant check", cost=120, extension_years=1),
                ),
            },
        },
        lifespans={"Heat Pump": 20},
        replacement_costs={"Heat Pump": 8000},
        condition_multipliers={"Good": 1.0, "Poor": 2.0},
    )


@pytest.mark.unit
class TestAnalyzeOpportunity:
    """Tests for analyze_preservation_opportunity."""

    def test_roi_example(self, example_table):
        """$300 for 2 extra years on an $8,000 system."""
        system = HomeSystem(system_type="Heat Pump", installation_year=2013, condition="Good")

        opportunity = analyze_preservation_opportunity(system, table=example_table, current_year=CURRENT_YEAR)

        assert opportunity is not None
        assert opportunity.investment == 300
        assert opportunity.extension_years == 2
        assert opportunity.annual_savings == 4000
        assert opportunity.roi == pytest.approx(13.33, abs=0.01)

    def test_lower_boundary_inclusive(self):
        """Age 10 of 20 is exactly 50% and qualifies."""
        opportunity = analyze_preservation_opportunity(_hvac(10), current_year=CURRENT_YEAR)

        assert opportunity is not None
        assert opportunity.percent_lifespan == 50
        assert opportunity.priority == OpportunityPriority.LOW
        assert [s.name for s in opportunity.strategies] == [
            "Annual professional deep cleaning",
            "Coil cleaning & treatment",
        ]

    def test_upper_boundary_inclusive(self):
        """Age 19 of 20 is exactly 95% and qualifies."""
        opportunity = analyze_preservation_opportunity(_hvac(19), current_year=CURRENT_YEAR)

        assert opportunity is not None
        assert opportunity.percent_lifespan == 95
        assert opportunity.priority == OpportunityPriority.HIGH
        assert opportunity.investment == 700

    def test_fully_depreciated(self):
        """Age 20 of 20 is past the window."""
        assert analyze_preservation_opportunity(_hvac(20), current_year=CURRENT_YEAR) is None

    def test_too_young(self):
        """Below half of the lifespan there is nothing to preserve yet."""
        assert analyze_preservation_opportunity(_hvac(9), current_year=CURRENT_YEAR) is None

    def test_unknown_age(self):
        """Systems without an install year are skipped."""
        system = HomeSystem(system_type="HVAC System", installation_year=None)
        assert analyze_preservation_opportunity(system, current_year=CURRENT_YEAR) is None

    def test_no_bracket(self):
        """A type with no strategies yields no opportunity."""
        system = HomeSystem(system_type="Electrical System", installation_year=CURRENT_YEAR - 25)
        assert analyze_preservation_opportunity(system, current_year=CURRENT_YEAR) is None

    def test_unknown_type_uses_defaults(self):
        """Unknown types fall back to a 20-year lifespan and $5,000 replacement."""
        table = StrategyTable(
            strategies={"Sump Pump": {"10+": (Intervention(name="Service", cost=100, extension_years=2),)}},
        )
        system = HomeSystem(system_type="Sump Pump", installation_year=CURRENT_YEAR - 12)

        opportunity = analyze_preservation_opportunity(system, table=table, current_year=CURRENT_YEAR)

        assert opportunity is not None
        assert opportunity.lifespan == 20
        assert opportunity.replacement_cost == 5000
        assert opportunity.roi == 25

    @pytest.mark.parametrize(
        ("age", "condition", "risk"),
        [
            (10, "Good", 10),
            (12, "Fair", 23),
            (14, "Excellent", 10),
            (16, "Poor", 60),
            (18, "Urgent", 80),
            (13, None, 15),
            (13, "Unknown", 15),
        ],
    )
    def test_failure_risk(self, age, condition, risk):
        """Base risk by lifespan bracket scaled by condition and capped at 80."""
        opportunity = analyze_preservation_opportunity(_hvac(age, condition), current_year=CURRENT_YEAR)

        assert opportunity is not None
        assert opportunity.failure_risk == risk

    def test_priority_thresholds(self):
        """HIGH above 75%, MEDIUM above 60%, LOW otherwise."""
        priorities = {
            age: analyze_preservation_opportunity(_hvac(age), current_year=CURRENT_YEAR).priority
            for age in (12, 13, 15, 16)
        }

        assert priorities == {
            12: OpportunityPriority.LOW,
            13: OpportunityPriority.MEDIUM,
            15: OpportunityPriority.MEDIUM,
            16: OpportunityPriority.HIGH,
        }

    def test_first_matching_bracket_wins(self):
        """Overlapping brackets resolve to the first listed."""
        bundle = select_bundle("HVAC System", 12)
        assert [s.cost for s in bundle] == [180, 120]

    def test_select_bundle_raises_without_bracket(self):
        """The bundle lookup signals a missing bracket."""
        with pytest.raises(NoPreservationBracketError):
            select_bundle("Plumbing System", 3, table=DEFAULT_STRATEGY_TABLE)


@pytest.mark.unit
class TestPortfolio:
    """Tests for build_portfolio and build_preservation_plan."""

    def test_portfolio_ordering_and_totals(self):
        """Sorted HIGH -> LOW then by ROI, with summed totals."""
        systems = [
            _hvac(10, system_id="low"),
            HomeSystem(id="roof", system_type="Roof System", installation_year=CURRENT_YEAR - 20),
            _hvac(17, system_id="high-hvac"),
            HomeSystem(id="young", system_type="Roof System", installation_year=CURRENT_YEAR - 2),
        ]

        portfolio = build_portfolio(systems, current_year=CURRENT_YEAR)

        assert portfolio is not None
        assert [o.system.id for o in portfolio.opportunities] == ["high-hvac", "roof", "low"]
        assert portfolio.total_investment == 700 + 1900 + 300
        assert portfolio.total_savings == 8000 + 18000 + 8000
        assert portfolio.total_roi == pytest.approx(34000 / 2900)

    def test_empty_portfolio(self):
        """No qualifying systems means no portfolio."""
        assert build_portfolio([_hvac(2)], current_year=CURRENT_YEAR) is None
        assert build_portfolio([], current_year=CURRENT_YEAR) is None

    def test_preservation_plan(self):
        """Plans are deterministic and timed by priority."""
        system = _hvac(17, condition="Fair")
        opportunity = analyze_preservation_opportunity(system, current_year=CURRENT_YEAR)

        plan = build_preservation_plan(system, opportunity)

        assert plan.best_timing == "Schedule within the next 30 days"
        assert "17 years old (85% of its expected lifespan)" in plan.why_now
        assert "$8,000" in plan.why_now
        assert f"{opportunity.failure_risk}% chance of failure" in plan.consequences_of_skipping
        assert len(plan.preventive_tips) == 4
