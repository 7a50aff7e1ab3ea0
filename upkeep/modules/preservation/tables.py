"""Static preservation strategy, lifespan and replacement cost tables."""

from pydantic import BaseModel, ConfigDict, Field

from upkeep.core.config import constants
from upkeep.core.errors import NoPreservationBracketError
from upkeep.domain.system import Intervention


def _bracket_matches(bracket: str, age: int) -> bool:
    """Match ``"min-max"`` (inclusive) or ``"N+"`` (age >= N) brackets."""
    if bracket.endswith("+"):
        return age >= int(bracket[:-1])
    low, high = (int(part) for part in bracket.split("-", 1))
    return low <= age <= high


class StrategyTable(BaseModel):
    """Immutable lookup data for the preservation ROI engine.

    Brackets for a system type are checked in insertion order; the first
    match wins.
    """

    model_config = ConfigDict(frozen=True)

    strategies: dict[str, dict[str, tuple[Intervention, ...]]] = Field(default_factory=dict)
    lifespans: dict[str, int] = Field(default_factory=dict)
    replacement_costs: dict[str, float] = Field(default_factory=dict)
    condition_multipliers: dict[str, float] = Field(default_factory=dict)

    def lifespan_for(self, system_type: str) -> int:
        """Expected lifespan in years."""
        return self.lifespans.get(system_type) or constants.DEFAULT_LIFESPAN_YEARS

    def replacement_cost_for(self, system_type: str) -> float:
        """Flat replacement cost estimate."""
        return self.replacement_costs.get(system_type) or constants.DEFAULT_REPLACEMENT_COST

    def condition_multiplier(self, condition: str | None) -> float:
        """Failure risk multiplier for an inspected condition, 1 when unknown."""
        if not condition:
            return 1.0
        return self.condition_multipliers.get(condition) or 1.0

    def bundle_for(self, system_type: str, age: int) -> tuple[Intervention, ...]:
        """Intervention bundle for a system type at a given age.

        Raises:
            NoPreservationBracketError: If no bracket covers the age
        """
        for bracket, bundle in self.strategies.get(system_type, {}).items():
            if _bracket_matches(bracket, age) and bundle:
                return bundle
        raise NoPreservationBracketError(system_type=system_type, age=age)


def _i(name: str, cost: float, extension_years: float, description: str) -> Intervention:
    return Intervention(name=name, cost=cost, extension_years=extension_years, description=description)


DEFAULT_STRATEGY_TABLE = StrategyTable(
    strategies={
        "HVAC System": {
            "8-12": (
                _i("Annual professional deep cleaning", 180, 1, "Removes 5+ years of efficiency-killing buildup"),
                _i("Coil cleaning & treatment", 120, 1, "Improves cooling efficiency 10-15%"),
            ),
            "12-16": (
                _i("Deep coil cleaning & descaling", 180, 1, "Removes years of buildup"),
                _i("Refrigerant optimization", 120, 1, "Improves efficiency 15-20%, reduces strain"),
                _i("Duct sealing & optimization", 600, 2, "Prevents 20-30% energy waste, reduces system strain"),
            ),
            "17+": (
                _i("Comprehensive tune-up", 300, 1, "Extract maximum remaining life"),
                _i("Component replacement (capacitors, contactors)", 400, 1, "Replace wear items before failure"),
            ),
        },
        "Plumbing System": {
            "6-8": (
                _i("Water heater anode rod replacement", 200, 2, "Prevents tank corrosion"),
                _i("Tank flush & sediment removal", 120, 1, "Improves efficiency, prevents buildup damage"),
            ),
            "9-11": (
                _i("Anode rod replacement", 200, 2, "Critical for preventing tank corrosion"),
                _i("Tank flush & descale treatment", 150, 1, "Removes damaging sediment, improves heating"),
                _i("Expansion tank check/replacement", 180, 1, "Prevents pressure damage"),
            ),
        },
        "Roof System": {
            "12-18": (
                _i("Moss treatment & removal", 400, 2, "Prevents shingle deterioration"),
                _i("Minor flashing repair", 500, 2, "Prevents leaks at vulnerable points"),
                _i("Sealant replacement", 300, 1, "Prevents moisture intrusion"),
            ),
            "18-22": (
                _i("Comprehensive moss treatment", 500, 2, "Aggressive moss removal & prevention"),
                _i("Flashing replacement", 800, 3, "Replace aging flashing before failure"),
                _i("Shingle repairs", 600, 2, "Replace damaged shingles, prevent spread"),
            ),
        },
        "Water & Sewer/Septic": {
            "15-25": (
                _i("Septic tank pump & inspection", 400, 2, "Prevents system failure"),
                _i("Drain field treatment", 300, 2, "Restores absorption capacity"),
            ),
            "25+": (
                _i("Comprehensive septic inspection", 500, 1, "Identify issues before failure"),
                _i("Tank & field treatment", 600, 2, "Extend system life"),
            ),
        },
        "Foundation & Structure": {
            "30+": (
                _i("Foundation sealing", 1500, 5, "Prevents water intrusion and cracks"),
                _i("Drainage improvement", 2000, 10, "Protects foundation long-term"),
            ),
        },
    },
    lifespans={
        "HVAC System": 20,
        "Plumbing System": 12,
        "Water Heater": 12,
        "Roof System": 25,
        "Electrical System": 40,
        "Water & Sewer/Septic": 40,
        "Foundation & Structure": 100,
        "Windows & Doors": 25,
        "Gutters & Downspouts": 20,
        "Exterior Siding & Envelope": 30,
    },
    replacement_costs={
        "HVAC System": 8000,
        "Plumbing System": 3500,
        "Water Heater": 3500,
        "Roof System": 18000,
        "Electrical System": 12000,
        "Water & Sewer/Septic": 25000,
        "Foundation & Structure": 50000,
        "Windows & Doors": 8000,
        "Gutters & Downspouts": 1500,
        "Exterior Siding & Envelope": 15000,
    },
    condition_multipliers={
        "Excellent": 0.5,
        "Good": 1.0,
        "Fair": 1.5,
        "Poor": 2.0,
        "Urgent": 3.0,
    },
)
