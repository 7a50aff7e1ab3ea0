"""Preservation ROI analysis for aging home systems."""

from upkeep.modules.preservation.roi import (
    analyze_preservation_opportunity,
    build_portfolio,
    build_preservation_plan,
    select_bundle,
)
from upkeep.modules.preservation.tables import DEFAULT_STRATEGY_TABLE, StrategyTable


__all__ = [
    "DEFAULT_STRATEGY_TABLE",
    "StrategyTable",
    "analyze_preservation_opportunity",
    "build_portfolio",
    "build_preservation_plan",
    "select_bundle",
]
