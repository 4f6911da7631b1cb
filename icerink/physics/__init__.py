"""Physics calculations for ice rink simulation."""

from icerink.physics.properties import (
    FluidProperties,
    PropertyTable,
    get_property_table,
    lookup,
    supported_concentrations,
)
from icerink.physics.heat_exchanger import HeatExchangerResult, calculate_effectiveness
from icerink.physics.heat_balance import HeatBalanceCoefficients, HeatBalanceResult, solve
from icerink.physics.loads import ResurfacingLoad, freezing_load, resurfacing_load

__all__ = [
    "FluidProperties",
    "PropertyTable",
    "get_property_table",
    "lookup",
    "supported_concentrations",
    "HeatExchangerResult",
    "calculate_effectiveness",
    "HeatBalanceCoefficients",
    "HeatBalanceResult",
    "solve",
    "ResurfacingLoad",
    "freezing_load",
    "resurfacing_load",
]
