"""
Effectiveness model for the refrigerant tubing buried in the rink slab.

The tubing is treated as a heat exchanger whose wall sits at the slab
source temperature. Effectiveness follows from the number of transfer
units with a constant-wall-temperature relation:

    Re  = 4 * mdot / (pi * mu * D * circuits)
    Nu  = 0.023 * Re^0.8 * Pr^(1/3)      (Re >= 2300, Colburn)
    Nu  = 3.66                           (Re <  2300, laminar)
    NTU = pi * k * Nu * L / (mdot * cp)
    eps = 1 - exp(-NTU)                  (eps = 1 when NTU > 50)

Usage:
    from icerink.physics.heat_exchanger import calculate_effectiveness
    from icerink.physics.properties import get_property_table

    hx = calculate_effectiveness(get_property_table("NH3"), -8.0, 2.0, 500.0, 0.02, 300)
    hx.epsilon, hx.eps_mdot_cp
"""

import math
from dataclasses import dataclass

from icerink.core.constants import (
    COLBURN_COEFFICIENT,
    LAMINAR_NUSSELT,
    MAX_EXP_POWER,
    MAX_LAMINAR_REYNOLDS,
    PRANDTL_EXPONENT,
    REYNOLDS_EXPONENT,
)
from icerink.physics.properties import FluidProperties, PropertyTable

LAMINAR = "laminar"
TURBULENT = "turbulent"


@dataclass(frozen=True)
class HeatExchangerResult:
    """Outcome of one effectiveness evaluation."""

    epsilon: float
    mdot_cp: float  # W/K
    reynolds: float
    nusselt: float
    ntu: float
    properties: FluidProperties

    @property
    def regime(self) -> str:
        return TURBULENT if self.reynolds >= MAX_LAMINAR_REYNOLDS else LAMINAR

    @property
    def eps_mdot_cp(self) -> float:
        """Effective thermal conductance, epsilon * mdot * cp, in W/K."""
        return self.epsilon * self.mdot_cp


def reynolds_number(mass_flow: float, viscosity: float, tube_diameter: float, circuits: float = 1.0) -> float:
    """Reynolds number of the flow in a single circuit."""
    return 4.0 * mass_flow / (math.pi * viscosity * tube_diameter * circuits)


def nusselt_number(reynolds: float, prandtl: float) -> float:
    """
    Nusselt number for fully developed tube flow.

    The switch at Re = 2300 is a hard step; there is no transition blending.
    """
    if reynolds >= MAX_LAMINAR_REYNOLDS:
        return COLBURN_COEFFICIENT * reynolds**REYNOLDS_EXPONENT * prandtl**PRANDTL_EXPONENT
    return LAMINAR_NUSSELT


def effectiveness_from_ntu(ntu: float) -> float:
    """Heat exchanger effectiveness, saturated to exactly 1.0 above MAX_EXP_POWER."""
    if ntu > MAX_EXP_POWER:
        return 1.0
    return 1.0 - math.exp(-ntu)


def calculate_effectiveness(
    table: PropertyTable,
    inlet_temp: float,
    mass_flow: float,
    tube_length: float,
    tube_diameter: float,
    circuits: float = 1.0,
) -> HeatExchangerResult:
    """
    Evaluate the buried-pipe heat exchanger.

    Args:
        table: Property table of the working fluid
        inlet_temp: Fluid temperature entering the slab in °C
        mass_flow: Total fluid mass flow in kg/s; must be positive
        tube_length: Total embedded tube length in m
        tube_diameter: Tube inner diameter in m
        circuits: Number of parallel circuits sharing the flow

    Returns:
        HeatExchangerResult with epsilon and mdot*cp

    Raises:
        ValueError: If mass_flow is not positive, or the geometry is invalid.
            Callers handle the no-flow case (no heat exchange) themselves.
    """
    if mass_flow <= 0:
        raise ValueError(f"Mass flow must be positive, got {mass_flow}")
    if tube_length <= 0 or tube_diameter <= 0 or circuits <= 0:
        raise ValueError("Tube length, diameter and circuit count must be positive")

    props = table.lookup(inlet_temp)
    reynolds = reynolds_number(mass_flow, props.viscosity, tube_diameter, circuits)
    nusselt = nusselt_number(reynolds, props.prandtl)
    mdot_cp = mass_flow * props.specific_heat
    ntu = math.pi * props.conductivity * nusselt * tube_length / mdot_cp

    return HeatExchangerResult(
        epsilon=effectiveness_from_ntu(ntu),
        mdot_cp=mdot_cp,
        reynolds=reynolds,
        nusselt=nusselt,
        ntu=ntu,
        properties=props,
    )
