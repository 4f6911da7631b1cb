"""
Refrigerant flow resolution for rink floor systems.

Two mutually exclusive strategies pick the refrigerant mass flow while a
system is cooling:

- OutletTemperatureControl inverts the slab/tubing coupling for the flow
  that brings the refrigerant outlet temperature to its setpoint.
- SurfaceTemperatureControl solves for the heat source that holds the ice
  surface at its setpoint and converts it to a flow.

Both evaluate the physics through a FlowProblem, a snapshot of everything
that is fixed for the step (coefficients, fluid, inlet temperature, tubing).
Resolution is bounded: each strategy makes at most a handful of
evaluations and clamps to the configured flow limits instead of iterating.

Usage:
    from icerink.controls.resolvers import FlowProblem, create_resolver

    resolver = create_resolver("IceSurfaceTemperature", min_flow=0.0, max_flow=5.0)
    decision = resolver.resolve(problem, setpoint=-5.0)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Optional

from icerink.core.config import (
    CONDENSATION_OFF,
    CONDENSATION_SIMPLE_OFF,
    CONDENSATION_VARIABLE_OFF,
    OUTLET_TEMPERATURE_CONTROL,
    SURFACE_TEMPERATURE_CONTROL,
)
from icerink.core.constants import CONDENSATION_TOLERANCE, DEGENERATE_TOLERANCE
from icerink.core.errors import ConfigurationError, NumericalError
from icerink.physics import heat_balance
from icerink.physics.heat_balance import HeatBalanceCoefficients, HeatBalanceResult
from icerink.physics.heat_exchanger import HeatExchangerResult, calculate_effectiveness
from icerink.physics.properties import PropertyTable

logger = logging.getLogger(__name__)

# Reasons attached to control decisions
REQUIRED_FLOW = "required_flow"
AT_SETPOINT = "at_setpoint"
UNDERSIZED = "undersized"
BELOW_MINIMUM = "below_minimum"
SETPOINT_BELOW_INLET = "setpoint_below_inlet"
REVERSE_OPERATION = "reverse_operation"
CONDENSATION_SHUTOFF = "condensation_shutoff"
CONDENSATION_REDUCED = "condensation_reduced"


@dataclass(frozen=True)
class FlowProblem:
    """Conditions held fixed while the flow for one step is resolved."""

    coeffs: HeatBalanceCoefficients
    table: PropertyTable
    inlet_temp: float  # °C
    surface_area: float  # m²
    tube_length: float  # m
    tube_diameter: float  # m
    circuits: float
    current_flow: float = 0.0  # kg/s, flow from the previous evaluation

    def exchanger(self, mass_flow: float) -> Optional[HeatExchangerResult]:
        """Effectiveness at mass_flow, or None when there is no flow."""
        if mass_flow <= 0:
            return None
        return calculate_effectiveness(
            self.table,
            self.inlet_temp,
            mass_flow,
            self.tube_length,
            self.tube_diameter,
            self.circuits,
        )

    def solve(self, mass_flow: float) -> HeatBalanceResult:
        """Heat source and temperatures at mass_flow."""
        return heat_balance.solve(
            self.coeffs, self.exchanger(mass_flow), self.inlet_temp, self.surface_area
        )


@dataclass(frozen=True)
class ControlDecision:
    """Flow chosen by a resolver, with the branch that produced it."""

    mass_flow: float  # kg/s
    reason: str


class FlowResolver(ABC):
    """
    Base class for refrigerant flow control strategies.

    Attributes:
        min_flow: Configured minimum refrigerant flow in kg/s
        max_flow: Configured maximum refrigerant flow in kg/s
    """

    control_type: str = ""

    def __init__(self, min_flow: float, max_flow: float) -> None:
        if min_flow < 0 or max_flow <= 0 or min_flow > max_flow:
            raise ConfigurationError(
                f"Invalid refrigerant flow limits: min={min_flow}, max={max_flow}"
            )
        self.min_flow = min_flow
        self.max_flow = max_flow

    @abstractmethod
    def resolve(self, problem: FlowProblem, setpoint: float) -> ControlDecision:
        """
        Choose the refrigerant flow for this step.

        Args:
            problem: Step conditions
            setpoint: Control setpoint in °C

        Returns:
            ControlDecision with a flow within [0, max_flow]
        """

    def clamp(self, flow: float) -> ControlDecision:
        """Limit a computed flow to the configured range."""
        if flow != flow or flow > self.max_flow:  # NaN or too high
            return ControlDecision(self.max_flow, UNDERSIZED)
        if flow < self.min_flow:
            return ControlDecision(self.min_flow, BELOW_MINIMUM)
        return ControlDecision(flow, REQUIRED_FLOW)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(min_flow={self.min_flow}, max_flow={self.max_flow})"


class OutletTemperatureControl(FlowResolver):
    """Regulate flow to reach a refrigerant outlet temperature."""

    control_type = OUTLET_TEMPERATURE_CONTROL

    def resolve(self, problem: FlowProblem, setpoint: float) -> ControlDecision:
        inlet_temp = problem.inlet_temp

        trial_flow = problem.current_flow if problem.current_flow > 0 else self.max_flow
        hx = problem.exchanger(trial_flow)
        trial = heat_balance.solve(problem.coeffs, hx, inlet_temp, problem.surface_area)

        if trial.outlet_temp <= setpoint:
            logger.debug(
                f"Outlet temperature {trial.outlet_temp:.2f} already at or below "
                f"setpoint {setpoint:.2f}, using minimum flow"
            )
            return ControlDecision(self.min_flow, AT_SETPOINT)

        # The refrigerant warms through the slab; an outlet at or below the
        # inlet cannot be reached by changing the flow
        if setpoint <= inlet_temp:
            logger.debug(
                f"Outlet setpoint {setpoint:.2f} at or below inlet {inlet_temp:.2f}, using maximum flow"
            )
            return ControlDecision(self.max_flow, SETPOINT_BELOW_INLET)

        cl = problem.coeffs.cl
        if abs(cl) < DEGENERATE_TOLERANCE:
            raise NumericalError("Cannot invert the heat balance for flow: Cl = 0")

        cp = hx.properties.specific_heat
        required = (
            (problem.coeffs.ck - inlet_temp) / (setpoint - inlet_temp) - 1.0 / hx.epsilon
        ) * problem.surface_area / (cp * cl)

        decision = self.clamp(required)
        if decision.reason == UNDERSIZED:
            logger.debug(f"Required flow {required:.3f} kg/s exceeds maximum, system undersized")
        return decision


class SurfaceTemperatureControl(FlowResolver):
    """Regulate flow to hold the ice surface temperature."""

    control_type = SURFACE_TEMPERATURE_CONTROL

    def resolve(self, problem: FlowProblem, setpoint: float) -> ControlDecision:
        no_flow = problem.solve(0.0)
        if no_flow.surface_temp <= setpoint:
            logger.debug(
                f"Ice surface {no_flow.surface_temp:.2f} already at or below "
                f"setpoint {setpoint:.2f}, no cooling needed"
            )
            return ControlDecision(0.0, AT_SETPOINT)

        q_setpoint = (
            heat_balance.flux_for_surface_temperature(problem.coeffs, setpoint) * problem.surface_area
        )

        hx_max = problem.exchanger(self.max_flow)
        at_max = heat_balance.solve(problem.coeffs, hx_max, problem.inlet_temp, problem.surface_area)
        if abs(q_setpoint) >= abs(at_max.heat_source):
            logger.debug(
                f"Heat source {q_setpoint:.0f} W needed, {at_max.heat_source:.0f} W available "
                f"at maximum flow, system undersized"
            )
            return ControlDecision(self.max_flow, UNDERSIZED)

        driving = problem.inlet_temp - at_max.source_temp
        if abs(driving) < DEGENERATE_TOLERANCE:
            return ControlDecision(self.max_flow, UNDERSIZED)

        required = q_setpoint / (hx_max.epsilon * hx_max.properties.specific_heat * driving)
        return self.clamp(required)


_RESOLVERS = {
    OUTLET_TEMPERATURE_CONTROL: OutletTemperatureControl,
    SURFACE_TEMPERATURE_CONTROL: SurfaceTemperatureControl,
}


def create_resolver(control_type: str, min_flow: float, max_flow: float) -> FlowResolver:
    """
    Create the resolver for a control type.

    Raises:
        ConfigurationError: If the control type is not recognized
    """
    try:
        resolver_class = _RESOLVERS[control_type]
    except KeyError:
        raise ConfigurationError(
            f"Unknown control type {control_type!r}; expected one of {', '.join(_RESOLVERS)}"
        ) from None
    return resolver_class(min_flow, max_flow)


def apply_reverse_operation_cutoff(result: HeatBalanceResult) -> HeatBalanceResult:
    """
    Force zero flow when a cooling system would heat the slab.

    A non-negative heat source during cooling means the control and the
    flow disagree; the system is shut off for the step.
    """
    if not result.is_heating:
        return result
    if result.mass_flow > 0:
        logger.debug(
            f"Heat source {result.heat_source:.1f} W would warm the slab, shutting off flow"
        )
    return replace(
        result,
        mass_flow=0.0,
        heat_source=0.0,
        outlet_temp=result.inlet_temp,
        epsilon=0.0,
    )


def apply_condensation_control(
    method: str,
    problem: FlowProblem,
    result: HeatBalanceResult,
    dew_point: float,
    offset: float,
) -> HeatBalanceResult:
    """
    Keep the ice surface above the predicted condensation temperature.

    Args:
        method: "Off", "SimpleOff" or "VariableOff"
        problem: Step conditions used to re-solve at a changed flow
        result: Final heat balance at the granted flow
        dew_point: Zone air dew point in °C
        offset: Margin above the dew point in °C

    Returns:
        The unchanged result, a re-solved result at reduced flow, or a
        zero-flow result
    """
    if method == CONDENSATION_OFF or result.mass_flow <= 0:
        return result

    condensation_temp = dew_point + offset
    if result.surface_temp >= condensation_temp:
        return result

    if method == CONDENSATION_SIMPLE_OFF:
        logger.debug(
            f"Surface {result.surface_temp:.2f} below condensation temperature "
            f"{condensation_temp:.2f}, shutting off"
        )
        return problem.solve(0.0)

    if method != CONDENSATION_VARIABLE_OFF:
        raise ConfigurationError(f"Unknown condensation control {method!r}")

    # Heat source that just holds the surface at the condensation temperature,
    # converted to a flow with the effectiveness at the current flow
    q_limit = (
        heat_balance.flux_for_surface_temperature(problem.coeffs, condensation_temp)
        * problem.surface_area
    )
    source_limit = heat_balance.source_temperature(problem.coeffs, q_limit, problem.surface_area)
    driving = problem.inlet_temp - source_limit
    if q_limit >= 0 or driving >= 0:
        return problem.solve(0.0)

    hx = problem.exchanger(result.mass_flow)
    reduced_flow = q_limit / (driving * hx.epsilon * hx.properties.specific_heat)
    reduced = problem.solve(min(reduced_flow, result.mass_flow))
    if reduced.surface_temp < condensation_temp - CONDENSATION_TOLERANCE:
        logger.debug("Condensation persists at reduced flow, shutting off")
        return problem.solve(0.0)
    return reduced
