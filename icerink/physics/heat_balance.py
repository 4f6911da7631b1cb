"""
Surface-coupled heat balance for the rink floor.

The host heat balance engine describes the floor slab with linear
transfer-function coefficients:

    T_in  = Ca + Cb * T_out + Cc * q"      inside (ice) face
    T_out = Cd + Ce * T_in  + Cf * q"      outside (ground) face
    T_src = Cg + Ch * q" + Ci * T_in + Cj * T_out

where q" is the source flux (W/m²). Eliminating the face temperatures gives
the source temperature as T_src = Ck + Cl * q", and coupling that to the
tubing (whose effectiveness term is eps*mdot*cp) gives the heat source:

    Q = eps*mdot*cp * (T_in_fluid - Ck) / (1 + eps*mdot*cp * Cl / A)

Negative Q extracts heat from the slab (cooling).
"""

from dataclasses import dataclass
from typing import Optional

from icerink.core.constants import DEGENERATE_TOLERANCE
from icerink.core.errors import NumericalError
from icerink.physics.heat_exchanger import HeatExchangerResult


@dataclass(frozen=True)
class HeatBalanceCoefficients:
    """
    Transfer-function coefficients for one floor surface and one step.

    Supplied by the host heat balance engine; read-only for the duration of
    an evaluation and never cached across steps.
    """

    ca: float  # inside face constant part
    cb: float  # inside face sensitivity to outside face temperature
    cc: float  # inside face sensitivity to source flux
    cd: float  # outside face constant part
    ce: float  # outside face sensitivity to inside face temperature
    cf: float  # outside face sensitivity to source flux
    cg: float  # source temperature history (constant) part
    ch: float  # source temperature sensitivity to source flux
    ci: float  # source temperature sensitivity to inside face temperature
    cj: float  # source temperature sensitivity to outside face temperature

    @property
    def face_denominator(self) -> float:
        """1 - Ce*Cb; zero makes the face equations singular."""
        denominator = 1.0 - self.ce * self.cb
        if abs(denominator) < DEGENERATE_TOLERANCE:
            raise NumericalError(
                f"Degenerate heat balance coefficients: 1 - Ce*Cb = {denominator!r} "
                f"(Ce={self.ce!r}, Cb={self.cb!r})"
            )
        return denominator

    @property
    def ck(self) -> float:
        """Source temperature with no heat source (°C)."""
        return self.cg + (
            self.ci * (self.ca + self.cb * self.cd) + self.cj * (self.cd + self.ce * self.ca)
        ) / self.face_denominator

    @property
    def cl(self) -> float:
        """Sensitivity of the source temperature to the source flux (K·m²/W)."""
        return self.ch + (
            self.ci * (self.cc + self.cb * self.cf) + self.cj * (self.cf + self.ce * self.cc)
        ) / self.face_denominator


@dataclass(frozen=True)
class HeatBalanceResult:
    """Heat source and resulting temperatures for one flow condition."""

    mass_flow: float  # kg/s
    heat_source: float  # W, negative when cooling
    surface_temp: float  # °C, ice surface
    source_temp: float  # °C, slab at the tubing plane
    inlet_temp: float  # °C
    outlet_temp: float  # °C
    epsilon: float = 0.0

    @property
    def is_heating(self) -> bool:
        """The fluid is adding heat to the slab."""
        return self.heat_source >= 0.0


def heat_source_from_conductance(
    coeffs: HeatBalanceCoefficients, eps_mdot_cp: float, inlet_temp: float, surface_area: float
) -> float:
    """Heat source (W) for a known effective conductance eps*mdot*cp."""
    return eps_mdot_cp * (inlet_temp - coeffs.ck) / (1.0 + eps_mdot_cp * coeffs.cl / surface_area)


def heat_source_from_flow(
    coeffs: HeatBalanceCoefficients,
    epsilon: float,
    mass_flow: float,
    specific_heat: float,
    inlet_temp: float,
    surface_area: float,
) -> float:
    """Heat source (W) for a known flow; algebraically equal to heat_source_from_conductance."""
    return (inlet_temp - coeffs.ck) / (
        coeffs.cl / surface_area + 1.0 / (epsilon * mass_flow * specific_heat)
    )


def ice_surface_temperature(
    coeffs: HeatBalanceCoefficients, heat_source: float, surface_area: float
) -> float:
    """Inside (ice) face temperature in °C for a heat source in W."""
    flux = heat_source / surface_area
    return (
        coeffs.ca + coeffs.cb * coeffs.cd + flux * (coeffs.cc + coeffs.cb * coeffs.cf)
    ) / coeffs.face_denominator


def source_temperature(coeffs: HeatBalanceCoefficients, heat_source: float, surface_area: float) -> float:
    """Slab temperature at the tubing plane in °C."""
    return coeffs.ck + coeffs.cl * heat_source / surface_area


def outlet_temperature(inlet_temp: float, heat_source: float, mdot_cp: float) -> float:
    """Fluid outlet temperature; equals the inlet when there is no flow."""
    if mdot_cp <= 0:
        return inlet_temp
    return inlet_temp - heat_source / mdot_cp


def flux_for_surface_temperature(coeffs: HeatBalanceCoefficients, target_temp: float) -> float:
    """Source flux (W/m²) that holds the ice surface at target_temp."""
    sensitivity = coeffs.cc + coeffs.cb * coeffs.cf
    if abs(sensitivity) < DEGENERATE_TOLERANCE:
        raise NumericalError("Ice surface temperature is insensitive to the heat source (Cc + Cb*Cf = 0)")
    return (coeffs.face_denominator * target_temp - coeffs.ca - coeffs.cb * coeffs.cd) / sensitivity


def solve(
    coeffs: HeatBalanceCoefficients,
    hx: Optional[HeatExchangerResult],
    inlet_temp: float,
    surface_area: float,
) -> HeatBalanceResult:
    """
    Solve the slab/tubing coupling for one flow condition.

    Args:
        coeffs: Transfer-function coefficients for the floor surface
        hx: Effectiveness evaluation at the flow of interest, or None for no flow
        inlet_temp: Fluid inlet temperature in °C
        surface_area: Floor area in m²

    Returns:
        HeatBalanceResult; with no flow the heat source is zero and the
        outlet temperature equals the inlet

    Raises:
        NumericalError: If 1 - Ce*Cb is zero
    """
    if surface_area <= 0:
        raise ValueError(f"Surface area must be positive, got {surface_area}")

    if hx is None:
        heat_source = 0.0
        mass_flow = 0.0
        epsilon = 0.0
        mdot_cp = 0.0
    else:
        heat_source = heat_source_from_conductance(coeffs, hx.eps_mdot_cp, inlet_temp, surface_area)
        mass_flow = hx.mdot_cp / hx.properties.specific_heat
        epsilon = hx.epsilon
        mdot_cp = hx.mdot_cp

    return HeatBalanceResult(
        mass_flow=mass_flow,
        heat_source=heat_source,
        surface_temp=ice_surface_temperature(coeffs, heat_source, surface_area),
        source_temp=source_temperature(coeffs, heat_source, surface_area),
        inlet_temp=inlet_temp,
        outlet_temp=outlet_temperature(inlet_temp, heat_source, mdot_cp),
        epsilon=epsilon,
    )
