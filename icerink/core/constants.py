"""
Physical and engineering constants for ice rink simulation.

This module centralizes the magic numbers used by the heat exchanger,
heat balance and auxiliary load calculations. All values are SI:
temperatures in °C, mass flow in kg/s, energy in J, power in W.

Usage:
    from icerink.core.constants import LATENT_HEAT_FUSION, ICE_SPECIFIC_HEAT

    energy = mass * (LATENT_HEAT_FUSION - ICE_SPECIFIC_HEAT * ice_temp)
"""

# =============================================================================
# Flow Regime / Heat Transfer Correlations
# =============================================================================

MAX_LAMINAR_REYNOLDS: float = 2300.0  # Re at or above this is treated as turbulent
LAMINAR_NUSSELT: float = 3.66  # fully developed, constant wall temperature
COLBURN_COEFFICIENT: float = 0.023  # Nu = 0.023 * Re^0.8 * Pr^(1/3)
REYNOLDS_EXPONENT: float = 0.8
PRANDTL_EXPONENT: float = 1.0 / 3.0

# exp(-NTU) underflows to zero for practical purposes beyond this
MAX_EXP_POWER: float = 50.0

# =============================================================================
# Water / Ice Properties
# =============================================================================

LATENT_HEAT_FUSION: float = 333550.0  # J/kg
ICE_SPECIFIC_HEAT: float = 2108.0  # J/(kg·K)
MOLAR_MASS_WATER: float = 18.015  # g/mol

# Energy terms of the freezing/resurfacing loads carry this factor (J -> kJ)
KJ_PER_J: float = 0.001

# =============================================================================
# Psychrometrics (Magnus form of the saturation vapor pressure)
# =============================================================================

MAGNUS_PRESSURE_HPA: float = 6.112  # hPa
MAGNUS_A: float = 17.67
MAGNUS_B: float = 243.5  # °C
GAS_CONSTANT_HUMIDITY: float = 0.08314  # L·bar/(K·mol), as used in the humidity term
KELVIN_OFFSET: float = 273.15
STANDARD_BAROMETRIC_PRESSURE: float = 101325.0  # Pa
WATER_AIR_MOLAR_RATIO: float = 0.621945  # Mw / Mda

# =============================================================================
# Control Parameters (Defaults)
# =============================================================================

MIN_THROTTLING_RANGE: float = 0.5  # °C
DEFAULT_CONDENSATION_OFFSET: float = 1.0  # °C above dew point
CONDENSATION_TOLERANCE: float = 0.01  # °C, margin accepted after a variable-off flow reduction

# Heat-balance denominators closer to zero than this are degenerate
DEGENERATE_TOLERANCE: float = 1e-12

# =============================================================================
# Simulation Defaults
# =============================================================================

SIMULATION_TIME_STEP_MINUTES: int = 15
SECONDS_PER_MINUTE: float = 60.0
