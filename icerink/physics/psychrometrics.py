"""
Moist air relations used by the resurfacing and condensation calculations.

Saturation vapor pressure uses the Magnus approximation

    p_sat = 6.112 * exp(17.67 * T / (T + 243.5))   [hPa]

which is accurate to a fraction of a percent over rink conditions
(-20 °C to 50 °C).
"""

import math

from icerink.core.constants import (
    GAS_CONSTANT_HUMIDITY,
    KELVIN_OFFSET,
    MAGNUS_A,
    MAGNUS_B,
    MAGNUS_PRESSURE_HPA,
    MOLAR_MASS_WATER,
    STANDARD_BAROMETRIC_PRESSURE,
    WATER_AIR_MOLAR_RATIO,
)


def saturation_vapor_pressure(temp_c: float) -> float:
    """
    Saturation vapor pressure over water.

    Args:
        temp_c: Air temperature in °C

    Returns:
        Saturation pressure in hPa
    """
    return MAGNUS_PRESSURE_HPA * math.exp(MAGNUS_A * temp_c / (temp_c + MAGNUS_B))


def absolute_humidity(temp_c: float, relative_humidity: float) -> float:
    """
    Water vapor concentration of air, in g/m³.

    Args:
        temp_c: Air temperature in °C
        relative_humidity: Relative humidity as a fraction (0-1)
    """
    if not 0.0 <= relative_humidity <= 1.0:
        raise ValueError(f"Relative humidity must be between 0 and 1, got {relative_humidity}")
    vapor_pressure = saturation_vapor_pressure(temp_c) * relative_humidity
    # hPa * g/mol / (L·bar/(K·mol) * K) -> g/m³
    return vapor_pressure * MOLAR_MASS_WATER / (GAS_CONSTANT_HUMIDITY * (KELVIN_OFFSET + temp_c))


def vapor_pressure_from_humidity_ratio(
    humidity_ratio: float, pressure: float = STANDARD_BAROMETRIC_PRESSURE
) -> float:
    """Partial pressure of water vapor (Pa) for a humidity ratio (kg/kg dry air)."""
    if humidity_ratio < 0:
        raise ValueError(f"Humidity ratio cannot be negative, got {humidity_ratio}")
    return humidity_ratio * pressure / (WATER_AIR_MOLAR_RATIO + humidity_ratio)


def dew_point(humidity_ratio: float, pressure: float = STANDARD_BAROMETRIC_PRESSURE) -> float:
    """
    Dew point temperature (°C) from humidity ratio and barometric pressure.

    Inverse of the Magnus relation. Dry air has no dew point; a very low
    temperature is returned so that no surface is considered condensing.
    """
    vapor_pressure_hpa = vapor_pressure_from_humidity_ratio(humidity_ratio, pressure) / 100.0
    if vapor_pressure_hpa <= 0:
        return -KELVIN_OFFSET
    gamma = math.log(vapor_pressure_hpa / MAGNUS_PRESSURE_HPA)
    return MAGNUS_B * gamma / (MAGNUS_A - gamma)
