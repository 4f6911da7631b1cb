"""
Auxiliary rink loads: initial freezing and resurfacing.

Energies are returned in kJ (the formulas carry a 0.001 J -> kJ factor).
Use energy_to_power() to express them as average power over a step.

Usage:
    from icerink.physics.loads import freezing_load, resurfacing_load

    q_freeze = freezing_load(30.0, 15.0, 0.03, flood_water_temp=15.0, setpoint_temp=-5.0)
    event = resurfacing_load(0.5, 40.0, -5.0, 10.0, air_volume=4500.0)
"""

from dataclasses import dataclass

from icerink.core.constants import ICE_SPECIFIC_HEAT, KJ_PER_J, LATENT_HEAT_FUSION
from icerink.physics.properties import water_density, water_specific_heat
from icerink.physics.psychrometrics import absolute_humidity

# Air states either side of a resurfacing event
PRE_RESURFACING_RH = 0.0
POST_RESURFACING_RH = 1.0


def water_to_ice_energy(
    volume: float, water_temp: float, ice_temp: float
) -> float:
    """
    Energy (kJ) to take a volume of water at water_temp to ice at ice_temp.

    Sensible cooling of the water, latent heat of fusion, and sensible
    cooling of the ice, with water properties evaluated at water_temp.
    """
    rho = water_density(water_temp)
    cp = water_specific_heat(water_temp)
    return KJ_PER_J * rho * volume * (cp * water_temp + LATENT_HEAT_FUSION - ICE_SPECIFIC_HEAT * ice_temp)


def freezing_load(
    length: float,
    width: float,
    ice_thickness: float,
    flood_water_temp: float,
    setpoint_temp: float,
) -> float:
    """
    Energy (kJ) to freeze the initial ice sheet.

    Args:
        length: Rink length in m
        width: Rink width in m
        ice_thickness: Ice sheet thickness in m
        flood_water_temp: Flood water temperature in °C
        setpoint_temp: Ice setpoint temperature in °C
    """
    return water_to_ice_energy(length * width * ice_thickness, flood_water_temp, setpoint_temp)


@dataclass(frozen=True)
class ResurfacingLoad:
    """Loads from a single resurfacing event, all in kJ."""

    q_resurfacing: float  # flood water turned to ice
    e_heating_water: float  # energy to heat the tank water
    q_humidity: float  # moisture released into the rink air

    @property
    def rink_load(self) -> float:
        """Heat the refrigeration system must remove (excludes water heating)."""
        return self.q_resurfacing + self.q_humidity

    def scaled(self, events: float) -> "ResurfacingLoad":
        return ResurfacingLoad(
            q_resurfacing=self.q_resurfacing * events,
            e_heating_water=self.e_heating_water * events,
            q_humidity=self.q_humidity * events,
        )


def humidity_load(
    ice_surface_temp: float, flood_water_temp: float, air_volume: float
) -> float:
    """
    Energy (kJ) carried by the moisture a resurfacing event releases.

    The air over the ice goes from dry at the ice temperature to saturated
    at the flood water temperature; the change in vapor content of the rink
    air volume is charged with the temperature difference.
    """
    cp = water_specific_heat(flood_water_temp)
    ah_pre = absolute_humidity(ice_surface_temp, PRE_RESURFACING_RH)  # g/m³
    ah_post = absolute_humidity(flood_water_temp, POST_RESURFACING_RH)
    delta_vapor = abs(ah_post - ah_pre) * 0.001  # kg/m³
    delta_t = abs(flood_water_temp - ice_surface_temp)
    return KJ_PER_J * delta_vapor * air_volume * delta_t * cp


def resurfacing_load(
    tank_capacity: float,
    flood_water_temp: float,
    ice_surface_temp: float,
    initial_water_temp: float,
    air_volume: float,
) -> ResurfacingLoad:
    """
    Loads from one resurfacing event.

    Args:
        tank_capacity: Resurfacer tank volume in m³
        flood_water_temp: Flood water temperature in °C
        ice_surface_temp: Ice surface temperature before the flood in °C
        initial_water_temp: Tank water temperature before heating in °C
        air_volume: Rink air volume above the ice in m³
    """
    rho = water_density(flood_water_temp)
    cp = water_specific_heat(flood_water_temp)
    return ResurfacingLoad(
        q_resurfacing=water_to_ice_energy(tank_capacity, flood_water_temp, ice_surface_temp),
        e_heating_water=KJ_PER_J * tank_capacity * rho * cp * (flood_water_temp - initial_water_temp),
        q_humidity=humidity_load(ice_surface_temp, flood_water_temp, air_volume),
    )


def energy_to_power(energy_kj: float, step_seconds: float) -> float:
    """Average power (W) of an energy in kJ spread over a step."""
    if step_seconds <= 0:
        raise ValueError(f"Step length must be positive, got {step_seconds}")
    return energy_kj / KJ_PER_J / step_seconds
