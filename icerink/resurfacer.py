"""
Ice resurfacing machine.

Each resurfacing event lays a tank of heated water on the ice. The rink
pays for freezing that water and for the moisture it releases into the
air; heating the water is reported separately since it is not a rink load.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from icerink.equipment.base import Equipment, EquipmentType
from icerink.physics.loads import ResurfacingLoad, resurfacing_load

if TYPE_CHECKING:
    from icerink.core.config import ResurfacerConfig

logger = logging.getLogger(__name__)


class Resurfacer(Equipment):
    """Resurfacing machine serving one or more rinks."""

    @classmethod
    def from_config(cls, config: "ResurfacerConfig") -> "Resurfacer":
        """Create a Resurfacer from a ResurfacerConfig dataclass.

        Args:
            config: ResurfacerConfig dataclass with resurfacer parameters

        Returns:
            A new Resurfacer instance
        """
        from icerink.core.config import ResurfacerConfig  # Import here to avoid circular imports

        if not isinstance(config, ResurfacerConfig):
            raise TypeError(f"Expected ResurfacerConfig, got {type(config).__name__}")

        config.validate()
        return cls(
            name=config.name,
            tank_capacity=config.tank_capacity,
            flood_water_temp=config.flood_water_temp,
            initial_water_temp=config.initial_water_temp,
            events_schedule=config.events_schedule,
        )

    def __init__(
        self,
        name: str,
        tank_capacity: float,
        flood_water_temp: float,
        initial_water_temp: float,
        events_schedule: Optional[str] = None,
    ) -> None:
        """
        Initialize a resurfacer.

        Args:
            name: Name of the resurfacer
            tank_capacity: Water tank volume in m³
            flood_water_temp: Temperature of the water laid on the ice in °C
            initial_water_temp: Tank water temperature before heating in °C
            events_schedule: Schedule giving resurfacing events per step
        """
        super().__init__(name, EquipmentType.RESURFACER)
        if tank_capacity <= 0:
            raise ValueError(f"Tank capacity must be positive, got {tank_capacity}")
        self.tank_capacity = tank_capacity
        self.flood_water_temp = flood_water_temp
        self.initial_water_temp = initial_water_temp
        self.events_schedule = events_schedule

        # Current state
        self.events = 0.0
        self.load = ResurfacingLoad(0.0, 0.0, 0.0)

    def event_load(self, ice_surface_temp: float, air_volume: float) -> ResurfacingLoad:
        """Loads from a single event at the given ice temperature, in kJ."""
        return resurfacing_load(
            self.tank_capacity,
            self.flood_water_temp,
            ice_surface_temp,
            self.initial_water_temp,
            air_volume,
        )

    def calculate_load(
        self, events: float, ice_surface_temp: float, air_volume: float
    ) -> ResurfacingLoad:
        """
        Loads for a step with the given number of events.

        Args:
            events: Number of resurfacing events in the step
            ice_surface_temp: Ice surface temperature before flooding in °C
            air_volume: Rink air volume in m³

        Returns:
            Total loads for the step in kJ
        """
        self.events = max(0.0, events)
        if self.events == 0:
            self.load = ResurfacingLoad(0.0, 0.0, 0.0)
        else:
            self.load = self.event_load(ice_surface_temp, air_volume).scaled(self.events)
            logger.debug(
                f"{self.name}: {self.events:g} events, {self.load.rink_load:.0f} kJ to the rink"
            )
        return self.load

    def get_process_variables(self) -> Dict[str, Any]:
        """Return a dictionary of all process variables for the resurfacer."""
        return {
            "name": self.name,
            "tank_capacity": self.tank_capacity,
            "flood_water_temp": self.flood_water_temp,
            "initial_water_temp": self.initial_water_temp,
            "events": self.events,
            "q_resurfacing": self.load.q_resurfacing,
            "e_heating_water": self.load.e_heating_water,
            "q_humidity": self.load.q_humidity,
        }

    @classmethod
    def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
        """Return metadata for all process variables."""
        return {
            "name": {"type": str, "label": "Name"},
            "tank_capacity": {"type": float, "label": "Tank Capacity", "unit": "m³"},
            "flood_water_temp": {"type": float, "label": "Flood Water Temperature", "unit": "°C"},
            "initial_water_temp": {"type": float, "label": "Initial Water Temperature", "unit": "°C"},
            "events": {"type": float, "label": "Resurfacing Events"},
            "q_resurfacing": {
                "type": float,
                "label": "Resurfacing Load",
                "description": "Energy to freeze the flood water",
                "unit": "kJ",
            },
            "e_heating_water": {
                "type": float,
                "label": "Water Heating Energy",
                "unit": "kJ",
            },
            "q_humidity": {
                "type": float,
                "label": "Humidity Load",
                "description": "Energy carried by moisture released to the rink air",
                "unit": "kJ",
            },
        }
