"""
Configuration management for ice rink simulation.

This module provides typed configuration dataclasses for refrigeration
systems, resurfacers and the simulation run, with support for loading from
YAML or JSON files.

Usage:
    from icerink.core.config import (
        RinkSystemConfig,
        ResurfacerConfig,
        load_config,
        config_from_dict,
    )

    # Load from file
    config = config_from_dict(load_config("rink.yaml"))

    # Or use defaults
    system_config = RinkSystemConfig(name="Main Rink", surface_name="Rink Floor")
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

import yaml

from icerink.core.constants import (
    DEFAULT_CONDENSATION_OFFSET,
    MIN_THROTTLING_RANGE,
    SIMULATION_TIME_STEP_MINUTES,
    STANDARD_BAROMETRIC_PRESSURE,
)
from icerink.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# System variants
DIRECT_SYSTEM = "direct"
INDIRECT_SYSTEM = "indirect"
SYSTEM_TYPES = (DIRECT_SYSTEM, INDIRECT_SYSTEM)

# Control types
OUTLET_TEMPERATURE_CONTROL = "RefrigOutletTemperature"
SURFACE_TEMPERATURE_CONTROL = "IceSurfaceTemperature"
CONTROL_TYPES = (OUTLET_TEMPERATURE_CONTROL, SURFACE_TEMPERATURE_CONTROL)

# Condensation control types
CONDENSATION_OFF = "Off"
CONDENSATION_SIMPLE_OFF = "SimpleOff"
CONDENSATION_VARIABLE_OFF = "VariableOff"
CONDENSATION_CONTROLS = (CONDENSATION_OFF, CONDENSATION_SIMPLE_OFF, CONDENSATION_VARIABLE_OFF)

# Number of circuits per surface
ONE_CIRCUIT_PER_SURFACE = "OnePerSurface"
CIRCUITS_FROM_LENGTH = "CalculateFromCircuitLength"
CIRCUIT_METHODS = (ONE_CIRCUIT_PER_SURFACE, CIRCUITS_FROM_LENGTH)

# Working fluids
AMMONIA = "NH3"
CALCIUM_CHLORIDE = "CaCl2"
ETHYLENE_GLYCOL = "EG"
WATER = "WATER"
REFRIGERANTS = {
    DIRECT_SYSTEM: (AMMONIA,),
    INDIRECT_SYSTEM: (CALCIUM_CHLORIDE, ETHYLENE_GLYCOL),
}


def _match_choice(value: str, choices, field_name: str) -> str:
    """Case-insensitive lookup of value among choices, returning the canonical spelling."""
    for choice in choices:
        if value.lower() == choice.lower():
            return choice
    raise ConfigurationError(
        f"Invalid {field_name} = {value!r}; expected one of {', '.join(choices)}"
    )


@dataclass
class PipeConfig:
    """Configuration for the tubing embedded in the rink slab."""

    tube_diameter: float = 0.025  # m, inner diameter
    tube_length: float = 15000.0  # m, total embedded length
    circuit_method: str = ONE_CIRCUIT_PER_SURFACE
    circuit_length: float = 106.7  # m, used with CalculateFromCircuitLength
    surface_flow_fraction: float = 1.0


@dataclass
class RinkGeometryConfig:
    """Physical dimensions of the rink."""

    length: float = 60.0  # m
    width: float = 30.0  # m
    ice_thickness: float = 0.03  # m
    air_height: float = 10.0  # m, enclosure height above the ice

    @property
    def ice_volume(self) -> float:
        return self.length * self.width * self.ice_thickness

    @property
    def air_volume(self) -> float:
        return self.length * self.width * self.air_height


@dataclass
class RinkSystemConfig:
    """Configuration for a direct or indirect refrigeration system."""

    name: str
    system_type: str = DIRECT_SYSTEM
    zone_name: str = "Rink Zone"
    surface_name: str = "Rink Floor"
    availability_schedule: Optional[str] = None  # None means always on
    control_type: str = SURFACE_TEMPERATURE_CONTROL
    setpoint_schedule: str = "Ice Setpoint"
    min_refrig_flow: float = 0.0  # kg/s
    max_refrig_flow: float = 5.0  # kg/s
    inlet_node: str = "Rink Refrigerant Inlet"
    outlet_node: str = "Rink Refrigerant Outlet"
    throttling_range: float = 1.0  # °C
    condensation_control: str = CONDENSATION_OFF
    condensation_dewpoint_offset: float = DEFAULT_CONDENSATION_OFFSET  # °C
    refrigerant: str = AMMONIA
    concentration: float = 0.0  # %, brine only
    people_schedule: Optional[str] = None  # W/m² of spectator area
    spectator_area: float = 0.0  # m²
    flood_water_temp: float = 15.0  # °C, for the initial freezing load
    pipe: PipeConfig = field(default_factory=PipeConfig)
    geometry: RinkGeometryConfig = field(default_factory=RinkGeometryConfig)
    resurfacers: List[str] = field(default_factory=list)

    def validate(self) -> "RinkSystemConfig":
        """
        Check the configuration and normalize spelling of the choice fields.

        An undersized throttling range or an unknown condensation control is
        reset to its default with a warning instead of failing.

        Returns:
            self, for chaining

        Raises:
            ConfigurationError: If a value is invalid
        """
        self.system_type = _match_choice(self.system_type, SYSTEM_TYPES, "system_type")
        self.control_type = _match_choice(self.control_type, CONTROL_TYPES, "control_type")
        self.refrigerant = _match_choice(
            self.refrigerant, REFRIGERANTS[self.system_type], f"refrigerant for {self.system_type} system"
        )
        self.pipe.circuit_method = _match_choice(
            self.pipe.circuit_method, CIRCUIT_METHODS, "circuit_method"
        )

        try:
            self.condensation_control = _match_choice(
                self.condensation_control, CONDENSATION_CONTROLS, "condensation_control"
            )
        except ConfigurationError:
            logger.warning(
                f"{self.name}: unknown condensation control {self.condensation_control!r}, "
                f"reset to {CONDENSATION_SIMPLE_OFF}"
            )
            self.condensation_control = CONDENSATION_SIMPLE_OFF

        if self.throttling_range < MIN_THROTTLING_RANGE:
            logger.warning(
                f"{self.name}: cooling throttling range too small, reset to {MIN_THROTTLING_RANGE}"
            )
            self.throttling_range = MIN_THROTTLING_RANGE

        if not self.surface_name:
            raise ConfigurationError(f"{self.name}: a rink floor surface is required")
        if self.pipe.tube_diameter <= 0:
            raise ConfigurationError(f"{self.name}: tube diameter must be positive")
        if self.pipe.tube_length <= 0:
            raise ConfigurationError(f"{self.name}: tube length must be positive")
        if self.pipe.circuit_method == CIRCUITS_FROM_LENGTH and self.pipe.circuit_length <= 0:
            raise ConfigurationError(f"{self.name}: circuit length must be positive")
        if self.min_refrig_flow < 0:
            raise ConfigurationError(f"{self.name}: minimum refrigerant flow cannot be negative")
        if self.max_refrig_flow <= 0:
            raise ConfigurationError(f"{self.name}: maximum refrigerant flow must be positive")
        if self.min_refrig_flow > self.max_refrig_flow:
            raise ConfigurationError(
                f"{self.name}: minimum refrigerant flow {self.min_refrig_flow} exceeds "
                f"maximum {self.max_refrig_flow}"
            )
        return self


@dataclass
class ResurfacerConfig:
    """Configuration for an ice resurfacing machine."""

    name: str
    tank_capacity: float = 0.8  # m³
    flood_water_temp: float = 55.0  # °C
    initial_water_temp: float = 10.0  # °C
    events_schedule: Optional[str] = None  # resurfacing events per step

    def validate(self) -> "ResurfacerConfig":
        if self.tank_capacity <= 0:
            raise ConfigurationError(f"{self.name}: tank capacity must be positive")
        return self


@dataclass
class SimulationConfig:
    """Configuration for the simulation run."""

    time_step_minutes: int = SIMULATION_TIME_STEP_MINUTES
    barometric_pressure: float = STANDARD_BAROMETRIC_PRESSURE  # Pa
    start_hour: int = 0


@dataclass
class IceRinkConfig:
    """Complete ice rink configuration."""

    name: str = "Default Ice Rink"
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    systems: List[RinkSystemConfig] = field(default_factory=list)
    resurfacers: List[ResurfacerConfig] = field(default_factory=list)
    # Schedule name -> constant value or 24 hourly values
    schedules: Dict[str, Union[float, List[float]]] = field(default_factory=dict)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from a YAML or JSON file.

    Args:
        path: Path to the configuration file

    Returns:
        Dictionary of configuration values

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file format is not supported
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(f)
        elif path.suffix == ".json":
            return json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


def save_config(config: Union[Dict[str, Any], IceRinkConfig], path: Union[str, Path]) -> None:
    """
    Save configuration to a YAML or JSON file.

    Args:
        config: Configuration dictionary or IceRinkConfig
        path: Path to save the file
    """
    path = Path(path)
    if isinstance(config, IceRinkConfig):
        config = config_to_dict(config)

    with open(path, "w") as f:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
        elif path.suffix == ".json":
            json.dump(config, f, indent=2)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


def config_to_dict(config: Any) -> Dict[str, Any]:
    """Convert a dataclass config to a dictionary."""
    return asdict(config)


def create_rink_system_config(data: Dict[str, Any]) -> RinkSystemConfig:
    """Create a RinkSystemConfig from a dictionary."""
    data = dict(data)
    # Handle nested configs
    if "pipe" in data and isinstance(data["pipe"], dict):
        data["pipe"] = PipeConfig(**data["pipe"])
    if "geometry" in data and isinstance(data["geometry"], dict):
        data["geometry"] = RinkGeometryConfig(**data["geometry"])
    return RinkSystemConfig(**data)


def create_resurfacer_config(data: Dict[str, Any]) -> ResurfacerConfig:
    """Create a ResurfacerConfig from a dictionary."""
    return ResurfacerConfig(**data)


def config_from_dict(data: Dict[str, Any]) -> IceRinkConfig:
    """Build a complete IceRinkConfig from a loaded configuration dictionary."""
    data = data or {}
    return IceRinkConfig(
        name=data.get("name", "Default Ice Rink"),
        simulation=SimulationConfig(**data.get("simulation", {})),
        systems=[create_rink_system_config(s) for s in data.get("systems", [])],
        resurfacers=[create_resurfacer_config(r) for r in data.get("resurfacers", [])],
        schedules=dict(data.get("schedules", {})),
    )


def get_default_config() -> IceRinkConfig:
    """Get a default single-rink configuration for testing."""
    return IceRinkConfig(
        name="Default Ice Rink",
        simulation=SimulationConfig(),
        systems=[
            RinkSystemConfig(
                name="Main Rink",
                control_type=SURFACE_TEMPERATURE_CONTROL,
                resurfacers=["Resurfacer-1"],
            )
        ],
        resurfacers=[ResurfacerConfig(name="Resurfacer-1", events_schedule="Resurfacing Events")],
        schedules={"Ice Setpoint": -5.0, "Resurfacing Events": 0.0},
    )
