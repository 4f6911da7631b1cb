"""
Host collaborators of the rink systems.

The rink floor model does not own the building heat balance, the plant
loop or the schedules; it reads them through the protocols below once per
step and writes one heat source back. The in-memory implementations are
used by the command line runner, the examples and the tests.

Usage:
    from icerink.host import StaticHeatBalanceEngine, FloorSurface

    engine = StaticHeatBalanceEngine()
    engine.add_surface(FloorSurface("Rink Floor", area=1800.0, zone_name="Rink Zone"), coeffs)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Union

from icerink.core.errors import ConfigurationError
from icerink.physics.heat_balance import HeatBalanceCoefficients

# Surface classes and heat transfer algorithms reported by the host
FLOOR = "floor"
WALL = "wall"
WINDOW = "window"
CTF_ALGORITHM = "CTF"


@dataclass
class FloorSurface:
    """A building surface as the heat balance engine describes it."""

    name: str
    area: float  # m²
    zone_name: str = "Rink Zone"
    surface_class: str = FLOOR
    heat_transfer_algorithm: str = CTF_ALGORITHM
    construction: Optional[str] = "Rink Slab"
    has_source_sink: bool = True


@dataclass
class ZoneAirState:
    """Zone air conditions used for condensation control."""

    temperature: float = 10.0  # °C
    humidity_ratio: float = 0.002  # kg water / kg dry air


@dataclass
class PlantLoopNode:
    """Refrigerant loop node at the rink system inlet or outlet."""

    name: str
    temperature: float = -10.0  # °C
    mass_flow: float = 0.0  # kg/s


class ScheduleService(Protocol):
    def set_hour(self, hour: int) -> None:
        ...

    def current_value(self, handle: str) -> float:
        ...


class HeatBalanceEngine(Protocol):
    def get_surface(self, name: str) -> Optional[FloorSurface]:
        ...

    def coefficients(self, surface_name: str) -> HeatBalanceCoefficients:
        ...

    def zone_convection_sum(self, zone_name: str) -> float:
        ...

    def set_heat_source(self, surface_name: str, value: float) -> None:
        ...

    def zone_air(self, zone_name: str) -> ZoneAirState:
        ...


class PlantFlowManager(Protocol):
    def request_flow_rate(self, node: PlantLoopNode, desired: float) -> float:
        ...


class StaticScheduleService:
    """
    Schedules given as constants or 24 hourly values.

    The hour used for hourly profiles is set by the simulation driver at the
    start of each step.
    """

    def __init__(self, schedules: Optional[Dict[str, Union[float, List[float]]]] = None) -> None:
        self.schedules: Dict[str, Union[float, List[float]]] = dict(schedules or {})
        self.hour = 0

    def set_hour(self, hour: int) -> None:
        self.hour = hour % 24

    def current_value(self, handle: str) -> float:
        try:
            value = self.schedules[handle]
        except KeyError:
            raise ConfigurationError(f"Schedule not found: {handle!r}") from None
        if isinstance(value, (list, tuple)):
            if not value:
                raise ConfigurationError(f"Schedule {handle!r} has no values")
            return float(value[self.hour % len(value)])
        return float(value)

    def __contains__(self, handle: str) -> bool:
        return handle in self.schedules


class StaticHeatBalanceEngine:
    """
    Heat balance engine with fixed coefficient snapshots.

    Zone convection responds linearly to the heat sources written back:
    each watt of heat source adds convective_fraction watts to the
    convection sum of the surface's zone.
    """

    def __init__(self, convective_fraction: float = 0.3) -> None:
        self.convective_fraction = convective_fraction
        self.surfaces: Dict[str, FloorSurface] = {}
        self._coefficients: Dict[str, HeatBalanceCoefficients] = {}
        self.heat_sources: Dict[str, float] = {}
        self.base_convection: Dict[str, float] = {}
        self.zones: Dict[str, ZoneAirState] = {}

    def add_surface(self, surface: FloorSurface, coeffs: Optional[HeatBalanceCoefficients] = None) -> None:
        self.surfaces[surface.name] = surface
        if coeffs is not None:
            self._coefficients[surface.name] = coeffs
        self.heat_sources.setdefault(surface.name, 0.0)
        self.zones.setdefault(surface.zone_name, ZoneAirState())
        self.base_convection.setdefault(surface.zone_name, 0.0)

    def set_coefficients(self, surface_name: str, coeffs: HeatBalanceCoefficients) -> None:
        self._coefficients[surface_name] = coeffs

    def get_surface(self, name: str) -> Optional[FloorSurface]:
        return self.surfaces.get(name)

    def coefficients(self, surface_name: str) -> HeatBalanceCoefficients:
        try:
            return self._coefficients[surface_name]
        except KeyError:
            raise ConfigurationError(f"No heat balance coefficients for surface {surface_name!r}") from None

    def zone_convection_sum(self, zone_name: str) -> float:
        source_total = sum(
            self.heat_sources.get(name, 0.0)
            for name, surface in self.surfaces.items()
            if surface.zone_name == zone_name
        )
        return self.base_convection.get(zone_name, 0.0) + self.convective_fraction * source_total

    def set_heat_source(self, surface_name: str, value: float) -> None:
        if surface_name not in self.surfaces:
            raise ConfigurationError(f"Surface not found: {surface_name!r}")
        self.heat_sources[surface_name] = value

    def zone_air(self, zone_name: str) -> ZoneAirState:
        return self.zones.get(zone_name, ZoneAirState())


class SimplePlantFlowManager:
    """
    Grants requested flows, optionally limited by a loop-wide capacity.

    With a network cap, a node is granted at most what the cap leaves after
    the latest grants to the other nodes.
    """

    def __init__(self, network_cap: Optional[float] = None) -> None:
        self.network_cap = network_cap
        self.grants: Dict[str, float] = {}

    def request_flow_rate(self, node: PlantLoopNode, desired: float) -> float:
        granted = max(0.0, desired)
        if self.network_cap is not None:
            others = sum(flow for name, flow in self.grants.items() if name != node.name)
            granted = min(granted, max(0.0, self.network_cap - others))
        self.grants[node.name] = granted
        node.mass_flow = granted
        return granted
