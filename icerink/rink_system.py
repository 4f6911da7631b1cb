"""
Direct and indirect refrigeration systems for an ice rink floor.

A rink system circulates refrigerant through tubing embedded in the floor
slab. A direct system pumps the primary refrigerant (ammonia) through the
floor; an indirect system circulates a secondary brine (calcium chloride or
ethylene glycol) cooled elsewhere. Both share the same step algorithm and
differ only in how the fluid property table is chosen.

Each step:
    availability -> flow resolution -> plant flow request ->
    final heat balance at the granted flow -> reverse-operation cutoff ->
    condensation control -> heat source written back to the host
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from icerink.controls.resolvers import (
    ControlDecision,
    FlowProblem,
    apply_condensation_control,
    apply_reverse_operation_cutoff,
    create_resolver,
)
from icerink.core.config import (
    AMMONIA,
    CIRCUITS_FROM_LENGTH,
    CONDENSATION_OFF,
    DIRECT_SYSTEM,
    INDIRECT_SYSTEM,
    ONE_CIRCUIT_PER_SURFACE,
    REFRIGERANTS,
    SURFACE_TEMPERATURE_CONTROL,
    PipeConfig,
    RinkGeometryConfig,
)
from icerink.core.constants import DEFAULT_CONDENSATION_OFFSET
from icerink.core.errors import ConfigurationError
from icerink.equipment.base import Equipment, EquipmentType
from icerink.host import (
    CTF_ALGORITHM,
    FLOOR,
    WINDOW,
    FloorSurface,
    HeatBalanceEngine,
    PlantFlowManager,
    PlantLoopNode,
    ScheduleService,
)
from icerink.physics import heat_balance
from icerink.physics.heat_balance import HeatBalanceResult
from icerink.physics.properties import PropertyTable, get_property_table
from icerink.physics.psychrometrics import dew_point

if TYPE_CHECKING:
    from icerink.core.config import RinkSystemConfig
    from icerink.simulation import StepContext

logger = logging.getLogger(__name__)

# Operating modes
NOT_OPERATING = "not_operating"
COOLING = "cooling"


class RinkSystem(Equipment):
    """
    Refrigerated rink floor served by one plant loop branch.

    Subclasses choose the working fluid; everything else is shared.
    """

    system_type: str = ""
    equipment_kind: EquipmentType = EquipmentType.OTHER

    @classmethod
    def from_config(cls, config: "RinkSystemConfig") -> "RinkSystem":
        """Create a rink system from a RinkSystemConfig dataclass.

        Called on RinkSystem itself, the subclass matching config.system_type
        is built.

        Args:
            config: RinkSystemConfig dataclass with system parameters

        Returns:
            A new DirectRinkSystem or IndirectRinkSystem

        Raises:
            TypeError: If config is not a RinkSystemConfig
            ConfigurationError: If the configuration is invalid
        """
        from icerink.core.config import RinkSystemConfig  # Import here to avoid circular imports

        if not isinstance(config, RinkSystemConfig):
            raise TypeError(f"Expected RinkSystemConfig, got {type(config).__name__}")

        config.validate()
        system_class = cls
        if cls is RinkSystem:
            system_class = _SYSTEM_CLASSES[config.system_type]
        elif config.system_type != cls.system_type:
            raise ConfigurationError(
                f"{config.name}: {cls.__name__} cannot be built from a {config.system_type} configuration"
            )

        return system_class(
            name=config.name,
            surface_name=config.surface_name,
            zone_name=config.zone_name,
            refrigerant=config.refrigerant,
            concentration=config.concentration,
            control_type=config.control_type,
            setpoint_schedule=config.setpoint_schedule,
            availability_schedule=config.availability_schedule,
            min_refrig_flow=config.min_refrig_flow,
            max_refrig_flow=config.max_refrig_flow,
            pipe=config.pipe,
            geometry=config.geometry,
            inlet_node=config.inlet_node,
            outlet_node=config.outlet_node,
            throttling_range=config.throttling_range,
            condensation_control=config.condensation_control,
            condensation_dewpoint_offset=config.condensation_dewpoint_offset,
            people_schedule=config.people_schedule,
            spectator_area=config.spectator_area,
            flood_water_temp=config.flood_water_temp,
            resurfacers=config.resurfacers,
        )

    def __init__(
        self,
        name: str,
        surface_name: str,
        refrigerant: str,
        zone_name: str = "Rink Zone",
        concentration: Optional[float] = None,
        control_type: str = SURFACE_TEMPERATURE_CONTROL,
        setpoint_schedule: str = "Ice Setpoint",
        availability_schedule: Optional[str] = None,
        min_refrig_flow: float = 0.0,
        max_refrig_flow: float = 5.0,
        pipe: Optional[PipeConfig] = None,
        geometry: Optional[RinkGeometryConfig] = None,
        inlet_node: str = "Rink Refrigerant Inlet",
        outlet_node: str = "Rink Refrigerant Outlet",
        throttling_range: float = 1.0,
        condensation_control: str = CONDENSATION_OFF,
        condensation_dewpoint_offset: float = DEFAULT_CONDENSATION_OFFSET,
        people_schedule: Optional[str] = None,
        spectator_area: float = 0.0,
        flood_water_temp: float = 15.0,
        resurfacers: Optional[List[str]] = None,
    ) -> None:
        """
        Initialize a rink system.

        Args:
            name: Name of the system
            surface_name: Floor surface holding the embedded tubing
            refrigerant: Working fluid ("NH3", "CaCl2" or "EG")
            zone_name: Zone the rink floor belongs to
            concentration: Brine concentration in %, indirect systems only
            control_type: "RefrigOutletTemperature" or "IceSurfaceTemperature"
            setpoint_schedule: Schedule holding the control setpoint in °C
            availability_schedule: Schedule enabling the system (> 0), None for always on
            min_refrig_flow: Minimum refrigerant flow in kg/s
            max_refrig_flow: Maximum refrigerant flow in kg/s
            pipe: Tubing configuration
            geometry: Rink dimensions
            throttling_range: Cooling throttling range in °C
            condensation_control: "Off", "SimpleOff" or "VariableOff"
            condensation_dewpoint_offset: Margin above the dew point in °C
            people_schedule: Schedule of spectator gain in W/m²
            spectator_area: Spectator area in m²
            flood_water_temp: Flood water temperature for the initial freezing load in °C
            resurfacers: Names of the resurfacers serving this rink

        Raises:
            ConfigurationError: If the refrigerant or control type is not valid
        """
        super().__init__(name, self.equipment_kind)
        self.surface_name = surface_name
        self.zone_name = zone_name
        self.refrigerant = refrigerant
        self.concentration = concentration
        self.control_type = control_type
        self.setpoint_schedule = setpoint_schedule
        self.availability_schedule = availability_schedule
        self.pipe = pipe if pipe is not None else PipeConfig()
        self.geometry = geometry if geometry is not None else RinkGeometryConfig()
        self.inlet_node = PlantLoopNode(inlet_node)
        self.outlet_node = PlantLoopNode(outlet_node)
        self.throttling_range = throttling_range
        self.condensation_control = condensation_control
        self.condensation_dewpoint_offset = condensation_dewpoint_offset
        self.people_schedule = people_schedule
        self.spectator_area = spectator_area
        self.flood_water_temp = flood_water_temp
        self.resurfacers = list(resurfacers or [])

        if not inlet_node or not outlet_node:
            raise ConfigurationError(f"{name}: refrigerant inlet and outlet nodes are required")
        if refrigerant not in REFRIGERANTS[self.system_type]:
            raise ConfigurationError(
                f"{name}: refrigerant {refrigerant!r} is not valid for a {self.system_type} system"
            )
        self.property_table: PropertyTable = self._select_property_table()
        self.resolver = create_resolver(control_type, min_refrig_flow, max_refrig_flow)

        # Set by initialize()
        self.surface: Optional[FloorSurface] = None

        # Current state
        self.mode = NOT_OPERATING
        self.refrig_mass_flow = 0.0  # kg/s
        self.refrig_inlet_temp = 0.0  # °C
        self.refrig_outlet_temp = 0.0  # °C
        self.heat_source = 0.0  # W, negative when cooling
        self.ice_surface_temp = 0.0  # °C
        self.setpoint = 0.0  # °C
        self.cooling_power = 0.0  # W
        self.cooling_energy = 0.0  # J over the last step
        self.last_decision: Optional[ControlDecision] = None

    def _select_property_table(self) -> PropertyTable:
        raise NotImplementedError

    @property
    def min_refrig_flow(self) -> float:
        return self.resolver.min_flow

    @property
    def max_refrig_flow(self) -> float:
        return self.resolver.max_flow

    @property
    def circuits(self) -> float:
        """Number of parallel tubing circuits in the slab."""
        if self.pipe.circuit_method == ONE_CIRCUIT_PER_SURFACE:
            return 1.0
        if self.pipe.circuit_method == CIRCUITS_FROM_LENGTH:
            return max(1.0, self.pipe.tube_length * self.pipe.surface_flow_fraction / self.pipe.circuit_length)
        raise ConfigurationError(f"{self.name}: unknown circuit method {self.pipe.circuit_method!r}")

    @property
    def surface_area(self) -> float:
        if self.surface is None:
            raise RuntimeError(f"{self.name} has not been initialized")
        return self.surface.area

    def validate_surface(self, engine: HeatBalanceEngine) -> FloorSurface:
        """
        Check that the configured surface can carry a rink floor.

        Raises:
            ConfigurationError: If the surface is missing or unsuitable
        """
        surface = engine.get_surface(self.surface_name)
        if surface is None:
            raise ConfigurationError(f"{self.name}: surface {self.surface_name!r} not found")
        if surface.heat_transfer_algorithm != CTF_ALGORITHM:
            raise ConfigurationError(
                f"{self.name}: surface {surface.name!r} must use the {CTF_ALGORITHM} heat transfer algorithm"
            )
        if surface.surface_class == WINDOW:
            raise ConfigurationError(f"{self.name}: window {surface.name!r} cannot be a rink floor")
        if surface.surface_class != FLOOR:
            raise ConfigurationError(f"{self.name}: surface {surface.name!r} is not a floor")
        if not surface.construction:
            raise ConfigurationError(f"{self.name}: surface {surface.name!r} has no construction")
        if not surface.has_source_sink:
            raise ConfigurationError(
                f"{self.name}: construction {surface.construction!r} has no internal source"
            )
        if surface.area <= 0:
            raise ConfigurationError(f"{self.name}: surface {surface.name!r} has no area")
        return surface

    def initialize(self, engine: HeatBalanceEngine, inlet_temp: Optional[float] = None) -> None:
        """One-time setup before the first step."""
        self.surface = self.validate_surface(engine)
        self.inlet_node.mass_flow = 0.0
        self.outlet_node.mass_flow = 0.0
        if inlet_temp is not None:
            self.inlet_node.temperature = inlet_temp
        self.outlet_node.temperature = self.inlet_node.temperature
        self._set_off(engine)

    def is_available(self, schedules: ScheduleService) -> bool:
        if not self.availability_schedule:
            return True
        return schedules.current_value(self.availability_schedule) > 0

    def build_problem(self, engine: HeatBalanceEngine) -> FlowProblem:
        """Snapshot the conditions for this step."""
        return FlowProblem(
            coeffs=engine.coefficients(self.surface_name),
            table=self.property_table,
            inlet_temp=self.inlet_node.temperature,
            surface_area=self.surface_area,
            tube_length=self.pipe.tube_length,
            tube_diameter=self.pipe.tube_diameter,
            circuits=self.circuits,
            current_flow=self.refrig_mass_flow,
        )

    def simulate(
        self,
        context: "StepContext",
        engine: HeatBalanceEngine,
        schedules: ScheduleService,
        plant: PlantFlowManager,
    ) -> HeatBalanceResult:
        """
        Run one step of the rink system.

        Args:
            context: Step context (step length, barometric pressure, averaging)
            engine: Host heat balance engine
            schedules: Schedule service
            plant: Plant flow manager

        Returns:
            Final heat balance result for the step
        """
        self.mode = NOT_OPERATING
        self.refrig_inlet_temp = self.inlet_node.temperature

        if not self.is_available(schedules):
            plant.request_flow_rate(self.inlet_node, 0.0)
            self._set_off(engine)
            context.averager.add(self.surface_name, 0.0)
            return self._zero_result(engine)

        problem = self.build_problem(engine)
        self.setpoint = schedules.current_value(self.setpoint_schedule)
        self.last_decision = self.resolver.resolve(problem, self.setpoint)
        logger.debug(
            f"{self.name}: {self.resolver.control_type} setpoint {self.setpoint:.2f} "
            f"-> {self.last_decision.mass_flow:.3f} kg/s ({self.last_decision.reason})"
        )

        granted = plant.request_flow_rate(self.inlet_node, self.last_decision.mass_flow)
        result = apply_reverse_operation_cutoff(problem.solve(granted))

        if self.condensation_control != CONDENSATION_OFF:
            zone_air = engine.zone_air(self.zone_name)
            zone_dew_point = dew_point(zone_air.humidity_ratio, context.barometric_pressure)
            result = apply_condensation_control(
                self.condensation_control,
                problem,
                result,
                zone_dew_point,
                self.condensation_dewpoint_offset,
            )

        if result.mass_flow != granted:
            plant.request_flow_rate(self.inlet_node, result.mass_flow)

        self._record(result, context.step_seconds)
        self.mode = COOLING
        engine.set_heat_source(self.surface_name, result.heat_source)
        context.averager.add(self.surface_name, result.heat_source)
        return result

    def _zero_result(self, engine: HeatBalanceEngine) -> HeatBalanceResult:
        coeffs = engine.coefficients(self.surface_name)
        result = heat_balance.solve(coeffs, None, self.inlet_node.temperature, self.surface_area)
        self.ice_surface_temp = result.surface_temp
        return result

    def _set_off(self, engine: HeatBalanceEngine) -> None:
        self.mode = NOT_OPERATING
        self.last_decision = None
        self.refrig_mass_flow = 0.0
        self.heat_source = 0.0
        self.cooling_power = 0.0
        self.cooling_energy = 0.0
        self.refrig_outlet_temp = self.inlet_node.temperature
        self.outlet_node.mass_flow = 0.0
        self.outlet_node.temperature = self.inlet_node.temperature
        engine.set_heat_source(self.surface_name, 0.0)

    def _record(self, result: HeatBalanceResult, step_seconds: float) -> None:
        self.refrig_mass_flow = result.mass_flow
        self.refrig_outlet_temp = result.outlet_temp
        self.heat_source = result.heat_source
        self.ice_surface_temp = result.surface_temp
        self.cooling_power = max(0.0, -result.heat_source)
        self.cooling_energy = self.cooling_power * step_seconds
        self.outlet_node.mass_flow = result.mass_flow
        self.outlet_node.temperature = result.outlet_temp

    def get_process_variables(self) -> Dict[str, Any]:
        """Return a dictionary of all process variables for the rink system."""
        return {
            "name": self.name,
            "system_type": self.system_type,
            "mode": self.mode,
            "refrigerant": self.refrigerant,
            "control_type": self.control_type,
            "setpoint": self.setpoint,
            "refrig_inlet_temp": self.refrig_inlet_temp,
            "refrig_outlet_temp": self.refrig_outlet_temp,
            "refrig_mass_flow": self.refrig_mass_flow,
            "heat_source": self.heat_source,
            "cooling_power": self.cooling_power,
            "cooling_energy": self.cooling_energy,
            "ice_surface_temp": self.ice_surface_temp,
        }

    @classmethod
    def get_process_variables_metadata(cls) -> Dict[str, Dict[str, Any]]:
        """Return metadata for all process variables."""
        return {
            "name": {"type": str, "label": "Name"},
            "system_type": {
                "type": str,
                "label": "System Type",
                "options": [DIRECT_SYSTEM, INDIRECT_SYSTEM],
            },
            "mode": {
                "type": str,
                "label": "Operating Mode",
                "options": [NOT_OPERATING, COOLING],
            },
            "refrigerant": {"type": str, "label": "Refrigerant"},
            "control_type": {"type": str, "label": "Control Type"},
            "setpoint": {
                "type": float,
                "label": "Control Setpoint",
                "description": "Outlet or ice surface temperature setpoint",
                "unit": "°C",
            },
            "refrig_inlet_temp": {
                "type": float,
                "label": "Refrigerant Inlet Temperature",
                "unit": "°C",
            },
            "refrig_outlet_temp": {
                "type": float,
                "label": "Refrigerant Outlet Temperature",
                "unit": "°C",
            },
            "refrig_mass_flow": {
                "type": float,
                "label": "Refrigerant Mass Flow",
                "unit": "kg/s",
            },
            "heat_source": {
                "type": float,
                "label": "Slab Heat Source",
                "description": "Heat added to the slab, negative when cooling",
                "unit": "W",
            },
            "cooling_power": {
                "type": float,
                "label": "Cooling Power",
                "unit": "W",
            },
            "cooling_energy": {
                "type": float,
                "label": "Cooling Energy",
                "description": "Cooling delivered over the last step",
                "unit": "J",
            },
            "ice_surface_temp": {
                "type": float,
                "label": "Ice Surface Temperature",
                "unit": "°C",
            },
        }

    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__} {self.name}: {self.mode}, "
            f"{self.refrig_mass_flow:.2f} kg/s {self.refrigerant}, "
            f"ice {self.ice_surface_temp:.1f}°C, cooling {self.cooling_power / 1000:.1f} kW"
        )


class DirectRinkSystem(RinkSystem):
    """Primary refrigerant (ammonia) pumped through the floor."""

    system_type = DIRECT_SYSTEM
    equipment_kind = EquipmentType.DIRECT_RINK

    def __init__(self, name: str, surface_name: str, refrigerant: str = AMMONIA, **kwargs: Any) -> None:
        super().__init__(name, surface_name, refrigerant, **kwargs)

    def _select_property_table(self) -> PropertyTable:
        return get_property_table(self.refrigerant)


class IndirectRinkSystem(RinkSystem):
    """Secondary brine circulated through the floor."""

    system_type = INDIRECT_SYSTEM
    equipment_kind = EquipmentType.INDIRECT_RINK

    def _select_property_table(self) -> PropertyTable:
        return get_property_table(self.refrigerant, self.concentration)


_SYSTEM_CLASSES = {
    DIRECT_SYSTEM: DirectRinkSystem,
    INDIRECT_SYSTEM: IndirectRinkSystem,
}
