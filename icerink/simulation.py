"""
Step driver for ice rink simulation.

IceRinkSimulation owns the rink systems and resurfacers of one
configuration and advances them against host collaborators (heat balance
engine, plant flow manager, schedules). All per-step state travels in a
StepContext built for that step; one-time setup happens in initialize().

Usage:
    from icerink.core.config import get_default_config
    from icerink.simulation import IceRinkSimulation

    sim = IceRinkSimulation.from_config(get_default_config(), engine)
    sim.initialize()
    reports = sim.step()
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from icerink.core.config import IceRinkConfig, SimulationConfig
from icerink.core.constants import SECONDS_PER_MINUTE
from icerink.core.errors import ConfigurationError
from icerink.host import (
    HeatBalanceEngine,
    PlantFlowManager,
    ScheduleService,
    SimplePlantFlowManager,
    StaticScheduleService,
)
from icerink.physics.loads import energy_to_power, freezing_load
from icerink.resurfacer import Resurfacer
from icerink.rink_system import RinkSystem

logger = logging.getLogger(__name__)


class HeatSourceAverager:
    """
    Time-weighted average of the heat source written to each surface.

    A step may evaluate a system several times; the heat source the host
    sees for the step is the weighted mean of those evaluations.
    """

    def __init__(self) -> None:
        self._totals: Dict[str, float] = {}
        self._weights: Dict[str, float] = {}

    def add(self, surface_name: str, heat_source: float, weight: float = 1.0) -> None:
        self._totals[surface_name] = self._totals.get(surface_name, 0.0) + heat_source * weight
        self._weights[surface_name] = self._weights.get(surface_name, 0.0) + weight

    def average(self, surface_name: str) -> float:
        weight = self._weights.get(surface_name, 0.0)
        if weight <= 0:
            return 0.0
        return self._totals[surface_name] / weight

    def reset(self) -> None:
        self._totals.clear()
        self._weights.clear()


@dataclass
class StepContext:
    """State of the simulation for one step."""

    step_index: int = 0
    hour: int = 0
    step_seconds: float = 900.0
    barometric_pressure: float = 101325.0  # Pa
    include_freezing_load: bool = False
    averager: HeatSourceAverager = field(default_factory=HeatSourceAverager)


@dataclass
class StepReport:
    """Per-system results of one step. Powers in W."""

    system_name: str
    step_index: int
    mode: str
    mass_flow: float  # kg/s
    heat_source: float  # W, step average
    surface_temp: float  # °C
    inlet_temp: float  # °C
    outlet_temp: float  # °C
    convective_load: float
    people_gain: float
    freezing_load: float
    resurfacing_load: float
    reason: Optional[str] = None

    @property
    def load_met(self) -> float:
        """Net load for the step; negative means cooling delivered."""
        return self.convective_load + self.people_gain + self.freezing_load + self.resurfacing_load


class IceRinkSimulation:
    """Advance a set of rink systems one step at a time."""

    @classmethod
    def from_config(
        cls,
        config: IceRinkConfig,
        engine: HeatBalanceEngine,
        plant: Optional[PlantFlowManager] = None,
        schedules: Optional[ScheduleService] = None,
        iterations_per_step: int = 1,
    ) -> "IceRinkSimulation":
        """Create a simulation from an IceRinkConfig dataclass."""
        if not isinstance(config, IceRinkConfig):
            raise TypeError(f"Expected IceRinkConfig, got {type(config).__name__}")

        return cls(
            systems=[RinkSystem.from_config(s) for s in config.systems],
            resurfacers=[Resurfacer.from_config(r) for r in config.resurfacers],
            engine=engine,
            plant=plant if plant is not None else SimplePlantFlowManager(),
            schedules=schedules if schedules is not None else StaticScheduleService(config.schedules),
            settings=config.simulation,
            iterations_per_step=iterations_per_step,
        )

    def __init__(
        self,
        systems: List[RinkSystem],
        resurfacers: List[Resurfacer],
        engine: HeatBalanceEngine,
        plant: PlantFlowManager,
        schedules: ScheduleService,
        settings: Optional[SimulationConfig] = None,
        iterations_per_step: int = 1,
    ) -> None:
        if iterations_per_step < 1:
            raise ValueError("At least one iteration per step is required")
        self.systems = systems
        self.resurfacers: Dict[str, Resurfacer] = {r.name: r for r in resurfacers}
        self.engine = engine
        self.plant = plant
        self.schedules = schedules
        self.settings = settings if settings is not None else SimulationConfig()
        self.iterations_per_step = iterations_per_step

        self.step_index = 0
        self.initialized = False
        self._freezing_pending = False

    @property
    def step_seconds(self) -> float:
        return self.settings.time_step_minutes * SECONDS_PER_MINUTE

    def initialize(self, inlet_temp: Optional[float] = None) -> None:
        """
        One-time setup before the first step.

        Validates every floor surface and resurfacer reference, zeroes the
        plant nodes and schedules the initial freezing load for the first step.

        Raises:
            ConfigurationError: If a surface or resurfacer reference is invalid
        """
        names = set()
        for system in self.systems:
            if system.name in names:
                raise ConfigurationError(f"Duplicate rink system name: {system.name!r}")
            names.add(system.name)
            for resurfacer_name in system.resurfacers:
                if resurfacer_name not in self.resurfacers:
                    raise ConfigurationError(
                        f"{system.name}: resurfacer {resurfacer_name!r} not found"
                    )
            system.initialize(self.engine, inlet_temp)

        self.step_index = 0
        self._freezing_pending = True
        self.initialized = True
        logger.info(f"Initialized {len(self.systems)} rink systems, {len(self.resurfacers)} resurfacers")

    def next_context(self) -> StepContext:
        """Build the context for the next step."""
        elapsed_minutes = self.step_index * self.settings.time_step_minutes
        return StepContext(
            step_index=self.step_index,
            hour=(self.settings.start_hour + elapsed_minutes // 60) % 24,
            step_seconds=self.step_seconds,
            barometric_pressure=self.settings.barometric_pressure,
            include_freezing_load=self._freezing_pending,
        )

    def step(self, context: Optional[StepContext] = None) -> List[StepReport]:
        """
        Advance every rink system by one step.

        Returns:
            One StepReport per rink system
        """
        if not self.initialized:
            raise RuntimeError("initialize() must be called before step()")

        if context is None:
            context = self.next_context()
        self.schedules.set_hour(context.hour)

        reports = [self._step_system(system, context) for system in self.systems]

        self._freezing_pending = False
        self.step_index += 1
        return reports

    def _step_system(self, system: RinkSystem, context: StepContext) -> StepReport:
        # Zone convection with the slab source inactive
        self.engine.set_heat_source(system.surface_name, 0.0)
        zero_source_convection = self.engine.zone_convection_sum(system.zone_name)

        for _ in range(self.iterations_per_step):
            result = system.simulate(context, self.engine, self.schedules, self.plant)
        heat_source = context.averager.average(system.surface_name)
        self.engine.set_heat_source(system.surface_name, heat_source)
        convective_load = self.engine.zone_convection_sum(system.zone_name) - zero_source_convection

        people_gain = 0.0
        if system.people_schedule:
            people_gain = self.schedules.current_value(system.people_schedule) * system.spectator_area

        freezing_power = 0.0
        if context.include_freezing_load:
            geometry = system.geometry
            freezing_power = energy_to_power(
                freezing_load(
                    geometry.length,
                    geometry.width,
                    geometry.ice_thickness,
                    system.flood_water_temp,
                    self.schedules.current_value(system.setpoint_schedule),
                ),
                context.step_seconds,
            )

        resurfacing_power = 0.0
        for resurfacer_name in system.resurfacers:
            resurfacer = self.resurfacers[resurfacer_name]
            events = 0.0
            if resurfacer.events_schedule:
                events = self.schedules.current_value(resurfacer.events_schedule)
            load = resurfacer.calculate_load(events, system.ice_surface_temp, system.geometry.air_volume)
            resurfacing_power += energy_to_power(load.rink_load, context.step_seconds)

        report = StepReport(
            system_name=system.name,
            step_index=context.step_index,
            mode=system.mode,
            mass_flow=result.mass_flow,
            heat_source=heat_source,
            surface_temp=result.surface_temp,
            inlet_temp=result.inlet_temp,
            outlet_temp=result.outlet_temp,
            convective_load=convective_load,
            people_gain=people_gain,
            freezing_load=freezing_power,
            resurfacing_load=resurfacing_power,
            reason=system.last_decision.reason if system.last_decision else None,
        )
        logger.debug(f"{system.name} step {context.step_index}: load met {report.load_met:.0f} W")
        return report

    def run(self, steps: int) -> List[List[StepReport]]:
        """Initialize if needed and run a number of steps."""
        if not self.initialized:
            self.initialize()
        return [self.step() for _ in range(steps)]
