"""Tests for the step driver and command line runner."""

import tempfile
import unittest
from pathlib import Path

from icerink.core.config import (
    IceRinkConfig,
    ResurfacerConfig,
    RinkSystemConfig,
    SimulationConfig,
    get_default_config,
    save_config,
)
from icerink.core.errors import ConfigurationError
from icerink.host import StaticScheduleService
from icerink.main import build_host, main
from icerink.physics.loads import energy_to_power, freezing_load, resurfacing_load
from icerink.rink_system import COOLING, NOT_OPERATING
from icerink.simulation import HeatSourceAverager, IceRinkSimulation, StepContext


def make_config(**system_overrides):
    system = dict(name="Main Rink", resurfacers=["Resurfacer-1"])
    system.update(system_overrides)
    return IceRinkConfig(
        name="Test Arena",
        simulation=SimulationConfig(time_step_minutes=15),
        systems=[RinkSystemConfig(**system)],
        resurfacers=[
            ResurfacerConfig(
                name="Resurfacer-1",
                tank_capacity=0.5,
                flood_water_temp=40.0,
                initial_water_temp=10.0,
                events_schedule="Resurfacing Events",
            )
        ],
        schedules={
            "Ice Setpoint": -5.0,
            "Resurfacing Events": 0.0,
            "Spectators": 50.0,
            "Off": 0.0,
        },
    )


class RecordingScheduleService(StaticScheduleService):
    """Schedule service that records the hours it is moved to."""

    def __init__(self, schedules):
        super().__init__(schedules)
        self.hours = []

    def set_hour(self, hour):
        self.hours.append(hour)
        super().set_hour(hour)


def make_simulation(config=None, **kwargs):
    config = config or make_config()
    sim = IceRinkSimulation.from_config(config, build_host(config), **kwargs)
    sim.initialize(inlet_temp=-10.0)
    return sim


class TestHeatSourceAverager(unittest.TestCase):

    def test_empty_average(self):
        self.assertEqual(HeatSourceAverager().average("Rink Floor"), 0.0)

    def test_weighted_average(self):
        averager = HeatSourceAverager()
        averager.add("Rink Floor", -1000.0, 0.25)
        averager.add("Rink Floor", -2000.0, 0.75)
        self.assertAlmostEqual(averager.average("Rink Floor"), -1750.0)

    def test_reset(self):
        averager = HeatSourceAverager()
        averager.add("Rink Floor", -1000.0)
        averager.reset()
        self.assertEqual(averager.average("Rink Floor"), 0.0)


class TestIceRinkSimulation(unittest.TestCase):
    """Test step ordering and load aggregation."""

    def test_step_requires_initialize(self):
        config = make_config()
        sim = IceRinkSimulation.from_config(config, build_host(config))
        with self.assertRaises(RuntimeError):
            sim.step()

    def test_unknown_resurfacer(self):
        config = make_config(resurfacers=["Resurfacer-9"])
        sim = IceRinkSimulation.from_config(config, build_host(config))
        with self.assertRaises(ConfigurationError):
            sim.initialize()

    def test_wrong_config_type(self):
        with self.assertRaises(TypeError):
            IceRinkSimulation.from_config({"systems": []}, build_host(make_config()))

    def test_cooling_step(self):
        report = make_simulation().step()[0]
        self.assertEqual(report.mode, COOLING)
        self.assertEqual(report.system_name, "Main Rink")
        self.assertGreater(report.mass_flow, 0.0)
        self.assertLess(report.heat_source, 0.0)

    def test_freezing_load_only_on_first_step(self):
        sim = make_simulation()
        first, second = sim.step()[0], sim.step()[0]
        expected = energy_to_power(freezing_load(60.0, 30.0, 0.03, 15.0, -5.0), 900.0)
        self.assertAlmostEqual(first.freezing_load, expected)
        self.assertEqual(second.freezing_load, 0.0)

    def test_convective_load_from_heat_source(self):
        """Test that the convective load is the difference of zone convection sums."""
        sim = make_simulation()
        report = sim.step()[0]
        self.assertAlmostEqual(report.convective_load, sim.engine.convective_fraction * report.heat_source)

    def test_load_met_aggregation(self):
        config = make_config(people_schedule="Spectators", spectator_area=400.0)
        config.schedules["Resurfacing Events"] = 1.0
        report = make_simulation(config).step()[0]

        self.assertAlmostEqual(report.people_gain, 20000.0)
        self.assertGreater(report.resurfacing_load, 0.0)
        self.assertAlmostEqual(
            report.load_met,
            report.convective_load + report.people_gain + report.freezing_load + report.resurfacing_load,
        )

    def test_resurfacing_power(self):
        config = make_config()
        config.schedules["Resurfacing Events"] = 2.0
        sim = make_simulation(config)
        report = sim.step()[0]
        event = resurfacing_load(0.5, 40.0, sim.systems[0].ice_surface_temp, 10.0, 18000.0)
        self.assertAlmostEqual(report.resurfacing_load, energy_to_power(2 * event.rink_load, 900.0), places=6)

    def test_unavailable_system(self):
        report = make_simulation(make_config(availability_schedule="Off")).step()[0]
        self.assertEqual(report.mode, NOT_OPERATING)
        self.assertEqual(report.mass_flow, 0.0)
        self.assertEqual(report.heat_source, 0.0)
        self.assertEqual(report.convective_load, 0.0)

    def test_iterations_average_heat_source(self):
        single = make_simulation().step()[0]
        repeated = make_simulation(iterations_per_step=3).step()[0]
        self.assertAlmostEqual(repeated.heat_source / single.heat_source, 1.0, places=2)

    def test_hourly_schedule(self):
        config = make_config(people_schedule="Spectators", spectator_area=100.0)
        config.schedules["Spectators"] = [0.0] + [10.0] * 23
        sim = make_simulation(config)
        reports = sim.run(5)
        self.assertEqual(reports[0][0].people_gain, 0.0)
        self.assertEqual(reports[4][0].people_gain, 1000.0)

    def test_schedule_hour_follows_context(self):
        config = make_config()
        schedules = RecordingScheduleService(config.schedules)
        sim = IceRinkSimulation.from_config(config, build_host(config), schedules=schedules)
        sim.initialize(inlet_temp=-10.0)

        sim.step()
        sim.step(StepContext(step_index=1, hour=7))
        self.assertEqual(schedules.hours, [0, 7])
        self.assertEqual(schedules.hour, 7)

    def test_next_context(self):
        sim = make_simulation()
        context = sim.next_context()
        self.assertIsInstance(context, StepContext)
        self.assertTrue(context.include_freezing_load)
        self.assertEqual(context.step_seconds, 900.0)
        sim.step()
        self.assertFalse(sim.next_context().include_freezing_load)


class TestMain(unittest.TestCase):
    """Test the command line runner."""

    def test_default_config(self):
        self.assertEqual(main(["--steps", "2"]), 0)

    def test_missing_file(self):
        self.assertEqual(main(["/nonexistent/rink.yaml"]), 1)

    def test_config_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "rink.yaml"
            save_config(get_default_config(), path)
            self.assertEqual(main([str(path), "--steps", "1"]), 0)

    def test_invalid_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "rink.yaml"
            path.write_text("systems:\n  - name: A\n    control_type: Bogus\n")
            self.assertEqual(main([str(path)]), 1)


if __name__ == "__main__":
    unittest.main()
