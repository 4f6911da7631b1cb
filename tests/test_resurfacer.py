"""Tests for the resurfacing machine."""

import unittest

from icerink.core.config import ResurfacerConfig, RinkSystemConfig
from icerink.core.errors import ConfigurationError
from icerink.equipment.base import EquipmentType
from icerink.physics.loads import resurfacing_load
from icerink.resurfacer import Resurfacer


class TestResurfacer(unittest.TestCase):

    def setUp(self):
        self.resurfacer = Resurfacer(
            name="Resurfacer-1",
            tank_capacity=0.5,
            flood_water_temp=40.0,
            initial_water_temp=10.0,
            events_schedule="Resurfacing Events",
        )

    def test_initial_state(self):
        self.assertEqual(self.resurfacer.events, 0.0)
        self.assertEqual(self.resurfacer.load.rink_load, 0.0)
        self.assertEqual(self.resurfacer.equipment_type, EquipmentType.RESURFACER)

    def test_no_events_no_load(self):
        load = self.resurfacer.calculate_load(0, -5.0, 4500.0)
        self.assertEqual(load.q_resurfacing, 0.0)
        self.assertEqual(load.q_humidity, 0.0)

    def test_load_is_events_times_event_load(self):
        event = resurfacing_load(0.5, 40.0, -5.0, 10.0, 4500.0)
        load = self.resurfacer.calculate_load(2, -5.0, 4500.0)
        self.assertAlmostEqual(load.q_resurfacing, 2 * event.q_resurfacing)
        self.assertAlmostEqual(load.e_heating_water, 2 * event.e_heating_water)
        self.assertAlmostEqual(load.q_humidity, 2 * event.q_humidity)
        self.assertEqual(self.resurfacer.events, 2)

    def test_negative_events_ignored(self):
        self.assertEqual(self.resurfacer.calculate_load(-1, -5.0, 4500.0).rink_load, 0.0)

    def test_invalid_tank(self):
        with self.assertRaises(ValueError):
            Resurfacer("R", tank_capacity=0.0, flood_water_temp=40.0, initial_water_temp=10.0)

    def test_from_config(self):
        resurfacer = Resurfacer.from_config(ResurfacerConfig(name="R2", tank_capacity=0.9))
        self.assertEqual(resurfacer.name, "R2")
        self.assertEqual(resurfacer.tank_capacity, 0.9)
        self.assertEqual(resurfacer.flood_water_temp, 55.0)

    def test_from_config_validates(self):
        with self.assertRaises(ConfigurationError):
            Resurfacer.from_config(ResurfacerConfig(name="R2", tank_capacity=-1.0))

    def test_from_config_wrong_type(self):
        with self.assertRaises(TypeError):
            Resurfacer.from_config(RinkSystemConfig(name="A"))

    def test_process_variables_match_metadata(self):
        self.resurfacer.calculate_load(1, -5.0, 4500.0)
        variables = self.resurfacer.get_process_variables()
        self.assertEqual(set(variables), set(Resurfacer.get_process_variables_metadata()))
        self.assertGreater(variables["q_resurfacing"], 0.0)


if __name__ == "__main__":
    unittest.main()
