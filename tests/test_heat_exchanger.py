"""Tests for the buried-pipe effectiveness model."""

import math
import unittest

from icerink.physics.heat_exchanger import (
    LAMINAR,
    TURBULENT,
    calculate_effectiveness,
    effectiveness_from_ntu,
    nusselt_number,
    reynolds_number,
)
from icerink.physics.properties import get_property_table


class TestCorrelations(unittest.TestCase):
    """Test the Reynolds, Nusselt and effectiveness relations."""

    def test_reynolds_number(self):
        """Test Re = 4 m / (pi mu D N)."""
        re = reynolds_number(2.0, 0.000186, 0.02, 300)
        self.assertAlmostEqual(re, 8.0 / (math.pi * 0.000186 * 0.02 * 300))

    def test_reynolds_scales_inversely_with_circuits(self):
        self.assertAlmostEqual(
            reynolds_number(1.0, 0.0002, 0.025, 1) / reynolds_number(1.0, 0.0002, 0.025, 10), 10.0
        )

    def test_laminar_nusselt(self):
        """Test the constant laminar Nusselt number below the boundary."""
        self.assertEqual(nusselt_number(2299.999, 1.5), 3.66)
        self.assertEqual(nusselt_number(100.0, 30.0), 3.66)

    def test_turbulent_nusselt(self):
        """Test the Colburn correlation at and above the boundary."""
        expected = 0.023 * 2300.0**0.8 * 1.5 ** (1.0 / 3.0)
        self.assertAlmostEqual(nusselt_number(2300.0, 1.5), expected)

    def test_regime_discontinuity(self):
        """Test that the switch at Re = 2300 is a step, not a blend."""
        below = nusselt_number(2300.0 - 1e-6, 1.5)
        above = nusselt_number(2300.0 + 1e-6, 1.5)
        self.assertEqual(below, 3.66)
        self.assertGreater(above, 10.0)

    def test_effectiveness_from_ntu(self):
        self.assertEqual(effectiveness_from_ntu(0.0), 0.0)
        self.assertAlmostEqual(effectiveness_from_ntu(1.0), 1.0 - math.exp(-1.0))

    def test_effectiveness_saturates(self):
        """Test that effectiveness is exactly 1 above NTU 50."""
        self.assertEqual(effectiveness_from_ntu(50.0001), 1.0)
        self.assertEqual(effectiveness_from_ntu(1e6), 1.0)


class TestCalculateEffectiveness(unittest.TestCase):
    """Test the full effectiveness evaluation."""

    def setUp(self):
        self.ammonia = get_property_table("NH3")

    def test_hand_calculation(self):
        """Test against a hand calculation for ammonia at -8 °C."""
        hx = calculate_effectiveness(self.ammonia, -8.0, 2.0, 500.0, 0.02, 300)
        props = self.ammonia.lookup(-8.0)

        re = 4 * 2.0 / (math.pi * props.viscosity * 0.02 * 300)
        ntu = math.pi * props.conductivity * 3.66 * 500.0 / (2.0 * props.specific_heat)
        self.assertAlmostEqual(hx.reynolds, re)
        self.assertEqual(hx.regime, LAMINAR)
        self.assertAlmostEqual(hx.ntu, ntu)
        self.assertAlmostEqual(hx.epsilon, 1.0 - math.exp(-ntu))
        self.assertAlmostEqual(hx.mdot_cp, 2.0 * props.specific_heat)
        self.assertAlmostEqual(hx.eps_mdot_cp, hx.epsilon * hx.mdot_cp)

    def test_single_circuit_is_turbulent(self):
        hx = calculate_effectiveness(self.ammonia, -8.0, 2.0, 500.0, 0.02, 1)
        self.assertEqual(hx.regime, TURBULENT)

    def test_long_tubing_saturates(self):
        hx = calculate_effectiveness(self.ammonia, -10.0, 5.0, 15000.0, 0.025, 1)
        self.assertEqual(hx.epsilon, 1.0)

    def test_zero_flow_rejected(self):
        """Test that callers must handle zero flow themselves."""
        with self.assertRaises(ValueError):
            calculate_effectiveness(self.ammonia, -8.0, 0.0, 500.0, 0.02, 300)
        with self.assertRaises(ValueError):
            calculate_effectiveness(self.ammonia, -8.0, -1.0, 500.0, 0.02, 300)

    def test_invalid_geometry_rejected(self):
        with self.assertRaises(ValueError):
            calculate_effectiveness(self.ammonia, -8.0, 1.0, 0.0, 0.02, 300)
        with self.assertRaises(ValueError):
            calculate_effectiveness(self.ammonia, -8.0, 1.0, 500.0, 0.0, 300)


if __name__ == "__main__":
    unittest.main()
