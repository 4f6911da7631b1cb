"""Tests for the surface-coupled heat balance solver."""

import unittest

from icerink.core.errors import NumericalError
from icerink.physics import heat_balance
from icerink.physics.heat_balance import HeatBalanceCoefficients
from icerink.physics.heat_exchanger import calculate_effectiveness
from icerink.physics.properties import get_property_table


def make_coefficients(**overrides):
    """Coefficients of a concrete slab with the ground warmer than the ice."""
    values = dict(ca=-2.0, cb=0.3, cc=0.05, cd=5.0, ce=0.1, cf=0.005, cg=0.0, ch=0.005, ci=0.5, cj=0.5)
    values.update(overrides)
    return HeatBalanceCoefficients(**values)


class TestDerivedCoefficients(unittest.TestCase):
    """Test Ck and Cl."""

    def test_ck(self):
        c = make_coefficients()
        expected = c.cg + (c.ci * (c.ca + c.cb * c.cd) + c.cj * (c.cd + c.ce * c.ca)) / (1 - c.ce * c.cb)
        self.assertAlmostEqual(c.ck, expected)
        self.assertAlmostEqual(c.ck, 2.15 / 0.97)

    def test_cl(self):
        c = make_coefficients()
        expected = c.ch + (c.ci * (c.cc + c.cb * c.cf) + c.cj * (c.cf + c.ce * c.cc)) / (1 - c.ce * c.cb)
        self.assertAlmostEqual(c.cl, expected)

    def test_degenerate_denominator(self):
        """Test that Ce*Cb = 1 is a numerical error, not infinity."""
        c = make_coefficients(cb=1.0, ce=1.0)
        with self.assertRaises(NumericalError):
            c.ck
        with self.assertRaises(NumericalError):
            heat_balance.solve(c, None, -10.0, 100.0)


class TestSolve(unittest.TestCase):
    """Test the coupled slab/tubing solution."""

    def setUp(self):
        self.coeffs = make_coefficients()
        self.table = get_property_table("NH3")
        self.area = 1800.0

    def hx(self, mass_flow, tube_length=15000.0):
        return calculate_effectiveness(self.table, -10.0, mass_flow, tube_length, 0.025, 1)

    def test_no_flow(self):
        """Test that no flow gives no heat source and outlet = inlet."""
        result = heat_balance.solve(self.coeffs, None, -10.0, self.area)
        self.assertEqual(result.heat_source, 0.0)
        self.assertEqual(result.mass_flow, 0.0)
        self.assertEqual(result.outlet_temp, -10.0)
        self.assertAlmostEqual(result.surface_temp, (self.coeffs.ca + self.coeffs.cb * self.coeffs.cd) / 0.97)

    def test_cold_inlet_cools(self):
        result = heat_balance.solve(self.coeffs, self.hx(3.0), -10.0, self.area)
        self.assertLess(result.heat_source, 0.0)
        self.assertFalse(result.is_heating)
        self.assertGreater(result.outlet_temp, -10.0)
        self.assertAlmostEqual(result.mass_flow, 3.0)

    def test_energy_round_trip(self):
        """Test Q = m cp (Tin - Tout) at the solved state."""
        hx = self.hx(2.5, tube_length=800.0)
        result = heat_balance.solve(self.coeffs, hx, -10.0, self.area)
        self.assertAlmostEqual(
            result.heat_source, 2.5 * hx.properties.specific_heat * (-10.0 - result.outlet_temp), places=6
        )

    def test_both_forms_agree(self):
        """Test that the conductance and flow forms give the same heat source."""
        hx = self.hx(1.5, tube_length=300.0)
        by_conductance = heat_balance.heat_source_from_conductance(self.coeffs, hx.eps_mdot_cp, -10.0, self.area)
        by_flow = heat_balance.heat_source_from_flow(
            self.coeffs, hx.epsilon, 1.5, hx.properties.specific_heat, -10.0, self.area
        )
        self.assertAlmostEqual(by_conductance, by_flow, places=6)

    def test_source_temperature_consistent(self):
        """Test that the source temperature is Ck + Cl q"."""
        result = heat_balance.solve(self.coeffs, self.hx(2.0), -10.0, self.area)
        self.assertAlmostEqual(
            result.source_temp, self.coeffs.ck + self.coeffs.cl * result.heat_source / self.area
        )

    def test_flux_for_surface_temperature(self):
        """Test that the inverted flux reproduces the target surface temperature."""
        flux = heat_balance.flux_for_surface_temperature(self.coeffs, -5.0)
        surface = heat_balance.ice_surface_temperature(self.coeffs, flux * self.area, self.area)
        self.assertAlmostEqual(surface, -5.0)

    def test_flux_insensitive_surface(self):
        with self.assertRaises(NumericalError):
            heat_balance.flux_for_surface_temperature(make_coefficients(cc=0.0, cf=0.0), -5.0)

    def test_outlet_temperature_without_flow(self):
        self.assertEqual(heat_balance.outlet_temperature(-8.0, -1000.0, 0.0), -8.0)

    def test_invalid_area(self):
        with self.assertRaises(ValueError):
            heat_balance.solve(self.coeffs, None, -10.0, 0.0)


if __name__ == "__main__":
    unittest.main()
