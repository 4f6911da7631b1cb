"""Parametrized tests for rink refrigeration behavior.

Uses pytest.mark.parametrize to test the floor model across fluids,
flows and setpoints.
"""

import pytest

from icerink.controls.resolvers import (
    FlowProblem,
    OutletTemperatureControl,
    SurfaceTemperatureControl,
    apply_reverse_operation_cutoff,
)
from icerink.physics.heat_balance import HeatBalanceCoefficients
from icerink.physics.heat_exchanger import LAMINAR, TURBULENT, calculate_effectiveness
from icerink.physics.properties import get_property_table
from icerink.physics.psychrometrics import dew_point

FLUIDS = [("NH3", None), ("CaCl2", 25.0), ("CaCl2", 30.0), ("EG", 25.0), ("EG", 30.0)]


def make_problem(fluid="NH3", concentration=None, inlet_temp=-10.0, current_flow=0.0):
    return FlowProblem(
        coeffs=HeatBalanceCoefficients(
            ca=-2.0, cb=0.3, cc=0.05, cd=5.0, ce=0.1, cf=0.005, cg=0.0, ch=0.005, ci=0.5, cj=0.5
        ),
        table=get_property_table(fluid, concentration),
        inlet_temp=inlet_temp,
        surface_area=1800.0,
        tube_length=15000.0,
        tube_diameter=0.025,
        circuits=1.0,
        current_flow=current_flow,
    )


class TestPropertyTables:
    """Parametrized tests for property table lookup."""

    @pytest.mark.parametrize("fluid,concentration", FLUIDS)
    def test_clamped_below_range(self, fluid, concentration):
        table = get_property_table(fluid, concentration)
        assert table.lookup(-25.0) == table.row(0)

    @pytest.mark.parametrize("fluid,concentration", FLUIDS)
    def test_clamped_above_range(self, fluid, concentration):
        table = get_property_table(fluid, concentration)
        assert table.lookup(8.0) == table.row(-1)

    @pytest.mark.parametrize("fluid,concentration", FLUIDS)
    def test_midpoint_interpolation(self, fluid, concentration):
        table = get_property_table(fluid, concentration)
        low, high = table.row(0), table.row(1)
        mid = table.lookup(-9.5)
        assert mid.specific_heat == pytest.approx((low.specific_heat + high.specific_heat) / 2)
        assert mid.viscosity == pytest.approx((low.viscosity + high.viscosity) / 2)


class TestEffectiveness:
    """Parametrized tests for the buried pipe heat exchanger."""

    @pytest.mark.parametrize(
        "mass_flow,expected_regime",
        [
            (0.005, LAMINAR),  # Re about 1340
            (0.008, LAMINAR),  # Re about 2140
            (0.01, TURBULENT),  # Re about 2680
            (2.0, TURBULENT),
        ],
    )
    def test_ammonia_flow_regime(self, mass_flow, expected_regime):
        result = calculate_effectiveness(get_property_table("NH3"), -10.0, mass_flow, 15000.0, 0.025)
        assert result.regime == expected_regime

    @pytest.mark.parametrize("fluid,concentration", FLUIDS)
    @pytest.mark.parametrize("tube_length", [50.0, 500.0, 15000.0])
    def test_conductance_increases_with_flow(self, fluid, concentration, tube_length):
        table = get_property_table(fluid, concentration)
        conductances = []
        for mass_flow in (0.5, 1.0, 2.0, 5.0):
            result = calculate_effectiveness(table, -8.0, mass_flow, tube_length, 0.025, circuits=10)
            assert 0.0 < result.epsilon <= 1.0
            conductances.append(result.eps_mdot_cp)
        assert conductances == sorted(conductances)


class TestFlowResolvers:
    """Parametrized tests for resolved flows."""

    @pytest.mark.parametrize("setpoint", [-12.0, -8.0, -6.0, -5.0, -4.0, -2.0, 0.0, 5.0])
    def test_surface_control_within_limits(self, setpoint):
        resolver = SurfaceTemperatureControl(min_flow=0.5, max_flow=5.0)
        decision = resolver.resolve(make_problem(), setpoint)
        assert decision.mass_flow == 0.0 or 0.5 <= decision.mass_flow <= 5.0

    @pytest.mark.parametrize("setpoint", [-12.0, -9.5, -8.0, -5.0, -1.0, 0.0])
    @pytest.mark.parametrize("current_flow", [0.0, 1.0, 4.0])
    def test_outlet_control_within_limits(self, setpoint, current_flow):
        resolver = OutletTemperatureControl(min_flow=0.5, max_flow=5.0)
        decision = resolver.resolve(make_problem(current_flow=current_flow), setpoint)
        assert 0.5 <= decision.mass_flow <= 5.0

    @pytest.mark.parametrize("fluid,concentration", FLUIDS)
    @pytest.mark.parametrize("setpoint", [-7.0, -5.0, -3.0])
    def test_surface_control_colder_needs_more_flow(self, fluid, concentration, setpoint):
        resolver = SurfaceTemperatureControl(min_flow=0.0, max_flow=20.0)
        problem = make_problem(fluid, concentration)
        warmer = resolver.resolve(problem, setpoint + 0.5)
        colder = resolver.resolve(problem, setpoint)
        assert colder.mass_flow >= warmer.mass_flow


class TestReverseOperation:
    """A cooling system never adds heat to the slab after the cutoff."""

    @pytest.mark.parametrize("inlet_temp", [-10.0, -5.0, 0.0, 10.0, 30.0])
    @pytest.mark.parametrize("mass_flow", [0.5, 2.0])
    def test_heat_source_never_positive(self, inlet_temp, mass_flow):
        problem = make_problem(inlet_temp=inlet_temp)
        result = apply_reverse_operation_cutoff(problem.solve(mass_flow))
        assert result.heat_source <= 0.0
        if result.mass_flow == 0.0:
            assert result.outlet_temp == inlet_temp


class TestDewPoint:

    @pytest.mark.parametrize(
        "humidity_ratio,expected_range",
        [
            (0.002, (-10.0, -7.0)),
            (0.004, (0.0, 2.0)),
            (0.008, (10.0, 11.5)),
        ],
    )
    def test_dew_point_from_humidity_ratio(self, humidity_ratio, expected_range):
        low, high = expected_range
        assert low <= dew_point(humidity_ratio) <= high
