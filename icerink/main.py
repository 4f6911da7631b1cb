#!/usr/bin/env python3
"""
Run an ice rink configuration against the in-memory host.

    python -m icerink.main rink.yaml --steps 96

The optional "host" section of the configuration file describes the
static heat balance engine:

    host:
      inlet_temp: -10.0
      convective_fraction: 0.3
      network_cap: 8.0
      surfaces:
        Rink Floor:
          area: 1800.0
          coefficients: {ca: -2.0, cb: 0.3, ...}
      zones:
        Rink Zone: {temperature: 10.0, humidity_ratio: 0.002}
"""
import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

from icerink.core.config import IceRinkConfig, config_from_dict, get_default_config, load_config
from icerink.core.errors import IceRinkError
from icerink.host import FloorSurface, SimplePlantFlowManager, StaticHeatBalanceEngine, ZoneAirState
from icerink.physics.heat_balance import HeatBalanceCoefficients
from icerink.simulation import IceRinkSimulation

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Slab response of a bare concrete rink floor over an insulated base
DEFAULT_COEFFICIENTS = {
    "ca": -2.0,
    "cb": 0.3,
    "cc": 0.05,
    "cd": 5.0,
    "ce": 0.1,
    "cf": 0.005,
    "cg": 0.0,
    "ch": 0.005,
    "ci": 0.5,
    "cj": 0.5,
}
DEFAULT_INLET_TEMP = -10.0  # °C


def build_host(config: IceRinkConfig, host_data: Optional[Dict[str, Any]] = None) -> StaticHeatBalanceEngine:
    """Create a static heat balance engine holding every configured rink floor."""
    host_data = host_data or {}
    engine = StaticHeatBalanceEngine(convective_fraction=host_data.get("convective_fraction", 0.3))
    surfaces = host_data.get("surfaces", {})

    for system in config.systems:
        surface_data = dict(surfaces.get(system.surface_name, {}))
        coefficients = dict(DEFAULT_COEFFICIENTS)
        coefficients.update(surface_data.pop("coefficients", {}))
        area = surface_data.pop("area", system.geometry.length * system.geometry.width)
        surface = FloorSurface(name=system.surface_name, area=area, zone_name=system.zone_name, **surface_data)
        engine.add_surface(surface, HeatBalanceCoefficients(**coefficients))

    for zone_name, zone_data in host_data.get("zones", {}).items():
        engine.zones[zone_name] = ZoneAirState(**zone_data)
    return engine


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ice rink radiant floor simulation")
    parser.add_argument("config", nargs="?", help="YAML or JSON configuration file (default: built-in)")
    parser.add_argument("--steps", type=int, default=4, help="number of steps to run")
    parser.add_argument("--debug", action="store_true", help="log per-step control decisions")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the simulation and log one line per system per step."""
    args = parse_args(argv)
    if args.debug:
        logging.getLogger("icerink").setLevel(logging.DEBUG)

    try:
        if args.config:
            data = load_config(args.config) or {}
            config = config_from_dict(data)
            host_data = data.get("host", {})
        else:
            config = get_default_config()
            host_data = {}

        logger.info(f"Starting ice rink simulation: {config.name}")
        engine = build_host(config, host_data)
        plant = SimplePlantFlowManager(network_cap=host_data.get("network_cap"))
        sim = IceRinkSimulation.from_config(config, engine, plant)
        sim.initialize(inlet_temp=host_data.get("inlet_temp", DEFAULT_INLET_TEMP))

        for _ in range(args.steps):
            for report in sim.step():
                logger.info(
                    f"Step {report.step_index:3d} {report.system_name}: {report.mode}, "
                    f"flow {report.mass_flow:.2f} kg/s, ice {report.surface_temp:.2f}°C, "
                    f"source {report.heat_source / 1000:.1f} kW, load met {report.load_met / 1000:.1f} kW"
                )
    except (IceRinkError, FileNotFoundError) as e:
        logger.error(f"Simulation failed: {e}")
        return 1

    logger.info("Simulation complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
