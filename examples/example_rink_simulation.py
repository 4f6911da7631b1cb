#!/usr/bin/env python
"""
Example simulation of an indirect (brine) rink over a 24-hour day.
Spectator gains and resurfacing events in the evening drive the load.
"""

from pathlib import Path

import matplotlib.pyplot as plt

from icerink.core.config import config_from_dict, load_config
from icerink.host import SimplePlantFlowManager
from icerink.main import build_host
from icerink.simulation import IceRinkSimulation

CONFIG_PATH = Path(__file__).with_name("rink_config.yaml")


def main():
    data = load_config(CONFIG_PATH)
    config = config_from_dict(data)
    host_data = data.get("host", {})

    engine = build_host(config, host_data)
    sim = IceRinkSimulation.from_config(config, engine, SimplePlantFlowManager())
    sim.initialize(inlet_temp=host_data.get("inlet_temp", -10.0))

    steps_per_day = 24 * 60 // config.simulation.time_step_minutes
    print(f"Running 24-hour simulation of {config.name} ({steps_per_day} steps)...")
    results = [sim.step()[0] for _ in range(steps_per_day)]

    plot_results(results, config.simulation.time_step_minutes)


def plot_results(results, step_minutes):
    hours = [r.step_index * step_minutes / 60 for r in results]

    fig, axes = plt.subplots(3, 1, figsize=(10, 10), sharex=True)

    axes[0].plot(hours, [r.surface_temp for r in results], "b-", label="Ice surface")
    axes[0].plot(hours, [r.outlet_temp for r in results], "r--", label="Brine outlet")
    axes[0].plot(hours, [r.inlet_temp for r in results], "g:", label="Brine inlet")
    axes[0].set_ylabel("Temperature (°C)")
    axes[0].legend()
    axes[0].grid(True)

    axes[1].plot(hours, [r.mass_flow for r in results], "k-")
    axes[1].set_ylabel("Brine flow (kg/s)")
    axes[1].grid(True)

    axes[2].plot(hours, [r.load_met / 1000 for r in results], "m-", label="Load met")
    axes[2].plot(hours, [r.resurfacing_load / 1000 for r in results], "c--", label="Resurfacing")
    axes[2].plot(hours, [r.people_gain / 1000 for r in results], "y:", label="Spectators")
    axes[2].set_ylabel("Power (kW)")
    axes[2].set_xlabel("Hour of day")
    axes[2].legend()
    axes[2].grid(True)

    fig.suptitle("Ice Rink Simulation")
    plt.tight_layout()
    plt.savefig("rink_simulation.png")
    plt.show()


if __name__ == "__main__":
    main()
