#!/usr/bin/env python3
"""
EV Powertrain Drive Cycle

This script runs the EV powertrain simulation through a scripted drive cycle
(accelerate, coast, brake), prints the final status, exports the recorded history
to CSV and optionally saves a plot of the history channels.
"""

import os
import argparse
from typing import List, NamedTuple, Optional

from ev_powertrain_sim import (
    Simulator, SimulationConfig, TickScheduler, TimingMode, available_drive_modes,
    SimulationError
)


class DriveCyclePhase(NamedTuple):
    """A constant command held for a duration."""
    name: str
    duration: float      # s
    command: float       # m/s²


DEFAULT_DRIVE_CYCLE = [
    DriveCyclePhase('accelerate', 20.0, 1.5),
    DriveCyclePhase('coast', 10.0, 0.0),
    DriveCyclePhase('brake', 10.0, -1.5),
]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the EV powertrain simulation over a drive cycle.")
    parser.add_argument("--config", default=None,
                        help="YAML configuration file (defaults built in)")
    parser.add_argument("--mode", choices=available_drive_modes(), default=None,
                        help="drive mode, overrides the configuration")
    parser.add_argument("--no-regen", action="store_true",
                        help="disable regenerative braking")
    parser.add_argument("--output-dir", default=None,
                        help="directory for the CSV export and plots")
    parser.add_argument("--plot", action="store_true",
                        help="save a plot of the history channels")
    return parser.parse_args(argv)


def load_configuration(args: argparse.Namespace) -> SimulationConfig:
    """
    Build the simulation configuration from the config file and command line.

    Args:
        args: Parsed command line arguments

    Returns:
        SimulationConfig
    """
    config = SimulationConfig(args.config) if args.config else SimulationConfig()

    overrides = {}
    if args.mode:
        overrides['drive_mode'] = args.mode
    if args.no_regen:
        overrides['regen_braking'] = False
    if overrides:
        config.parameters = config.parameters.with_values(**overrides)

    if args.output_dir:
        config.output_directory = args.output_dir

    # Scripted cycles are replayed in simulated time, not wall-clock time
    config.timing_mode = TimingMode.FIXED

    print(f"Configuration loaded. Output directory: {config.output_directory}")
    return config


def run_drive_cycle(simulator: Simulator, scheduler: TickScheduler,
                    phases: List[DriveCyclePhase]) -> None:
    """
    Drive the simulator through each phase of a drive cycle.

    Args:
        simulator: Simulator (started by this function)
        scheduler: Fixed-step scheduler driving the simulator
        phases: Drive cycle phases, run in order
    """
    simulator.start()

    for phase in phases:
        simulator.set_command(phase.command)
        ticks = int(round(phase.duration / scheduler.nominal_step))
        for _ in range(ticks):
            scheduler.tick()

        state = simulator.state
        print(f"  {phase.name:<12} {phase.duration:5.1f}s  "
              f"speed {state.speed:7.2f} km/h  SoC {state.soc:6.2f} %  "
              f"temp {state.battery_temp:6.2f} °C")

    simulator.stop()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_configuration(args)
    except (FileNotFoundError, SimulationError) as e:
        print(f"Error: {e}")
        return 1

    simulator = Simulator.from_config(config)
    scheduler = TickScheduler(simulator, timing_mode=config.timing_mode,
                              nominal_step=config.nominal_step)

    print(f"\n=== Drive Cycle ({config.parameters.drive_mode} mode) ===")
    run_drive_cycle(simulator, scheduler, DEFAULT_DRIVE_CYCLE)

    snapshot = simulator.detached_snapshot()

    # Imported here so the matplotlib backend can be chosen by the caller
    from ev_powertrain_sim.utils.plotting import format_status, plot_history, save_plot

    print("\n=== Final Status ===")
    print(format_status(snapshot.state))

    try:
        csv_path = simulator.export(config.output_directory)
        print(f"\nData exported to {csv_path}")
    except SimulationError as e:
        print(f"\nExport failed: {e}")
        return 1

    if args.plot:
        fig = plot_history(snapshot.history, channels=['speed', 'soc', 'temperature', 'current'])
        plot_path = save_plot(fig, os.path.splitext(os.path.basename(csv_path))[0],
                              directory=config.output_directory)
        print(f"Plot saved to {plot_path}")

    print("\nSimulation completed successfully!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
