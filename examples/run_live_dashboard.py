#!/usr/bin/env python3
"""
Live Dashboard Example

This script runs the EV powertrain simulation in real time on a background thread
and shows the history channels in a matplotlib window. The window owns the display;
the simulation thread hands it detached snapshots.

Keys: up/down change the commanded acceleration, space pauses/resumes,
e exports the history to CSV, r resets, q quits.
"""

import os
import sys

import matplotlib.pyplot as plt

# Add project root to Python path for imports
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ev_powertrain_sim import (
    Simulator, SimulationConfig, TickScheduler, SimulationRunner, SimulationError
)
from ev_powertrain_sim.utils.plotting import LiveHistoryPlot, set_plot_style

COMMAND_STEP = 0.1  # m/s² per key press
COMMAND_LIMIT = 1.5  # m/s²


def main():
    config_path = os.path.join(os.path.dirname(__file__), '..', 'configs', 'simulation.yaml')
    config = SimulationConfig(config_path) if os.path.exists(config_path) else SimulationConfig()

    simulator = Simulator.from_config(config)
    scheduler = TickScheduler(simulator, timing_mode=config.timing_mode,
                              nominal_step=config.nominal_step)
    runner = SimulationRunner(scheduler)

    set_plot_style('dark')
    plt.ion()
    plot = LiveHistoryPlot(config.history_capacity,
                           channels=['voltage', 'current', 'speed', 'temperature', 'soc'])
    plot.update(simulator.snapshot())

    state = {'quit': False}

    def on_key(event):
        try:
            if event.key == 'up':
                simulator.set_command(min(COMMAND_LIMIT, simulator.command + COMMAND_STEP))
            elif event.key == 'down':
                simulator.set_command(max(-COMMAND_LIMIT, simulator.command - COMMAND_STEP))
            elif event.key == ' ':
                simulator.toggle_pause()
            elif event.key == 'e':
                print(f"Data exported to {simulator.export(config.output_directory)}")
            elif event.key == 'r':
                simulator.reset()
                simulator.start()
            elif event.key == 'q':
                state['quit'] = True
        except SimulationError as e:
            print(f"Error: {e}")

    plot.fig.canvas.mpl_connect('key_press_event', on_key)
    plot.fig.canvas.mpl_connect('close_event', lambda event: state.update(quit=True))

    simulator.start()
    runner.start()
    try:
        while not state['quit']:
            snapshot = runner.poll()
            if snapshot is not None:
                plot.update(snapshot)
            plot.draw()
            plt.pause(1 / 30)
    except KeyboardInterrupt:
        print("\nSimulation stopped by user")
    finally:
        runner.stop()
        if not simulator.lifecycle.is_stopped:
            simulator.stop()
        plot.close()


if __name__ == "__main__":
    main()
