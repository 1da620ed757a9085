"""
Plotting utilities for EV powertrain simulation.

This module renders the simulation history as stacked line charts, one panel per
channel, and formats the engine state as a status panel. `LiveHistoryPlot`
redraws an open figure from snapshots and is meant to be fed by the main thread
that owns the matplotlib window.
"""

import os
import logging
from typing import Dict, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec

from ..core.history import HISTORY_CHANNELS, CHANNEL_NAMES

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Plotting")


# Default style settings for plots
DEFAULT_FIG_SIZE = (9, 10)
DEFAULT_DPI = 150
DEFAULT_LINE_WIDTH = 2
DEFAULT_FONT_SIZE = 10
DEFAULT_TITLE_SIZE = 14
DEFAULT_LABEL_SIZE = 11
DEFAULT_GRID_ALPHA = 0.3
DEFAULT_SAVE_FORMAT = 'png'

# Channel colours, matching the oscilloscope-style display
CHANNEL_COLORS = {
    'voltage': '#d62728',
    'current': '#2ca02c',
    'speed': '#1f77b4',
    'temperature': '#bcbd22',
    'soc': '#9467bd',
    'torque': '#ff7f0e',
    'efficiency': '#8c564b',
}

# Channels shown when none are selected
DEFAULT_CHANNELS = ('voltage', 'current', 'speed', 'temperature')

# Status panel rows: (label, EngineState field, unit)
STATUS_FIELDS = (
    ('Speed', 'speed', 'km/h'),
    ('State of Charge', 'soc', '%'),
    ('Distance', 'distance', 'km'),
    ('Energy Consumed', 'energy_consumed', 'kWh'),
    ('Motor Torque', 'motor_torque', 'Nm'),
    ('Motor RPM', 'motor_rpm', 'RPM'),
    ('Battery Temp', 'battery_temp', '°C'),
    ('Efficiency', 'energy_efficiency', 'Wh/km'),
)

_LABELS = {channel.name: channel.label for channel in HISTORY_CHANNELS}


#------------------------------------------------------------------------------
# Utility functions
#------------------------------------------------------------------------------

_STYLE_SHEETS = {
    'default': 'default',
    'clean': 'seaborn-v0_8-whitegrid',
    'dark': 'dark_background',
}


def set_plot_style(style: str = 'default') -> None:
    """
    Apply a style sheet and the shared font, line and grid sizes.

    Args:
        style: 'default', 'clean' (white grid) or 'dark' (for the live dashboard)
    """
    if style not in _STYLE_SHEETS:
        logger.warning(f"Unknown plot style '{style}', falling back to default")
    plt.style.use(_STYLE_SHEETS.get(style, 'default'))

    plt.rcParams.update({
        'font.size': DEFAULT_FONT_SIZE,
        'axes.titlesize': DEFAULT_TITLE_SIZE,
        'axes.labelsize': DEFAULT_LABEL_SIZE,
        'lines.linewidth': DEFAULT_LINE_WIDTH,
        'grid.alpha': DEFAULT_GRID_ALPHA,
    })


def save_plot(fig: plt.Figure, filename: str, directory: Optional[str] = None,
              format: str = DEFAULT_SAVE_FORMAT, dpi: int = DEFAULT_DPI) -> str:
    """
    Write a figure next to the CSV exports.

    Args:
        fig: Figure to write
        filename: File name; any extension is replaced by the format's
        directory: Output directory, created if missing
        format: Image format passed to matplotlib
        dpi: Resolution of raster formats

    Returns:
        Path of the written image
    """
    stem = os.path.splitext(filename)[0]
    if directory:
        os.makedirs(directory, exist_ok=True)
        stem = os.path.join(directory, stem)
    filepath = f"{stem}.{format}"

    fig.savefig(filepath, format=format, dpi=dpi, bbox_inches='tight')
    logger.info(f"Plot written to {filepath}")
    return filepath


def _resolve_channels(channels: Optional[Sequence[str]]) -> Sequence[str]:
    if channels is None:
        return DEFAULT_CHANNELS
    unknown = [name for name in channels if name not in CHANNEL_NAMES]
    if unknown:
        raise ValueError(f"Unknown history channels: {', '.join(unknown)}")
    if not channels:
        raise ValueError("At least one channel must be selected")
    return channels


def format_status(state) -> str:
    """
    Format an engine state as a status panel, two decimals per value.

    Args:
        state: EngineState instance

    Returns:
        Multi-line status text
    """
    lines = []
    for label, field_name, unit in STATUS_FIELDS:
        lines.append(f"{label + ':':<18}{getattr(state, field_name):>10.2f} {unit}")
    return "\n".join(lines)


#------------------------------------------------------------------------------
# History plotting
#------------------------------------------------------------------------------

def plot_history(history, channels: Optional[Sequence[str]] = None,
                 title: Optional[str] = None,
                 save_path: Optional[str] = None) -> plt.Figure:
    """
    Plot history channels as stacked panels, oldest sample on the left.

    Args:
        history: HistoryView (chronological)
        channels: Channel names to show (voltage, current, speed and temperature if None)
        title: Plot title
        save_path: Path to save plot (if None, not saved)

    Returns:
        Matplotlib figure
    """
    channels = _resolve_channels(channels)

    fig = plt.figure(figsize=DEFAULT_FIG_SIZE)
    gs = gridspec.GridSpec(len(channels), 1, hspace=0.35)
    samples = np.arange(len(history))

    axes = []
    for i, name in enumerate(channels):
        ax = fig.add_subplot(gs[i], sharex=axes[0] if axes else None)
        ax.plot(samples, history.channel(name), color=CHANNEL_COLORS[name],
                linewidth=DEFAULT_LINE_WIDTH)
        ax.set_ylabel(_LABELS[name])
        ax.grid(True, alpha=DEFAULT_GRID_ALPHA)
        axes.append(ax)

    axes[-1].set_xlabel('Sample (oldest → newest)')
    fig.suptitle(title or 'EV Powertrain Simulation', fontsize=DEFAULT_TITLE_SIZE)

    if save_path:
        plt.savefig(save_path, dpi=DEFAULT_DPI, bbox_inches='tight')
        logger.info(f"History plot saved to {save_path}")

    return fig


class LiveHistoryPlot:
    """
    Interactive history chart with a status panel, redrawn from snapshots.

    Only the thread that owns the figure may call `update`; snapshots produced on
    another thread arrive through `SimulationRunner.poll`.
    """

    def __init__(self, capacity: int, channels: Optional[Sequence[str]] = None):
        """
        Create the figure.

        Args:
            capacity: Number of samples per channel
            channels: Channel names to show
        """
        self.channels = list(_resolve_channels(channels))
        self.fig = plt.figure(figsize=(14, 9))
        gs = gridspec.GridSpec(len(self.channels), 2, width_ratios=[1, 3],
                               wspace=0.3, hspace=0.35)

        status_ax = self.fig.add_subplot(gs[:, 0])
        status_ax.axis('off')
        self.status_text = status_ax.text(0.02, 0.98, "", va='top', ha='left',
                                          fontsize=DEFAULT_FONT_SIZE, family='monospace')

        samples = np.arange(capacity)
        self.axes: Dict[str, plt.Axes] = {}
        self.lines = {}
        for i, name in enumerate(self.channels):
            ax = self.fig.add_subplot(gs[i, 1])
            line, = ax.plot(samples, np.zeros(capacity), color=CHANNEL_COLORS[name],
                            linewidth=DEFAULT_LINE_WIDTH)
            ax.set_ylabel(_LABELS[name])
            ax.grid(True, alpha=DEFAULT_GRID_ALPHA)
            self.axes[name] = ax
            self.lines[name] = line

    def update(self, snapshot) -> None:
        """Redraw channels and status from a snapshot."""
        for name in self.channels:
            values = snapshot.history.channel(name)
            self.lines[name].set_ydata(values)
            ax = self.axes[name]
            ax.relim()
            ax.autoscale_view(scalex=False)

        header = (f"Lifecycle: {snapshot.lifecycle.name.title()}\n"
                  f"Mode:      {snapshot.parameters.drive_mode}\n"
                  f"Command:   {snapshot.command:+.2f} m/s²\n"
                  f"Time:      {snapshot.elapsed_time:.1f} s\n\n")
        self.status_text.set_text(header + format_status(snapshot.state))

    def draw(self) -> None:
        self.fig.canvas.draw_idle()
        self.fig.canvas.flush_events()

    def close(self) -> None:
        plt.close(self.fig)
