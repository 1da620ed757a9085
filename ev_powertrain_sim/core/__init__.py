"""
Core module for EV powertrain simulation.

This module provides the simulation engine: the drive mode table, the parameter set,
the physics engine, the history buffers, the lifecycle state machine, the tick
scheduler and the simulator facade tying them together.
"""

from .drive_modes import DRIVE_MODES, DriveMode, get_drive_mode, available_drive_modes
from .parameters import SimulationParameters
from .state import EngineState
from .physics import EngineConfig, PhysicsEngine
from .history import HistoryBuffers, HistoryView, HistorySample, HISTORY_CHANNELS, CHANNEL_NAMES
from .lifecycle import SimulationLifecycle
from .simulator import Simulator, SimulationSnapshot
from .scheduler import TickScheduler, SimulationRunner
from .config import SimulationConfig

__all__ = [
    'DRIVE_MODES', 'DriveMode', 'get_drive_mode', 'available_drive_modes',
    'SimulationParameters', 'EngineState',
    'EngineConfig', 'PhysicsEngine',
    'HistoryBuffers', 'HistoryView', 'HistorySample', 'HISTORY_CHANNELS', 'CHANNEL_NAMES',
    'SimulationLifecycle',
    'Simulator', 'SimulationSnapshot',
    'TickScheduler', 'SimulationRunner',
    'SimulationConfig',
]
