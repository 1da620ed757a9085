"""
EV powertrain simulation.

A real-time model of an electric vehicle powertrain: longitudinal vehicle dynamics,
traction motor torque and efficiency, battery state of charge and temperature, and
regenerative braking, advanced one time step at a time with a rolling history of the
key channels for display and export.
"""

__version__ = '0.1.0'

from .exceptions import (
    SimulationError, ParameterError, UnknownDriveModeError,
    LifecycleError, ExportError, ConfigurationError
)
from .core import (
    DRIVE_MODES, DriveMode, get_drive_mode, available_drive_modes,
    SimulationParameters, EngineState,
    EngineConfig, PhysicsEngine,
    HistoryBuffers, HistoryView, HISTORY_CHANNELS,
    SimulationLifecycle,
    Simulator, SimulationSnapshot,
    TickScheduler, SimulationRunner,
    SimulationConfig
)
from .utils.constants import LifecycleState, TimingMode

__all__ = [
    # Errors
    'SimulationError', 'ParameterError', 'UnknownDriveModeError',
    'LifecycleError', 'ExportError', 'ConfigurationError',

    # Core
    'DRIVE_MODES', 'DriveMode', 'get_drive_mode', 'available_drive_modes',
    'SimulationParameters', 'EngineState',
    'EngineConfig', 'PhysicsEngine',
    'HistoryBuffers', 'HistoryView', 'HISTORY_CHANNELS',
    'SimulationLifecycle', 'LifecycleState',
    'Simulator', 'SimulationSnapshot',
    'TickScheduler', 'SimulationRunner', 'TimingMode',
    'SimulationConfig',
]
