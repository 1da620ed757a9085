"""
Exception types raised by the EV powertrain simulation.

Every error is recoverable: the simulator is left in its last valid state.
"""


class SimulationError(Exception):
    """Base class for all simulation errors."""


class ParameterError(SimulationError, ValueError):
    """A parameter value was rejected; the previous value is retained."""

    def __init__(self, name: str, value, message: str):
        super().__init__(message)
        self.name = name
        self.value = value


class UnknownDriveModeError(ParameterError):
    """The requested drive mode is not in the drive mode table."""

    def __init__(self, mode):
        super().__init__('drive_mode', mode, f"Unknown drive mode: {mode!r}")


class LifecycleError(SimulationError):
    """A lifecycle command is not valid in the current state."""


class ExportError(SimulationError):
    """Writing the history export failed."""


class ConfigurationError(SimulationError):
    """A configuration file could not be interpreted."""
