"""
Drive mode table for EV powertrain simulation.

A drive mode constrains the maximum commanded acceleration and scales the rated
motor power. The table is built once at import and is read-only afterwards.
"""

from types import MappingProxyType
from typing import NamedTuple, Tuple

from ..exceptions import UnknownDriveModeError


class DriveMode(NamedTuple):
    """Limits applied by a drive mode."""
    max_acceleration: float  # m/s²
    power_factor: float      # multiplier on rated motor power


DRIVE_MODES = MappingProxyType({
    'Eco': DriveMode(max_acceleration=0.5, power_factor=0.7),
    'Normal': DriveMode(max_acceleration=1.0, power_factor=1.0),
    'Sport': DriveMode(max_acceleration=1.5, power_factor=1.3),
})

DEFAULT_DRIVE_MODE = 'Normal'


def get_drive_mode(name: str) -> DriveMode:
    """
    Look up a drive mode by name.

    Args:
        name: Drive mode identifier ('Eco', 'Normal' or 'Sport')

    Returns:
        DriveMode with the mode's limits

    Raises:
        UnknownDriveModeError: If the name is not in the table
    """
    try:
        return DRIVE_MODES[name]
    except (KeyError, TypeError):
        raise UnknownDriveModeError(name) from None


def available_drive_modes() -> Tuple[str, ...]:
    """Names of all drive modes, in table order."""
    return tuple(DRIVE_MODES)
