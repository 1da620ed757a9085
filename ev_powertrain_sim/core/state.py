"""
Engine state for EV powertrain simulation.
"""

import dataclasses
from dataclasses import dataclass
from typing import Dict

from ..utils.constants import DEFAULT_BATTERY_TEMP, MAX_STATE_OF_CHARGE


@dataclass(frozen=True)
class EngineState:
    """
    Immutable state of the powertrain after a tick.

    Only the physics engine produces new states; everything else reads them.
    """

    speed: float = 0.0                       # km/h
    soc: float = MAX_STATE_OF_CHARGE         # %
    distance: float = 0.0                    # km
    energy_consumed: float = 0.0             # kWh
    battery_temp: float = DEFAULT_BATTERY_TEMP  # °C
    motor_torque: float = 0.0                # Nm
    motor_rpm: float = 0.0                   # RPM
    energy_efficiency: float = 0.0           # Wh/km
    power_kw: float = 0.0                    # kW drawn from the pack this tick
    pack_voltage: float = 0.0                # V at the terminals
    pack_current: float = 0.0                # A

    @classmethod
    def initial(cls, parameters) -> 'EngineState':
        """Default state for a parameter set; the pack sits at its nominal voltage."""
        return cls(pack_voltage=parameters.battery_voltage)

    def to_dict(self) -> Dict[str, float]:
        return dataclasses.asdict(self)
