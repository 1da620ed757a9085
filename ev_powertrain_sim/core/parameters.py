"""
Simulation parameters for EV powertrain simulation.

Parameters are an immutable value object. Updating a parameter produces a new,
fully validated object that replaces the previous one in a single assignment, so a
tick always sees one consistent parameter set.
"""

import dataclasses
from dataclasses import dataclass
from typing import Dict, Any

from ..exceptions import ParameterError
from ..utils.validation import validate_parameter, validate_flag, PARAMETER_RANGES
from .drive_modes import get_drive_mode, DEFAULT_DRIVE_MODE


@dataclass(frozen=True)
class SimulationParameters:
    """Externally supplied vehicle, battery and motor parameters."""

    battery_voltage: float = 400.0       # V
    battery_capacity: float = 60.0       # kWh
    motor_power: float = 150.0           # kW
    vehicle_mass: float = 1500.0         # kg
    drag_coefficient: float = 0.3
    frontal_area: float = 2.5            # m²
    air_density: float = 1.225           # kg/m³
    rolling_resistance: float = 0.01
    gear_ratio: float = 8.0
    thermal_mass: float = 1000.0         # J/°C
    regen_efficiency: float = 0.5        # 0.0-1.0
    regen_braking: bool = True
    drive_mode: str = DEFAULT_DRIVE_MODE

    def __post_init__(self):
        for name in PARAMETER_RANGES:
            object.__setattr__(self, name, validate_parameter(name, getattr(self, name)))
        validate_flag('regen_braking', self.regen_braking)
        get_drive_mode(self.drive_mode)

    @classmethod
    def names(cls):
        """Names of all parameters, in declaration order."""
        return tuple(f.name for f in dataclasses.fields(cls))

    def with_value(self, name: str, value: Any) -> 'SimulationParameters':
        """
        Return a copy with one parameter replaced.

        Raises:
            ParameterError: If the name is unknown or the value is invalid
        """
        return self.with_values(**{name: value})

    def with_values(self, **values) -> 'SimulationParameters':
        """
        Return a copy with several parameters replaced. Either all values are
        applied or none is.

        Raises:
            ParameterError: If any name is unknown or any value is invalid
        """
        unknown = [name for name in values if name not in self.names()]
        if unknown:
            raise ParameterError(unknown[0], values[unknown[0]],
                                 f"Unknown parameter: {unknown[0]!r}")
        return dataclasses.replace(self, **values)

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'SimulationParameters':
        """Build parameters from a mapping, using defaults for missing keys."""
        return cls().with_values(**values)
