"""
Validation utilities for EV powertrain simulation.

This module provides the declared valid ranges of the simulation parameters and
functions for checking values against them, plus sanity checks on engine state
that are used to verify the simulation stays within its physical bounds.
"""

import math
import numbers
import logging
from typing import Dict, Tuple, Optional, Any

from ..exceptions import ParameterError
from ..utils.constants import (
    MIN_VEHICLE_SPEED, MAX_VEHICLE_SPEED,
    MIN_STATE_OF_CHARGE, MAX_STATE_OF_CHARGE,
    MIN_BATTERY_TEMP, MAX_BATTERY_TEMP
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Validation")


# Declared valid ranges of the numeric simulation parameters
PARAMETER_RANGES = {
    'battery_voltage': (100.0, 1000.0),     # V
    'battery_capacity': (10.0, 200.0),      # kWh
    'motor_power': (50.0, 500.0),           # kW
    'vehicle_mass': (1000.0, 3000.0),       # kg
    'drag_coefficient': (0.1, 0.5),         # -
    'frontal_area': (1.5, 3.5),             # m²
    'air_density': (1.0, 1.5),              # kg/m³
    'rolling_resistance': (0.005, 0.02),    # -
    'gear_ratio': (4.0, 12.0),              # -
    'thermal_mass': (500.0, 2000.0),        # J/°C
    'regen_efficiency': (0.0, 1.0),         # fraction
}

# Physical bounds every reachable engine state must respect
STATE_BOUNDS = {
    'speed': (MIN_VEHICLE_SPEED, MAX_VEHICLE_SPEED),
    'soc': (MIN_STATE_OF_CHARGE, MAX_STATE_OF_CHARGE),
    'battery_temp': (MIN_BATTERY_TEMP, MAX_BATTERY_TEMP),
    'distance': (0.0, math.inf),
    'motor_rpm': (0.0, math.inf),
}


def validate_in_range(value: float, metric_name: str,
                      custom_range: Optional[Tuple[float, float]] = None) -> Dict:
    """
    Validate if a value is within the declared range for a parameter.

    Args:
        value: Value to validate
        metric_name: Name of the parameter to check
        custom_range: Optional custom range override

    Returns:
        Dictionary with validation results
    """
    if custom_range:
        expected_range = custom_range
    elif metric_name in PARAMETER_RANGES:
        expected_range = PARAMETER_RANGES[metric_name]
    else:
        logger.warning(f"No declared range found for parameter: {metric_name}")
        return {
            'status': 'unknown',
            'metric': metric_name,
            'value': value,
            'expected_range': None,
            'message': f"No declared range for {metric_name}"
        }

    min_value, max_value = expected_range

    if not is_real_number(value):
        return {
            'status': 'invalid',
            'metric': metric_name,
            'value': value,
            'expected_range': expected_range,
            'message': f"{metric_name} must be a finite number, got {value!r}"
        }
    elif value < min_value:
        return {
            'status': 'below_range',
            'metric': metric_name,
            'value': value,
            'expected_range': expected_range,
            'message': f"{metric_name} ({value:.3f}) is below minimum ({min_value:.3f})"
        }
    elif value > max_value:
        return {
            'status': 'above_range',
            'metric': metric_name,
            'value': value,
            'expected_range': expected_range,
            'message': f"{metric_name} ({value:.3f}) is above maximum ({max_value:.3f})"
        }
    else:
        return {
            'status': 'valid',
            'metric': metric_name,
            'value': value,
            'expected_range': expected_range,
            'message': f"{metric_name} ({value:.3f}) is within range ({min_value:.3f} - {max_value:.3f})"
        }


def is_real_number(value: Any) -> bool:
    """Return True for finite ints/floats. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


def validate_parameter(name: str, value: Any) -> float:
    """
    Check a numeric parameter against its declared range.

    Args:
        name: Parameter name (key of PARAMETER_RANGES)
        value: Candidate value

    Returns:
        The value as a float

    Raises:
        ParameterError: If the parameter is unknown or the value is out of range
    """
    if name not in PARAMETER_RANGES:
        raise ParameterError(name, value, f"Unknown numeric parameter: {name!r}")

    result = validate_in_range(value, name)
    if result['status'] != 'valid':
        raise ParameterError(name, value, result['message'])

    return float(value)


def validate_flag(name: str, value: Any) -> bool:
    """
    Check a boolean parameter.

    Raises:
        ParameterError: If the value is not a bool
    """
    if not isinstance(value, bool):
        raise ParameterError(name, value, f"{name} must be a boolean, got {value!r}")
    return value


def check_state_bounds(state) -> Dict[str, Dict]:
    """
    Check an engine state against its physical bounds.

    Args:
        state: EngineState instance

    Returns:
        Dictionary of violations keyed by field name (empty when the state is valid)
    """
    violations = {}

    for field_name, (low, high) in STATE_BOUNDS.items():
        value = getattr(state, field_name)
        if not math.isfinite(value) or value < low or value > high:
            violations[field_name] = {
                'value': value,
                'expected_range': (low, high),
            }

    for field_name in ('energy_consumed', 'motor_torque', 'energy_efficiency',
                       'power_kw', 'pack_voltage', 'pack_current'):
        value = getattr(state, field_name)
        if not math.isfinite(value):
            violations[field_name] = {'value': value, 'expected_range': None}

    return violations
