"""
Utility modules for EV powertrain simulation.

This package provides constants, parameter validation, CSV export and plotting used
throughout the EV powertrain simulation. The plotting module imports matplotlib and
is not imported here.
"""

from .constants import (
    GRAVITY, AIR_DENSITY_SEA_LEVEL, SECONDS_PER_HOUR,
    KMH_TO_MS, MS_TO_KMH, KW_TO_W, KWH_TO_WH, RPM_TO_RAD_S, RAD_S_TO_RPM,
    DEFAULT_NOMINAL_STEP, DEFAULT_MAX_STEP, DEFAULT_HISTORY_CAPACITY,
    TimingMode, LifecycleState
)

from .validation import (
    PARAMETER_RANGES, STATE_BOUNDS,
    validate_in_range, validate_parameter, validate_flag,
    is_real_number, check_state_bounds
)

__all__ = [
    'GRAVITY', 'AIR_DENSITY_SEA_LEVEL', 'SECONDS_PER_HOUR',
    'KMH_TO_MS', 'MS_TO_KMH', 'KW_TO_W', 'KWH_TO_WH', 'RPM_TO_RAD_S', 'RAD_S_TO_RPM',
    'DEFAULT_NOMINAL_STEP', 'DEFAULT_MAX_STEP', 'DEFAULT_HISTORY_CAPACITY',
    'TimingMode', 'LifecycleState',
    'PARAMETER_RANGES', 'STATE_BOUNDS',
    'validate_in_range', 'validate_parameter', 'validate_flag',
    'is_real_number', 'check_state_bounds',
]
