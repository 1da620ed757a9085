"""
Constants module for EV powertrain simulation.

This module provides physical constants, unit conversion factors, and reference values
used throughout the electric vehicle powertrain simulation.
"""

import numpy as np
from enum import Enum, auto

# Physical constants
GRAVITY = 9.81  # m/s², standard gravity
AIR_DENSITY_SEA_LEVEL = 1.225  # kg/m³, air density at sea level (15°C, 1013.25 hPa)
SECONDS_PER_HOUR = 3600.0

# Unit conversion factors
KMH_TO_MS = 1.0 / 3.6  # Convert km/h to m/s
MS_TO_KMH = 3.6  # Convert m/s to km/h
KW_TO_W = 1000.0  # Convert kilowatts to watts
KWH_TO_WH = 1000.0  # Convert kilowatt-hours to watt-hours
RPM_TO_RAD_S = 2.0 * np.pi / 60.0  # Convert rev/min to rad/s
RAD_S_TO_RPM = 60.0 / (2.0 * np.pi)  # Convert rad/s to rev/min

# Vehicle limits
MAX_VEHICLE_SPEED = 180.0  # km/h, speed clamp of the longitudinal model
MIN_VEHICLE_SPEED = 0.0  # km/h, the model does not reverse
DEFAULT_WHEEL_RADIUS = 0.4  # m

# Motor model
MOTOR_PEAK_EFFICIENCY = 0.85  # efficiency at standstill
MOTOR_EFFICIENCY_DROOP = 0.1  # fractional loss per MOTOR_REFERENCE_RPM
MOTOR_REFERENCE_RPM = 9000.0  # RPM
DEFAULT_MIN_MOTOR_EFFICIENCY = 0.05  # floor keeping the torque/power divisions finite
DEFAULT_ANGULAR_VELOCITY_FLOOR = 0.1  # rad/s, torque denominator floor near standstill

# Battery model
MIN_STATE_OF_CHARGE = 0.0  # %
MAX_STATE_OF_CHARGE = 100.0  # %
MIN_BATTERY_TEMP = 10.0  # °C
MAX_BATTERY_TEMP = 70.0  # °C
DEFAULT_BATTERY_TEMP = 25.0  # °C, initial pack temperature
DEFAULT_AMBIENT_TEMP = 25.0  # °C, temperature the pack cools towards
COOLING_COEFFICIENT = 0.05  # heat flow per °C above ambient
HEAT_INPUT_COEFFICIENT = 0.1  # heat flow per unit of relative power draw
DERATING_ONSET_TEMP = 40.0  # °C, temperature above which the pack loses efficiency
DERATING_PER_DEGREE = 0.01  # efficiency lost per °C above onset
MIN_TEMPERATURE_EFFICIENCY = 0.05  # floor for the derating factor

# Regenerative braking
REGEN_SOC_CUTOFF = 95.0  # %, no regen at or above this state of charge
REGEN_SOC_TAPER = 80.0  # %, regen halved above this state of charge
REGEN_TAPER_FACTOR = 0.5
REGEN_RECOVERY_FRACTION = 0.5  # fraction of drive power available for recovery

# Pack terminal voltage
LOW_SOC_THRESHOLD = 20.0  # %
HIGH_SOC_THRESHOLD = 80.0  # %
LOW_SOC_VOLTAGE_FACTOR = 0.95
HIGH_SOC_VOLTAGE_FACTOR = 1.05

# Simulation timing
DEFAULT_NOMINAL_STEP = 0.01667  # s, ~60 FPS frame period
DEFAULT_MAX_STEP = 0.1  # s, largest step the integrator accepts
DEFAULT_HISTORY_CAPACITY = 200  # samples per history channel


class TimingMode(Enum):
    """How the tick scheduler derives the time step."""
    WALL_CLOCK = auto()  # Delta between successive ticks on a monotonic clock
    FIXED = auto()       # Constant nominal period


class LifecycleState(Enum):
    """Lifecycle states of the simulation."""
    STOPPED = auto()
    RUNNING = auto()
    PAUSED = auto()
