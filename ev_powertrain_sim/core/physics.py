"""
Physics engine module for EV powertrain simulation.

This module integrates the longitudinal vehicle dynamics, the traction motor model,
the battery energy bookkeeping with regenerative braking, and the battery thermal
model. The coupling between the sub-models is the heart of the simulation: battery
temperature derates efficiency, efficiency sets the energy drawn, and the energy
drawn heats the battery.

The engine is stateless. `PhysicsEngine.advance` maps an engine state, a parameter
set, a commanded acceleration and a time step to the next engine state.
"""

import math
import logging
from dataclasses import dataclass, fields
from typing import Dict, Tuple, Any

from ..exceptions import ConfigurationError
from ..utils.constants import (
    GRAVITY, SECONDS_PER_HOUR, KMH_TO_MS, MS_TO_KMH, KW_TO_W, KWH_TO_WH,
    RPM_TO_RAD_S, MIN_VEHICLE_SPEED, MAX_VEHICLE_SPEED,
    MOTOR_PEAK_EFFICIENCY, MOTOR_EFFICIENCY_DROOP, MOTOR_REFERENCE_RPM,
    DEFAULT_MIN_MOTOR_EFFICIENCY, DEFAULT_ANGULAR_VELOCITY_FLOOR, DEFAULT_WHEEL_RADIUS,
    MIN_STATE_OF_CHARGE, MAX_STATE_OF_CHARGE, MIN_BATTERY_TEMP, MAX_BATTERY_TEMP,
    DEFAULT_AMBIENT_TEMP, COOLING_COEFFICIENT, HEAT_INPUT_COEFFICIENT,
    DERATING_ONSET_TEMP, DERATING_PER_DEGREE, MIN_TEMPERATURE_EFFICIENCY,
    REGEN_SOC_CUTOFF, REGEN_SOC_TAPER, REGEN_TAPER_FACTOR, REGEN_RECOVERY_FRACTION,
    LOW_SOC_THRESHOLD, HIGH_SOC_THRESHOLD, LOW_SOC_VOLTAGE_FACTOR, HIGH_SOC_VOLTAGE_FACTOR,
    DEFAULT_MAX_STEP
)
from .drive_modes import get_drive_mode
from .parameters import SimulationParameters
from .state import EngineState

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("PhysicsEngine")

# Smallest denominator allowed for rated power and distance
_EPSILON = 1e-9


@dataclass(frozen=True)
class EngineConfig:
    """
    Numerical constants and optional sub-models of the physics engine.

    The switches select the model fidelity: with every switch off the engine is a
    plain dynamics and energy model; with every switch on it also tracks pack
    temperature, temperature derating and the pack's electrical channels.
    """

    max_step: float = DEFAULT_MAX_STEP                            # s
    wheel_radius: float = DEFAULT_WHEEL_RADIUS                    # m
    angular_velocity_floor: float = DEFAULT_ANGULAR_VELOCITY_FLOOR  # rad/s
    min_motor_efficiency: float = DEFAULT_MIN_MOTOR_EFFICIENCY
    thermal_model: bool = True
    temperature_derating: bool = True
    electrical_channels: bool = True

    def __post_init__(self):
        for name in ('max_step', 'wheel_radius', 'angular_velocity_floor'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) \
                    or not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"Engine setting '{name}' must be a positive number, got {value!r}")
        if not 0.0 < self.min_motor_efficiency <= 1.0:
            raise ConfigurationError(
                f"Engine setting 'min_motor_efficiency' must be in (0, 1], got {self.min_motor_efficiency!r}")
        for name in ('thermal_model', 'temperature_derating', 'electrical_channels'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"Engine setting '{name}' must be a boolean")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'EngineConfig':
        """
        Build an engine configuration from a mapping.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown engine settings: {', '.join(unknown)}")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def clamp(value: float, low: float, high: float) -> float:
    """Limit value to the closed interval [low, high]."""
    return max(low, min(high, value))


def calculate_resistive_forces(speed_ms: float, parameters: SimulationParameters) -> Tuple[float, float]:
    """
    Calculate the road load opposing the vehicle.

    Args:
        speed_ms: Vehicle speed in m/s
        parameters: Simulation parameters

    Returns:
        Tuple of (aerodynamic drag, rolling resistance) in N
    """
    drag = 0.5 * parameters.drag_coefficient * parameters.frontal_area * parameters.air_density * speed_ms ** 2
    rolling = parameters.rolling_resistance * parameters.vehicle_mass * GRAVITY
    return drag, rolling


def calculate_motor_rpm(speed_kmh: float, gear_ratio: float, wheel_radius: float) -> float:
    """
    Calculate motor speed from vehicle speed through a single reduction gear.

    Args:
        speed_kmh: Vehicle speed in km/h
        gear_ratio: Reduction ratio between motor and wheel
        wheel_radius: Wheel radius in m

    Returns:
        Motor speed in RPM
    """
    wheel_rpm = (speed_kmh * KMH_TO_MS * 60) / (2 * math.pi * wheel_radius)
    return max(0.0, wheel_rpm * gear_ratio)


def calculate_motor_efficiency(rpm: float, min_efficiency: float = DEFAULT_MIN_MOTOR_EFFICIENCY) -> float:
    """
    Motor efficiency, falling linearly with speed from its standstill peak.

    The linear fit goes negative at very high speed, so it is floored at
    min_efficiency.
    """
    efficiency = MOTOR_PEAK_EFFICIENCY * (1 - MOTOR_EFFICIENCY_DROOP * abs(rpm / MOTOR_REFERENCE_RPM))
    return max(min_efficiency, efficiency)


def calculate_motor_torque(available_power_kw: float, rpm: float, efficiency: float,
                           angular_velocity_floor: float = DEFAULT_ANGULAR_VELOCITY_FLOOR) -> float:
    """
    Torque the motor delivers at its available power.

    Args:
        available_power_kw: Rated power scaled by the drive mode, in kW
        rpm: Motor speed in RPM
        efficiency: Motor efficiency (> 0)
        angular_velocity_floor: Lower bound on angular velocity in rad/s

    Returns:
        Motor torque in Nm
    """
    angular_velocity = max(angular_velocity_floor, rpm * RPM_TO_RAD_S)
    return available_power_kw * KW_TO_W / (angular_velocity * efficiency)


def calculate_temperature_efficiency(battery_temp: float) -> float:
    """Pack efficiency derating above the onset temperature."""
    derating = max(0.0, (battery_temp - DERATING_ONSET_TEMP) * DERATING_PER_DEGREE)
    return max(MIN_TEMPERATURE_EFFICIENCY, 1.0 - derating)


def calculate_state_of_charge(energy_consumed: float, capacity: float) -> float:
    """State of charge in % for the energy drawn from a pack of the given capacity (kWh)."""
    soc = MAX_STATE_OF_CHARGE - energy_consumed / max(capacity, _EPSILON) * 100
    return clamp(soc, MIN_STATE_OF_CHARGE, MAX_STATE_OF_CHARGE)


def calculate_pack_voltage(nominal_voltage: float, soc: float) -> float:
    """Terminal voltage: sagging when nearly empty, raised when nearly full."""
    if soc < LOW_SOC_THRESHOLD:
        return nominal_voltage * LOW_SOC_VOLTAGE_FACTOR
    if soc > HIGH_SOC_THRESHOLD:
        return nominal_voltage * HIGH_SOC_VOLTAGE_FACTOR
    return nominal_voltage


def calculate_pack_current(motor_power_kw: float, command: float, motor_efficiency: float,
                           nominal_voltage: float) -> float:
    """
    Pack current for the commanded load at the nominal pack voltage.

    Args:
        motor_power_kw: Rated motor power in kW (no drive mode scaling)
        command: Commanded acceleration in m/s², before drive mode clamping
        motor_efficiency: Motor efficiency at the current rpm (> 0)
        nominal_voltage: Nominal battery voltage in V

    Returns:
        Current in A
    """
    demand = motor_power_kw * (0.5 + 0.5 * abs(command)) / motor_efficiency
    return demand * KW_TO_W / nominal_voltage


class PhysicsEngine:
    """
    Integrator for the EV powertrain.

    Advances the coupled vehicle, motor, battery and thermal models by one explicit
    Euler step. The engine holds no simulation state of its own, so one instance can
    be shared between simulators.
    """

    def __init__(self, config: EngineConfig = None):
        """
        Initialize the physics engine.

        Args:
            config: Engine configuration (defaults to EngineConfig())
        """
        self.config = config if config is not None else EngineConfig()

        logger.info(f"Physics engine initialized (max step: {self.config.max_step}s, "
                    f"thermal model: {self.config.thermal_model}, "
                    f"electrical channels: {self.config.electrical_channels})")

    def clamp_step(self, dt: float) -> float:
        """Limit a time step to the largest step the integrator accepts."""
        return min(dt, self.config.max_step)

    def advance(self, state: EngineState, parameters: SimulationParameters,
                command: float, dt: float) -> EngineState:
        """
        Advance the powertrain by one time step.

        Args:
            state: Engine state at the start of the step
            parameters: Parameter set, read once for the whole step
            command: Commanded acceleration in m/s² (clamped to the drive mode limit)
            dt: Time step in seconds (clamped to config.max_step)

        Returns:
            Engine state at the end of the step; the input state when dt is not positive
        """
        if not math.isfinite(dt) or dt <= 0:
            return state
        dt = self.clamp_step(dt)
        config = self.config

        # Drive mode limits
        mode = get_drive_mode(parameters.drive_mode)
        if not math.isfinite(command):
            command = 0.0
        acceleration = clamp(command, -mode.max_acceleration, mode.max_acceleration)

        # Vehicle dynamics
        speed_ms = state.speed * KMH_TO_MS
        drag, rolling = calculate_resistive_forces(speed_ms, parameters)
        net_force = parameters.vehicle_mass * acceleration - drag - rolling
        speed_ms += (net_force / parameters.vehicle_mass) * dt
        speed = clamp(speed_ms * MS_TO_KMH, MIN_VEHICLE_SPEED, MAX_VEHICLE_SPEED)

        # Motor
        available_power = parameters.motor_power * mode.power_factor
        rpm = calculate_motor_rpm(speed, parameters.gear_ratio, config.wheel_radius)
        motor_efficiency = calculate_motor_efficiency(rpm, config.min_motor_efficiency)
        torque = calculate_motor_torque(available_power, rpm, motor_efficiency,
                                        config.angular_velocity_floor)

        # Battery energy, derated by pack temperature
        if config.thermal_model and config.temperature_derating:
            temp_efficiency = calculate_temperature_efficiency(state.battery_temp)
        else:
            temp_efficiency = 1.0
        power_use = available_power * (0.5 + 0.5 * abs(acceleration)) / (motor_efficiency * temp_efficiency)
        energy_consumed = state.energy_consumed + power_use / SECONDS_PER_HOUR * dt
        soc = calculate_state_of_charge(energy_consumed, parameters.battery_capacity)

        # Regenerative braking
        if self.regen_active(acceleration, parameters, soc):
            soc_factor = REGEN_TAPER_FACTOR if soc > REGEN_SOC_TAPER else 1.0
            regen_power = parameters.regen_efficiency * power_use * REGEN_RECOVERY_FRACTION * soc_factor
            energy_consumed = max(0.0, energy_consumed - regen_power / SECONDS_PER_HOUR * dt)
            soc = calculate_state_of_charge(energy_consumed, parameters.battery_capacity)

        # Battery temperature
        if config.thermal_model:
            heat_input = (power_use / max(parameters.motor_power, _EPSILON)) * HEAT_INPUT_COEFFICIENT
            cooling = COOLING_COEFFICIENT * (state.battery_temp - DEFAULT_AMBIENT_TEMP)
            battery_temp = state.battery_temp + (heat_input - cooling) * dt / parameters.thermal_mass
            battery_temp = clamp(battery_temp, MIN_BATTERY_TEMP, MAX_BATTERY_TEMP)
        else:
            battery_temp = state.battery_temp

        # Distance and consumption per km
        distance = state.distance + speed / SECONDS_PER_HOUR * dt
        if distance > _EPSILON:
            energy_efficiency = energy_consumed * KWH_TO_WH / distance
        else:
            energy_efficiency = 0.0

        # Pack electrical channels
        if config.electrical_channels:
            pack_voltage = calculate_pack_voltage(parameters.battery_voltage, soc)
            pack_current = calculate_pack_current(parameters.motor_power, command, motor_efficiency,
                                                  parameters.battery_voltage)
        else:
            pack_voltage = parameters.battery_voltage
            pack_current = 0.0

        return EngineState(
            speed=speed,
            soc=soc,
            distance=distance,
            energy_consumed=energy_consumed,
            battery_temp=battery_temp,
            motor_torque=torque,
            motor_rpm=rpm,
            energy_efficiency=energy_efficiency,
            power_kw=power_use,
            pack_voltage=pack_voltage,
            pack_current=pack_current,
        )

    @staticmethod
    def regen_active(acceleration: float, parameters: SimulationParameters, soc: float) -> bool:
        """Regenerative braking recovers energy only when braking, enabled, and below the SoC cutoff."""
        return acceleration < 0 and parameters.regen_braking and soc < REGEN_SOC_CUTOFF
