from __future__ import annotations

import math
import random

import pytest

from ev_powertrain_sim import (
    ConfigurationError, EngineConfig, EngineState, PhysicsEngine, SimulationParameters,
)
from ev_powertrain_sim.core.physics import (
    calculate_motor_efficiency,
    calculate_motor_rpm,
    calculate_motor_torque,
    calculate_pack_current,
    calculate_pack_voltage,
    calculate_resistive_forces,
    calculate_state_of_charge,
    calculate_temperature_efficiency,
)
from ev_powertrain_sim.utils.validation import check_state_bounds


def _braking_state(soc: float, capacity: float = 60.0) -> EngineState:
    return EngineState(
        speed=50.0,
        soc=soc,
        energy_consumed=(100.0 - soc) / 100.0 * capacity,
        distance=1.0,
        pack_voltage=400.0,
    )


def test_acceleration_from_rest(long_step_engine, parameters) -> None:
    state = long_step_engine.advance(EngineState.initial(parameters), parameters, 1.0, 1.0)

    # (1500 * 1.0 - 0.01 * 1500 * 9.81) / 1500 m/s² for one second
    assert state.speed == pytest.approx(3.24684, abs=1e-4)
    assert state.distance == pytest.approx(3.24684 / 3600, rel=1e-6)
    assert state.motor_rpm > 0
    assert state.energy_consumed > 0
    assert state.soc < 100.0


def test_command_is_clamped_to_drive_mode(long_step_engine) -> None:
    eco = SimulationParameters(drive_mode="Eco")
    state = long_step_engine.advance(EngineState.initial(eco), eco, 5.0, 1.0)
    assert state.speed == pytest.approx(1.44684, abs=1e-4)


def test_standstill_stays_at_rest_and_draws_power(long_step_engine, parameters) -> None:
    state = long_step_engine.advance(EngineState.initial(parameters), parameters, 0.0, 1.0)

    assert state.speed == 0.0
    assert state.distance == 0.0
    assert state.energy_efficiency == 0.0
    assert state.power_kw == pytest.approx(150.0 * 0.5 / 0.85)
    assert state.energy_consumed == pytest.approx(state.power_kw / 3600)
    # Angular velocity floor: 150 kW / (0.1 rad/s * 0.85)
    assert state.motor_torque == pytest.approx(150_000 / (0.1 * 0.85))
    assert state.battery_temp > 25.0


def test_time_step_is_clamped(engine, parameters) -> None:
    initial = EngineState.initial(parameters)
    long = engine.advance(initial, parameters, 1.0, 5.0)
    short = engine.advance(initial, parameters, 1.0, 0.1)
    assert long == short


@pytest.mark.parametrize("dt", [0.0, -0.5, math.nan, math.inf])
def test_non_positive_step_returns_same_state(engine, parameters, dt) -> None:
    state = EngineState.initial(parameters)
    assert engine.advance(state, parameters, 1.0, dt) is state


def test_non_finite_command_is_treated_as_zero(long_step_engine, parameters) -> None:
    state = EngineState.initial(parameters)
    assert long_step_engine.advance(state, parameters, math.nan, 1.0) == \
        long_step_engine.advance(state, parameters, 0.0, 1.0)


def test_regen_recovers_energy_while_braking(long_step_engine, parameters) -> None:
    state = _braking_state(soc=70.0)
    with_regen = long_step_engine.advance(state, parameters, -1.0, 1.0)
    without = long_step_engine.advance(state, parameters.with_value("regen_braking", False), -1.0, 1.0)

    recovered = 0.5 * without.power_kw * 0.5 / 3600
    assert with_regen.energy_consumed == pytest.approx(without.energy_consumed - recovered)
    assert with_regen.soc > without.soc


def test_regen_is_tapered_above_80_percent(long_step_engine, parameters) -> None:
    state = _braking_state(soc=90.0)
    with_regen = long_step_engine.advance(state, parameters, -1.0, 1.0)
    without = long_step_engine.advance(state, parameters.with_value("regen_braking", False), -1.0, 1.0)

    recovered = 0.5 * without.power_kw * 0.5 * 0.5 / 3600
    assert with_regen.energy_consumed == pytest.approx(without.energy_consumed - recovered)


def test_no_regen_near_full_charge(long_step_engine, parameters) -> None:
    state = _braking_state(soc=96.0)
    with_regen = long_step_engine.advance(state, parameters, -1.0, 1.0)
    without = long_step_engine.advance(state, parameters.with_value("regen_braking", False), -1.0, 1.0)
    assert with_regen.energy_consumed == pytest.approx(without.energy_consumed)


def test_no_regen_when_not_braking(long_step_engine, parameters) -> None:
    state = _braking_state(soc=70.0)
    coasting = long_step_engine.advance(state, parameters, 0.0, 1.0)
    assert coasting.energy_consumed == pytest.approx(state.energy_consumed + coasting.power_kw / 3600)


def test_regen_never_drives_energy_negative(long_step_engine) -> None:
    parameters = SimulationParameters(regen_efficiency=1.0)
    state = EngineState(speed=50.0, soc=70.0, energy_consumed=0.0, pack_voltage=400.0)
    result = long_step_engine.advance(state, parameters, -1.0, 1.0)
    assert result.energy_consumed >= 0.0
    assert result.soc <= 100.0


def test_hot_pack_draws_more_power(long_step_engine, parameters) -> None:
    cool = long_step_engine.advance(EngineState(speed=30.0, battery_temp=25.0), parameters, 1.0, 1.0)
    hot = long_step_engine.advance(EngineState(speed=30.0, battery_temp=50.0), parameters, 1.0, 1.0)
    assert hot.power_kw / cool.power_kw == pytest.approx(1 / 0.9)


def test_thermal_model_disabled_holds_temperature() -> None:
    engine = PhysicsEngine(EngineConfig(max_step=1.0, thermal_model=False))
    parameters = SimulationParameters()
    state = EngineState(speed=30.0, battery_temp=50.0)

    result = engine.advance(state, parameters, 1.0, 1.0)
    reference = PhysicsEngine(EngineConfig(max_step=1.0)).advance(
        EngineState(speed=30.0, battery_temp=25.0), parameters, 1.0, 1.0)

    assert result.battery_temp == 50.0
    assert result.power_kw == pytest.approx(reference.power_kw)


def test_electrical_channels(long_step_engine, parameters) -> None:
    state = long_step_engine.advance(EngineState.initial(parameters), parameters, 1.0, 1.0)
    assert state.pack_voltage == pytest.approx(420.0)
    # 150 kW at 0.5 + 0.5 * 1.0 over the motor efficiency at 172 rpm, on the 400 V nominal pack
    assert state.pack_current == pytest.approx(442.02, abs=0.01)


def test_pack_current_follows_rated_power_and_command(long_step_engine) -> None:
    eco = SimulationParameters(drive_mode="Eco")
    state = long_step_engine.advance(EngineState.initial(eco), eco, 2.0, 1.0)
    efficiency = calculate_motor_efficiency(state.motor_rpm)

    assert state.pack_current == pytest.approx(150.0 * 1.5 / efficiency * 1000 / 400.0)
    assert state.pack_current != pytest.approx(state.power_kw * 1000 / state.pack_voltage)


def test_pack_current_helper() -> None:
    assert calculate_pack_current(100.0, -1.0, 0.8, 500.0) == pytest.approx(250.0)
    assert calculate_pack_current(100.0, 0.0, 0.5, 400.0) == pytest.approx(250.0)


def test_electrical_channels_disabled(parameters) -> None:
    engine = PhysicsEngine(EngineConfig(electrical_channels=False))
    state = engine.advance(EngineState.initial(parameters), parameters, 1.0, 0.1)
    assert state.pack_voltage == 400.0
    assert state.pack_current == 0.0


def test_state_of_charge_floors_at_zero(long_step_engine) -> None:
    parameters = SimulationParameters(battery_capacity=10.0, motor_power=500.0, drive_mode="Sport")
    state = EngineState.initial(parameters)
    for _ in range(200):
        state = long_step_engine.advance(state, parameters, 1.5, 1.0)

    assert state.soc == 0.0
    assert state.pack_voltage == pytest.approx(380.0)
    assert not check_state_bounds(state)


def test_random_commands_stay_within_bounds(engine) -> None:
    rng = random.Random(42)
    parameters = SimulationParameters(drive_mode="Sport", motor_power=500.0, thermal_mass=500.0)
    state = EngineState.initial(parameters)

    for _ in range(5000):
        state = engine.advance(state, parameters, rng.uniform(-5.0, 5.0), rng.uniform(0.0, 0.2))
        assert not check_state_bounds(state)
        assert state.energy_consumed >= 0.0


def test_engine_config_validation() -> None:
    with pytest.raises(ConfigurationError):
        EngineConfig(max_step=0.0)
    with pytest.raises(ConfigurationError):
        EngineConfig(min_motor_efficiency=1.5)
    with pytest.raises(ConfigurationError):
        EngineConfig(thermal_model="yes")
    with pytest.raises(ConfigurationError, match="Unknown engine settings"):
        EngineConfig.from_dict({"max_stepp": 0.1})
    assert EngineConfig.from_dict(EngineConfig().to_dict()) == EngineConfig()


def test_motor_rpm() -> None:
    assert calculate_motor_rpm(36.0, 8.0, 0.4) == pytest.approx(1909.86, abs=0.01)
    assert calculate_motor_rpm(0.0, 8.0, 0.4) == 0.0


def test_motor_efficiency() -> None:
    assert calculate_motor_efficiency(0.0) == pytest.approx(0.85)
    assert calculate_motor_efficiency(9000.0) == pytest.approx(0.765)
    assert calculate_motor_efficiency(1e7) == 0.05


def test_motor_torque_uses_angular_velocity_floor() -> None:
    assert calculate_motor_torque(100.0, 0.0, 0.5) == pytest.approx(100_000 / (0.1 * 0.5))
    omega = 3000.0 * 2 * math.pi / 60
    assert calculate_motor_torque(100.0, 3000.0, 0.8) == pytest.approx(100_000 / (omega * 0.8))


def test_temperature_efficiency() -> None:
    assert calculate_temperature_efficiency(25.0) == 1.0
    assert calculate_temperature_efficiency(40.0) == 1.0
    assert calculate_temperature_efficiency(60.0) == pytest.approx(0.8)
    assert calculate_temperature_efficiency(500.0) == 0.05


def test_state_of_charge_helper() -> None:
    assert calculate_state_of_charge(0.0, 60.0) == 100.0
    assert calculate_state_of_charge(30.0, 60.0) == pytest.approx(50.0)
    assert calculate_state_of_charge(90.0, 60.0) == 0.0


def test_pack_voltage() -> None:
    assert calculate_pack_voltage(400.0, 10.0) == pytest.approx(380.0)
    assert calculate_pack_voltage(400.0, 50.0) == 400.0
    assert calculate_pack_voltage(400.0, 90.0) == pytest.approx(420.0)


def test_resistive_forces(parameters) -> None:
    drag, rolling = calculate_resistive_forces(10.0, parameters)
    assert drag == pytest.approx(0.5 * 0.3 * 2.5 * 1.225 * 100)
    assert rolling == pytest.approx(0.01 * 1500 * 9.81)
