from __future__ import annotations

import numpy as np
import pytest

from ev_powertrain_sim import HISTORY_CHANNELS, EngineState, HistoryBuffers, SimulationParameters
from ev_powertrain_sim.core.history import CHANNEL_NAMES


def _state(i: float) -> EngineState:
    return EngineState(speed=float(i), soc=100.0 - i / 10, pack_voltage=400.0 + i)


def test_channel_order() -> None:
    assert CHANNEL_NAMES == ("voltage", "current", "speed", "temperature", "soc", "torque", "efficiency")
    assert [channel.label for channel in HISTORY_CHANNELS][0] == "Voltage (V)"


def test_buffers_start_full_of_initial_state() -> None:
    initial = EngineState.initial(SimulationParameters())
    buffers = HistoryBuffers(initial)

    assert len(buffers) == 200
    assert buffers.cursor == 0
    view = buffers.snapshot()
    assert len(view) == 200
    assert np.all(view.channel("voltage") == 400.0)
    assert np.all(view.channel("temperature") == 25.0)
    assert np.all(view.channel("soc") == 100.0)
    assert np.all(view.channel("speed") == 0.0)


def test_wraparound_keeps_newest_samples_in_order() -> None:
    buffers = HistoryBuffers(EngineState(), capacity=200)
    for i in range(1, 251):
        buffers.record(_state(i))

    speeds = buffers.channel("speed")
    np.testing.assert_array_equal(speeds, np.arange(51, 251, dtype=float))
    assert buffers.cursor == 50
    assert buffers.sample(0).speed == 51.0
    assert buffers.sample(-1).speed == 250.0
    assert buffers.sample(-1).voltage == 650.0


def test_partial_fill_keeps_defaults_first() -> None:
    buffers = HistoryBuffers(EngineState(), capacity=5)
    buffers.record(_state(1))
    buffers.record(_state(2))
    assert list(buffers.channel("speed")) == [0.0, 0.0, 0.0, 1.0, 2.0]


def test_view_iteration_is_restartable() -> None:
    buffers = HistoryBuffers(EngineState(), capacity=4)
    for i in range(1, 7):
        buffers.record(_state(i))

    view = buffers.snapshot()
    first = [sample.speed for sample in view]
    second = [sample.speed for sample in view]
    assert first == second == [3.0, 4.0, 5.0, 6.0]
    assert view[0].speed == 3.0
    assert view[-1].speed == 6.0


def test_snapshot_is_a_live_view() -> None:
    buffers = HistoryBuffers(EngineState(), capacity=3)
    view = buffers.snapshot()
    assert buffers.snapshot() is view

    buffers.record(_state(9))
    assert view[-1].speed == 9.0


def test_copy_is_detached() -> None:
    buffers = HistoryBuffers(EngineState(), capacity=3)
    buffers.record(_state(1))
    duplicate = buffers.copy()
    buffers.record(_state(2))

    assert list(duplicate.channel("speed")) == [0.0, 0.0, 1.0]
    assert list(buffers.channel("speed")) == [0.0, 1.0, 2.0]


def test_reset_refills_and_rewinds() -> None:
    buffers = HistoryBuffers(EngineState(), capacity=3)
    buffers.record(_state(1))
    buffers.reset(EngineState(pack_voltage=500.0))

    assert buffers.cursor == 0
    assert list(buffers.channel("voltage")) == [500.0, 500.0, 500.0]
    assert list(buffers.channel("speed")) == [0.0, 0.0, 0.0]


def test_errors() -> None:
    buffers = HistoryBuffers(EngineState(), capacity=3)
    with pytest.raises(IndexError):
        buffers.sample(3)
    with pytest.raises(IndexError):
        buffers.sample(-4)
    with pytest.raises(KeyError):
        buffers.channel("pressure")
    with pytest.raises(ValueError):
        HistoryBuffers(capacity=0)
    with pytest.raises(ValueError):
        HistoryBuffers(capacity=2.5)


def test_to_frame() -> None:
    buffers = HistoryBuffers(EngineState.initial(SimulationParameters()))
    buffers.record(_state(7))

    frame = buffers.snapshot().to_frame()
    assert frame.shape == (200, 7)
    assert list(frame.columns) == list(CHANNEL_NAMES)
    assert frame["speed"].iloc[-1] == 7.0
    assert frame.index[0] == 0
