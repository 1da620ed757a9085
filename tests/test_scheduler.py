from __future__ import annotations

import threading
import time

import pytest

from ev_powertrain_sim import SimulationRunner, TickScheduler, TimingMode


def test_first_tick_uses_nominal_step(simulator, clock) -> None:
    scheduler = TickScheduler(simulator, clock=clock)
    simulator.start()

    assert scheduler.tick() is True
    assert simulator.elapsed_time == pytest.approx(0.01667)

    clock.advance(0.05)
    scheduler.tick()
    assert simulator.elapsed_time == pytest.approx(0.01667 + 0.05)


def test_paused_time_is_not_applied(simulator, clock) -> None:
    scheduler = TickScheduler(simulator, clock=clock)
    simulator.start()
    scheduler.tick()

    simulator.pause()
    clock.advance(30.0)
    assert scheduler.tick() is False

    simulator.resume()
    scheduler.tick()
    assert simulator.elapsed_time == pytest.approx(2 * 0.01667)


def test_resume_without_scheduler_seeing_pause(simulator, clock) -> None:
    scheduler = TickScheduler(simulator, clock=clock)
    simulator.start()
    scheduler.tick()

    simulator.pause()
    clock.advance(30.0)
    simulator.resume()

    assert scheduler.next_step() == pytest.approx(0.01667)


def test_large_gap_is_clamped(simulator, clock) -> None:
    scheduler = TickScheduler(simulator, clock=clock)
    simulator.start()
    scheduler.tick()

    clock.advance(5.0)
    scheduler.tick()
    assert simulator.elapsed_time == pytest.approx(0.01667 + 0.1)


def test_fixed_mode_ignores_clock(simulator, clock) -> None:
    scheduler = TickScheduler(simulator, timing_mode="fixed", nominal_step=0.02, clock=clock)
    assert scheduler.timing_mode is TimingMode.FIXED
    simulator.start()

    for _ in range(5):
        clock.advance(3.0)
        scheduler.tick()

    assert simulator.tick_count == 5
    assert simulator.elapsed_time == pytest.approx(0.1)


def test_invalid_scheduler_settings(simulator) -> None:
    with pytest.raises(ValueError):
        TickScheduler(simulator, timing_mode="sometimes")
    with pytest.raises(ValueError):
        TickScheduler(simulator, nominal_step=0.0)
    assert TickScheduler(simulator, timing_mode="WALL_CLOCK").timing_mode is TimingMode.WALL_CLOCK


def test_runner_run_once_publishes_latest_snapshot(simulator, clock) -> None:
    runner = SimulationRunner(TickScheduler(simulator, timing_mode=TimingMode.FIXED, clock=clock))

    assert runner.run_once() is False
    assert runner.poll() is None

    simulator.start()
    runner.run_once()
    runner.run_once()

    snapshot = runner.poll()
    assert snapshot is not None
    assert snapshot.tick_count == 2
    assert runner.latest is snapshot
    assert runner.poll() is None


def test_runner_thread(simulator) -> None:
    scheduler = TickScheduler(simulator, timing_mode=TimingMode.FIXED)
    runner = SimulationRunner(scheduler, period=0.001)
    simulator.set_command(1.0)
    simulator.start()

    runner.start()
    with pytest.raises(RuntimeError):
        runner.start()

    deadline = time.monotonic() + 5.0
    while simulator.tick_count < 10 and time.monotonic() < deadline:
        time.sleep(0.01)
    runner.stop(timeout=5.0)

    assert not runner.is_alive
    assert simulator.tick_count >= 10
    assert runner.latest is not None
    count = simulator.tick_count
    time.sleep(0.02)
    assert simulator.tick_count == count


def test_runner_cannot_restart_while_thread_is_finishing(simulator) -> None:
    entered = threading.Event()
    release = threading.Event()

    def slow_listener(snapshot):
        entered.set()
        release.wait(5.0)

    simulator.add_listener(slow_listener)
    runner = SimulationRunner(TickScheduler(simulator, timing_mode=TimingMode.FIXED), period=0.001)
    simulator.start()
    runner.start()

    try:
        assert entered.wait(5.0)
        assert runner.stop(timeout=0.05) is False
        assert runner.is_alive
        with pytest.raises(RuntimeError):
            runner.start()
    finally:
        release.set()

    assert runner.stop(timeout=5.0) is True
    assert not runner.is_alive
