from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest

from ev_powertrain_sim import EngineConfig, PhysicsEngine, SimulationParameters, Simulator


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=100.0)


@pytest.fixture
def parameters() -> SimulationParameters:
    return SimulationParameters()


@pytest.fixture
def engine() -> PhysicsEngine:
    return PhysicsEngine()


@pytest.fixture
def long_step_engine() -> PhysicsEngine:
    """Engine accepting one-second steps."""
    return PhysicsEngine(EngineConfig(max_step=1.0))


@pytest.fixture
def simulator(clock: FakeClock) -> Simulator:
    return Simulator(clock=clock)
